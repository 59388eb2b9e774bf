"""Import and export of ``[openconnect]`` key/value profile files."""

from __future__ import annotations

import configparser
from pathlib import Path
from typing import List, Tuple, Union

from .. import PLUGIN_NAME
from ..utils.logging import get_logger
from .connection import (
    KEY_CACERT,
    KEY_CSD_ENABLE,
    KEY_CSD_WRAPPER,
    KEY_GATEWAY,
    KEY_PEM_PASSPHRASE_FSID,
    KEY_PREVENT_INVALID_CERT,
    KEY_PRIVKEY,
    KEY_PROTOCOL,
    KEY_PROXY,
    KEY_REPORTED_OS,
    KEY_TOKEN_MODE,
    KEY_TOKEN_SECRET,
    KEY_USERCERT,
    YES,
    Connection,
    ConnectionProfile,
)
from .errors import InvalidDataError, NotRecognizedFormatError, UnknownError

logger = get_logger("keyfile")

SECTION = "openconnect"
DEFAULT_PROTOCOL = "anyconnect"

# Placeholder an older exporter wrote for unset paths.
NULL_SENTINEL = "(null)"

# File key -> data item key, for plain string values read verbatim.
STRING_KEYS: List[Tuple[str, str]] = [
    ("Protocol", KEY_PROTOCOL),
    ("Proxy", KEY_PROXY),
    ("CSDWrapper", KEY_CSD_WRAPPER),
    ("ReportedOS", KEY_REPORTED_OS),
    ("StokenSource", KEY_TOKEN_MODE),
]
PATH_KEYS: List[Tuple[str, str]] = [
    ("CACert", KEY_CACERT),
    ("UserCertificate", KEY_USERCERT),
    ("PrivateKey", KEY_PRIVKEY),
]
BOOLEAN_KEYS: List[Tuple[str, str]] = [
    ("CSDEnable", KEY_CSD_ENABLE),
    ("FSID", KEY_PEM_PASSPHRASE_FSID),
]

PathLike = Union[str, Path]


def _new_parser() -> configparser.RawConfigParser:
    parser = configparser.RawConfigParser(
        delimiters=("=",),
        comment_prefixes=("#",),
        inline_comment_prefixes=None,
        strict=False,
        interpolation=None,
        default_section="\x00",
    )
    parser.optionxform = str  # keys are case sensitive
    return parser


def parse_boolean(value: str | None) -> bool:
    """Key-file booleans: exactly ``true`` or ``1`` is true, anything else is false."""
    if value is None:
        return False
    return value.strip() in {"true", "1"}


def _not_recognized() -> NotRecognizedFormatError:
    return NotRecognizedFormatError(f"does not look like a {PLUGIN_NAME} VPN connection (parse failed)")


def import_file(path: PathLike) -> Connection:
    """Read ``path`` and return the connection it describes."""
    parser = _new_parser()
    try:
        with open(path, "r", encoding="utf-8") as handle:
            # key files ignore leading whitespace; configparser would read an
            # indented line as a continuation of the previous value
            parser.read_string("".join(line.lstrip() for line in handle), source=str(path))
    except (OSError, UnicodeDecodeError, configparser.Error) as exc:
        logger.warning("Failed to parse %s: %s", path, exc)
        raise _not_recognized() from exc

    def get(key: str) -> str | None:
        if not parser.has_section(SECTION):
            return None
        return parser.get(SECTION, key, fallback=None)

    gateway = get("Host")
    if gateway is None:
        logger.warning("%s has no Host entry", path)
        raise InvalidDataError(f"does not look like a {PLUGIN_NAME} VPN connection (no Host)")

    connection = Connection()
    vpn = connection.vpn
    vpn.add_data_item(KEY_GATEWAY, gateway)

    description = get("Description")
    if description is not None:
        connection.id = description

    for file_key, item_key in PATH_KEYS:
        value = get(file_key)
        if value and value != NULL_SENTINEL:
            vpn.add_data_item(item_key, value)

    for file_key, item_key in STRING_KEYS:
        value = get(file_key)
        if value is not None:
            vpn.add_data_item(item_key, value)

    for file_key, item_key in BOOLEAN_KEYS:
        if parse_boolean(get(file_key)):
            vpn.add_data_item(item_key, YES)

    # The stored value is informational only; certificate checking is always
    # switched on for imported connections.
    # TODO: honour PreventInvalidCert=false once the editor can show the choice.
    prevent = get("PreventInvalidCert")
    if prevent is not None and not parse_boolean(prevent):
        logger.debug("Ignoring PreventInvalidCert=%s in %s", prevent, path)
    vpn.add_data_item(KEY_PREVENT_INVALID_CERT, YES)

    token_secret = get("StokenString")
    if token_secret is not None:
        vpn.add_secret(KEY_TOKEN_SECRET, token_secret)

    logger.info("Imported connection for %s from %s", gateway, path)
    return connection


def import_profile(path: PathLike) -> ConnectionProfile:
    return ConnectionProfile.from_connection(import_file(path))


def _non_empty(value: str | None) -> str | None:
    return value if value else None


def export_file(path: PathLike, connection: Connection | ConnectionProfile) -> bool:
    """Write ``connection`` to ``path``.

    The destination is opened before validation, so an incomplete connection
    leaves an empty file behind.
    """
    if isinstance(connection, ConnectionProfile):
        connection = connection.to_connection()
    try:
        handle = open(path, "w", encoding="utf-8")
    except OSError as exc:
        logger.warning("Cannot open %s for writing: %s", path, exc)
        raise UnknownError("could not open file for writing") from exc

    with handle:
        vpn = connection.vpn
        gateway = _non_empty(vpn.get_data_item(KEY_GATEWAY))
        if gateway is None:
            logger.warning("Refusing to export %s without a gateway", path)
            raise InvalidDataError("connection was incomplete (missing gateway)")

        token_secret = _non_empty(vpn.get_secret(KEY_TOKEN_SECRET)) or _non_empty(vpn.get_data_item(KEY_TOKEN_SECRET))

        def text(key: str) -> str:
            return _non_empty(vpn.get_data_item(key)) or ""

        def flag(key: str) -> str:
            return "1" if vpn.get_data_item(key) == YES else "0"

        entries = [
            ("Description", connection.id or ""),
            ("Host", gateway),
            ("CACert", text(KEY_CACERT)),
            ("Protocol", text(KEY_PROTOCOL) or DEFAULT_PROTOCOL),
            ("Proxy", text(KEY_PROXY)),
            ("CSDEnable", flag(KEY_CSD_ENABLE)),
            ("CSDWrapper", text(KEY_CSD_WRAPPER)),
            ("ReportedOS", text(KEY_REPORTED_OS)),
            ("UserCertificate", text(KEY_USERCERT)),
            ("PrivateKey", text(KEY_PRIVKEY)),
            ("FSID", flag(KEY_PEM_PASSPHRASE_FSID)),
            ("PreventInvalidCert", flag(KEY_PREVENT_INVALID_CERT)),
            ("StokenSource", text(KEY_TOKEN_MODE)),
            ("StokenString", token_secret or ""),
        ]
        handle.write(f"[{SECTION}]\n")
        for key, value in entries:
            handle.write(f"{key}={value}\n")

    logger.info("Exported connection for %s to %s", gateway, path)
    return True
