"""Tests for reading ``[openconnect]`` profile files."""

from __future__ import annotations

import pytest

from nm_openconnect_editor import NM_VPN_SERVICE_TYPE_OPENCONNECT
from nm_openconnect_editor.core.connection import (
    KEY_CACERT,
    KEY_CSD_ENABLE,
    KEY_GATEWAY,
    KEY_PEM_PASSPHRASE_FSID,
    KEY_PREVENT_INVALID_CERT,
    KEY_PRIVKEY,
    KEY_TOKEN_SECRET,
    KEY_USERCERT,
    ConnectionProfile,
)
from nm_openconnect_editor.core.errors import (
    ImportExportErrorCode,
    InvalidDataError,
    NotRecognizedFormatError,
)
from nm_openconnect_editor.core.keyfile import import_file, import_profile, parse_boolean


def write_profile(tmp_path, text: str):
    path = tmp_path / "profile.conf"
    path.write_text(text, encoding="utf-8")
    return path


def test_import_work_vpn_example(tmp_path):
    path = write_profile(
        tmp_path,
        "[openconnect]\n"
        "Host=vpn.example.com\n"
        "Description=Work VPN\n"
        "Protocol=nc\n"
        "CSDEnable=true\n",
    )

    profile = import_profile(path)

    assert profile.gateway == "vpn.example.com"
    assert profile.display_name == "Work VPN"
    assert profile.protocol == "nc"
    assert profile.csd_enabled is True
    assert profile.prevent_invalid_cert is True
    assert profile.ca_cert_path is None
    assert profile.http_proxy is None
    assert profile.csd_wrapper_path is None
    assert profile.reported_os is None
    assert profile.user_cert_path is None
    assert profile.private_key_path is None
    assert profile.pem_passphrase_from_fsid is False
    assert profile.token_mode is None
    assert profile.token_secret is None


def test_import_sets_up_openconnect_connection(tmp_path):
    path = write_profile(tmp_path, "[openconnect]\nHost=vpn.example.com\n")

    connection = import_file(path)

    assert connection.vpn.service_type == NM_VPN_SERVICE_TYPE_OPENCONNECT
    assert connection.ipv4_method == "auto"
    assert connection.id is None
    assert connection.vpn.data == {
        KEY_GATEWAY: "vpn.example.com",
        KEY_PREVENT_INVALID_CERT: "yes",
    }


@pytest.mark.parametrize("key,item", [("CACert", KEY_CACERT), ("UserCertificate", KEY_USERCERT), ("PrivateKey", KEY_PRIVKEY)])
def test_null_sentinel_paths_are_dropped(tmp_path, key, item):
    path = write_profile(tmp_path, f"[openconnect]\nHost=vpn.example.com\n{key}=(null)\n")

    connection = import_file(path)

    assert connection.vpn.get_data_item(item) is None


def test_real_paths_are_kept(tmp_path):
    path = write_profile(
        tmp_path,
        "[openconnect]\n"
        "Host=vpn.example.com\n"
        "CACert=/etc/ssl/ca.pem\n"
        "UserCertificate=/home/user/cert.pem\n"
        "PrivateKey=pkcs11:token=foo\n",
    )

    profile = import_profile(path)

    assert profile.ca_cert_path == "/etc/ssl/ca.pem"
    assert profile.user_cert_path == "/home/user/cert.pem"
    assert profile.private_key_path == "pkcs11:token=foo"


def test_false_booleans_are_omitted(tmp_path):
    path = write_profile(tmp_path, "[openconnect]\nHost=vpn.example.com\nCSDEnable=false\nFSID=0\n")

    connection = import_file(path)

    assert connection.vpn.get_data_item(KEY_CSD_ENABLE) is None
    assert connection.vpn.get_data_item(KEY_PEM_PASSPHRASE_FSID) is None


def test_prevent_invalid_cert_is_always_enabled(tmp_path):
    path = write_profile(tmp_path, "[openconnect]\nHost=vpn.example.com\nPreventInvalidCert=0\n")

    connection = import_file(path)

    assert connection.vpn.get_data_item(KEY_PREVENT_INVALID_CERT) == "yes"


def test_token_string_is_a_secret(tmp_path):
    path = write_profile(
        tmp_path,
        "[openconnect]\nHost=vpn.example.com\nStokenSource=stoken\nStokenString=ABCDEF123\n",
    )

    connection = import_file(path)

    assert connection.vpn.get_secret(KEY_TOKEN_SECRET) == "ABCDEF123"
    assert connection.vpn.get_data_item(KEY_TOKEN_SECRET) is None
    assert connection.vpn.get_data_item("stoken_source") == "stoken"


def test_unknown_keys_and_sections_are_ignored(tmp_path):
    path = write_profile(
        tmp_path,
        "# exported profile\n"
        "[openconnect]\n"
        "Host=vpn.example.com\n"
        "Colour=blue\n"
        "[other]\n"
        "Host=elsewhere.example.com\n",
    )

    connection = import_file(path)

    assert connection.vpn.get_data_item(KEY_GATEWAY) == "vpn.example.com"
    assert "Colour" not in connection.vpn.data


def test_missing_host_is_invalid_data(tmp_path):
    path = write_profile(tmp_path, "[openconnect]\nDescription=No host here\n")

    with pytest.raises(InvalidDataError) as excinfo:
        import_file(path)

    assert excinfo.value.code is ImportExportErrorCode.BAD_DATA
    assert "no Host" in str(excinfo.value)


def test_missing_section_is_invalid_data(tmp_path):
    path = write_profile(tmp_path, "[vpnc]\nHost=vpn.example.com\n")

    with pytest.raises(InvalidDataError):
        import_file(path)


@pytest.mark.parametrize(
    "text",
    [
        "Host=vpn.example.com\n",
        "[openconnect]\nthis line has no separator\n",
    ],
)
def test_unparsable_file_is_not_recognized(tmp_path, text):
    path = write_profile(tmp_path, text)

    with pytest.raises(NotRecognizedFormatError) as excinfo:
        import_file(path)

    assert excinfo.value.code is ImportExportErrorCode.NOT_OPENCONNECT
    assert "parse failed" in excinfo.value.message


def test_missing_file_is_not_recognized(tmp_path):
    with pytest.raises(NotRecognizedFormatError):
        import_file(tmp_path / "does-not-exist.conf")


def test_binary_file_is_not_recognized(tmp_path):
    path = tmp_path / "blob.bin"
    path.write_bytes(b"\xff\xfe\x00garbage")

    with pytest.raises(NotRecognizedFormatError):
        import_file(path)


@pytest.mark.parametrize(
    "value,expected",
    [
        ("true", True),
        ("1", True),
        (" true ", True),
        ("True", False),
        ("TRUE", False),
        ("false", False),
        ("0", False),
        ("yes", False),
        (None, False),
    ],
)
def test_parse_boolean(value, expected):
    assert parse_boolean(value) is expected


def test_boolean_values_are_case_sensitive(tmp_path):
    path = write_profile(tmp_path, "[openconnect]\nHost=vpn.example.com\nCSDEnable=TRUE\nFSID=True\n")

    profile = import_profile(path)

    assert profile.csd_enabled is False
    assert profile.pem_passphrase_from_fsid is False


def test_indented_lines_are_separate_keys(tmp_path):
    path = write_profile(tmp_path, "[openconnect]\nHost=vpn.example.com\n  Proxy=http://proxy.example.com:3128\n")

    profile = import_profile(path)

    assert profile.gateway == "vpn.example.com"
    assert profile.http_proxy == "http://proxy.example.com:3128"


def test_empty_values_are_unset(tmp_path):
    path = write_profile(
        tmp_path,
        "[openconnect]\nHost=vpn.example.com\nDescription=\nCACert=\nProxy=\nUserCertificate=\nStokenString=\n",
    )

    connection = import_file(path)
    profile = ConnectionProfile.from_connection(connection)

    assert connection.vpn.get_data_item(KEY_CACERT) is None
    assert connection.vpn.get_data_item(KEY_USERCERT) is None
    assert profile.display_name is None
    assert profile.ca_cert_path is None
    assert profile.http_proxy is None
    assert profile.user_cert_path is None
    assert profile.token_secret is None
