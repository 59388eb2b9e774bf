"""VPN sub-protocols advertised by the openconnect engine."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from enum import IntFlag
from typing import Any, Iterable, Iterator, Mapping, Optional, Tuple

from ..utils.logging import get_logger

logger = get_logger("protocols")

ApiVersion = Tuple[int, int]

# Engine API 5.5 ships openconnect_get_supported_protocols().
DYNAMIC_PROTOCOLS_API: ApiVersion = (5, 5)
NC_PROTOCOL_API: ApiVersion = (5, 2)


class ProtocolFlag(IntFlag):
    NONE = 0
    PROXY = 1 << 0
    CSD = 1 << 1
    AUTH_CERT = 1 << 2
    AUTH_OTP = 1 << 3
    AUTH_STOKEN = 1 << 4


@dataclass(frozen=True)
class VpnProtocol:
    name: str
    pretty_name: str
    description: str
    flags: ProtocolFlag = ProtocolFlag.NONE

    def supports(self, flag: ProtocolFlag) -> bool:
        return bool(self.flags & flag)

    def display_name(self) -> str:
        return f"{self.pretty_name} (OpenConnect)"

    @classmethod
    def from_engine(cls, entry: Any) -> "VpnProtocol":
        if isinstance(entry, VpnProtocol):
            return entry
        if isinstance(entry, Mapping):
            return cls(
                name=str(entry["name"]),
                pretty_name=str(entry.get("pretty_name") or entry["name"]),
                description=str(entry.get("description") or ""),
                flags=ProtocolFlag(int(entry.get("flags", 0))),
            )
        return cls(
            name=str(entry.name),
            pretty_name=str(getattr(entry, "pretty_name", None) or entry.name),
            description=str(getattr(entry, "description", None) or ""),
            flags=ProtocolFlag(int(getattr(entry, "flags", 0))),
        )


ANYCONNECT = VpnProtocol(
    name="anyconnect",
    pretty_name="Cisco AnyConnect or openconnect",
    description="Compatible with Cisco AnyConnect SSL VPN, as well as ocserv",
    flags=ProtocolFlag.PROXY | ProtocolFlag.CSD | ProtocolFlag.AUTH_CERT | ProtocolFlag.AUTH_OTP | ProtocolFlag.AUTH_STOKEN,
)

NETWORK_CONNECT = VpnProtocol(
    name="nc",
    pretty_name="Juniper Network Connect",
    description="Compatible with Juniper Network Connect",
    flags=ProtocolFlag.PROXY | ProtocolFlag.CSD | ProtocolFlag.AUTH_CERT | ProtocolFlag.AUTH_OTP,
)


def fallback_protocols(api_version: ApiVersion = NC_PROTOCOL_API) -> Tuple[VpnProtocol, ...]:
    """Protocols known to engines that cannot enumerate them.

    Newer protocols such as GlobalProtect or Pulse appeared together with the
    enumeration API, so only AnyConnect and Network Connect are listed here.
    """
    if tuple(api_version) >= NC_PROTOCOL_API:
        return (ANYCONNECT, NETWORK_CONNECT)
    return (ANYCONNECT,)


class ProtocolCatalog:
    """Immutable snapshot of the supported protocols, in engine order."""

    def __init__(self, protocols: Iterable[VpnProtocol] = ()) -> None:
        self._protocols: Tuple[VpnProtocol, ...] = tuple(protocols)

    def __iter__(self) -> Iterator[VpnProtocol]:
        return iter(self._protocols)

    def __len__(self) -> int:
        return len(self._protocols)

    def __getitem__(self, index: int) -> VpnProtocol:
        return self._protocols[index]

    @property
    def protocols(self) -> Tuple[VpnProtocol, ...]:
        return self._protocols

    def names(self) -> list[str]:
        return [protocol.name for protocol in self._protocols]

    def find(self, name: str) -> Optional[Tuple[int, VpnProtocol]]:
        """Return ``(index, protocol)`` of the first entry called ``name``."""
        for index, protocol in enumerate(self._protocols):
            if protocol.name == name:
                return index, protocol
        return None

    @classmethod
    def build(cls, engine: Any = None, api_version: ApiVersion = DYNAMIC_PROTOCOLS_API) -> "ProtocolCatalog":
        """Query ``engine`` for its protocols, or use the built-in list."""
        enumerate_protocols = getattr(engine, "supported_protocols", None)
        if enumerate_protocols is None or tuple(api_version) < DYNAMIC_PROTOCOLS_API:
            return cls(fallback_protocols(api_version))
        try:
            protocols = [VpnProtocol.from_engine(entry) for entry in enumerate_protocols()]
        except Exception as exc:
            logger.warning("Engine protocol enumeration failed, using built-in list: %s", exc)
            return cls(fallback_protocols(api_version))
        seen: set[str] = set()
        unique = []
        for protocol in protocols:
            if protocol.name in seen:
                logger.debug("Ignoring duplicate protocol %s", protocol.name)
                continue
            seen.add(protocol.name)
            unique.append(protocol)
        logger.debug("Engine advertises protocols: %s", ", ".join(p.name for p in unique) or "none")
        return cls(unique)


class CatalogHolder:
    """Owns the current catalog and swaps it wholesale on rebuild."""

    def __init__(self, engine: Any = None, api_version: ApiVersion = DYNAMIC_PROTOCOLS_API) -> None:
        self._engine = engine
        self._api_version = api_version
        self._lock = threading.Lock()
        self._catalog = ProtocolCatalog.build(engine, api_version)

    def snapshot(self) -> ProtocolCatalog:
        with self._lock:
            return self._catalog

    def rebuild(self) -> ProtocolCatalog:
        catalog = ProtocolCatalog.build(self._engine, self._api_version)
        with self._lock:
            self._catalog = catalog
        logger.info("Protocol catalog rebuilt with %d entries", len(catalog))
        return catalog
