"""The editor plugin object NetworkManager talks to."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntFlag
from pathlib import Path
from typing import Any, List, Optional

from .. import NM_VPN_SERVICE_TYPE_OPENCONNECT, PLUGIN_DESCRIPTION, PLUGIN_NAME
from ..utils.logging import get_logger
from . import keyfile
from .config import PluginConfig
from .connection import KEY_PROTOCOL, Connection, ConnectionProfile
from .editor import EditorFactory, EditorLoader
from .protocols import (
    DYNAMIC_PROTOCOLS_API,
    NC_PROTOCOL_API,
    ApiVersion,
    CatalogHolder,
    ProtocolCatalog,
    VpnProtocol,
)

logger = get_logger("plugin")


class EditorCapability(IntFlag):
    NONE = 0
    IMPORT = 1 << 0
    EXPORT = 1 << 1
    IPV6 = 1 << 2


@dataclass(frozen=True)
class AddDetail:
    pretty_name: str
    description: str
    key: Optional[str] = None
    value: Optional[str] = None
    flags: int = 0


def plugin_strings(api_version: ApiVersion) -> tuple[str, str]:
    """Name and description advertised for a given engine API version."""
    if tuple(api_version) >= DYNAMIC_PROTOCOLS_API:
        return PLUGIN_NAME, PLUGIN_DESCRIPTION
    if tuple(api_version) >= NC_PROTOCOL_API:
        return PLUGIN_NAME, "Compatible with Cisco AnyConnect and Juniper Network Connect and Junos Pulse SSL VPNs."
    return "Cisco AnyConnect Compatible VPN (openconnect)", "Compatible with Cisco AnyConnect SSL VPN."


class OpenconnectEditorPlugin:
    """Implements import/export, capabilities and editor lookup."""

    def __init__(
        self,
        config: PluginConfig | None = None,
        engine: Any = None,
        editor_factory: EditorFactory | None = None,
    ) -> None:
        self.config = config or PluginConfig()
        self._catalog = CatalogHolder(engine, self.config.engine_api_version)
        self._editor_loader = EditorLoader(self.config.editor_module(), editor_factory)
        self.name, self.description = plugin_strings(self.config.engine_api_version)
        self.service = NM_VPN_SERVICE_TYPE_OPENCONNECT

    @property
    def catalog(self) -> ProtocolCatalog:
        return self._catalog.snapshot()

    def list_protocols(self) -> tuple[VpnProtocol, ...]:
        return self.catalog.protocols

    def import_(self, path: str | Path) -> Connection:
        return keyfile.import_file(path)

    def export(self, path: str | Path, connection: Connection | ConnectionProfile) -> bool:
        return keyfile.export_file(path, connection)

    def get_capabilities(self) -> EditorCapability:
        return EditorCapability.IMPORT | EditorCapability.EXPORT | EditorCapability.IPV6

    def get_editor(self, connection: Connection) -> Any:
        return self._editor_loader.load(self, connection)

    def notify_plugin_info_set(self, plugin_info: Any) -> None:
        if plugin_info is None:
            return
        logger.debug("Plugin info set, refreshing protocol catalog")
        self._catalog.rebuild()

    def get_service_add_details(self, service_type: str = NM_VPN_SERVICE_TYPE_OPENCONNECT) -> List[str]:
        return self.catalog.names()

    def get_service_add_detail(self, service_type: str, add_detail: str) -> Optional[AddDetail]:
        """Describe the protocol ``add_detail`` for the "add connection" list.

        The first protocol is the implicit default, so only the others carry
        a ``Protocol`` data item to preset on the new connection.
        """
        if service_type != NM_VPN_SERVICE_TYPE_OPENCONNECT:
            return None
        found = self.catalog.find(add_detail)
        if found is None:
            return None
        index, protocol = found
        if index == 0:
            return AddDetail(protocol.display_name(), protocol.description)
        return AddDetail(protocol.display_name(), protocol.description, KEY_PROTOCOL, protocol.name)
