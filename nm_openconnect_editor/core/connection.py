"""Connection settings model shaped after NetworkManager's VPN setting."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field, fields
from typing import Any, Dict, Optional

from .. import NM_VPN_SERVICE_TYPE_OPENCONNECT

KEY_GATEWAY = "gateway"
KEY_CACERT = "cacert"
KEY_PROTOCOL = "protocol"
KEY_PROXY = "proxy"
KEY_CSD_ENABLE = "enable_csd_trojan"
KEY_CSD_WRAPPER = "csd_wrapper"
KEY_REPORTED_OS = "reported_os"
KEY_USERCERT = "usercert"
KEY_PRIVKEY = "userkey"
KEY_PEM_PASSPHRASE_FSID = "pem_passphrase_fsid"
KEY_PREVENT_INVALID_CERT = "prevent_invalid_cert"
KEY_TOKEN_MODE = "stoken_source"
KEY_TOKEN_SECRET = "stoken_string"

# Boolean data items are either "yes" or absent.
YES = "yes"


@dataclass
class VpnSetting:
    """Plain data items and secrets of one VPN connection."""

    service_type: str = NM_VPN_SERVICE_TYPE_OPENCONNECT
    data: Dict[str, str] = field(default_factory=dict)
    secrets: Dict[str, str] = field(default_factory=dict)

    def add_data_item(self, key: str, value: str) -> None:
        self.data[key] = value

    def get_data_item(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def remove_data_item(self, key: str) -> None:
        self.data.pop(key, None)

    def add_secret(self, key: str, value: str) -> None:
        self.secrets[key] = value

    def get_secret(self, key: str) -> Optional[str]:
        return self.secrets.get(key)

    def remove_secret(self, key: str) -> None:
        self.secrets.pop(key, None)


@dataclass
class Connection:
    id: Optional[str] = None
    uuid: str = field(default_factory=lambda: str(uuid.uuid4()))
    vpn: VpnSetting = field(default_factory=VpnSetting)
    ipv4_method: str = "auto"

    def to_dict(self, include_secrets: bool = True) -> Dict[str, Any]:
        vpn: Dict[str, Any] = {
            "service_type": self.vpn.service_type,
            "data": dict(self.vpn.data),
        }
        if include_secrets:
            vpn["secrets"] = dict(self.vpn.secrets)
        return {
            "id": self.id,
            "uuid": self.uuid,
            "vpn": vpn,
            "ipv4": {"method": self.ipv4_method},
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Connection":
        raw_vpn = data.get("vpn") or {}
        vpn = VpnSetting(
            service_type=raw_vpn.get("service_type", NM_VPN_SERVICE_TYPE_OPENCONNECT),
            data={str(k): str(v) for k, v in (raw_vpn.get("data") or {}).items()},
            secrets={str(k): str(v) for k, v in (raw_vpn.get("secrets") or {}).items()},
        )
        connection = cls(id=data.get("id"), vpn=vpn, ipv4_method=(data.get("ipv4") or {}).get("method", "auto"))
        if data.get("uuid"):
            connection.uuid = str(data["uuid"])
        return connection


@dataclass
class ConnectionProfile:
    """Typed view of an OpenConnect connection.

    Optional strings use ``None`` for "not set". ``token_secret`` lives in the
    secrets of the underlying :class:`VpnSetting`, everything else is a plain
    data item.
    """

    gateway: str
    display_name: Optional[str] = None
    ca_cert_path: Optional[str] = None
    protocol: Optional[str] = None
    http_proxy: Optional[str] = None
    csd_enabled: bool = False
    csd_wrapper_path: Optional[str] = None
    reported_os: Optional[str] = None
    user_cert_path: Optional[str] = None
    private_key_path: Optional[str] = None
    pem_passphrase_from_fsid: bool = False
    prevent_invalid_cert: bool = False
    token_mode: Optional[str] = None
    token_secret: Optional[str] = None

    @classmethod
    def from_connection(cls, connection: Connection) -> "ConnectionProfile":
        vpn = connection.vpn

        def item(key: str) -> Optional[str]:
            # empty values written by the exporter mean "not set"
            return vpn.get_data_item(key) or None

        token_secret = vpn.get_secret(KEY_TOKEN_SECRET) or vpn.get_data_item(KEY_TOKEN_SECRET)
        return cls(
            gateway=vpn.get_data_item(KEY_GATEWAY) or "",
            display_name=connection.id or None,
            ca_cert_path=item(KEY_CACERT),
            protocol=item(KEY_PROTOCOL),
            http_proxy=item(KEY_PROXY),
            csd_enabled=vpn.get_data_item(KEY_CSD_ENABLE) == YES,
            csd_wrapper_path=item(KEY_CSD_WRAPPER),
            reported_os=item(KEY_REPORTED_OS),
            user_cert_path=item(KEY_USERCERT),
            private_key_path=item(KEY_PRIVKEY),
            pem_passphrase_from_fsid=vpn.get_data_item(KEY_PEM_PASSPHRASE_FSID) == YES,
            prevent_invalid_cert=vpn.get_data_item(KEY_PREVENT_INVALID_CERT) == YES,
            token_mode=item(KEY_TOKEN_MODE),
            token_secret=token_secret or None,
        )

    def to_connection(self) -> Connection:
        vpn = VpnSetting()
        items = {
            KEY_GATEWAY: self.gateway,
            KEY_CACERT: self.ca_cert_path,
            KEY_PROTOCOL: self.protocol,
            KEY_PROXY: self.http_proxy,
            KEY_CSD_WRAPPER: self.csd_wrapper_path,
            KEY_REPORTED_OS: self.reported_os,
            KEY_USERCERT: self.user_cert_path,
            KEY_PRIVKEY: self.private_key_path,
            KEY_TOKEN_MODE: self.token_mode,
        }
        for key, value in items.items():
            if value is not None:
                vpn.add_data_item(key, value)
        flags = {
            KEY_CSD_ENABLE: self.csd_enabled,
            KEY_PEM_PASSPHRASE_FSID: self.pem_passphrase_from_fsid,
            KEY_PREVENT_INVALID_CERT: self.prevent_invalid_cert,
        }
        for key, enabled in flags.items():
            if enabled:
                vpn.add_data_item(key, YES)
        if self.token_secret is not None:
            vpn.add_secret(KEY_TOKEN_SECRET, self.token_secret)
        return Connection(id=self.display_name, vpn=vpn)

    def to_dict(self, include_secrets: bool = True) -> Dict[str, Any]:
        data = {f.name: getattr(self, f.name) for f in fields(self)}
        if not include_secrets:
            data.pop("token_secret", None)
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ConnectionProfile":
        known = {f.name for f in fields(cls)}
        values = {key: value for key, value in data.items() if key in known}
        values.setdefault("gateway", "")
        return cls(**values)
