"""NetworkManager OpenConnect connection editor plugin."""

__version__ = "1.2.10"

NM_VPN_SERVICE_TYPE_OPENCONNECT = "org.freedesktop.NetworkManager.openconnect"

PLUGIN_NAME = "Multi-protocol VPN client (openconnect)"
PLUGIN_DESCRIPTION = (
    "Compatible with Cisco AnyConnect, Juniper Network Connect and Junos Pulse, and PAN GlobalProtect SSL VPNs."
)
