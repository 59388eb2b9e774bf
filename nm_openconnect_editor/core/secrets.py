"""Soft-token secret storage using python-keyring."""

from __future__ import annotations

import keyring
from keyring.errors import KeyringError

from ..utils.logging import get_logger
from .connection import KEY_TOKEN_SECRET, Connection

logger = get_logger("secrets")

SERVICE_NAME = "nm-openconnect-editor"


class TokenSecretStore:
    """Keeps soft-token secrets out of exported YAML dumps.

    Keyring failures are logged and reported through the return value.
    """

    def __init__(self, service: str = SERVICE_NAME) -> None:
        self.service = service

    def build_key(self, connection: Connection) -> str:
        return f"{connection.uuid}:{KEY_TOKEN_SECRET}"

    def save(self, connection: Connection) -> bool:
        secret = connection.vpn.get_secret(KEY_TOKEN_SECRET)
        if not secret:
            return False
        try:
            keyring.set_password(self.service, self.build_key(connection), secret)
        except KeyringError as exc:
            logger.error("Failed to save token secret: %s", exc)
            return False
        return True

    def load(self, connection: Connection) -> str | None:
        try:
            return keyring.get_password(self.service, self.build_key(connection))
        except KeyringError as exc:
            logger.error("Failed to read token secret: %s", exc)
            return None

    def delete(self, connection: Connection) -> bool:
        try:
            keyring.delete_password(self.service, self.build_key(connection))
        except KeyringError as exc:
            logger.error("Failed to delete token secret: %s", exc)
            return False
        return True

    def fill(self, connection: Connection) -> bool:
        """Add the stored secret to ``connection`` unless it already has one."""
        if connection.vpn.get_secret(KEY_TOKEN_SECRET):
            return False
        secret = self.load(connection)
        if not secret:
            return False
        connection.vpn.add_secret(KEY_TOKEN_SECRET, secret)
        return True
