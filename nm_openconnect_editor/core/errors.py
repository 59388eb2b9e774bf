"""Exceptions raised by the import/export and editor layers."""

from __future__ import annotations

from enum import IntEnum


class ImportExportErrorCode(IntEnum):
    UNKNOWN = 0
    NOT_OPENCONNECT = 1
    BAD_DATA = 2


class ImportExportError(Exception):
    """Base error for profile import and export failures.

    The message is meant to be shown to the user as-is.
    """

    code = ImportExportErrorCode.UNKNOWN

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class UnknownError(ImportExportError):
    code = ImportExportErrorCode.UNKNOWN


class NotRecognizedFormatError(ImportExportError):
    code = ImportExportErrorCode.NOT_OPENCONNECT


class InvalidDataError(ImportExportError):
    code = ImportExportErrorCode.BAD_DATA


class EditorLoadError(RuntimeError):
    """Raised when no editor factory can be resolved for a connection."""


class ConfigError(ValueError):
    """Raised for invalid values in the plugin configuration file."""
