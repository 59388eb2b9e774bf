"""Plugin configuration stored in YAML."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Tuple

import yaml

from ..utils.logging import get_logger
from .errors import ConfigError

logger = get_logger("config")

CONFIG_DIR = Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config")) / "nm-openconnect-editor"
CONFIG_PATH = CONFIG_DIR / "config.yaml"

TOOLKITS = ("gtk3", "gtk4")
DEFAULT_EDITOR_MODULES = {
    "gtk3": "nm_openconnect_editor_gtk3",
    "gtk4": "nm_openconnect_editor_gtk4",
}


@dataclass
class PluginConfig:
    editor_toolkit: str = "gtk3"
    editor_modules: Dict[str, str] = field(default_factory=lambda: dict(DEFAULT_EDITOR_MODULES))
    engine_api_version: Tuple[int, int] = (5, 5)
    log_level: str = "INFO"
    keyring_service: str = "nm-openconnect-editor"

    def __post_init__(self) -> None:
        if self.editor_toolkit not in TOOLKITS:
            raise ConfigError(f"Unknown editor toolkit {self.editor_toolkit!r}, expected one of {', '.join(TOOLKITS)}")

    def editor_module(self) -> str:
        return self.editor_modules.get(self.editor_toolkit, DEFAULT_EDITOR_MODULES[self.editor_toolkit])

    def to_dict(self) -> Dict[str, Any]:
        return {
            "editor_toolkit": self.editor_toolkit,
            "editor_modules": dict(self.editor_modules),
            "engine_api_version": list(self.engine_api_version),
            "log_level": self.log_level,
            "keyring_service": self.keyring_service,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PluginConfig":
        modules = dict(DEFAULT_EDITOR_MODULES)
        modules.update({str(k): str(v) for k, v in (data.get("editor_modules") or {}).items()})
        raw_version = data.get("engine_api_version", (5, 5))
        try:
            major, minor = (int(part) for part in raw_version)
        except (TypeError, ValueError) as exc:
            raise ConfigError(f"engine_api_version must be a [major, minor] pair, got {raw_version!r}") from exc
        return cls(
            editor_toolkit=str(data.get("editor_toolkit", "gtk3")),
            editor_modules=modules,
            engine_api_version=(major, minor),
            log_level=str(data.get("log_level", "INFO")),
            keyring_service=str(data.get("keyring_service", "nm-openconnect-editor")),
        )


def load_config(path: Path = CONFIG_PATH) -> PluginConfig:
    """Return the configuration stored at ``path``, or defaults when absent."""
    if not path.exists():
        return PluginConfig()
    with path.open("r", encoding="utf-8") as handle:
        try:
            data = yaml.safe_load(handle) or {}
        except yaml.YAMLError as exc:
            raise ConfigError(f"Cannot parse {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"{path} must contain a mapping")
    logger.debug("Loaded configuration from %s", path)
    return PluginConfig.from_dict(data)


def save_config(config: PluginConfig, path: Path = CONFIG_PATH) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_suffix(".tmp")
    with tmp_path.open("w", encoding="utf-8") as handle:
        yaml.safe_dump(config.to_dict(), handle, sort_keys=False)
    tmp_path.replace(path)
    logger.info("Saved configuration to %s", path)
