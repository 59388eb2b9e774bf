"""Resolution of the graphical editor for a connection."""

from __future__ import annotations

import importlib
from typing import Any, Callable, Optional

from ..utils.logging import get_logger
from .connection import Connection
from .errors import EditorLoadError

logger = get_logger("editor")

FACTORY_NAME = "nm_vpn_editor_factory_openconnect"

EditorFactory = Callable[[Any, Connection], Any]


def resolve_factory(module_name: str, factory_name: str = FACTORY_NAME) -> EditorFactory:
    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        raise EditorLoadError(f"Cannot load editor module {module_name}: {exc}") from exc
    factory = getattr(module, factory_name, None)
    if not callable(factory):
        raise EditorLoadError(f"Editor module {module_name} does not provide {factory_name}()")
    return factory


class EditorLoader:
    """Creates editors either through an injected factory or a module lookup."""

    def __init__(self, module_name: str, factory: Optional[EditorFactory] = None) -> None:
        self.module_name = module_name
        self._factory = factory

    def load(self, plugin: Any, connection: Connection) -> Any:
        factory = self._factory
        if factory is None:
            factory = resolve_factory(self.module_name)
            logger.debug("Resolved editor factory from %s", self.module_name)
        editor = factory(plugin, connection)
        if editor is None:
            raise EditorLoadError(f"Editor factory returned no editor for {connection.id or connection.uuid}")
        return editor
