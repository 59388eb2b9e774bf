"""Tests for editor factory resolution."""

from __future__ import annotations

import sys
import types

import pytest

from nm_openconnect_editor.core.connection import Connection
from nm_openconnect_editor.core.editor import FACTORY_NAME, EditorLoader, resolve_factory
from nm_openconnect_editor.core.errors import EditorLoadError


@pytest.fixture()
def editor_module(monkeypatch):
    module = types.ModuleType("fake_openconnect_editor")
    monkeypatch.setitem(sys.modules, "fake_openconnect_editor", module)
    return module


def test_resolve_factory_finds_exported_function(editor_module):
    def factory(plugin, connection):
        return "editor"

    setattr(editor_module, FACTORY_NAME, factory)

    assert resolve_factory("fake_openconnect_editor") is factory


def test_module_without_factory_is_rejected(editor_module):
    with pytest.raises(EditorLoadError, match=FACTORY_NAME):
        resolve_factory("fake_openconnect_editor")


def test_factory_returning_nothing_is_an_error():
    loader = EditorLoader("unused", factory=lambda plugin, connection: None)

    with pytest.raises(EditorLoadError):
        loader.load(object(), Connection(id="work"))
