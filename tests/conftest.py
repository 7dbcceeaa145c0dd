"""Shared fixtures for plugin system tests."""

from __future__ import annotations

import os

import pytest

from schemaui.core.config import SchemaUIConfig
from schemaui.core.events import EventBus
from schemaui.plugins.base import PluginDefinition
from schemaui.plugins.system import PluginSystem
from schemaui.registry.components import ComponentRegistry


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch):
    """Prevent .env file and shell env from leaking into tests."""
    monkeypatch.setitem(SchemaUIConfig.model_config, "env_file", None)
    for key in list(os.environ):
        if key.startswith("SCHEMAUI_"):
            monkeypatch.delenv(key, raising=False)


def make_plugin(name: str, *, register=None, **kwargs) -> PluginDefinition:
    """Build a definition with a no-op register unless one is given."""
    kwargs.setdefault("version", "1.0.0")
    return PluginDefinition(
        name=name,
        register=register or (lambda scope: None),
        **kwargs,
    )


@pytest.fixture
def config():
    return SchemaUIConfig()


@pytest.fixture
def registry():
    return ComponentRegistry()


@pytest.fixture
def global_bus():
    return EventBus("global")


@pytest.fixture
def plugin_system(registry, global_bus, config):
    return PluginSystem(registry=registry, global_bus=global_bus, config=config)
