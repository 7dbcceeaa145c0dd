"""Tests for the component registry."""

from __future__ import annotations

import pytest
from structlog.testing import capture_logs

from schemaui.registry.components import (
    ComponentInput,
    ComponentMeta,
    ComponentRegistry,
    qualify,
)


def button():
    return "button"


def fancy_button():
    return "fancy button"


class TestQualify:
    def test_with_namespace(self):
        assert qualify("grid", "plugin-a") == "plugin-a:grid"

    def test_without_namespace(self):
        assert qualify("grid") == "grid"
        assert qualify("grid", "") == "grid"


class TestComponentRegistry:
    def test_register_and_get_bare(self, registry):
        registry.register("button", button)
        assert registry.get("button") is button
        assert registry.has("button")

    def test_register_namespaced(self, registry):
        registry.register("button", fancy_button, ComponentMeta(namespace="ui"))
        assert registry.get("button", "ui") is fancy_button
        assert "ui:button" in registry
        assert "button" not in registry

    def test_namespaced_lookup_falls_back_to_bare(self, registry):
        registry.register("button", button)
        assert registry.get("button", "plugin-x") is button
        assert registry.has("button", "plugin-x")

    def test_namespaced_entry_shadows_bare(self, registry):
        registry.register("button", button)
        registry.register("button", fancy_button, ComponentMeta(namespace="ui"))
        assert registry.get("button", "ui") is fancy_button
        assert registry.get("button") is button

    def test_missing_returns_none(self, registry):
        assert registry.get("nope") is None
        assert registry.get_config("nope", "ns") is None
        assert not registry.has("nope", "ns")

    def test_same_type_in_two_namespaces(self, registry):
        def grid_a():
            return "a"

        def grid_b():
            return "b"

        registry.register("grid", grid_a, ComponentMeta(namespace="plugin-a"))
        registry.register("grid", grid_b, ComponentMeta(namespace="plugin-b"))
        assert registry.get("grid", "plugin-a") is grid_a
        assert registry.get("grid", "plugin-b") is grid_b

    def test_get_config_carries_meta(self, registry):
        meta = ComponentMeta(
            namespace="ui",
            label="Button",
            category="basic",
            inputs=[ComponentInput(name="text", type="string", required=True)],
            default_props={"variant": "primary"},
            is_container=False,
        )
        registry.register("button", button, meta)
        config = registry.get_config("button", "ui")
        assert config.type == "ui:button"
        assert config.component is button
        assert config.label == "Button"
        assert config.inputs[0].name == "text"
        assert config.default_props == {"variant": "primary"}

    def test_overwrite_replaces_entry(self, registry):
        registry.register("button", button, ComponentMeta(namespace="ui"))
        registry.register("button", fancy_button, ComponentMeta(namespace="ui"))
        assert registry.get("button", "ui") is fancy_button
        assert len(registry) == 1

    def test_unnamespaced_registration_warns(self, registry):
        with capture_logs() as logs:
            registry.register("button", button)
        events = [entry["event"] for entry in logs]
        assert "unnamespaced_component_registration" in events

    def test_namespaced_registration_does_not_warn(self, registry):
        with capture_logs() as logs:
            registry.register("button", button, ComponentMeta(namespace="ui"))
        events = [entry["event"] for entry in logs]
        assert "unnamespaced_component_registration" not in events

    def test_warning_can_be_disabled(self):
        registry = ComponentRegistry(warn_unnamespaced=False)
        with capture_logs() as logs:
            registry.register("button", button)
        events = [entry["event"] for entry in logs]
        assert "unnamespaced_component_registration" not in events

    def test_unregister(self, registry):
        registry.register("button", button, ComponentMeta(namespace="ui"))
        assert registry.unregister("button", "ui") is True
        assert registry.unregister("button", "ui") is False
        assert registry.get("button", "ui") is None

    def test_unregister_namespace(self, registry):
        registry.register("grid", button, ComponentMeta(namespace="plugin-a"))
        registry.register("chart", button, ComponentMeta(namespace="plugin-a"))
        registry.register("grid", button, ComponentMeta(namespace="plugin-ab"))
        removed = registry.unregister_namespace("plugin-a")
        assert sorted(removed) == ["plugin-a:chart", "plugin-a:grid"]
        assert registry.get_all_types() == ["plugin-ab:grid"]

    def test_get_all_types_in_registration_order(self, registry):
        registry.register("a", button, ComponentMeta(namespace="ns"))
        registry.register("b", button)
        assert registry.get_all_types() == ["ns:a", "b"]
        assert [c.type for c in registry.get_all_configs()] == ["ns:a", "b"]

    def test_invalid_input_type_rejected(self):
        with pytest.raises(ValueError):
            ComponentInput(name="x", type="matrix")
