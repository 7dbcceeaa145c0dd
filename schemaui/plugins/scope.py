"""Plugin scope — the only surface a plugin's register() touches."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import structlog

from schemaui.core.events import EventBus, EventHandler, Unsubscribe
from schemaui.exceptions import PluginError
from schemaui.plugins.state import ScopedStateStore, Setter
from schemaui.registry.components import ComponentConfig, ComponentMeta

if TYPE_CHECKING:
    from schemaui.plugins.base import PluginScopeConfig
    from schemaui.registry.components import ComponentRegistry

logger = structlog.get_logger()


def _noop() -> None:
    pass


class PluginScope:
    """Isolated state, events, and component namespace for one loaded plugin.

    Components are registered under ``"<plugin>:<type>"``. State and scoped
    events never leave this object; ``on_global``/``emit_global`` go through
    the bus shared by every scope of the owning PluginSystem.
    """

    def __init__(
        self,
        name: str,
        version: str,
        registry: ComponentRegistry,
        global_bus: EventBus,
        config: PluginScopeConfig,
    ) -> None:
        self.name = name
        self.version = version
        self.config = config
        self._registry = registry
        self._global_bus = global_bus
        self._state = ScopedStateStore(name, config.max_state_size)
        self._events = EventBus(name)
        self._global_unsubscribers: list[Unsubscribe] = []
        self._closed = False

    @property
    def namespace(self) -> str:
        return self.name

    @property
    def registry(self) -> ComponentRegistry:
        return self._registry

    @property
    def closed(self) -> bool:
        return self._closed

    # Components

    def register_component(
        self, type_: str, component: Any, meta: ComponentMeta | None = None
    ) -> ComponentConfig:
        self._ensure_open()
        meta = (meta or ComponentMeta()).model_copy(update={"namespace": self.name})
        return self._registry.register(type_, component, meta)

    def get_component(self, type_: str) -> Any | None:
        return self._registry.get(type_, self.name)

    # State

    def use_state(self, key: str, initial_value: Any) -> tuple[Any, Setter]:
        self._ensure_open()
        value, setter = self._state.use_state(key, initial_value)

        def set_value(new_value: Any) -> None:
            self._ensure_open()
            setter(new_value)

        return value, set_value

    def get_state(self, key: str) -> Any | None:
        return self._state.get_state(key)

    def set_state(self, key: str, value: Any) -> None:
        self._ensure_open()
        self._state.set_state(key, value)

    @property
    def state_size(self) -> int:
        return self._state.size

    # Events

    def on(self, event_name: str, handler: EventHandler) -> Unsubscribe:
        self._ensure_open()
        return self._events.on(event_name, handler)

    def emit(self, event_name: str, payload: Any = None) -> None:
        self._ensure_open()
        self._events.emit(event_name, payload)

    def on_global(self, event_name: str, handler: EventHandler) -> Unsubscribe:
        self._ensure_open()
        if not self.config.allow_global_events:
            logger.warning(
                "global_events_disabled", plugin=self.name, event_name=event_name
            )
            return _noop
        unsubscribe = self._global_bus.on(event_name, handler)
        self._global_unsubscribers.append(unsubscribe)
        return unsubscribe

    def emit_global(self, event_name: str, payload: Any = None) -> None:
        self._ensure_open()
        if not self.config.allow_global_events:
            logger.warning(
                "global_events_disabled", plugin=self.name, event_name=event_name
            )
            return
        self._global_bus.emit(event_name, payload)

    def cleanup(self) -> None:
        """Drop state and every subscription made through this scope.

        Afterwards every mutating method raises ``PluginError``; lookups
        keep working and return nothing.
        """
        if self._closed:
            return
        self._state.clear()
        self._events.clear()
        for unsubscribe in self._global_unsubscribers:
            unsubscribe()
        self._global_unsubscribers.clear()
        self._closed = True

    def _ensure_open(self) -> None:
        if self._closed:
            raise PluginError(f'Plugin "{self.name}" scope is closed')
