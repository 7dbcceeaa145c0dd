"""Plugin lifecycle manager — dependency-checked load/unload of plugin scopes."""

from __future__ import annotations

from collections.abc import Iterable
from enum import Enum

import structlog

from schemaui.core.config import SchemaUIConfig
from schemaui.core.events import PLUGIN_LOADED, PLUGIN_UNLOADED, EventBus
from schemaui.exceptions import (
    DependencyError,
    DependentsExistError,
    PluginError,
    PluginNotLoadedError,
    SchemaUIError,
)
from schemaui.plugins.base import PluginDefinition, PluginScopeConfig, call_hook
from schemaui.plugins.scope import PluginScope
from schemaui.registry.components import ComponentRegistry

logger = structlog.get_logger()


class PluginState(Enum):
    UNLOADED = "unloaded"
    LOADING = "loading"
    LOADED = "loaded"
    UNLOADING = "unloading"


def resolve_load_order(
    definitions: Iterable[PluginDefinition],
    loaded: Iterable[str] = (),
) -> list[PluginDefinition]:
    """Order *definitions* so every plugin follows its dependencies.

    Dependencies outside the batch must be in *loaded*. Ties are broken by
    name so the order is deterministic.

    Raises:
        DependencyError: A dependency is neither in the batch nor loaded,
            or the batch contains a cycle.
        PluginError: Two different definitions share a name.
    """
    loaded = set(loaded)
    by_name: dict[str, PluginDefinition] = {}
    for definition in definitions:
        existing = by_name.get(definition.name)
        if existing is not None and existing is not definition:
            raise PluginError(f"Duplicate plugin definition: {definition.name}")
        by_name[definition.name] = definition

    in_degree = dict.fromkeys(by_name, 0)
    dependents: dict[str, list[str]] = {name: [] for name in by_name}
    for definition in by_name.values():
        for dep in definition.dependencies:
            if dep in by_name:
                dependents[dep].append(definition.name)
                in_degree[definition.name] += 1
            elif dep not in loaded:
                raise DependencyError(
                    f"Missing dependency: {dep} required by {definition.name}",
                    plugin=definition.name,
                    dependency=dep,
                )

    queue = sorted(name for name, degree in in_degree.items() if degree == 0)
    order: list[PluginDefinition] = []
    while queue:
        name = queue.pop(0)
        order.append(by_name[name])
        for dependent in dependents[name]:
            in_degree[dependent] -= 1
            if in_degree[dependent] == 0:
                queue.append(dependent)
        queue.sort()

    if len(order) != len(by_name):
        cyclic = sorted(name for name, degree in in_degree.items() if degree > 0)
        raise DependencyError(
            f"Circular dependency detected among: {', '.join(cyclic)}"
        )
    return order


class PluginSystem:
    """Owns the loaded plugins, their scopes, and the shared global bus.

    A plugin counts as loaded exactly when its definition is in the loaded
    map; that only happens after ``register`` and ``on_load`` have finished.
    """

    def __init__(
        self,
        registry: ComponentRegistry | None = None,
        global_bus: EventBus | None = None,
        config: SchemaUIConfig | None = None,
    ) -> None:
        if config is None:
            config = SchemaUIConfig()
        self.config = config
        if registry is None:
            registry = ComponentRegistry(warn_unnamespaced=config.warn_unnamespaced)
        self.registry = registry
        self.global_bus = global_bus if global_bus is not None else EventBus("global")
        self._plugins: dict[str, PluginDefinition] = {}
        self._scopes: dict[str, PluginScope] = {}
        self._transient: dict[str, PluginState] = {}

    async def load_plugin(
        self,
        definition: PluginDefinition,
        registry: ComponentRegistry | None = None,
        use_scope: bool = True,
    ) -> None:
        """Load *definition*; a no-op when a plugin of that name is loaded.

        With ``use_scope=False`` the legacy path runs: ``register`` receives
        the component registry itself and no scope is created.
        """
        name = definition.name
        if name in self._plugins:
            logger.debug("plugin_load_skipped", name=name)
            return
        self._ensure_stable(name)

        for dep in definition.dependencies:
            # A dependency mid-unload no longer counts as loaded
            if (
                dep not in self._plugins
                or self._transient.get(dep) is PluginState.UNLOADING
            ):
                raise DependencyError(
                    f"Missing dependency: {dep} required by {name}",
                    plugin=name,
                    dependency=dep,
                )

        if registry is None:
            registry = self.registry

        self._transient[name] = PluginState.LOADING
        scope: PluginScope | None = None
        try:
            if use_scope:
                scope = PluginScope(
                    name,
                    definition.version,
                    registry,
                    self.global_bus,
                    self._scope_config(definition),
                )
                await call_hook(definition.register_fn, scope)
            else:
                await call_hook(definition.register_fn, registry)
            if definition.on_load is not None:
                await call_hook(definition.on_load)
        except Exception as e:
            if scope is not None:
                scope.cleanup()
                registry.unregister_namespace(name)
            logger.error("plugin_register_failed", name=name, error=str(e))
            if isinstance(e, SchemaUIError):
                raise
            raise PluginError(f"Plugin {name} failed to load: {e}") from e
        finally:
            self._transient.pop(name, None)

        self._plugins[name] = definition
        if scope is not None:
            self._scopes[name] = scope
        logger.info(
            "plugin_loaded",
            name=name,
            version=definition.version,
            scoped=use_scope,
        )
        self.global_bus.emit(
            PLUGIN_LOADED, {"name": name, "version": definition.version}
        )

    async def unload_plugin(self, name: str) -> None:
        self._ensure_stable(name)
        definition = self._plugins.get(name)
        if definition is None:
            raise PluginNotLoadedError(name)

        for other, other_def in self._plugins.items():
            if other != name and name in other_def.dependencies:
                raise DependentsExistError(name, other)

        self._transient[name] = PluginState.UNLOADING
        try:
            if definition.on_unload is not None:
                await call_hook(definition.on_unload)
        except SchemaUIError:
            raise
        except Exception as e:
            raise PluginError(f"Plugin {name} failed to unload: {e}") from e
        finally:
            self._transient.pop(name, None)

        scope = self._scopes.pop(name, None)
        if scope is not None:
            self._discard_scope(scope)
        del self._plugins[name]
        logger.info("plugin_unloaded", name=name)
        self.global_bus.emit(
            PLUGIN_UNLOADED, {"name": name, "version": definition.version}
        )

    async def load_plugins(
        self,
        definitions: Iterable[PluginDefinition],
        registry: ComponentRegistry | None = None,
        use_scope: bool = True,
    ) -> list[str]:
        """Load a batch in dependency order; returns the names in load order."""
        order = resolve_load_order(definitions, loaded=self._plugins)
        for definition in order:
            await self.load_plugin(definition, registry, use_scope)
        return [definition.name for definition in order]

    async def unload_all(self) -> list[str]:
        """Unload every plugin, dependents first. Failures are logged and skipped."""
        order = resolve_load_order(self._plugins.values())
        unloaded: list[str] = []
        for definition in reversed(order):
            try:
                await self.unload_plugin(definition.name)
            except SchemaUIError:
                logger.exception("plugin_unload_failed", name=definition.name)
                continue
            unloaded.append(definition.name)
        return unloaded

    def is_loaded(self, name: str) -> bool:
        return name in self._plugins

    def get_plugin(self, name: str) -> PluginDefinition | None:
        return self._plugins.get(name)

    def get_all_plugins(self) -> list[PluginDefinition]:
        return list(self._plugins.values())

    def get_scope(self, name: str) -> PluginScope | None:
        return self._scopes.get(name)

    def get_loaded_plugins(self) -> list[str]:
        return list(self._plugins)

    def get_plugin_state(self, name: str) -> PluginState:
        if name in self._transient:
            return self._transient[name]
        if name in self._plugins:
            return PluginState.LOADED
        return PluginState.UNLOADED

    def _ensure_stable(self, name: str) -> None:
        state = self._transient.get(name)
        if state is not None:
            raise PluginError(f'Plugin "{name}" is {state.value}')

    def _scope_config(self, definition: PluginDefinition) -> PluginScopeConfig:
        scope_config = definition.scope_config or PluginScopeConfig()
        if scope_config.max_state_size is None:
            scope_config = scope_config.model_copy(
                update={"max_state_size": self.config.default_max_state_size}
            )
        return scope_config

    def _discard_scope(self, scope: PluginScope) -> None:
        scope.cleanup()
        if self.config.remove_components_on_unload:
            removed = scope.registry.unregister_namespace(scope.namespace)
            logger.debug("plugin_components_removed", name=scope.name, types=removed)
