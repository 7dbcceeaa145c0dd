"""Plugin definition — the immutable descriptor a host hands to PluginSystem."""

from __future__ import annotations

import inspect
from collections.abc import Callable
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

# register(scope) in the scoped path, register(registry) in the legacy path
RegisterFn = Callable[[Any], Any]
LifecycleHook = Callable[[], Any]


class PluginScopeConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    max_state_size: int | None = None
    allow_global_events: bool = True


class PluginDefinition(BaseModel):
    model_config = ConfigDict(
        frozen=True, arbitrary_types_allowed=True, populate_by_name=True
    )

    name: str
    version: str
    description: str = ""
    dependencies: tuple[str, ...] = ()
    # "register" would shadow ABCMeta.register on the model class
    register_fn: RegisterFn = Field(alias="register")
    on_load: LifecycleHook | None = None
    on_unload: LifecycleHook | None = None
    scope_config: PluginScopeConfig | None = None

    @model_validator(mode="after")
    def check_identity(self) -> PluginDefinition:
        if not self.name.strip():
            raise ValueError("plugin name must not be empty")
        if ":" in self.name:
            raise ValueError(f"plugin name must not contain ':': {self.name}")
        if self.name in self.dependencies:
            raise ValueError(f"plugin {self.name} cannot depend on itself")
        return self


async def call_hook(fn: Callable[..., Any], *args: Any) -> Any:
    """Invoke a sync-or-async plugin callback and wait for its result."""
    result = fn(*args)
    if inspect.isawaitable(result):
        result = await result
    return result
