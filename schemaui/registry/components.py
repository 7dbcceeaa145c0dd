"""Component registry — namespaced type → renderer map."""

from __future__ import annotations

from typing import Any, Literal

import structlog
from pydantic import BaseModel, ConfigDict

logger = structlog.get_logger()

InputType = Literal[
    "string",
    "number",
    "boolean",
    "enum",
    "array",
    "object",
    "color",
    "date",
    "code",
    "file",
    "slot",
]


class ComponentInput(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    type: InputType
    label: str | None = None
    default_value: Any = None
    required: bool = False
    enum: list[Any] | None = None
    description: str | None = None
    advanced: bool = False
    input_type: str | None = None


class ResizeConstraints(BaseModel):
    model_config = ConfigDict(frozen=True)

    width: bool | None = None
    height: bool | None = None
    min_width: int | None = None
    max_width: int | None = None
    min_height: int | None = None
    max_height: int | None = None


class ComponentMeta(BaseModel):
    """Designer-facing metadata attached to a component registration."""

    model_config = ConfigDict(frozen=True)

    label: str | None = None
    icon: str | None = None
    category: str | None = None
    namespace: str | None = None
    inputs: list[ComponentInput] = []
    default_props: dict[str, Any] = {}
    default_children: list[Any] = []
    examples: dict[str, Any] = {}
    is_container: bool = False
    resizable: bool = False
    resize_constraints: ResizeConstraints | None = None


class ComponentConfig(ComponentMeta):
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    type: str
    component: Any


def qualify(type_: str, namespace: str | None = None) -> str:
    return f"{namespace}:{type_}" if namespace else type_


class ComponentRegistry:
    def __init__(self, *, warn_unnamespaced: bool = True) -> None:
        self._components: dict[str, ComponentConfig] = {}
        self._warn_unnamespaced = warn_unnamespaced

    def register(
        self, type_: str, component: Any, meta: ComponentMeta | None = None
    ) -> ComponentConfig:
        meta = meta or ComponentMeta()
        full_type = qualify(type_, meta.namespace)

        if full_type in self._components:
            logger.debug("component_overwritten", type=full_type)

        if not meta.namespace and self._warn_unnamespaced:
            logger.warning(
                "unnamespaced_component_registration",
                type=type_,
                hint="pass ComponentMeta(namespace=...) to avoid collisions",
            )

        config = ComponentConfig(
            **meta.model_dump(), type=full_type, component=component
        )
        self._components[full_type] = config
        logger.debug("component_registered", type=full_type)
        return config

    def get(self, type_: str, namespace: str | None = None) -> Any | None:
        config = self.get_config(type_, namespace)
        return config.component if config is not None else None

    def get_config(
        self, type_: str, namespace: str | None = None
    ) -> ComponentConfig | None:
        if namespace:
            config = self._components.get(qualify(type_, namespace))
            if config is not None:
                return config
        return self._components.get(type_)

    def has(self, type_: str, namespace: str | None = None) -> bool:
        return self.get_config(type_, namespace) is not None

    def unregister(self, type_: str, namespace: str | None = None) -> bool:
        return self._components.pop(qualify(type_, namespace), None) is not None

    def unregister_namespace(self, namespace: str) -> list[str]:
        """Drop every registration under *namespace*; returns the removed keys."""
        prefix = f"{namespace}:"
        removed = [key for key in self._components if key.startswith(prefix)]
        for key in removed:
            del self._components[key]
        return removed

    def get_all_types(self) -> list[str]:
        return list(self._components)

    def get_all_configs(self) -> list[ComponentConfig]:
        return list(self._components.values())

    def __len__(self) -> int:
        return len(self._components)

    def __contains__(self, full_type: object) -> bool:
        return full_type in self._components
