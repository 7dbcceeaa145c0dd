"""Per-plugin key/value state with a serialized-size ceiling."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from pydantic_core import PydanticSerializationError, to_json

from schemaui.exceptions import StateError, StateSizeError

Setter = Callable[[Any], None]


class ScopedStateStore:
    """Key/value store owned by exactly one plugin scope.

    The size ceiling is checked against the JSON encoding of the whole store
    as it would be after the write. A rejected write leaves the store as it was.
    """

    def __init__(self, owner: str, max_size: int | None = None) -> None:
        self.owner = owner
        self.max_size = max_size or None
        self._data: dict[str, Any] = {}

    def get_state(self, key: str) -> Any | None:
        return self._data.get(key)

    def set_state(self, key: str, value: Any) -> None:
        if self.max_size is not None:
            candidate = {**self._data, key: value}
            size = self._measure(candidate)
            if size > self.max_size:
                raise StateSizeError(self.owner, size, self.max_size)
        self._data[key] = value

    def use_state(self, key: str, initial_value: Any) -> tuple[Any, Setter]:
        if key not in self._data:
            self.set_state(key, initial_value)

        def set_value(value: Any) -> None:
            if callable(value):
                value = value(self._data.get(key))
            self.set_state(key, value)

        return self._data[key], set_value

    def has(self, key: str) -> bool:
        return key in self._data

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._data)

    @property
    def size(self) -> int:
        return self._measure(self._data)

    def clear(self) -> None:
        self._data.clear()

    def _measure(self, data: dict[str, Any]) -> int:
        try:
            return len(to_json(data))
        except PydanticSerializationError as e:
            raise StateError(
                f'Plugin "{self.owner}" state is not serializable: {e}'
            ) from e
