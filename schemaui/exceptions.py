"""Shared exception types for schemaui."""


class SchemaUIError(Exception):
    """Base exception for all schemaui errors."""


class ConfigError(SchemaUIError):
    """Configuration is invalid or missing."""


class PluginError(SchemaUIError):
    """Plugin lifecycle error."""


class DependencyError(PluginError):
    """A plugin's dependency is not loaded, or the dependency graph has a cycle."""

    def __init__(
        self, message: str, *, plugin: str | None = None, dependency: str | None = None
    ) -> None:
        super().__init__(message)
        self.plugin = plugin
        self.dependency = dependency


class PluginNotLoadedError(PluginError):
    """The target plugin has no loaded definition."""

    def __init__(self, plugin: str) -> None:
        super().__init__(f'Plugin "{plugin}" is not loaded')
        self.plugin = plugin


class DependentsExistError(PluginError):
    """Another loaded plugin still depends on the target."""

    def __init__(self, plugin: str, dependent: str) -> None:
        super().__init__(
            f'Cannot unload plugin "{plugin}" - plugin "{dependent}" depends on it'
        )
        self.plugin = plugin
        self.dependent = dependent


class StateError(PluginError):
    """Scoped state could not be written."""


class StateSizeError(StateError):
    """A state write would push the store over its size ceiling."""

    def __init__(self, plugin: str, size: int, limit: int) -> None:
        super().__init__(
            f'Plugin "{plugin}" exceeded maximum state size: '
            f"{size} bytes > {limit} bytes"
        )
        self.plugin = plugin
        self.size = size
        self.limit = limit
