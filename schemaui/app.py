"""Bootstrap: logging setup and plugin system wiring."""

from __future__ import annotations

import logging
import logging.handlers

import structlog

from schemaui.core.config import SchemaUIConfig
from schemaui.core.events import EventBus
from schemaui.plugins.system import PluginSystem
from schemaui.registry.components import ComponentRegistry

logger = structlog.get_logger()


_PROCESSORS: tuple[structlog.types.Processor, ...] = (
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.add_logger_name,
    structlog.processors.add_log_level,
    structlog.processors.TimeStamper(fmt="iso"),
    structlog.processors.StackInfoRenderer(),
    structlog.processors.format_exc_info,
)


def _rendered(
    handler: logging.Handler, renderer: structlog.types.Processor
) -> logging.Handler:
    handler.setFormatter(structlog.stdlib.ProcessorFormatter(processor=renderer))
    return handler


def _log_handlers(config: SchemaUIConfig) -> list[logging.Handler]:
    """Console output always; JSON lines into ``<log_dir>/schemaui.log`` when set."""
    handlers = [_rendered(logging.StreamHandler(), structlog.dev.ConsoleRenderer())]
    if config.log_dir is None:
        return handlers

    config.log_dir.mkdir(parents=True, exist_ok=True)
    rotating = logging.handlers.RotatingFileHandler(
        config.log_dir / "schemaui.log",
        maxBytes=config.log_max_bytes,
        backupCount=config.log_backup_count,
    )
    handlers.append(_rendered(rotating, structlog.processors.JSONRenderer()))
    return handlers


def configure_logging(config: SchemaUIConfig) -> None:
    """Route structlog through stdlib logging at ``config.log_level``.

    Replaces any handlers already on the root logger.
    """
    root = logging.getLogger()
    for handler in root.handlers[:]:
        root.removeHandler(handler)
    for handler in _log_handlers(config):
        root.addHandler(handler)
    root.setLevel(config.log_level)

    structlog.configure(
        processors=[
            *_PROCESSORS,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def build_plugin_system(
    config: SchemaUIConfig | None = None,
    registry: ComponentRegistry | None = None,
) -> PluginSystem:
    if config is None:
        config = SchemaUIConfig()

    configure_logging(config)

    if registry is None:
        registry = ComponentRegistry(warn_unnamespaced=config.warn_unnamespaced)

    system = PluginSystem(
        registry=registry, global_bus=EventBus("global"), config=config
    )
    logger.info(
        "plugin_system_ready",
        max_state_size=config.default_max_state_size,
        remove_components_on_unload=config.remove_components_on_unload,
    )
    return system

