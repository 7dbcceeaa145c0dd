"""Lightweight event bus for plugin scopes."""

from __future__ import annotations

import asyncio
import inspect
from collections.abc import Callable, Coroutine
from typing import Any

import structlog

logger = structlog.get_logger()

# Global event name constants
PLUGIN_LOADED = "plugin.loaded"
PLUGIN_UNLOADED = "plugin.unloaded"

EventHandler = Callable[[Any], Any]
Unsubscribe = Callable[[], None]


class _Subscription:
    __slots__ = ("handler",)

    def __init__(self, handler: EventHandler) -> None:
        self.handler = handler


class EventBus:
    """Name-keyed publish/subscribe channel.

    Delivery is synchronous and in subscription order. Each handler runs
    inside its own error boundary, so a failing handler never stops the
    remaining handlers from receiving the event. A coroutine returned by a
    handler is scheduled on the running loop and not awaited by ``emit``.
    """

    def __init__(self, name: str = "global") -> None:
        self.name = name
        self._handlers: dict[str, list[_Subscription]] = {}
        self._tasks: set[asyncio.Task[Any]] = set()

    def on(self, event_name: str, handler: EventHandler) -> Unsubscribe:
        sub = _Subscription(handler)
        self._handlers.setdefault(event_name, []).append(sub)

        def unsubscribe() -> None:
            subs = self._handlers.get(event_name)
            if subs is None or sub not in subs:
                return
            subs.remove(sub)
            if not subs:
                del self._handlers[event_name]

        return unsubscribe

    def emit(self, event_name: str, payload: Any = None) -> None:
        # Snapshot: handlers (un)subscribed mid-dispatch take effect next emit
        for sub in list(self._handlers.get(event_name, [])):
            try:
                result = sub.handler(payload)
            except Exception:
                logger.exception(
                    "event_handler_error",
                    bus=self.name,
                    event_name=event_name,
                    handler_name=_handler_name(sub.handler),
                )
                continue
            if inspect.iscoroutine(result):
                self._schedule(event_name, sub.handler, result)

    def _schedule(
        self, event_name: str, handler: EventHandler, coro: Coroutine[Any, Any, Any]
    ) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            coro.close()
            logger.warning(
                "event_handler_not_awaited",
                bus=self.name,
                event_name=event_name,
                handler_name=_handler_name(handler),
            )
            return

        task = loop.create_task(coro)
        self._tasks.add(task)

        def _done(task: asyncio.Task[Any]) -> None:
            self._tasks.discard(task)
            if task.cancelled() or task.exception() is None:
                return
            logger.error(
                "event_handler_error",
                bus=self.name,
                event_name=event_name,
                handler_name=_handler_name(handler),
                exc_info=task.exception(),
            )

        task.add_done_callback(_done)

    def handler_count(self, event_name: str | None = None) -> int:
        if event_name is not None:
            return len(self._handlers.get(event_name, []))
        return sum(len(subs) for subs in self._handlers.values())

    @property
    def pending_tasks(self) -> int:
        return len(self._tasks)

    def clear(self) -> None:
        self._handlers.clear()


def _handler_name(handler: EventHandler) -> str:
    return getattr(handler, "__name__", repr(handler))
