"""
core/events.py — Publish/subscribe bus shared by the client layers.

Handlers are called synchronously in subscription order. A coroutine
function's result is scheduled on the running loop instead of awaited, so
publish() never suspends.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections import defaultdict
from typing import Any, Callable

log = logging.getLogger(__name__)

EventHandler = Callable[..., Any]


class EventBus:
    def __init__(self):
        self._listeners: dict[str, list[EventHandler]] = defaultdict(list)
        self._tasks: set[asyncio.Task] = set()

    def subscribe(self, event: str, handler: EventHandler) -> None:
        self._listeners[event].append(handler)

    on = subscribe

    def unsubscribe(self, event: str, handler: EventHandler) -> None:
        if handler in self._listeners.get(event, []):
            self._listeners[event].remove(handler)

    def listeners(self, event: str) -> list[EventHandler]:
        return list(self._listeners.get(event, []))

    def publish(self, event: str, *args: Any) -> None:
        for handler in self.listeners(event):
            try:
                result = handler(*args)
            except Exception as e:
                log.error(f"Listener error on '{event}': {e}")
                continue
            if inspect.isawaitable(result):
                try:
                    task = asyncio.ensure_future(result, loop=asyncio.get_running_loop())
                except RuntimeError as e:
                    # no running loop to schedule on
                    log.error(f"Async listener on '{event}' not scheduled: {e}")
                    if inspect.iscoroutine(result):
                        result.close()
                    continue
                self._tasks.add(task)
                task.add_done_callback(self._task_done)

    def _task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if not task.cancelled() and task.exception() is not None:
            log.error(f"Async listener error: {task.exception()}")
