"""Deferred-task scheduling for the single state owner.

Every timed transition (toast expiry, hidden-reset grace period) is armed
through a ``Scheduler``. Tasks are never cancelled by their owners; the
callback re-checks its condition when it fires.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable, Coroutine
from typing import Any, Protocol


logger = logging.getLogger(__name__)


class Scheduler(Protocol):
    def now(self) -> float:
        """Monotonic clock in seconds."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> None:
        """Run ``callback`` on the owner after ``delay`` seconds."""

    def spawn(self, coro: Coroutine[Any, Any, Any]) -> None:
        """Run ``coro`` as a fire-and-forget task on the owner loop."""


def guarded(callback: Callable[[], None]) -> Callable[[], None]:
    def _run() -> None:
        try:
            callback()
        except Exception:
            logger.exception("deferred task %r failed", callback)

    return _run


class LoopScheduler:
    """Scheduler backed by a running asyncio loop."""

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop
        self._tasks: set[asyncio.Task] = set()

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def now(self) -> float:
        return time.monotonic()

    def call_later(self, delay: float, callback: Callable[[], None]) -> None:
        self.loop.call_later(max(0.0, delay), guarded(callback))

    def spawn(self, coro: Coroutine[Any, Any, Any]) -> None:
        task = self.loop.create_task(coro)
        # Keep a strong reference until done; the loop only holds weak ones.
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        task.add_done_callback(_log_task_failure)


def _log_task_failure(task: asyncio.Task) -> None:
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.error("background task failed", exc_info=exc)
