"""Shared test helpers."""

from __future__ import annotations

import heapq
import itertools
from collections.abc import Callable, Coroutine
from typing import Any

from hearth.actions import ActionContext
from hearth.commands import builtin_registry
from hearth.context import AppContext
from hearth.registry import Command, command_id
from hearth.settings import load_settings


class ManualScheduler:
    """Virtual-clock scheduler; nothing runs until ``advance``."""

    def __init__(self, start: float = 1000.0) -> None:
        self.clock = start
        self._queue: list[tuple[float, int, Callable[[], None]]] = []
        self._seq = itertools.count()
        self.spawned: list[Coroutine[Any, Any, Any]] = []

    def now(self) -> float:
        return self.clock

    def call_later(self, delay: float, callback: Callable[[], None]) -> None:
        heapq.heappush(self._queue, (self.clock + max(0.0, delay), next(self._seq), callback))

    def spawn(self, coro: Coroutine[Any, Any, Any]) -> None:
        self.spawned.append(coro)

    @property
    def pending(self) -> int:
        return len(self._queue)

    def advance(self, seconds: float) -> None:
        target = self.clock + seconds
        while self._queue and self._queue[0][0] <= target:
            when, _, callback = heapq.heappop(self._queue)
            self.clock = when
            callback()
        self.clock = target


class RecordingSurface:
    def __init__(self) -> None:
        self.calls: list[str] = []

    def show(self) -> None:
        self.calls.append("show")

    def hide(self) -> None:
        self.calls.append("hide")


def recording_command(leaf: str, calls: list[str], group: str = "test") -> Command:
    """A command whose invocation appends its leaf to ``calls``."""

    def _invoke(_ctx: ActionContext) -> None:
        calls.append(leaf)

    return Command(
        id=command_id(group, leaf),
        title=leaf.replace("-", " ").title(),
        category="Testing",
        invoke=_invoke,
    )


def make_context(
    monkeypatch: Any = None,
    *,
    extra: tuple[Command, ...] = (),
    start_hidden: bool = False,
    **kwargs: Any,
) -> tuple[AppContext, ManualScheduler, RecordingSurface]:
    """AppContext over builtin commands with a manual clock and fake surface.

    With ``monkeypatch`` given, desktop notifications are captured on
    ``context.floated`` instead of calling notify-send.
    """
    scheduler = ManualScheduler()
    surface = RecordingSurface()
    floated: list[str] = []
    if monkeypatch is not None:
        monkeypatch.setattr(
            "hearth.context.notify",
            lambda title, body, urgency="normal": floated.append(body) or True,
        )
    context = AppContext(
        builtin_registry(extra),
        scheduler,
        surface=surface,
        settings=load_settings(),
        start_hidden=start_hidden,
        **kwargs,
    )
    context.floated = floated  # type: ignore[attr-defined]
    return context, scheduler, surface
