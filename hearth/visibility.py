"""Shown/hidden state of the launcher surface.

Hiding arms a deferred reset: once the grace period elapses, the view stack
is truncated to the root if the surface is hidden at that moment. Nothing
is cancelled on show; the task checks on wake.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Protocol

from .models import VisibilityState
from .scheduler import Scheduler


logger = logging.getLogger(__name__)

DEFAULT_RESET_AFTER = 90.0


class Surface(Protocol):
    def show(self) -> None:
        """Bring the launcher surface to the front."""

    def hide(self) -> None:
        """Remove the launcher surface from view."""


class NullSurface:
    """Surface that only records transitions in the log."""

    def show(self) -> None:
        logger.debug("surface shown")

    def hide(self) -> None:
        logger.debug("surface hidden")


class VisibilityController:
    def __init__(
        self,
        scheduler: Scheduler,
        surface: Surface,
        *,
        on_reset: Callable[[], None],
        reset_after: float = DEFAULT_RESET_AFTER,
        state: VisibilityState = VisibilityState.SHOWN,
    ) -> None:
        self._scheduler = scheduler
        self.surface = surface
        self._on_reset = on_reset
        self.reset_after = reset_after
        self._state = state
        self._listeners: list[Callable[[VisibilityState], None]] = []

    @property
    def state(self) -> VisibilityState:
        return self._state

    @property
    def is_shown(self) -> bool:
        return self._state is VisibilityState.SHOWN

    @property
    def is_hidden(self) -> bool:
        return self._state is VisibilityState.HIDDEN

    def subscribe(
        self, listener: Callable[[VisibilityState], None]
    ) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _set(self, state: VisibilityState) -> None:
        self._state = state
        logger.info("visibility -> %s", state.value)
        for listener in list(self._listeners):
            listener(state)

    def show(self) -> None:
        if self.is_shown:
            return
        self.surface.show()
        self._set(VisibilityState.SHOWN)

    def hide(self) -> None:
        if self.is_hidden:
            return
        self._arm_reset()
        self.surface.hide()
        self._set(VisibilityState.HIDDEN)

    def toggle(self) -> None:
        if self.is_shown:
            self.hide()
        else:
            self.show()

    def _arm_reset(self) -> None:
        def _maybe_reset() -> None:
            if self.is_hidden:
                logger.info("hidden for %.0fs, resetting navigation", self.reset_after)
                self._on_reset()

        self._scheduler.call_later(self.reset_after, _maybe_reset)
