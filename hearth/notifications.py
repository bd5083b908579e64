"""Per-view toast state: Idle, Loading, Success, Error.

A new notification always replaces the current one. Success and Error arm
a deferred task at their expiry; the task only resets to Idle if the state
it was armed for is still current.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from .scheduler import Scheduler


@dataclass(frozen=True, eq=False)
class Idle:
    pass


@dataclass(frozen=True, eq=False)
class Loading:
    message: str
    started: float
    expires: None = None


@dataclass(frozen=True, eq=False)
class Success:
    message: str
    started: float
    expires: float


@dataclass(frozen=True, eq=False)
class Error:
    message: str
    started: float
    expires: float


ToastState = Idle | Loading | Success | Error


def _ease_in_out(t: float) -> float:
    t = min(1.0, max(0.0, t))
    return t * t * (3.0 - 2.0 * t)


class NotificationState:
    """Timed toast state machine for one view."""

    def __init__(
        self,
        scheduler: Scheduler,
        *,
        success_timeout: float = 3.0,
        error_timeout: float = 4.0,
        fade: float = 0.3,
        floating: Callable[[str], bool] | None = None,
    ) -> None:
        self._scheduler = scheduler
        self.success_timeout = success_timeout
        self.error_timeout = error_timeout
        self.fade = fade
        self._floating = floating
        self._state: ToastState = Idle()
        self._listeners: list[Callable[[ToastState], None]] = []

    @property
    def state(self) -> ToastState:
        return self._state

    @property
    def is_idle(self) -> bool:
        return isinstance(self._state, Idle)

    def subscribe(self, listener: Callable[[ToastState], None]) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def dispose(self) -> None:
        self._listeners.clear()

    def _set(self, state: ToastState) -> None:
        self._state = state
        for listener in list(self._listeners):
            listener(state)

    def _arm_expiry(self, state: Success | Error) -> None:
        def _expire() -> None:
            if self._state is state:
                self._set(Idle())

        self._scheduler.call_later(state.expires - state.started, _expire)

    def loading(self, message: str) -> None:
        self._set(Loading(message=message, started=self._scheduler.now()))

    def success(self, message: str) -> None:
        now = self._scheduler.now()
        state = Success(message=message, started=now, expires=now + self.success_timeout)
        self._set(state)
        self._arm_expiry(state)

    def error(self, message: str) -> None:
        now = self._scheduler.now()
        state = Error(message=message, started=now, expires=now + self.error_timeout)
        self._set(state)
        self._arm_expiry(state)

    def floating(self, message: str) -> None:
        """Report outside the surface when it is hidden, otherwise as success."""
        if self._floating is not None and self._floating(message):
            return
        self.success(message)

    def reset(self) -> None:
        if not self.is_idle:
            self._set(Idle())

    def fade_in(self, now: float | None = None) -> float:
        state = self._state
        if isinstance(state, Idle):
            return 0.0
        now = self._scheduler.now() if now is None else now
        return _ease_in_out((now - state.started) / (self.fade or 1e-9))

    def fade_out(self, now: float | None = None) -> float:
        """1.0 until the last ``fade`` seconds before expiry, then down to 0."""
        state = self._state
        if isinstance(state, Idle):
            return 0.0
        if state.expires is None:
            return 1.0
        now = self._scheduler.now() if now is None else now
        return _ease_in_out((state.expires - now) / (self.fade or 1e-9))

    def opacity(self, now: float | None = None) -> float:
        """Fade progress in [0, 1] for renderers."""
        return min(self.fade_in(now), self.fade_out(now))
