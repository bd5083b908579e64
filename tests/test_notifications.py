"""Tests for toast state transitions and expiry."""

import pytest

from hearth.notifications import Error, Idle, Loading, NotificationState, Success
from tests.helpers import ManualScheduler


def _toast(**kwargs) -> tuple[NotificationState, ManualScheduler, list[object]]:  # type: ignore[no-untyped-def]
    scheduler = ManualScheduler()
    toast = NotificationState(scheduler, **kwargs)
    seen: list[object] = []
    toast.subscribe(seen.append)
    return toast, scheduler, seen


def test_success_expires_to_idle_after_three_seconds() -> None:
    toast, scheduler, _ = _toast()
    toast.success("Theme activated")
    state = toast.state
    assert isinstance(state, Success)
    assert state.expires == state.started + 3.0
    scheduler.advance(2.9)
    assert toast.state is state
    scheduler.advance(0.2)
    assert isinstance(toast.state, Idle)


def test_error_expires_after_four_seconds() -> None:
    toast, scheduler, _ = _toast()
    toast.error("nope")
    scheduler.advance(3.5)
    assert isinstance(toast.state, Error)
    scheduler.advance(0.6)
    assert toast.is_idle


def test_error_preempts_success_and_survives_its_timer() -> None:
    toast, scheduler, _ = _toast()
    toast.success("ok")
    scheduler.advance(1.0)
    toast.error("bad")
    err = toast.state
    scheduler.advance(2.5)  # success's expiry fires here
    assert toast.state is err
    scheduler.advance(1.6)
    assert toast.is_idle


def test_second_success_is_not_cut_short_by_first_timer() -> None:
    toast, scheduler, _ = _toast()
    toast.success("one")
    scheduler.advance(2.0)
    toast.success("two")
    second = toast.state
    scheduler.advance(1.5)
    assert toast.state is second
    scheduler.advance(1.6)
    assert toast.is_idle


def test_loading_never_expires() -> None:
    toast, scheduler, _ = _toast()
    toast.loading("working")
    assert scheduler.pending == 0
    scheduler.advance(1000)
    assert isinstance(toast.state, Loading)
    assert toast.state.expires is None


def test_observers_see_every_change_including_expiry() -> None:
    toast, scheduler, seen = _toast()
    toast.loading("a")
    toast.success("b")
    scheduler.advance(5)
    assert [type(s) for s in seen] == [Loading, Success, Idle]


def test_custom_timeouts() -> None:
    toast, scheduler, _ = _toast(success_timeout=1.0)
    toast.success("quick")
    scheduler.advance(1.01)
    assert toast.is_idle


def test_floating_uses_callback_when_it_accepts() -> None:
    sent: list[str] = []
    toast, _, _ = _toast(floating=lambda msg: sent.append(msg) or True)
    toast.floating("copied")
    assert sent == ["copied"]
    assert toast.is_idle


def test_floating_falls_back_to_success() -> None:
    toast, _, _ = _toast(floating=lambda msg: False)
    toast.floating("copied")
    assert isinstance(toast.state, Success)
    assert toast.state.message == "copied"


def test_reset_returns_to_idle() -> None:
    toast, _, seen = _toast()
    toast.reset()
    assert seen == []
    toast.loading("x")
    toast.reset()
    assert toast.is_idle


def test_fade_progress() -> None:
    toast, scheduler, _ = _toast()
    assert toast.opacity() == 0.0
    toast.success("fade")
    start = scheduler.now()
    assert toast.fade_in(start) == 0.0
    assert toast.fade_in(start + 0.15) == pytest.approx(0.5)
    assert toast.opacity(start + 1.0) == 1.0
    assert toast.fade_out(start + 3.0 - 0.15) == pytest.approx(0.5)
    assert toast.opacity(start + 3.0) == 0.0


def test_loading_does_not_fade_out() -> None:
    toast, scheduler, _ = _toast()
    toast.loading("busy")
    assert toast.fade_out() == 1.0
    assert toast.opacity(scheduler.now() + 10) == 1.0
