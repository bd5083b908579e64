"""Tests for show/hide transitions and the deferred navigation reset."""

import pytest

from hearth.models import VisibilityState
from hearth.visibility import VisibilityController
from tests.helpers import ManualScheduler, RecordingSurface


def _controller(**kwargs):  # type: ignore[no-untyped-def]
    scheduler = ManualScheduler()
    surface = RecordingSurface()
    resets: list[int] = []
    controller = VisibilityController(
        scheduler,
        surface,
        on_reset=lambda: resets.append(1),
        reset_after=90.0,
        **kwargs,
    )
    return controller, scheduler, surface, resets


def test_toggle_flips_state_and_drives_surface() -> None:
    controller, _, surface, _ = _controller()
    seen: list[VisibilityState] = []
    controller.subscribe(seen.append)
    controller.toggle()
    assert controller.is_hidden
    controller.toggle()
    assert controller.is_shown
    assert surface.calls == ["hide", "show"]
    assert seen == [VisibilityState.HIDDEN, VisibilityState.SHOWN]


def test_repeated_show_and_hide_are_no_ops() -> None:
    controller, scheduler, surface, _ = _controller()
    controller.show()
    controller.hide()
    controller.hide()
    assert surface.calls == ["hide"]
    assert scheduler.pending == 1


def test_reset_fires_after_staying_hidden() -> None:
    controller, scheduler, _, resets = _controller()
    controller.hide()
    scheduler.advance(89.0)
    assert resets == []
    scheduler.advance(1.0)
    assert resets == [1]


def test_showing_before_deadline_skips_reset() -> None:
    controller, scheduler, _, resets = _controller()
    controller.hide()
    scheduler.advance(30.0)
    controller.show()
    scheduler.advance(120.0)
    assert resets == []


def test_earlier_timer_resets_when_hidden_again() -> None:
    controller, scheduler, _, resets = _controller()
    controller.hide()
    scheduler.advance(10.0)
    controller.show()
    scheduler.advance(70.0)
    controller.hide()
    # The first hide's timer fires at t=90 and finds the surface hidden.
    scheduler.advance(10.5)
    assert resets == [1]
    scheduler.advance(80.0)
    assert resets == [1, 1]


def test_hide_is_untouched_when_timer_cannot_be_armed() -> None:
    class _Broken(ManualScheduler):
        def call_later(self, delay, callback):  # type: ignore[no-untyped-def]
            raise RuntimeError("no running event loop")

    surface = RecordingSurface()
    controller = VisibilityController(_Broken(), surface, on_reset=lambda: None)
    with pytest.raises(RuntimeError):
        controller.hide()
    assert controller.is_shown
    assert surface.calls == []


def test_unsubscribe_stops_notifications() -> None:
    controller, _, _, _ = _controller(state=VisibilityState.HIDDEN)
    seen: list[VisibilityState] = []
    unsubscribe = controller.subscribe(seen.append)
    unsubscribe()
    controller.show()
    assert seen == []
