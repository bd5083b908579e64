"""Tests for keystrokes, shortcut builders, and labels."""

import pytest

from hearth.keys import ACTIONS_MENU, ENTER, KeyEvent, Keystroke


def test_parse_modifiers_and_key() -> None:
    ks = Keystroke.parse("ctrl+shift+k")
    assert ks == Keystroke(key="k", ctrl=True, shift=True)
    assert ks.has_modifiers
    assert ks.modifiers() == ("ctrl", "shift")


def test_parse_aliases() -> None:
    assert Keystroke.parse("cmd+return") == Keystroke(key="enter", super=True)
    assert Keystroke.parse("esc") == Keystroke.new("escape")
    assert Keystroke.parse("Enter") == ENTER


def test_parse_rejects_unknown_modifier_and_empty() -> None:
    with pytest.raises(ValueError):
        Keystroke.parse("hyper+k")
    with pytest.raises(ValueError):
        Keystroke.parse("   ")


def test_str_uses_canonical_modifier_order() -> None:
    assert str(Keystroke.parse("shift+ctrl+a")) == "ctrl+shift+a"
    assert str(ENTER) == "enter"


def test_cmd_builder_follows_platform(monkeypatch) -> None:
    monkeypatch.setattr("hearth.keys.IS_MACOS", False)
    assert Keystroke.new("k").cmd() == Keystroke(key="k", ctrl=True)
    assert Keystroke.new("k").ctrl_key() == Keystroke(key="k", super=True)

    monkeypatch.setattr("hearth.keys.IS_MACOS", True)
    assert Keystroke.new("k").cmd() == Keystroke(key="k", super=True)
    assert Keystroke.new("k").ctrl_key() == Keystroke(key="k", ctrl=True)


def test_builders_do_not_mutate() -> None:
    base = Keystroke.new("d")
    shifted = base.with_shift().with_alt()
    assert base == Keystroke(key="d")
    assert shifted == Keystroke(key="d", alt=True, shift=True)


def test_actions_menu_shortcut_is_command_k() -> None:
    assert ACTIONS_MENU == Keystroke.new("k").cmd()


def test_labels() -> None:
    assert ENTER.label() == "↵"
    assert Keystroke(key="k", ctrl=True).label() == "^K"
    assert Keystroke.new("tab").label() == "⇥"


def test_key_event_from_name() -> None:
    event = KeyEvent.from_name("tab", is_held=True)
    assert event.keystroke == Keystroke(key="tab")
    assert event.is_held
    assert not KeyEvent.from_name("a").is_held
