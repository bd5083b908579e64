"""Keystrokes and shortcut builders."""

from __future__ import annotations

import sys
from dataclasses import dataclass, replace


IS_MACOS = sys.platform == "darwin"

_MODIFIER_ORDER = ("ctrl", "alt", "shift", "super")

# Aliases accepted by ``Keystroke.parse``; values are canonical key names.
_KEY_ALIASES: dict[str, str] = {
    "return": "enter",
    "esc": "escape",
    "cmd": "super",
    "meta": "super",
    "option": "alt",
    "control": "ctrl",
    ",": "comma",
    ".": "dot",
    "?": "question_mark",
    "!": "exclamation_mark",
    "/": "slash",
    "\\": "backslash",
    " ": "space",
}

_KEY_LABELS: dict[str, str] = {
    "enter": "↵",
    "backspace": "⌫",
    "delete": "⌦",
    "escape": "esc",
    "tab": "⇥",
    "space": "␣",
    "up": "↑",
    "down": "↓",
    "left": "←",
    "right": "→",
    "comma": ",",
    "dot": ".",
    "question_mark": "?",
    "exclamation_mark": "!",
    "slash": "/",
    "backslash": "\\",
}

_MODIFIER_LABELS: dict[str, str] = {
    "ctrl": "^",
    "alt": "⌥",
    "shift": "⇧",
    "super": "⌘" if IS_MACOS else "◆",
}


@dataclass(frozen=True)
class Keystroke:
    """A key plus modifier set; equality is exact on every field."""

    key: str
    ctrl: bool = False
    alt: bool = False
    shift: bool = False
    super: bool = False

    @classmethod
    def new(cls, key: str) -> "Keystroke":
        return cls(key=_KEY_ALIASES.get(key.lower(), key.lower()))

    @classmethod
    def parse(cls, text: str) -> "Keystroke":
        """Parse ``"ctrl+shift+k"`` style key names (textual's format)."""
        clean = text.strip().lower()
        if not clean:
            raise ValueError("empty keystroke")
        if clean == "+":
            return cls(key="plus")
        parts = clean.split("+")
        key = parts[-1] or "plus"
        mods = {_KEY_ALIASES.get(p, p) for p in parts[:-1] if p}
        unknown = mods - set(_MODIFIER_ORDER)
        if unknown:
            raise ValueError(f"unknown modifier(s) in {text!r}: {sorted(unknown)}")
        return cls(
            key=_KEY_ALIASES.get(key, key),
            ctrl="ctrl" in mods,
            alt="alt" in mods,
            shift="shift" in mods,
            super="super" in mods,
        )

    # Builders mirror desktop conventions: "cmd" is the platform command key.

    def cmd(self) -> "Keystroke":
        return replace(self, super=True) if IS_MACOS else replace(self, ctrl=True)

    def ctrl_key(self) -> "Keystroke":
        return replace(self, ctrl=True) if IS_MACOS else replace(self, super=True)

    def with_shift(self) -> "Keystroke":
        return replace(self, shift=True)

    def with_alt(self) -> "Keystroke":
        return replace(self, alt=True)

    @property
    def has_modifiers(self) -> bool:
        return self.ctrl or self.alt or self.shift or self.super

    def modifiers(self) -> tuple[str, ...]:
        return tuple(m for m in _MODIFIER_ORDER if getattr(self, m))

    def __str__(self) -> str:
        return "+".join((*self.modifiers(), self.key))

    def label(self) -> str:
        """Compact display form, e.g. ``^K`` or ``↵``."""
        mods = "".join(_MODIFIER_LABELS[m] for m in self.modifiers())
        key = _KEY_LABELS.get(self.key, self.key.upper())
        return f"{mods}{key}"


ENTER = Keystroke.new("enter")
TAB = Keystroke.new("tab")
ESCAPE = Keystroke.new("escape")
BACKSPACE = Keystroke.new("backspace")
ACTIONS_MENU = Keystroke.new("k").cmd()


@dataclass(frozen=True)
class KeyEvent:
    """A key press delivered to a view; ``is_held`` marks auto-repeat."""

    keystroke: Keystroke
    is_held: bool = False

    @classmethod
    def from_name(cls, name: str, *, is_held: bool = False) -> "KeyEvent":
        return cls(Keystroke.parse(name), is_held=is_held)
