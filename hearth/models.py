"""Core data types shared by the transport, dispatch, and view layers."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class TopLevelAction(str, Enum):
    TOGGLE = "toggle"
    SHOW = "show"
    HIDE = "hide"
    QUIT = "quit"
    COMMAND = "command"
    PIPE = "pipe"


class VisibilityState(str, Enum):
    SHOWN = "shown"
    HIDDEN = "hidden"


@dataclass(frozen=True)
class CommandPayload:
    """Single request sent by a control client."""

    action: TopLevelAction
    command: str | None = None

    def to_dict(self) -> dict[str, object]:
        return {"action": self.action.value, "command": self.command}


@dataclass(frozen=True)
class SnapshotEntry:
    """Display projection of one registered command."""

    id: str
    title: str
    category: str

    @property
    def leaf(self) -> str:
        return self.id.rsplit("::", 1)[-1]

    def to_dict(self) -> dict[str, str]:
        return {"id": self.id, "title": self.title, "category": self.category}


# ── View meta ────────────────────────────────────────────────────────
# Selection payload carried alongside a view's local actions.


@dataclass(frozen=True)
class NoMeta:
    pass


@dataclass(frozen=True)
class CommandMeta:
    command_id: str


@dataclass(frozen=True)
class ThemeMeta:
    name: str


ViewMeta = NoMeta | CommandMeta | ThemeMeta
