"""Command registry and its serializable snapshot.

Command ids have the form ``<namespace>::<group>::<leaf>``. The leaf is
the name users type on the command line, so leaves must be unique.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .config import COMMAND_NAMESPACE
from .errors import CommandNotFound
from .keys import Keystroke
from .models import SnapshotEntry

if TYPE_CHECKING:
    from .actions import ActionContext


def command_id(group: str, leaf: str, namespace: str = COMMAND_NAMESPACE) -> str:
    return f"{namespace}::{group}::{leaf}"


def split_command_id(value: str) -> tuple[str, str, str]:
    parts = value.split("::")
    if len(parts) != 3 or not all(p.strip() for p in parts):
        raise ValueError(f"command id must be <namespace>::<group>::<leaf>: {value!r}")
    return parts[0], parts[1], parts[2]


@dataclass(frozen=True)
class Command:
    id: str
    title: str
    category: str
    invoke: Callable[["ActionContext"], None] = field(compare=False, repr=False)
    icon: str = ""
    tags: tuple[str, ...] = ()
    shortcut: Keystroke | None = None

    @property
    def leaf(self) -> str:
        return split_command_id(self.id)[2]

    def snapshot(self) -> SnapshotEntry:
        return SnapshotEntry(id=self.id, title=self.title, category=self.category)


class CommandRegistry:
    """Immutable id → command map, validated at construction."""

    def __init__(self, commands: Iterable[Command]) -> None:
        by_id: dict[str, Command] = {}
        by_leaf: dict[str, Command] = {}
        for command in commands:
            leaf = split_command_id(command.id)[2]
            if command.id in by_id:
                raise ValueError(f"duplicate command id: {command.id!r}")
            if leaf in by_leaf:
                raise ValueError(
                    f"duplicate command leaf {leaf!r}: "
                    f"{by_leaf[leaf].id!r} and {command.id!r}"
                )
            by_id[command.id] = command
            by_leaf[leaf] = command
        self._by_id = by_id
        self._by_leaf = by_leaf

    def __iter__(self) -> Iterator[Command]:
        return iter(self._by_id.values())

    def __len__(self) -> int:
        return len(self._by_id)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and (name in self._by_id or name in self._by_leaf)

    def get(self, name: str) -> Command:
        """Look up by full id or by leaf; raises ``CommandNotFound``."""
        command = self._by_id.get(name) or self._by_leaf.get(name)
        if command is None:
            raise CommandNotFound(name)
        return command

    def leaves(self) -> list[str]:
        return sorted(self._by_leaf)

    def snapshot(self) -> list[SnapshotEntry]:
        return [command.snapshot() for command in self._by_id.values()]
