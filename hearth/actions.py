"""Per-view action sets, keystroke resolution, and the action menu.

Actions are data: an ``ActionEntry`` names a handler id that is looked up
in a ``HandlerRegistry`` when the action fires.

Resolution order is fixed: the combined list is ``local + global`` and the
first entry whose shortcut equals the keystroke wins, so a local action
always shadows a global one bound to the same key.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, replace
from enum import Enum
from typing import TYPE_CHECKING, Any

from .keys import ACTIONS_MENU, ENTER, ESCAPE, TAB, KeyEvent, Keystroke
from .models import NoMeta, ViewMeta
from .notifications import NotificationState
from .query import QueryText

if TYPE_CHECKING:
    from .context import AppContext


logger = logging.getLogger(__name__)

TOGGLE_MENU = "actions.toggle_menu"


@dataclass(frozen=True)
class ActionEntry:
    label: str
    handler: str
    shortcut: Keystroke | None = None
    icon: str = ""
    args: tuple[Any, ...] = ()
    hidden: bool = False


class KeyOutcome(str, Enum):
    ACTION = "action"
    DROPDOWN = "dropdown"
    MENU = "menu"
    CLOSE = "close"
    BACK = "back"
    IGNORED = "ignored"


@dataclass
class ActionContext:
    """What a handler sees: the app plus the view the action fired on."""

    app: "AppContext"
    resolver: "ActionResolver"

    @property
    def toast(self) -> NotificationState:
        return self.resolver.toast

    @property
    def meta(self) -> ViewMeta:
        return self.resolver.meta


Handler = Callable[..., None]


class HandlerRegistry:
    """Handler id → callable ``fn(ActionContext, *args)``."""

    def __init__(self) -> None:
        self._handlers: dict[str, Handler] = {}
        self.register(TOGGLE_MENU, lambda ctx: ctx.resolver.menu.toggle())

    def register(self, handler_id: str, fn: Handler) -> None:
        if handler_id in self._handlers:
            raise ValueError(f"handler already registered: {handler_id!r}")
        self._handlers[handler_id] = fn

    def handler(self, handler_id: str) -> Callable[[Handler], Handler]:
        """Decorator form of ``register``."""

        def _wrap(fn: Handler) -> Handler:
            self.register(handler_id, fn)
            return fn

        return _wrap

    def get(self, handler_id: str) -> Handler:
        return self._handlers[handler_id]

    def __contains__(self, handler_id: object) -> bool:
        return handler_id in self._handlers


class Dropdown:
    """Small value selector shown next to the query; Tab cycles it."""

    def __init__(self) -> None:
        self.value = ""
        self.items: list[tuple[str, str]] = []

    def label(self) -> str:
        for value, label in self.items:
            if value == self.value:
                return label
        return ""

    def set_items(self, items: list[tuple[str, str]]) -> None:
        self.items = [(str(value), str(label)) for value, label in items]

    def set_value(self, value: str) -> bool:
        """Set value; a non-empty value must be one of the items."""
        if value and not any(item[0] == value for item in self.items):
            return False
        self.value = value
        return True

    def cycle(self) -> bool:
        if not self.items:
            return False
        index = next(
            (i for i, item in enumerate(self.items) if item[0] == self.value), 0
        )
        self.value = self.items[(index + 1) % len(self.items)][0]
        return True


class ActionMenu:
    """Filterable popup listing the visible entries of a view's actions."""

    def __init__(self, resolver: "ActionResolver") -> None:
        self._resolver = resolver
        self.query = QueryText(placeholder="Search for actions...")
        self.is_open = False
        self.entries: list[ActionEntry] = []
        self.query.subscribe(lambda _text: self._resolver.notify())

    def _snapshot(self) -> None:
        self.entries = [e for e in self._resolver.combined() if not e.hidden]

    def open(self) -> None:
        self._snapshot()
        self.query.set_text("")
        self.is_open = True
        self._resolver.notify()

    def close(self) -> None:
        if self.is_open:
            self.is_open = False
            self._resolver.notify()

    def toggle(self) -> None:
        if self.is_open:
            self.close()
        else:
            self.open()

    def refresh(self) -> None:
        if self.is_open:
            self._snapshot()
            self._resolver.notify()

    def filtered(self) -> list[ActionEntry]:
        needle = self.query.text.strip().lower()
        if not needle:
            return list(self.entries)
        return [e for e in self.entries if needle in e.label.lower()]

    def select(self, index: int = 0) -> ActionEntry | None:
        """Close the menu and invoke the filtered entry at ``index``."""
        items = self.filtered()
        self.close()
        if not 0 <= index < len(items):
            return None
        entry = items[index]
        self._resolver.invoke(entry)
        return entry

    def handle_key(self, event: KeyEvent) -> KeyOutcome:
        if event.is_held:
            return KeyOutcome.IGNORED
        if event.keystroke == ENTER:
            self.select(0)
            return KeyOutcome.MENU
        if event.keystroke == ESCAPE:
            self.close()
            return KeyOutcome.MENU
        entry = self._resolver.resolve(event.keystroke)
        if entry is not None:
            self._resolver.invoke(entry)
            return KeyOutcome.ACTION
        return KeyOutcome.IGNORED


class ActionResolver:
    """Global + local actions for one view, plus its dropdown and toast."""

    def __init__(
        self,
        handlers: HandlerRegistry,
        toast: NotificationState,
        make_context: Callable[["ActionResolver"], ActionContext],
    ) -> None:
        self._handlers = handlers
        self._make_context = make_context
        self.toast = toast
        self.global_actions: list[ActionEntry] = []
        self.local_actions: list[ActionEntry] = []
        self.meta: ViewMeta = NoMeta()
        self.dropdown = Dropdown()
        self.menu = ActionMenu(self)
        self._listeners: list[Callable[[], None]] = []

    # ── observers ────────────────────────────────────────────────────

    def subscribe(self, listener: Callable[[], None]) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def notify(self) -> None:
        for listener in list(self._listeners):
            listener()

    def dispose(self) -> None:
        self._listeners.clear()
        self.menu.query.dispose()
        self.toast.dispose()

    # ── action sets ──────────────────────────────────────────────────

    def update_global(self, actions: list[ActionEntry]) -> None:
        self.global_actions = list(actions)
        self.menu.refresh()
        self.notify()

    def update_local(self, actions: list[ActionEntry], meta: ViewMeta | None = None) -> None:
        self.local_actions = list(actions)
        self.meta = meta if meta is not None else NoMeta()
        self.menu.refresh()
        self.notify()

    def clear_local(self) -> None:
        self.update_local([])

    def combined(self) -> list[ActionEntry]:
        """Fresh ``local + global`` list with the primary bound to Enter."""
        combined = [*self.local_actions, *self.global_actions]
        if not combined:
            return combined
        for index, entry in enumerate(combined):
            if not entry.hidden:
                combined[index] = replace(entry, shortcut=ENTER)
                break
        combined.append(
            ActionEntry(
                label="Actions",
                handler=TOGGLE_MENU,
                shortcut=ACTIONS_MENU,
                icon="book-open",
                hidden=True,
            )
        )
        return combined

    def primary(self) -> ActionEntry | None:
        return next((e for e in self.combined() if not e.hidden), None)

    # ── dropdown ─────────────────────────────────────────────────────

    def set_dropdown(self, value: str, items: list[tuple[str, str]]) -> None:
        self.dropdown.set_items(items)
        self.set_dropdown_value(value)

    def set_dropdown_value(self, value: str) -> None:
        if self.dropdown.set_value(value):
            self.notify()

    @property
    def dropdown_value(self) -> str:
        return self.dropdown.value

    # ── keys ─────────────────────────────────────────────────────────

    def resolve(self, keystroke: Keystroke) -> ActionEntry | None:
        for entry in self.combined():
            if entry.shortcut is not None and entry.shortcut == keystroke:
                return entry
        return None

    def invoke(self, entry: ActionEntry) -> None:
        try:
            fn = self._handlers.get(entry.handler)
            fn(self._make_context(self), *entry.args)
        except Exception as exc:
            logger.exception("action %r (%s) failed", entry.label, entry.handler)
            self.toast.error(f"{entry.label} failed: {exc}")

    def handle_key(self, event: KeyEvent) -> KeyOutcome:
        if event.is_held:
            return KeyOutcome.IGNORED
        if self.menu.is_open:
            return self.menu.handle_key(event)
        entry = self.resolve(event.keystroke)
        if entry is not None:
            self.invoke(entry)
            return KeyOutcome.ACTION
        if event.keystroke == TAB:
            if self.dropdown.cycle():
                self.notify()
            return KeyOutcome.DROPDOWN
        if event.keystroke == ESCAPE:
            return KeyOutcome.CLOSE
        return KeyOutcome.IGNORED
