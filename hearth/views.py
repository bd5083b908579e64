"""List view model: the opaque view handle that hosts render.

A ``ListModel`` keeps the full item set, the filtered subset for the
current query, and the selection. Moving the selection pushes the selected
item's actions into the view's local action set.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field

from .actions import ActionEntry
from .models import CommandMeta, NoMeta, ThemeMeta, ViewMeta
from .navigation import ViewContext


@dataclass(frozen=True)
class ListItem:
    id: str
    title: str
    subtitle: str = ""
    icon: str = ""
    accessories: tuple[str, ...] = ()
    keywords: tuple[str, ...] = ()
    actions: tuple[ActionEntry, ...] = ()
    meta: ViewMeta = field(default_factory=NoMeta)


ItemSource = Callable[["ListModel"], list[ListItem]]


def meta_label(meta: ViewMeta) -> str:
    """Short description of what the selected item refers to."""
    match meta:
        case CommandMeta(command_id=cid):
            return cid.rsplit("::", 1)[-1]
        case ThemeMeta(name=name):
            return f"theme: {name}"
        case NoMeta():
            return ""


def _score(item: ListItem, needle: str) -> int | None:
    """Lower is better; None means no match."""
    title = item.title.lower()
    if title.startswith(needle):
        return 0
    if needle in title:
        return 1
    if any(needle in kw.lower() for kw in item.keywords):
        return 2
    return None


def filter_items(items: list[ListItem], query: str) -> list[ListItem]:
    needle = query.strip().lower()
    if not needle:
        return list(items)
    scored = [(s, i, item) for i, item in enumerate(items) if (s := _score(item, needle)) is not None]
    scored.sort(key=lambda row: (row[0], row[1]))
    return [item for _, _, item in scored]


class ListModel:
    def __init__(self, ctx: ViewContext, source: ItemSource, *, placeholder: str = "") -> None:
        self._ctx = ctx
        self._source = source
        self.items_all: list[ListItem] = []
        self.items: list[ListItem] = []
        self.selected = 0
        self._listeners: list[Callable[[], None]] = []
        self._dropdown_seen = ctx.actions.dropdown_value
        if placeholder:
            ctx.query.set_placeholder(placeholder)
        self._unsubs = [
            ctx.query.subscribe(lambda _text: self.update()),
            ctx.actions.subscribe(self._on_actions_changed),
        ]
        self.update(reload=True)

    @property
    def query(self) -> str:
        return self._ctx.query.text

    @property
    def dropdown_value(self) -> str:
        return self._ctx.actions.dropdown_value

    def subscribe(self, listener: Callable[[], None]) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _on_actions_changed(self) -> None:
        # Only a dropdown change re-filters; local action updates come from us.
        value = self._ctx.actions.dropdown_value
        if value != self._dropdown_seen:
            self._dropdown_seen = value
            self.update(reload=True)

    def update(self, reload: bool = False) -> None:
        if reload:
            self.items_all = list(self._source(self))
        self.items = filter_items(self.items_all, self.query)
        self.selected = 0
        self._sync_actions()
        for listener in list(self._listeners):
            listener()

    @property
    def selected_item(self) -> ListItem | None:
        if 0 <= self.selected < len(self.items):
            return self.items[self.selected]
        return None

    def select(self, index: int) -> None:
        if not self.items:
            return
        self.selected = max(0, min(index, len(self.items) - 1))
        self._sync_actions()
        for listener in list(self._listeners):
            listener()

    def move(self, delta: int) -> None:
        if self.items:
            self.select((self.selected + delta) % len(self.items))

    def _sync_actions(self) -> None:
        item = self.selected_item
        if item is None:
            self._ctx.actions.clear_local()
        else:
            self._ctx.actions.update_local(list(item.actions), item.meta)

    def dispose(self) -> None:
        for unsub in self._unsubs:
            unsub()
        self._listeners.clear()
