"""The view stack: root view at index 0, pushed views above it."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Protocol

from .actions import ActionResolver
from .query import QueryText

if TYPE_CHECKING:
    from .context import AppContext


logger = logging.getLogger(__name__)


@dataclass
class ViewContext:
    """Handed to a builder while its view is being constructed."""

    app: "AppContext"
    query: QueryText
    actions: ActionResolver


class ViewBuilder(Protocol):
    command_id: str

    def build(self, ctx: ViewContext) -> Any:
        """Return the view handle the host renders."""


@dataclass
class ViewInstance:
    id: str
    query: QueryText
    view: Any
    actions: ActionResolver
    is_root: bool = False

    def dispose(self) -> None:
        dispose = getattr(self.view, "dispose", None)
        if callable(dispose):
            dispose()
        self.query.dispose()
        self.actions.dispose()


ViewFactory = Callable[[ViewBuilder, bool], ViewInstance]


class NavigationStack:
    """Always-non-empty stack of views.

    ``pop`` never removes the root; ``reset`` truncates to the root and
    clears its query. Each mutating call notifies observers exactly once.
    """

    def __init__(self, root: ViewBuilder, factory: ViewFactory) -> None:
        self._factory = factory
        self._listeners: list[Callable[[], None]] = []
        self._stack: list[ViewInstance] = [factory(root, True)]
        self._check()

    def _check(self) -> None:
        assert self._stack, "navigation stack must never be empty"
        assert self._stack[0].is_root, "index 0 must be the root view"

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener()

    def subscribe(self, listener: Callable[[], None]) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    @property
    def views(self) -> tuple[ViewInstance, ...]:
        return tuple(self._stack)

    @property
    def depth(self) -> int:
        return len(self._stack)

    def __len__(self) -> int:
        return len(self._stack)

    @property
    def root(self) -> ViewInstance:
        return self._stack[0]

    @property
    def active(self) -> ViewInstance:
        return self._stack[-1]

    def push(self, builder: ViewBuilder) -> ViewInstance:
        view = self._factory(builder, False)
        self._stack.append(view)
        self._check()
        logger.debug("pushed %s (depth %d)", view.id, len(self._stack))
        self._notify()
        return view

    def pop(self) -> None:
        if len(self._stack) <= 1:
            return
        view = self._stack.pop()
        view.dispose()
        self._check()
        logger.debug("popped %s (depth %d)", view.id, len(self._stack))
        self._notify()

    def replace(self, builder: ViewBuilder) -> ViewInstance:
        self.pop()
        return self.push(builder)

    def reset(self) -> None:
        removed = self._stack[1:]
        del self._stack[1:]
        for view in reversed(removed):
            view.dispose()
        self._check()
        self.root.query.set_text("")
        logger.debug("reset to root (dropped %d views)", len(removed))
        self._notify()
