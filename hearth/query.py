"""Per-view query text holder with change notifications."""

from __future__ import annotations

from collections.abc import Callable


TextListener = Callable[[str], None]


class QueryText:
    """Mutable search text owned by exactly one view."""

    def __init__(self, text: str = "", placeholder: str = "") -> None:
        self._text = text
        self.placeholder = placeholder
        self._listeners: list[TextListener] = []

    @property
    def text(self) -> str:
        return self._text

    def set_text(self, text: str) -> None:
        if text == self._text:
            return
        self._text = text
        for listener in list(self._listeners):
            listener(text)

    def set_placeholder(self, placeholder: str) -> None:
        self.placeholder = placeholder

    def subscribe(self, listener: TextListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def dispose(self) -> None:
        self._listeners.clear()
