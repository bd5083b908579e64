"""Hearth terminal host: owns the event loop and renders the active view."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Coroutine
from typing import Any

from rich.text import Text
from textual import events
from textual.app import App, ComposeResult
from textual.containers import Horizontal
from textual.screen import Screen
from textual.widgets import Input, OptionList, Static
from textual.widgets.option_list import Option

from ..actions import ActionResolver, KeyOutcome
from ..commands import builtin_registry
from ..context import AppContext
from ..keys import ACTIONS_MENU, KeyEvent, Keystroke
from ..notifications import Error, Idle, Loading, Success
from ..registry import CommandRegistry
from ..scheduler import guarded
from ..server import DispatchServer
from ..settings import SETTINGS, Settings
from ..transport import Listener
from ..views import ListItem, ListModel, meta_label
from ..windowing import surface_for
from .css import APP_CSS, HIDDEN_CSS


logger = logging.getLogger(__name__)


class AppScheduler:
    """Scheduler backed by the app's timers and workers.

    Work scheduled before ``start`` (i.e. before the app is mounted) is
    queued and handed to textual once the message loop exists.
    """

    def __init__(self, app: App) -> None:
        self._app = app
        self._started = False
        self._timers: list[tuple[float, Callable[[], None]]] = []
        self._coros: list[Coroutine[Any, Any, Any]] = []

    @property
    def pending(self) -> int:
        return len(self._timers) + len(self._coros)

    def now(self) -> float:
        return time.monotonic()

    def call_later(self, delay: float, callback: Callable[[], None]) -> None:
        if not self._started:
            self._timers.append((self.now() + max(0.0, delay), callback))
            return
        self._app.set_timer(max(0.0, delay), guarded(callback))

    def spawn(self, coro: Coroutine[Any, Any, Any]) -> None:
        if not self._started:
            self._coros.append(coro)
            return
        self._app.run_worker(coro, group="spawned", exit_on_error=False)

    def start(self) -> None:
        """Flush queued work onto the running app; later calls go straight through."""
        self._started = True
        timers, self._timers = self._timers, []
        coros, self._coros = self._coros, []
        for due, callback in timers:
            self.call_later(due - self.now(), callback)
        for coro in coros:
            self.spawn(coro)


class TextualThemes:
    """The app's registered textual themes as launcher themes."""

    def __init__(self, app: App) -> None:
        self._app = app
        self.defaults: dict[str, str] = {}

    def names(self) -> list[str]:
        return sorted(name for name in self._app.available_themes if name != "textual-ansi")

    def is_dark(self, name: str) -> bool:
        theme = self._app.get_theme(name)
        return True if theme is None else bool(theme.dark)

    def apply(self, name: str) -> None:
        if name not in self._app.available_themes:
            raise KeyError(name)
        self._app.theme = name

    def set_default(self, mode: str, name: str) -> None:
        if mode not in {"light", "dark"} or name not in self._app.available_themes:
            raise ValueError(f"cannot set {mode} theme to {name!r}")
        self.defaults[mode] = name
        logger.info("default %s theme -> %s", mode, name)


class HiddenScreen(Screen):
    CSS = HIDDEN_CSS

    def compose(self) -> ComposeResult:
        yield Static("hearth is hidden · enter or `hearth-ctl show`", id="hidden-note")

    def on_key(self, event: events.Key) -> None:
        if event.key == "enter" and isinstance(self.app, HearthApp):
            event.stop()
            self.app.context.visibility.show()


class TerminalSurface:
    """Hide by covering the launcher with ``HiddenScreen``."""

    def __init__(self, app: App) -> None:
        self._app = app

    def show(self) -> None:
        if self._app.is_running and isinstance(self._app.screen, HiddenScreen):
            self._app.pop_screen()

    def hide(self) -> None:
        if self._app.is_running and not isinstance(self._app.screen, HiddenScreen):
            self._app.push_screen(HiddenScreen())


class QueryInput(Input):
    """Query field that offers each key to the launcher before editing."""

    async def _on_key(self, event: events.Key) -> None:
        app = self.app
        if isinstance(app, HearthApp) and app.handle_launcher_key(event.key):
            event.stop()
            event.prevent_default()


def _item_text(item: ListItem) -> Text:
    text = Text(item.title, style="bold")
    if item.subtitle:
        text.append(f"  {item.subtitle}", style="dim")
    if item.accessories:
        text.append(f"  {' · '.join(item.accessories)}", style="italic dim")
    return text


class HearthApp(App):
    TITLE = "Hearth"
    DEFAULT_CSS = APP_CSS

    def __init__(
        self,
        listener: Listener | None = None,
        *,
        settings: Settings | None = None,
        registry: CommandRegistry | None = None,
        start_hidden: bool = False,
    ) -> None:
        super().__init__()
        self.settings = settings or SETTINGS
        self.listener = listener
        self.server: DispatchServer | None = None
        self.launcher_themes = TextualThemes(self)
        self.launcher_scheduler = AppScheduler(self)
        if self.settings.visibility.surface == "terminal":
            surface = TerminalSurface(self)
        else:
            surface = surface_for(self.settings)
        self.context = AppContext(
            registry or builtin_registry(),
            self.launcher_scheduler,
            surface=surface,
            settings=self.settings,
            themes=self.launcher_themes,
            on_quit=self._request_exit,
            start_hidden=start_hidden,
        )
        self._ui_ready = False
        self._view_unsubs: list[Callable[[], None]] = []
        self.context.navigation.subscribe(self._on_navigation)
        self.context.visibility.subscribe(lambda _state: self._refresh_view())
        self._bind_active_view()

    def compose(self) -> ComposeResult:
        with Horizontal(id="search-bar"):
            yield QueryInput(id="query")
            yield Static("", id="dropdown", classes="empty")
        yield OptionList(id="items")
        yield Static("", id="action-menu")
        yield Static("", id="toast")
        yield Static("", id="action-bar")

    def on_mount(self) -> None:
        self._ui_ready = True
        self.launcher_scheduler.start()
        self.query_one("#items", OptionList).can_focus = False
        self.query_one("#query", QueryInput).focus()
        self._refresh_view()
        self.set_interval(0.05, self._tick_toast)
        if self.context.visibility.is_hidden and isinstance(
            self.context.visibility.surface, TerminalSurface
        ):
            self.push_screen(HiddenScreen())
        if self.listener is not None:
            self.server = DispatchServer(self.context, self.listener)
            self.run_worker(
                self.server.serve_forever(),
                name="dispatch-server",
                group="server",
                exclusive=True,
            )

    async def on_unmount(self) -> None:
        if self.server is not None:
            await self.server.close()

    def _request_exit(self) -> None:
        if self.is_running:
            self.exit()

    # ── view binding ─────────────────────────────────────────────────

    def _bind_active_view(self) -> None:
        for unsub in self._view_unsubs:
            unsub()
        view = self.context.active
        self._view_unsubs = [
            view.actions.subscribe(self._refresh_view),
            view.actions.toast.subscribe(lambda _state: self._refresh_toast()),
        ]
        if isinstance(view.view, ListModel):
            self._view_unsubs.append(view.view.subscribe(self._refresh_view))

    def _on_navigation(self) -> None:
        self._bind_active_view()
        self._refresh_view()

    # ── rendering ────────────────────────────────────────────────────

    def _refresh_view(self) -> None:
        if not self._ui_ready:
            return
        view = self.context.active
        actions = view.actions
        menu = actions.menu

        query = self.query_one("#query", QueryInput)
        source = menu.query if menu.is_open else view.query
        if query.value != source.text:
            query.value = source.text
        query.placeholder = source.placeholder

        dropdown = self.query_one("#dropdown", Static)
        label = actions.dropdown.label()
        dropdown.update(f"⇥ {label}" if label else "")
        dropdown.set_class(not label, "empty")

        self._render_items(view.view)
        self._render_menu(actions)
        self._render_action_bar(actions)
        self._refresh_toast()

    def _render_items(self, model: object) -> None:
        options = self.query_one("#items", OptionList)
        options.clear_options()
        if not isinstance(model, ListModel):
            return
        options.add_options([Option(_item_text(item)) for item in model.items])
        if model.items:
            options.highlighted = model.selected

    def _render_menu(self, actions: ActionResolver) -> None:
        widget = self.query_one("#action-menu", Static)
        menu = actions.menu
        widget.set_class(menu.is_open, "open")
        if not menu.is_open:
            return
        text = Text("Actions\n", style="bold")
        entries = menu.filtered()
        for index, entry in enumerate(entries):
            style = "reverse" if index == 0 else ""
            text.append(f" {entry.label} ", style=style)
            if entry.shortcut is not None:
                text.append(f" {entry.shortcut.label()}", style="dim")
            text.append("\n")
        if not entries:
            text.append("No matching actions", style="dim")
        widget.update(text)

    def _render_action_bar(self, actions: ActionResolver) -> None:
        text = Text()
        described = meta_label(actions.meta)
        if described:
            text.append(described, style="dim")
            text.append("   ")
        primary = actions.primary()
        if primary is not None:
            text.append(primary.label)
            text.append(" ↵   ", style="bold")
            text.append("Actions ")
            text.append(ACTIONS_MENU.label(), style="bold")
        self.query_one("#action-bar", Static).update(text)

    def _refresh_toast(self) -> None:
        if not self._ui_ready:
            return
        widget = self.query_one("#toast", Static)
        state = self.context.active.actions.toast.state
        match state:
            case Loading(message=message):
                kind, body = "loading", f"… {message}"
            case Success(message=message):
                kind, body = "success", f"✓ {message}"
            case Error(message=message):
                kind, body = "error", f"✗ {message}"
            case Idle():
                kind, body = "", ""
        for name in ("loading", "success", "error"):
            widget.set_class(kind == name, name)
        widget.update(body)

    def _tick_toast(self) -> None:
        toast = self.context.active.actions.toast
        if toast.is_idle:
            return
        self.query_one("#toast", Static).styles.opacity = toast.opacity()

    # ── input ────────────────────────────────────────────────────────

    def handle_launcher_key(self, key: str) -> bool:
        """Route one key through the active view; True if it was consumed."""
        view = self.context.active
        if key in {"up", "down"}:
            if view.actions.menu.is_open:
                return True
            if isinstance(view.view, ListModel):
                view.view.move(-1 if key == "up" else 1)
                return True
            return False
        try:
            keystroke = Keystroke.parse(key)
        except ValueError:
            return False
        # Terminals do not report auto-repeat, so every key counts as a fresh press.
        outcome = self.context.handle_key(KeyEvent(keystroke))
        return outcome is not KeyOutcome.IGNORED

    def on_input_changed(self, event: Input.Changed) -> None:
        if event.input.id != "query":
            return
        view = self.context.active
        target = view.actions.menu.query if view.actions.menu.is_open else view.query
        target.set_text(event.value)

    def on_option_list_option_highlighted(
        self, event: OptionList.OptionHighlighted
    ) -> None:
        model = self.context.active.view
        if isinstance(model, ListModel) and event.option_index != model.selected:
            model.select(event.option_index)

    def on_option_list_option_selected(self, event: OptionList.OptionSelected) -> None:
        actions = self.context.active.actions
        model = self.context.active.view
        if isinstance(model, ListModel):
            model.select(event.option_index)
        primary = actions.primary()
        if primary is not None:
            actions.invoke(primary)

    def on_app_blur(self, _event: events.AppBlur) -> None:
        if self.settings.visibility.hide_on_blur:
            self.context.visibility.hide()
