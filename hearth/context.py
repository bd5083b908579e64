"""Application context: the single owner of control-plane state.

One ``AppContext`` is built at startup and handed to every component that
needs the registry, the view stack, or the visibility controller. All of
its methods must run on the owner loop; the dispatch server calls
``apply`` from connection tasks scheduled on that same loop, so requests
are applied one at a time.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from .actions import ActionContext, ActionEntry, ActionResolver, HandlerRegistry, KeyOutcome
from .commands import DEFAULT_GLOBAL_ACTIONS, RootListBuilder, StaticThemes, ThemeProvider, register_handlers
from .config import APP_NAME
from .errors import CommandNotFound
from .keys import BACKSPACE, KeyEvent
from .models import CommandPayload, TopLevelAction, VisibilityState
from .navigation import NavigationStack, ViewBuilder, ViewContext, ViewInstance
from .notifications import NotificationState
from .notify import notify
from .query import QueryText
from .registry import CommandRegistry
from .scheduler import Scheduler
from .settings import SETTINGS, Settings
from .visibility import NullSurface, Surface, VisibilityController


logger = logging.getLogger(__name__)


class AppContext:
    def __init__(
        self,
        registry: CommandRegistry,
        scheduler: Scheduler,
        *,
        surface: Surface | None = None,
        settings: Settings | None = None,
        handlers: HandlerRegistry | None = None,
        themes: ThemeProvider | None = None,
        root: ViewBuilder | None = None,
        global_actions: list[ActionEntry] | None = None,
        on_quit: Callable[[], None] | None = None,
        start_hidden: bool = False,
    ) -> None:
        self.settings = settings or SETTINGS
        self.registry = registry
        self.scheduler = scheduler
        self.themes: ThemeProvider = themes or StaticThemes()
        self.handlers = handlers or HandlerRegistry()
        register_handlers(self.handlers)
        self._global_actions = list(
            DEFAULT_GLOBAL_ACTIONS if global_actions is None else global_actions
        )
        self._on_quit = on_quit
        self.quit_requested = False

        self.visibility = VisibilityController(
            scheduler,
            surface or NullSurface(),
            on_reset=self._reset_navigation,
            reset_after=self.settings.visibility.reset_after,
            state=VisibilityState.HIDDEN if start_hidden else VisibilityState.SHOWN,
        )
        self.navigation = NavigationStack(root or RootListBuilder(), self._build_view)

    # ── views ────────────────────────────────────────────────────────

    def _build_view(self, builder: ViewBuilder, is_root: bool) -> ViewInstance:
        notes = self.settings.notifications
        toast = NotificationState(
            self.scheduler,
            success_timeout=notes.success_timeout,
            error_timeout=notes.error_timeout,
            fade=notes.fade,
            floating=self._float_notification,
        )
        resolver = ActionResolver(
            self.handlers, toast, lambda r: ActionContext(app=self, resolver=r)
        )
        resolver.update_global(self._global_actions)
        query = QueryText()
        handle = builder.build(ViewContext(app=self, query=query, actions=resolver))
        return ViewInstance(
            id=builder.command_id,
            query=query,
            view=handle,
            actions=resolver,
            is_root=is_root,
        )

    def _reset_navigation(self) -> None:
        self.navigation.reset()

    def _float_notification(self, message: str) -> bool:
        if not self.visibility.is_hidden:
            return False
        return notify(APP_NAME, message)

    @property
    def active(self) -> ViewInstance:
        return self.navigation.active

    def action_context(self, view: ViewInstance | None = None) -> ActionContext:
        return ActionContext(app=self, resolver=(view or self.active).actions)

    def set_global_actions(self, actions: list[ActionEntry]) -> None:
        self._global_actions = list(actions)
        for view in self.navigation.views:
            view.actions.update_global(self._global_actions)

    # ── dispatch ─────────────────────────────────────────────────────

    def apply(self, payload: CommandPayload) -> None:
        """Apply one control request. Raises ``CommandNotFound`` before mutating."""
        action = payload.action
        logger.info("apply %s %s", action.value, payload.command or "")
        if action is TopLevelAction.TOGGLE:
            self.visibility.toggle()
        elif action is TopLevelAction.SHOW:
            self.visibility.show()
        elif action is TopLevelAction.HIDE:
            self.visibility.hide()
        elif action is TopLevelAction.QUIT:
            self.quit()
        elif action is TopLevelAction.COMMAND:
            self._invoke_command(payload.command)
        elif action is TopLevelAction.PIPE:
            logger.debug("pipe action is reserved; ignoring")

    def _invoke_command(self, name: str | None) -> None:
        if not name:
            raise CommandNotFound("")
        command = self.registry.get(name)
        if self.active.id == command.id:
            self.visibility.toggle()
            return
        self.navigation.reset()
        ctx = self.action_context()
        try:
            command.invoke(ctx)
        except Exception as exc:
            logger.exception("command %s failed", command.id)
            ctx.toast.error(f"{command.title} failed: {exc}")
        self.visibility.show()

    def quit(self) -> None:
        self.quit_requested = True
        if self._on_quit is not None:
            self._on_quit()

    # ── keys ─────────────────────────────────────────────────────────

    def handle_key(self, event: KeyEvent) -> KeyOutcome:
        view = self.active
        outcome = view.actions.handle_key(event)
        if outcome is KeyOutcome.CLOSE:
            self.visibility.hide()
        elif (
            outcome is KeyOutcome.IGNORED
            and not event.is_held
            and event.keystroke == BACKSPACE
            and not view.query.text
            and not view.is_root
        ):
            self.navigation.pop()
            return KeyOutcome.BACK
        return outcome
