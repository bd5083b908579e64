"""Built-in commands, the views they open, and their action handlers."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Protocol

from .actions import ActionContext, ActionEntry, HandlerRegistry
from .keys import Keystroke
from .models import CommandMeta, ThemeMeta
from .navigation import ViewContext
from .registry import Command, CommandRegistry, command_id
from .views import ListItem, ListModel


logger = logging.getLogger(__name__)

ROOT_ID = command_id("root", "root")
THEMES_ID = command_id("theme", "themes")
PREFERENCES_ID = command_id("root", "hearth")

RUN_COMMAND = "commands.run"
SELECT_THEME = "themes.select"
SET_DEFAULT_THEME = "themes.set_default"
HIDE_LAUNCHER = "visibility.hide"

THEME_FILTERS: list[tuple[str, str]] = [
    ("all", "All"),
    ("dark", "Dark"),
    ("light", "Light"),
]


# ── Themes ───────────────────────────────────────────────────────────


class ThemeProvider(Protocol):
    def names(self) -> list[str]: ...

    def is_dark(self, name: str) -> bool: ...

    def apply(self, name: str) -> None: ...

    def set_default(self, mode: str, name: str) -> None: ...


class StaticThemes:
    """In-memory theme list for hosts without their own theme set."""

    def __init__(self, themes: dict[str, bool] | None = None) -> None:
        self._themes = dict(themes or {"hearth-dark": True, "hearth-light": False})
        self.current = next(iter(self._themes))
        self.defaults: dict[str, str] = {}

    def names(self) -> list[str]:
        return sorted(self._themes)

    def is_dark(self, name: str) -> bool:
        return self._themes.get(name, True)

    def apply(self, name: str) -> None:
        if name not in self._themes:
            raise KeyError(name)
        self.current = name

    def set_default(self, mode: str, name: str) -> None:
        if mode not in {"light", "dark"} or name not in self._themes:
            raise ValueError(f"cannot set {mode} theme to {name!r}")
        self.defaults[mode] = name


# ── Views ────────────────────────────────────────────────────────────


class RootListBuilder:
    command_id = ROOT_ID

    def build(self, ctx: ViewContext) -> ListModel:
        registry = ctx.app.registry

        def _items(_model: ListModel) -> list[ListItem]:
            return [
                ListItem(
                    id=cmd.id,
                    title=cmd.title,
                    subtitle=cmd.category,
                    icon=cmd.icon,
                    accessories=(
                        (cmd.category, cmd.shortcut.label())
                        if cmd.shortcut is not None
                        else (cmd.category,)
                    ),
                    keywords=(cmd.title, cmd.leaf, *cmd.tags),
                    actions=(
                        ActionEntry(
                            label="Open Command",
                            handler=RUN_COMMAND,
                            icon="arrow-up-right",
                            args=(cmd.id,),
                        ),
                    ),
                    meta=CommandMeta(cmd.id),
                )
                for cmd in sorted(registry, key=lambda c: c.title.lower())
            ]

        return ListModel(ctx, _items, placeholder="Search for apps and commands...")


class ThemeListBuilder:
    command_id = THEMES_ID

    def build(self, ctx: ViewContext) -> ListModel:
        themes = ctx.app.themes
        ctx.actions.set_dropdown("all", THEME_FILTERS)

        def _items(model: ListModel) -> list[ListItem]:
            mode = model.dropdown_value
            out: list[ListItem] = []
            for name in themes.names():
                dark = themes.is_dark(name)
                if (mode == "dark" and not dark) or (mode == "light" and dark):
                    continue
                out.append(
                    ListItem(
                        id=name,
                        title=name,
                        icon="palette",
                        accessories=("dark" if dark else "light",),
                        keywords=(name,),
                        actions=(
                            ActionEntry("Select Theme", SELECT_THEME, icon="palette", args=(name,)),
                            ActionEntry(
                                "Default Light Theme",
                                SET_DEFAULT_THEME,
                                shortcut=Keystroke.new("l").cmd(),
                                icon="sun",
                                args=("light", name),
                            ),
                            ActionEntry(
                                "Default Dark Theme",
                                SET_DEFAULT_THEME,
                                shortcut=Keystroke.new("d").cmd(),
                                icon="moon",
                                args=("dark", name),
                            ),
                        ),
                        meta=ThemeMeta(name),
                    )
                )
            return out

        return ListModel(ctx, _items, placeholder="Search for themes...")


# ── Handlers ─────────────────────────────────────────────────────────


def _run_command(ctx: ActionContext, cmd_id: str) -> None:
    ctx.app.registry.get(cmd_id).invoke(ctx)


def _select_theme(ctx: ActionContext, name: str) -> None:
    ctx.app.themes.apply(name)
    ctx.toast.success("Theme activated")


def _set_default_theme(ctx: ActionContext, mode: str, name: str) -> None:
    try:
        ctx.app.themes.set_default(mode, name)
    except (KeyError, ValueError, OSError) as exc:
        logger.warning("could not set default %s theme: %s", mode, exc)
        ctx.toast.error(f"Failed to change {mode} theme")
        return
    ctx.toast.success(f"Changed {mode} theme")


def _hide_launcher(ctx: ActionContext) -> None:
    ctx.app.visibility.hide()


def register_handlers(handlers: HandlerRegistry) -> None:
    handlers.register(RUN_COMMAND, _run_command)
    handlers.register(SELECT_THEME, _select_theme)
    handlers.register(SET_DEFAULT_THEME, _set_default_theme)
    handlers.register(HIDE_LAUNCHER, _hide_launcher)


DEFAULT_GLOBAL_ACTIONS: list[ActionEntry] = [
    ActionEntry(
        label="Hide Launcher",
        handler=HIDE_LAUNCHER,
        shortcut=Keystroke.new("w").cmd(),
        icon="eye-off",
        hidden=True,
    ),
]


# ── Commands ─────────────────────────────────────────────────────────


def _open_themes(ctx: ActionContext) -> None:
    ctx.app.navigation.push(ThemeListBuilder())


def _open_preferences(ctx: ActionContext) -> None:
    ctx.toast.error("Preferences not yet implemented")


BUILTIN_COMMANDS: tuple[Command, ...] = (
    Command(
        id=THEMES_ID,
        title="Search Themes",
        category="Customization",
        invoke=_open_themes,
        icon="palette",
        tags=("Appearance",),
    ),
    Command(
        id=PREFERENCES_ID,
        title="Hearth",
        category="Preferences",
        invoke=_open_preferences,
        icon="rocket",
        tags=("Settings",),
    ),
)


def builtin_registry(extra: Iterable[Command] = ()) -> CommandRegistry:
    return CommandRegistry([*BUILTIN_COMMANDS, *extra])
