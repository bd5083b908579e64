"""Tests for list filtering and the list view model."""

from dataclasses import replace

from hearth.actions import ActionEntry
from hearth.commands import RUN_COMMAND, THEMES_ID
from hearth.keys import Keystroke
from hearth.models import CommandMeta, NoMeta, ThemeMeta
from hearth.views import ListItem, filter_items, meta_label
from tests.helpers import make_context, recording_command


def _item(title: str, *keywords: str) -> ListItem:
    return ListItem(id=title.lower(), title=title, keywords=keywords)


def test_filter_ranks_prefix_then_substring_then_keyword() -> None:
    items = [
        _item("Clipboard History", "paste"),
        _item("Search Themes", "appearance"),
        _item("Theme Studio"),
        _item("Calculator", "math", "theme"),
    ]
    assert [i.title for i in filter_items(items, "theme")] == [
        "Theme Studio",
        "Search Themes",
        "Calculator",
    ]
    assert filter_items(items, "  ") == items
    assert filter_items(items, "zzz") == []


def test_root_list_tracks_query_and_local_actions() -> None:
    context, _, _ = make_context()
    model = context.active.view
    actions = context.active.actions
    assert [i.title for i in model.items] == ["Hearth", "Search Themes"]

    context.active.query.set_text("them")
    assert [i.title for i in model.items] == ["Search Themes"]
    assert actions.meta == CommandMeta(THEMES_ID)
    assert actions.local_actions[0].handler == RUN_COMMAND
    assert actions.local_actions[0].args == (THEMES_ID,)


def test_empty_result_clears_local_actions() -> None:
    context, _, _ = make_context()
    context.active.query.set_text("no such thing")
    actions = context.active.actions
    assert context.active.view.items == []
    assert actions.local_actions == []
    assert actions.meta == NoMeta()
    assert actions.primary() is None


def test_move_wraps_and_syncs_actions() -> None:
    context, _, _ = make_context()
    model = context.active.view
    model.move(1)
    assert model.selected_item.title == "Search Themes"
    model.move(1)
    assert model.selected_item.title == "Hearth"
    model.move(-1)
    assert context.active.actions.meta == CommandMeta(THEMES_ID)


def test_select_clamps_and_notifies() -> None:
    context, _, _ = make_context()
    model = context.active.view
    seen: list[int] = []
    model.subscribe(lambda: seen.append(model.selected))
    model.select(99)
    assert model.selected == 1
    assert seen == [1]


def test_meta_label() -> None:
    assert meta_label(NoMeta()) == ""
    assert meta_label(CommandMeta(THEMES_ID)) == "themes"
    assert meta_label(ThemeMeta("nord")) == "theme: nord"


def test_list_item_actions_are_data() -> None:
    entry = ActionEntry("Open", RUN_COMMAND, args=("x",))
    item = ListItem(id="x", title="X", actions=(entry,))
    assert item.actions[0] is entry
    assert item.meta == NoMeta()


def test_root_rows_show_command_shortcut() -> None:
    shortcut = Keystroke.new("v").cmd()
    clip = replace(recording_command("clipboard", []), shortcut=shortcut)
    context, _, _ = make_context(extra=(clip,))
    rows = {item.id: item for item in context.active.view.items}
    assert rows[clip.id].accessories == ("Testing", shortcut.label())
    assert rows[THEMES_ID].accessories == (context.registry.get(THEMES_ID).category,)
