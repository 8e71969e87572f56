from datetime import date

import pytest

from hab.grid import RenderingLevel, Timeline, generate_grid
from hab.store import Activity, HabitManager, format_date
from hab.tui import HabitItem, TrackerModel, ViewMode

TODAY = date(2025, 1, 15)


@pytest.fixture
def manager(tmp_path):
    m = HabitManager(tmp_path / "activities.json")
    m.load()
    m.create_activity("exercise", "Exercise", "green", 1)
    m.create_activity("water", "Water", "blue", 3)
    m.add_entry("exercise", "2025-01-15")
    m.add_entry("exercise", "2025-01-14")
    return m


@pytest.fixture
def model(manager, monkeypatch):
    monkeypatch.delenv("HAB_DEBUG", raising=False)
    return TrackerModel(
        manager, Timeline.TWELVE_MONTHS, True, RenderingLevel.ASCII, TODAY
    )


def _row(model, activity, index):
    return model.render_activity_grid(activity).split("\n")[index + 1]


def test_habit_item_text():
    item = HabitItem("run", Activity("Run", "red", ["2025-01-01"], 0))
    assert item.title() == "Run"
    assert item.description() == "Key: run • Color: red • Target: 1/day • Entries: 1"


def test_initial_state_and_title(model):
    assert model.view_mode is ViewMode.ALL_ACTIVITIES
    assert model.activity_keys == ["exercise", "water"]
    assert "Activity Tracker - All Activities (12 months)" in model.view()


def test_digit_selects_habit(model):
    assert model.handle_key("2") is True
    assert model.view_mode is ViewMode.SINGLE_ACTIVITY
    assert model.selected_index == 1
    assert "Activity Tracker - Water (12 months)" in model.view()


def test_digit_out_of_range_ignored(model):
    model.handle_key("9")
    assert model.view_mode is ViewMode.ALL_ACTIVITIES
    assert model.selected_index == 0


def test_quit_keys(model):
    assert model.handle_key("q") is False
    assert model.handle_key("ctrl+c") is False


def test_help_toggle(model):
    assert "move up" not in model.view()
    model.handle_key("?")
    assert model.show_help is True
    assert "move up" in model.view()
    model.handle_key("?")
    assert model.show_help is False


def test_single_navigation_wraps(model):
    model.handle_key("1")
    model.handle_key("up")
    assert model.selected_index == 1
    model.handle_key("j")
    assert model.selected_index == 0


def test_enter_logs_today(model, manager):
    model.handle_key("2")
    model.handle_key("enter")
    model.handle_key(" ")
    assert manager.get_activity("water").dates == [format_date(TODAY)] * 2
    reloaded = HabitManager(manager.data_file)
    reloaded.load()
    assert reloaded.get_activity("water").dates.count(format_date(TODAY)) == 2


def test_all_view_key_returns(model):
    model.handle_key("1")
    model.handle_key("a")
    assert model.view_mode is ViewMode.ALL_ACTIVITIES


def test_selection_list_enter_and_escape(model):
    model.handle_key("tab")
    assert model.view_mode is ViewMode.HABIT_SELECTION
    assert "Select a Habit" in model.view()
    model.handle_key("down")
    model.handle_key("enter")
    assert model.view_mode is ViewMode.SINGLE_ACTIVITY
    assert model.selected_index == 1
    model.handle_key("tab")
    model.handle_key("esc")
    assert model.view_mode is ViewMode.ALL_ACTIVITIES


def test_selection_filter(model):
    model.handle_key("tab")
    model.handle_key("/")
    for ch in "wat":
        model.handle_key(ch)
    assert [item.key for item in model.visible_items()] == ["water"]
    model.handle_key("enter")
    assert model.view_mode is ViewMode.SINGLE_ACTIVITY
    assert model.activity_keys[model.selected_index] == "water"


def test_timeline_keys_regenerate_grid(model, manager):
    model.handle_key("ctrl+3")
    assert model.timeline is Timeline.THREE_MONTHS
    expected = generate_grid(manager.activities(), Timeline.THREE_MONTHS, TODAY)
    assert model.grid == expected
    assert "(3 months)" in model.view()
    model.handle_key("ctrl+y")
    assert model.timeline is Timeline.TWELVE_MONTHS


def test_legend_toggle(model):
    assert "None  .  -  +  #  Complete" in model.view()
    model.handle_key("l")
    assert model.show_legend is False
    assert "Complete" not in model.view()


def test_grid_shape(model, manager):
    text = model.render_activity_grid(manager.get_activity("exercise"), 1)
    lines = text.rstrip("\n").split("\n")
    assert lines[0] == "[1] Exercise (2 activities)"
    assert len(lines) == 8
    assert [line[0] for line in lines[1:]] == ["S", "M", "T", "W", "T", "F", "S"]
    assert all(len(line) == 3 + 3 * len(model.grid) for line in lines[1:])


def test_grid_title_without_number(model, manager):
    text = model.render_activity_grid(manager.get_activity("water"))
    assert text.split("\n")[0] == "Water (0 activities)"


def test_cell_levels(model, manager):
    assert model.grid[-1][3].date == TODAY
    assert _row(model, manager.get_activity("exercise"), 3).endswith("#  ")
    water = manager.get_activity("water")
    assert _row(model, water, 3).endswith(".  ")
    manager.add_entry("water", format_date(TODAY))
    assert _row(model, water, 3).endswith("-  ")
    manager.add_entry("water", format_date(TODAY))
    assert _row(model, water, 3).endswith("+  ")


def test_debug_mode_line(model, monkeypatch):
    monkeypatch.setenv("HAB_DEBUG", "true")
    assert "Rendering Mode: ASCII" in model.view()


def test_resize(model):
    model.resize(120, 40)
    assert (model.width, model.height) == (120, 40)


def test_empty_manager(tmp_path, monkeypatch):
    monkeypatch.delenv("HAB_DEBUG", raising=False)
    m = HabitManager(tmp_path / "empty.json")
    m.load()
    model = TrackerModel(m, Timeline.SIX_MONTHS, True, RenderingLevel.ASCII, TODAY)
    model.handle_key("tab")
    model.handle_key("enter")
    assert model.view_mode is ViewMode.HABIT_SELECTION
    assert "No items." in model.view()