import io
import json

import pytest

from hab.cli import build_parser, main


@pytest.fixture
def data_file(tmp_path, monkeypatch):
    path = tmp_path / "data" / "activities.json"
    monkeypatch.setenv("HAB_DATA_FILE", str(path))
    return path


def _dates(path, key):
    return json.loads(path.read_text(encoding="utf-8"))["activities"][key]["dates"]


def _create(name="exercise", target="1"):
    assert main(["new", name, "-c", "red", "-t", target]) == 0


def test_build_parser_prune_options():
    ns = build_parser().parse_args(["prune", "--dry-run", "walk"])
    assert ns.command == "prune"
    assert ns.dry_run is True
    assert ns.force is False
    assert ns.habit == "walk"


def test_build_parser_add_date_flag():
    ns = build_parser().parse_args(["add", "walk", "-d", "2025-01-15"])
    assert ns.habit == "walk"
    assert ns.date_flag == "2025-01-15"


def test_list_empty(data_file, capsys):
    assert main(["list"]) == 0
    assert "No habits found. Create one with: hab new [habit-name]" in capsys.readouterr().out


def test_new_creates_habit(data_file, capsys):
    _create()
    out = capsys.readouterr().out
    assert "✓ Created habit 'Exercise' with color red" in out
    assert "Add an entry with: hab exercise" in out
    assert _dates(data_file, "exercise") == []


def test_new_invalid_color(data_file, capsys):
    assert main(["new", "walk", "-c", "purple", "-t", "1"]) == 1
    assert "Error: invalid color 'purple'" in capsys.readouterr().out


def test_root_single_argument_adds_today(data_file, capsys):
    _create()
    capsys.readouterr()
    assert main(["exercise"]) == 0
    out = capsys.readouterr().out
    assert "✓ Added entry for 'Exercise' today" in out
    assert "Current streak: 1 days 🔥" in out
    assert len(_dates(data_file, "exercise")) == 1


def test_add_with_positional_date(data_file, capsys):
    _create()
    assert main(["add", "exercise", "2025-01-15"]) == 0
    assert "on 2025-01-15" in capsys.readouterr().out
    assert _dates(data_file, "exercise") == ["2025-01-15"]


def test_add_date_flag_overrides_positional(data_file):
    _create()
    assert main(["add", "exercise", "2025-01-15", "-d", "2025-01-16"]) == 0
    assert _dates(data_file, "exercise") == ["2025-01-16"]


def test_add_missing_habit(data_file, capsys):
    assert main(["add", "nope"]) == 1
    assert "Error: habit 'nope' does not exist" in capsys.readouterr().out


def test_add_invalid_date(data_file, capsys):
    _create()
    assert main(["add", "exercise", "15-01-2025"]) == 1
    assert "invalid date format" in capsys.readouterr().out


def test_invalid_timeline(data_file, capsys):
    assert main(["-t", "bad"]) == 1
    assert "Invalid timeline 'bad'. Use 3m, 6m, or 12m" in capsys.readouterr().err


def test_several_arguments_show_help(data_file, capsys):
    assert main(["one", "two"]) == 0
    assert "usage: hab" in capsys.readouterr().out


def test_delete_forced(data_file, capsys):
    _create()
    assert main(["delete", "exercise", "-f"]) == 0
    assert "✓ Deleted habit 'Exercise'" in capsys.readouterr().out
    assert json.loads(data_file.read_text(encoding="utf-8"))["activities"] == {}


def test_delete_cancelled(data_file, capsys, monkeypatch):
    _create()
    monkeypatch.setattr("sys.stdin", io.StringIO("n\n"))
    assert main(["delete", "exercise"]) == 0
    assert "Operation cancelled" in capsys.readouterr().out
    assert _dates(data_file, "exercise") == []


def test_prune_unknown_habit(data_file, capsys):
    _create()
    assert main(["prune", "missing"]) == 1
    assert "Habit 'missing' not found." in capsys.readouterr().err


def test_prune_dry_run_keeps_entries(data_file, capsys):
    _create()
    main(["add", "exercise", "2025-01-15"])
    main(["add", "exercise", "2025-01-15"])
    capsys.readouterr()
    assert main(["prune", "--dry-run"]) == 0
    assert "Dry run complete. Would prune 1 total entries." in capsys.readouterr().out
    assert _dates(data_file, "exercise") == ["2025-01-15", "2025-01-15"]


def test_prune_force_removes_excess(data_file, capsys):
    _create()
    for _ in range(3):
        main(["add", "exercise", "2025-01-15"])
    capsys.readouterr()
    assert main(["prune", "exercise", "--force"]) == 0
    assert "Successfully pruned 2 total entries." in capsys.readouterr().out
    assert _dates(data_file, "exercise") == ["2025-01-15"]


def test_stats_reports_totals(data_file, capsys):
    _create()
    main(["add", "exercise", "2025-01-15"])
    capsys.readouterr()
    assert main(["stats", "exercise"]) == 0
    out = capsys.readouterr().out
    assert "Statistics for 'Exercise'" in out
    assert "Total entries: 1" in out


def test_load_error_reported(data_file, capsys):
    data_file.parent.mkdir(parents=True)
    data_file.write_text("{not json", encoding="utf-8")
    assert main(["list"]) == 1
    assert "Error loading habits" in capsys.readouterr().out


def test_version_flag(capsys):
    with pytest.raises(SystemExit) as info:
        main(["--version"])
    assert info.value.code == 0
    assert capsys.readouterr().out.startswith("hab version ")


def test_subcommand_missing_argument_exits():
    with pytest.raises(SystemExit) as info:
        main(["stats"])
    assert info.value.code == 2