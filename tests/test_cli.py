"""
Smoke tests for the command line interface.
"""

import importlib

import pytest
from typer.testing import CliRunner

from playdate.cli.app import app

cli_app = importlib.import_module("playdate.cli.app")

DAY = "2024-11-25"

runner = CliRunner()


@pytest.fixture
def config_path(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "store:\n"
        "  backend: file\n"
        f"  path: {tmp_path / 'state'}\n",
        encoding="utf-8",
    )
    return path


def _invoke(config_path, *args):
    return runner.invoke(app, ["--config", str(config_path), *args])


def test_add_and_list(config_path):
    result = _invoke(config_path, "add", "Ann", "--phone", "555-1")
    assert result.exit_code == 0, result.output
    assert "Added Ann" in result.output

    result = _invoke(config_path, "list")
    assert result.exit_code == 0, result.output
    assert "Ann" in result.output
    assert "555-1" in result.output


def test_add_without_name_fails(config_path):
    result = _invoke(config_path, "add", " ")

    assert result.exit_code == 1
    assert "Name is required" in result.output


def test_shared_slot_workflow(config_path):
    """Two children marking the same slot show up as the top slot and a range."""
    for args in [
        ("add", "Ann", "--phone", "555-1"),
        ("add", "Bo", "--phone", "555-2"),
        ("dates", "--start", DAY, "--days", "5"),
        ("toggle", "Ann", DAY, "14:00"),
        ("toggle", "Bo", DAY, "14:00"),
    ]:
        result = _invoke(config_path, *args)
        assert result.exit_code == 0, result.output

    result = _invoke(config_path, "top")
    assert result.exit_code == 0, result.output
    assert f"{DAY} 2:00 PM" in result.output
    assert "Ann, Bo" in result.output

    result = _invoke(config_path, "range", "Ann", DAY, "14:00")
    assert result.exit_code == 0, result.output
    assert "2:00 PM – 2:30 PM" in result.output
    assert "555-2" in result.output


def test_dates_window(config_path):
    result = _invoke(config_path, "dates", "--start", DAY, "--end", "2024-11-27")
    assert result.exit_code == 0, result.output

    result = _invoke(config_path, "dates")
    assert "2024-11-25 – 2024-11-27 (3 days)" in result.output


def test_dates_end_without_start(config_path):
    result = _invoke(config_path, "dates", "--end", DAY)

    assert result.exit_code == 1


def test_toggle_day_fills_then_clears(config_path):
    _invoke(config_path, "add", "Ann")

    first = _invoke(config_path, "toggle-day", "Ann", DAY)
    second = _invoke(config_path, "toggle-day", "Ann", DAY)

    assert f"{DAY} filled" in first.output
    assert f"{DAY} cleared" in second.output


def test_toggle_unknown_child(config_path):
    result = _invoke(config_path, "toggle", "Nobody", DAY, "10:00")

    assert result.exit_code == 1
    assert "Unknown participant" in result.output


def test_toggle_time_outside_grid(config_path):
    _invoke(config_path, "add", "Ann")

    result = _invoke(config_path, "toggle", "Ann", DAY, "07:00")

    assert result.exit_code == 1


def test_edit_and_remove(config_path):
    _invoke(config_path, "add", "Ann")

    result = _invoke(config_path, "edit", "Ann", "--name", "Annie")
    assert "Updated Annie" in result.output

    result = _invoke(config_path, "remove", "Annie")
    assert "Removed Annie" in result.output

    result = _invoke(config_path, "remove", "Annie")
    assert result.exit_code == 0
    assert "nothing removed" in result.output


def test_range_with_nothing_to_propose(config_path):
    _invoke(config_path, "add", "Ann")
    _invoke(config_path, "dates", "--start", DAY)

    result = _invoke(config_path, "range", "Ann", DAY, "10:00")

    assert result.exit_code == 0
    assert "Nothing to propose" in result.output


def test_grid_renders(config_path):
    _invoke(config_path, "add", "Ann")
    _invoke(config_path, "dates", "--start", DAY, "--days", "2")
    _invoke(config_path, "toggle", "Ann", DAY, "09:00")

    result = _invoke(config_path, "grid", "--for", "Ann")

    assert result.exit_code == 0, result.output
    assert "9:00 AM" in result.output
    assert "Ann" in result.output


def test_missing_config_file(tmp_path):
    result = runner.invoke(app, ["--config", str(tmp_path / "missing.yaml"), "list"])

    assert result.exit_code == 1
    assert "Config file not found" in result.output


@pytest.mark.parametrize("command", [("toggle", "Ann", "tomorrow", "14:00"), ("toggle-day", "Ann", "next-week")])
def test_toggle_rejects_invalid_dates(config_path, command):
    _invoke(config_path, "add", "Ann")

    result = _invoke(config_path, *command)

    assert result.exit_code == 1
    assert "Invalid date" in result.output


def test_top_with_zero_limit_shows_nothing(config_path):
    for args in [
        ("add", "Ann"),
        ("dates", "--start", DAY),
        ("toggle", "Ann", DAY, "10:00"),
    ]:
        _invoke(config_path, *args)

    assert "Top available times" in _invoke(config_path, "top").output

    result = _invoke(config_path, "top", "--limit", "0")

    assert result.exit_code == 0, result.output
    assert "Top available times" not in result.output


def test_session_is_disposed_after_each_command(config_path, monkeypatch):
    sessions = []
    build_session = cli_app._build_session

    def recording_build_session(config):
        session = build_session(config)
        sessions.append(session)
        return session

    monkeypatch.setattr(cli_app, "_build_session", recording_build_session)

    _invoke(config_path, "add", "Ann")
    _invoke(config_path, "toggle", "Nobody", DAY, "10:00")

    assert len(sessions) == 2
    assert all(session.closed for session in sessions)
    assert all(len(session.participants) == 0 for session in sessions)
