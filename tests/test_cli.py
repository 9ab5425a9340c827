"""
CLI tests for the timekeeper commands.
"""
from datetime import datetime, timedelta

import pytest
from typer.testing import CliRunner

from timekeeper import cli
from timekeeper.cli import app
from timekeeper.config import TrackerSettings
from timekeeper.db import database_connection, fetch_activities_for_task, fetch_task_by_name


runner = CliRunner()


def invoke(db_path, *args):
    return runner.invoke(app, [*args, "--db", str(db_path)])


def task_activities(db_path, name):
    with database_connection(db_path) as conn:
        task = fetch_task_by_name(conn, name)
        return fetch_activities_for_task(conn, task.id)


class TestStartStop:

    def test_start_then_stop(self, db_path):
        result = invoke(db_path, "start", "--task", "Deploy", "--at", "2024-01-01 09:00")
        assert result.exit_code == 0
        assert "Activity started on 2024-01-01 at 09:00" in result.stdout

        result = invoke(db_path, "stop", "--at", "2024-01-01 10:30")
        assert result.exit_code == 0

        [activity] = task_activities(db_path, "Deploy")
        assert activity.get_duration() == timedelta(minutes=90)
        assert not activity.edited

    def test_cannot_start_twice(self, db_path):
        invoke(db_path, "start", "--task", "Deploy", "--at", "2024-01-01 09:00")
        result = invoke(db_path, "start", "--task", "Deploy", "--at", "2024-01-01 09:30")
        assert result.exit_code == 1
        assert "still running" in result.output

    def test_stop_without_running_activity(self, db_path):
        result = invoke(db_path, "stop", "--at", "2024-01-01 09:00")
        assert result.exit_code == 1
        assert "No activity is running" in result.output

    def test_stop_before_start_is_rejected(self, db_path):
        invoke(db_path, "start", "--task", "Deploy", "--at", "2024-01-01 09:00")
        result = invoke(db_path, "stop", "--at", "2024-01-01 08:00")
        assert result.exit_code == 1

    def test_bad_timestamp(self, db_path):
        result = invoke(db_path, "start", "--at", "yesterday")
        assert result.exit_code != 0
        assert "Expected YYYY-MM-DD HH:MM" in result.output
        assert "During handling" not in result.output

    def test_bad_date(self, db_path):
        result = invoke(db_path, "show", "--date", "02/01/2024")
        assert result.exit_code != 0
        assert "Expected YYYY-MM-DD" in result.output


class TestEditing:

    def started(self, db_path):
        invoke(db_path, "start", "--task", "Deploy", "--at", "2024-01-01 09:00")
        [activity] = task_activities(db_path, "Deploy")
        return activity

    def test_adjust_sets_duration_and_marks_edited(self, db_path):
        activity = self.started(db_path)
        result = invoke(db_path, "adjust", activity.id, "--minutes", "25")
        assert result.exit_code == 0
        assert "2024-01-01 09:25" in result.stdout

        [activity] = task_activities(db_path, "Deploy")
        assert activity.get_duration() == timedelta(minutes=25)
        assert activity.edited

    def test_adjust_unknown_activity(self, db_path):
        result = invoke(db_path, "adjust", "missing", "--minutes", "25")
        assert result.exit_code == 1
        assert "No activity found for id=missing" in result.output

    def test_rename(self, db_path):
        activity = self.started(db_path)
        result = invoke(db_path, "rename", activity.id, "Release 1.2")
        assert result.exit_code == 0

        [activity] = task_activities(db_path, "Deploy")
        assert activity.summary == "Release 1.2"


class TestListing:

    def test_show_day(self, db_path):
        invoke(db_path, "start", "--task", "Deploy", "--at", "2024-01-01 22:00")
        invoke(db_path, "stop", "--at", "2024-01-02 02:00")

        result = invoke(db_path, "show", "--date", "2024-01-01")
        assert result.exit_code == 0
        assert "22:00 - 02:00 02:00:00" in result.stdout

    def test_history(self, db_path):
        invoke(db_path, "start", "--task", "Deploy", "--at", "2024-01-01 09:00")
        invoke(db_path, "stop", "--at", "2024-01-01 10:00")

        result = invoke(db_path, "history", "Deploy")
        assert result.exit_code == 0
        assert "History of Deploy" in result.stdout

    def test_history_unknown_task(self, db_path):
        result = invoke(db_path, "history", "Nope")
        assert result.exit_code == 1
        assert "No task named" in result.output


class TestDefaultsToNow:

    @pytest.fixture(autouse=True)
    def fixed_clock(self, clock, monkeypatch):
        monkeypatch.setattr(
            cli,
            "get_settings",
            lambda db_path: TrackerSettings.from_options(db_path, clock=clock),
        )

    def test_start_and_stop_without_times(self, db_path, clock):
        clock.advance(seconds=42)
        result = invoke(db_path, "start", "--task", "Deploy")
        assert result.exit_code == 0
        assert "Activity started on 2024-01-02 at 12:00" in result.stdout

        clock.advance(minutes=30)
        result = invoke(db_path, "stop")
        assert result.exit_code == 0

        [activity] = task_activities(db_path, "Deploy")
        assert activity.start == datetime(2024, 1, 2, 12, 0)
        assert activity.end == datetime(2024, 1, 2, 12, 30)

    def test_show_defaults_to_today(self, db_path):
        invoke(db_path, "start", "--task", "Deploy", "--at", "2024-01-02 10:30")

        result = invoke(db_path, "show")
        assert result.exit_code == 0
        assert "Activities on 2024-01-02" in result.stdout
        assert "10:30 - running 01:30:00" in result.stdout

    def test_show_running_activity_started_later_today(self, db_path):
        invoke(db_path, "start", "--task", "Deploy", "--at", "2024-01-02 13:00")

        result = invoke(db_path, "show")
        assert result.exit_code == 0
        assert "13:00 - running 00:00:00" in result.stdout
