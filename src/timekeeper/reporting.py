"""Simple reporting utilities for CLI output."""

from __future__ import annotations

from datetime import date, timedelta
from typing import Iterable, Mapping

from .config import TrackerSettings
from .db import (
    database_connection,
    fetch_activities_between,
    fetch_activities_for_task,
    fetch_task_by_name,
    fetch_task_names,
)
from .models import Activity


class ActivityPrinter:
    """Render human-readable activity listings in the console."""

    def __init__(self, settings: TrackerSettings) -> None:
        self.settings = settings

    def print_day(self, day: date) -> None:
        with database_connection(self.settings.db_path) as conn:
            activities = fetch_activities_between(
                conn, day, day + timedelta(days=1), clock=self.settings.clock
            )
            task_names = fetch_task_names(conn)
        if not activities:
            print("No activity recorded for the selected day.")
            return

        print(f"Activities on {day.strftime(self.settings.date_format)}")
        print("-" * 40)
        for line in self.format_day(activities, day, task_names):
            print(line)

    def print_task_history(self, task_name: str) -> None:
        with database_connection(self.settings.db_path) as conn:
            task = fetch_task_by_name(conn, task_name)
            if task is None:
                raise ValueError(f"No task named {task_name!r}")
            activities = fetch_activities_for_task(
                conn, task.id, clock=self.settings.clock
            )
        if not activities:
            print("No activity recorded for this task.")
            return

        print(f"History of {task.name}")
        print("-" * 40)
        for activity in sorted(activities):
            end = activity.end if activity.end is not None else self.settings.now()
            print(self.format_activity(activity, end - activity.start, with_date=True))

    def format_day(
        self,
        activities: Iterable[Activity],
        day: date,
        task_names: Mapping[str, str],
    ) -> list[str]:
        """Format one line per activity, with its time clipped to ``day``."""
        lines = []
        for activity in sorted(activities):
            line = self.format_activity(activity, activity.duration_on(day))
            name = task_names.get(activity.tracked_task) if activity.tracked_task else None
            if name:
                line = f"{line}  [{name}]"
            lines.append(line)
        return lines

    def format_activity(
        self, activity: Activity, duration: timedelta, *, with_date: bool = False
    ) -> str:
        fmt = self.settings.time_format
        if with_date:
            fmt = f"{self.settings.date_format} {fmt}"
        start = activity.start.strftime(fmt)
        end = activity.end.strftime(fmt) if activity.end is not None else "running"
        marker = "*" if activity.edited else " "
        summary = activity.summary or ""
        return (
            f"{activity.id}  {start} - {end:<{len(start)}} "
            f"{format_duration(duration.total_seconds())}{marker} {summary}"
        ).rstrip()


def format_duration(seconds: float) -> str:
    total_seconds = int(round(seconds))
    hours, remainder = divmod(total_seconds, 3600)
    minutes, secs = divmod(remainder, 60)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"
