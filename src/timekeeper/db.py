"""SQLite database layer for tasks, projects and activities."""

from __future__ import annotations

import logging
import sqlite3
import uuid
from contextlib import contextmanager
from datetime import date, datetime, time
from pathlib import Path
from typing import Iterator, Optional

from .models import Activity, Clock, Project, TrackedTask

logger = logging.getLogger(__name__)

DATETIME_FMT = "%Y-%m-%d %H:%M:%S.%f"

_ACTIVITY_COLUMNS = """
    id,
    start_time,
    end_time,
    adjusted,
    summary,
    task_id,
    project_id
"""


def open_database(path: Path, *, check_same_thread: bool = True) -> sqlite3.Connection:
    """Open (and initialize) the SQLite database."""
    conn = sqlite3.connect(
        path,
        isolation_level=None,
        check_same_thread=check_same_thread,
    )
    conn.row_factory = sqlite3.Row
    enable_foreign_keys(conn)
    initialize_schema(conn)
    return conn


@contextmanager
def database_connection(
    path: Path, *, check_same_thread: bool = True
) -> Iterator[sqlite3.Connection]:
    conn = open_database(path, check_same_thread=check_same_thread)
    try:
        yield conn
    finally:
        conn.close()


def enable_foreign_keys(conn: sqlite3.Connection) -> None:
    conn.execute("PRAGMA foreign_keys = ON;")


def initialize_schema(conn: sqlite3.Connection) -> None:
    conn.executescript(
        """
        CREATE TABLE IF NOT EXISTS projects (
            id TEXT PRIMARY KEY,
            name TEXT NOT NULL UNIQUE
        );

        CREATE TABLE IF NOT EXISTS tasks (
            id TEXT PRIMARY KEY,
            name TEXT NOT NULL UNIQUE,
            project_id TEXT REFERENCES projects(id)
        );

        CREATE TABLE IF NOT EXISTS activities (
            id TEXT PRIMARY KEY,
            start_time TEXT,
            end_time TEXT,
            adjusted INTEGER NOT NULL DEFAULT 0,
            summary TEXT,
            task_id TEXT REFERENCES tasks(id),
            project_id TEXT REFERENCES projects(id)
        );

        CREATE INDEX IF NOT EXISTS idx_activities_start_time
            ON activities(start_time);
        """
    )


def new_id() -> str:
    return uuid.uuid4().hex


def _format_timestamp(value: Optional[datetime]) -> Optional[str]:
    return value.strftime(DATETIME_FMT) if value is not None else None


def _parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    return datetime.strptime(value, DATETIME_FMT) if value is not None else None


def _row_to_activity(row: sqlite3.Row, clock: Optional[Clock] = None) -> Activity:
    activity = Activity(
        id=row["id"],
        start=_parse_timestamp(row["start_time"]),
        end=_parse_timestamp(row["end_time"]),
        manual=bool(row["adjusted"]),
        tracked_task=row["task_id"],
        project=row["project_id"],
        summary=row["summary"],
    )
    if clock is not None:
        activity.clock = clock
    return activity


def _activity_params(activity: Activity) -> tuple[object, ...]:
    return (
        _format_timestamp(activity.start),
        _format_timestamp(activity.end),
        1 if activity.manual else 0,
        activity.summary,
        activity.tracked_task,
        activity.project,
    )


def create_project(conn: sqlite3.Connection, name: str) -> Project:
    project = Project(id=new_id(), name=name)
    conn.execute(
        "INSERT INTO projects (id, name) VALUES (?, ?)",
        (project.id, project.name),
    )
    logger.debug("Created project %s (%s)", project.name, project.id)
    return project


def fetch_project_by_name(conn: sqlite3.Connection, name: str) -> Optional[Project]:
    row = conn.execute(
        "SELECT id, name FROM projects WHERE name = ?", (name,)
    ).fetchone()
    if row is None:
        return None
    return Project(id=row["id"], name=row["name"])


def get_or_create_project(conn: sqlite3.Connection, name: str) -> Project:
    return fetch_project_by_name(conn, name) or create_project(conn, name)


def create_task(
    conn: sqlite3.Connection, name: str, project_id: Optional[str] = None
) -> TrackedTask:
    task = TrackedTask(id=new_id(), name=name, project=project_id)
    conn.execute(
        "INSERT INTO tasks (id, name, project_id) VALUES (?, ?, ?)",
        (task.id, task.name, task.project),
    )
    logger.debug("Created task %s (%s)", task.name, task.id)
    return task


def fetch_task_by_name(conn: sqlite3.Connection, name: str) -> Optional[TrackedTask]:
    row = conn.execute(
        "SELECT id, name, project_id FROM tasks WHERE name = ?", (name,)
    ).fetchone()
    if row is None:
        return None
    return TrackedTask(id=row["id"], name=row["name"], project=row["project_id"])


def get_or_create_task(conn: sqlite3.Connection, name: str) -> TrackedTask:
    return fetch_task_by_name(conn, name) or create_task(conn, name)


def fetch_task_names(conn: sqlite3.Connection) -> dict[str, str]:
    """Return a mapping of task id to task name."""
    return {row["id"]: row["name"] for row in conn.execute("SELECT id, name FROM tasks")}


def create_activity(conn: sqlite3.Connection, activity: Activity) -> Activity:
    """Insert a new activity, assigning its identifier."""
    if activity.id is not None:
        raise ValueError(f"Activity already has id={activity.id}")
    activity.id = new_id()
    conn.execute(
        """
        INSERT INTO activities (
            start_time,
            end_time,
            adjusted,
            summary,
            task_id,
            project_id,
            id
        ) VALUES (?, ?, ?, ?, ?, ?, ?)
        """,
        (*_activity_params(activity), activity.id),
    )
    logger.debug("Created activity %s starting %s", activity.id, activity.start)
    return activity


def load_activity(
    conn: sqlite3.Connection, activity_id: str, *, clock: Optional[Clock] = None
) -> Activity:
    row = conn.execute(
        f"SELECT {_ACTIVITY_COLUMNS} FROM activities WHERE id = ?",
        (activity_id,),
    ).fetchone()
    if row is None:
        raise ValueError(f"No activity found for id={activity_id}")
    return _row_to_activity(row, clock)


def save_activity(conn: sqlite3.Connection, activity: Activity) -> None:
    """Write every stored field of an existing activity."""
    if activity.id is None:
        raise ValueError("Cannot save an activity that has not been created")
    cur = conn.execute(
        """
        UPDATE activities SET
            start_time = ?,
            end_time = ?,
            adjusted = ?,
            summary = ?,
            task_id = ?,
            project_id = ?
        WHERE id = ?
        """,
        (*_activity_params(activity), activity.id),
    )
    if cur.rowcount == 0:
        raise ValueError(f"No activity found for id={activity.id}")


def delete_activity(conn: sqlite3.Connection, activity_id: str) -> None:
    cur = conn.execute("DELETE FROM activities WHERE id = ?", (activity_id,))
    if cur.rowcount == 0:
        raise ValueError(f"No activity found for id={activity_id}")


def fetch_activities_for_task(
    conn: sqlite3.Connection, task_id: str, *, clock: Optional[Clock] = None
) -> list[Activity]:
    """Return the activities of a task in chronological order."""
    rows = conn.execute(
        f"""
        SELECT {_ACTIVITY_COLUMNS}
        FROM activities
        WHERE task_id = ?
        ORDER BY start_time;
        """,
        (task_id,),
    )
    return [_row_to_activity(row, clock) for row in rows]


def fetch_activities_between(
    conn: sqlite3.Connection,
    range_start: date,
    range_end: date,
    *,
    clock: Optional[Clock] = None,
) -> list[Activity]:
    """Fetch activities overlapping ``[range_start, range_end)``.

    Running activities are included whenever they started before the end of
    the range.
    """
    lower = datetime.combine(range_start, time.min).strftime(DATETIME_FMT)
    upper = datetime.combine(range_end, time.min).strftime(DATETIME_FMT)
    rows = conn.execute(
        f"""
        SELECT {_ACTIVITY_COLUMNS}
        FROM activities
        WHERE start_time < ? AND (end_time IS NULL OR end_time > ?)
        ORDER BY start_time;
        """,
        (upper, lower),
    )
    return [_row_to_activity(row, clock) for row in rows]


def fetch_open_activity(
    conn: sqlite3.Connection, *, clock: Optional[Clock] = None
) -> Optional[Activity]:
    row = conn.execute(
        f"""
        SELECT {_ACTIVITY_COLUMNS}
        FROM activities
        WHERE end_time IS NULL
        ORDER BY start_time DESC
        LIMIT 1;
        """
    ).fetchone()
    if row is None:
        return None
    return _row_to_activity(row, clock)
