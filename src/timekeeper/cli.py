"""Command-line interface for the time tracker."""

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from pathlib import Path
from typing import Optional

import typer

from .config import TrackerSettings
from .db import (
    create_activity,
    database_connection,
    fetch_open_activity,
    get_or_create_project,
    get_or_create_task,
    load_activity,
    save_activity,
)
from .models import Activity, format_summary
from .paths import get_log_path

logger = logging.getLogger(__name__)

app = typer.Typer(help="Track time spent on tasks and projects.")

TIMESTAMP_FMT = "%Y-%m-%d %H:%M"

DB_OPTION = typer.Option(
    None,
    "--db",
    path_type=Path,
    help="Location of the timekeeper SQLite database.",
)


@app.callback(no_args_is_help=True)
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logs."),
    log_to_file: bool = typer.Option(
        False, "--log-file", help="Also write logs to the application data directory."
    ),
) -> None:
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_to_file:
        handlers.append(logging.FileHandler(get_log_path(), encoding="utf-8"))
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
        handlers=handlers,
    )


def get_settings(db_path: Optional[Path]) -> TrackerSettings:
    """Build the settings every command runs with."""
    return TrackerSettings.from_options(db_path)


def _parse_timestamp(value: Optional[str], settings: TrackerSettings) -> datetime:
    if not value:
        return settings.now().replace(second=0, microsecond=0)
    try:
        return datetime.strptime(value, TIMESTAMP_FMT)
    except ValueError:
        raise typer.BadParameter(f"Expected YYYY-MM-DD HH:MM, got {value!r}") from None


def _parse_date(value: Optional[str], settings: TrackerSettings) -> date:
    if not value:
        return settings.now().date()
    try:
        return datetime.strptime(value, settings.date_format).date()
    except ValueError:
        raise typer.BadParameter(f"Expected YYYY-MM-DD, got {value!r}") from None


def _fail(message: str) -> None:
    typer.echo(f"Error: {message}", err=True)
    raise typer.Exit(1)


@app.command()
def start(
    task: Optional[str] = typer.Option(None, "--task", "-t", help="Task to track."),
    project: Optional[str] = typer.Option(
        None, "--project", "-p", help="Project to track when there is no task."
    ),
    at: Optional[str] = typer.Option(
        None, "--at", help="Start time (YYYY-MM-DD HH:MM). Defaults to now."
    ),
    db_path: Optional[Path] = DB_OPTION,
) -> None:
    """Start a new activity."""
    settings = get_settings(db_path)
    started_at = _parse_timestamp(at, settings)
    with database_connection(settings.db_path) as conn:
        running = fetch_open_activity(conn)
        if running is not None:
            _fail(f"Activity {running.id} is still running; stop it first.")

        task_id = get_or_create_task(conn, task).id if task else None
        activity = Activity.started(task_id, started_at)
        if project:
            activity.project = get_or_create_project(conn, project).id
        create_activity(conn, activity)
    logger.info("Started activity %s", activity.id)
    typer.echo(f"{activity.summary} ({activity.id})")


@app.command()
def stop(
    at: Optional[str] = typer.Option(
        None, "--at", help="Stop time (YYYY-MM-DD HH:MM). Defaults to now."
    ),
    db_path: Optional[Path] = DB_OPTION,
) -> None:
    """Stop the running activity."""
    settings = get_settings(db_path)
    stopped_at = _parse_timestamp(at, settings)
    with database_connection(settings.db_path) as conn:
        activity = fetch_open_activity(conn)
        if activity is None:
            _fail("No activity is running.")
        if stopped_at < activity.start:
            _fail("Stop time is before the start of the activity.")
        activity.end = stopped_at
        save_activity(conn, activity)
    logger.info("Stopped activity %s", activity.id)
    typer.echo(f"Stopped {activity.id} after {activity.get_duration()}")


@app.command()
def adjust(
    activity_id: str = typer.Argument(..., help="Identifier of the activity."),
    minutes: float = typer.Option(..., "--minutes", "-m", min=0.0, help="New duration."),
    db_path: Optional[Path] = DB_OPTION,
) -> None:
    """Set the duration of an activity, marking it as edited."""
    settings = get_settings(db_path)
    try:
        with database_connection(settings.db_path) as conn:
            activity = load_activity(conn, activity_id)
            activity.set_duration(timedelta(minutes=minutes))
            save_activity(conn, activity)
    except ValueError as exc:
        _fail(str(exc))
    typer.echo(f"Activity {activity.id} now ends at {activity.end.strftime(TIMESTAMP_FMT)}")


@app.command()
def rename(
    activity_id: str = typer.Argument(..., help="Identifier of the activity."),
    summary: Optional[str] = typer.Argument(
        None, help="New summary. Omit to restore the default summary."
    ),
    db_path: Optional[Path] = DB_OPTION,
) -> None:
    """Change the summary of an activity."""
    settings = get_settings(db_path)
    try:
        with database_connection(settings.db_path) as conn:
            activity = load_activity(conn, activity_id)
            activity.summary = summary or format_summary(activity.start)
            save_activity(conn, activity)
    except ValueError as exc:
        _fail(str(exc))
    typer.echo(activity.summary)


@app.command()
def show(
    day: Optional[str] = typer.Option(
        None,
        "--date",
        help="Date (YYYY-MM-DD) to list. Defaults to today.",
    ),
    db_path: Optional[Path] = DB_OPTION,
) -> None:
    """List the activities of a day with the time spent on that day."""
    from .reporting import ActivityPrinter

    settings = get_settings(db_path)
    ActivityPrinter(settings).print_day(_parse_date(day, settings))


@app.command()
def history(
    task: str = typer.Argument(..., help="Name of the task."),
    db_path: Optional[Path] = DB_OPTION,
) -> None:
    """List every activity of a task in chronological order."""
    from .reporting import ActivityPrinter

    settings = get_settings(db_path)
    try:
        ActivityPrinter(settings).print_task_history(task)
    except ValueError as exc:
        _fail(str(exc))
