"""Locations of the files kept between runs."""

from __future__ import annotations

from pathlib import Path

from platformdirs import user_data_path


APP_NAME = "Timekeeper"
DB_FILENAME = "timekeeper.sqlite3"
LOG_FILENAME = "timekeeper.log"


def get_data_dir() -> Path:
    """Return the per-user data directory, creating it when missing."""
    return user_data_path(APP_NAME, appauthor=False, roaming=True, ensure_exists=True)


def get_db_path() -> Path:
    return get_data_dir() / DB_FILENAME


def get_log_path() -> Path:
    return get_data_dir() / LOG_FILENAME
