"""
Shared pytest fixtures for timekeeper tests.
"""
from datetime import datetime, timedelta

import pytest

from timekeeper.config import TrackerSettings


class FakeClock:
    """A clock that only moves when told to."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock():
    return FakeClock(datetime(2024, 1, 2, 12, 0))


@pytest.fixture
def db_path(tmp_path):
    return tmp_path / "timekeeper.sqlite3"


@pytest.fixture
def settings(db_path, clock):
    return TrackerSettings.from_options(db_path, clock=clock)
