"""Domain models for tracked work."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from typing import Callable, Optional

Clock = Callable[[], datetime]

SUMMARY_DATE_FMT = "%Y-%m-%d"
SUMMARY_TIME_FMT = "%H:%M"


def format_summary(start: datetime) -> str:
    """Return the default summary for an activity started at ``start``."""
    return (
        f"Activity started on {start.strftime(SUMMARY_DATE_FMT)}"
        f" at {start.strftime(SUMMARY_TIME_FMT)}"
    )


@dataclass(slots=True)
class Project:
    id: str
    name: str


@dataclass(slots=True)
class TrackedTask:
    """A unit of work that activities are recorded against."""

    id: str
    name: str
    project: Optional[str] = None


@dataclass(slots=True, unsafe_hash=True)
class Activity:
    """A period of work on a task, from ``start`` until ``end``.

    An activity without an end is still running. Activities may stretch over
    several days; the duration queries clip them to calendar days as needed.

    ``tracked_task`` and ``project`` hold identifiers of the related records.
    ``project`` is only meant to be used when there is no task, and it takes no
    part in equality. Activities order by ``start`` alone.
    """

    id: Optional[str] = None
    start: Optional[datetime] = None
    end: Optional[datetime] = None
    manual: bool = False
    tracked_task: Optional[str] = None
    project: Optional[str] = field(default=None, compare=False)
    summary: Optional[str] = None
    clock: Clock = field(default=datetime.now, compare=False, repr=False)

    @classmethod
    def started(
        cls,
        tracked_task: Optional[str],
        start: datetime,
        *,
        clock: Optional[Clock] = None,
    ) -> "Activity":
        activity = cls(
            start=start,
            tracked_task=tracked_task,
            summary=format_summary(start),
        )
        if clock is not None:
            activity.clock = clock
        return activity

    @property
    def is_open(self) -> bool:
        return self.end is None

    @property
    def edited(self) -> bool:
        """Whether the end time was set by assigning a duration."""
        return self.manual

    def get_duration(
        self, day: Optional[date] = None, until: Optional[date] = None
    ) -> timedelta:
        """Return the work duration, optionally limited to a day or a date range.

        With no arguments this is the full ``end - start`` span and the activity
        must be closed. With ``day`` only, the part falling on that day. With
        both, the part falling in ``[day, until)``.
        """
        if day is None:
            return self.end - self.start
        if until is None:
            return self.duration_on(day)
        return self.duration_between(day, until)

    def duration_on(self, day: date) -> timedelta:
        return self.duration_between(day, day + timedelta(days=1))

    def duration_between(self, range_start: date, range_end: date) -> timedelta:
        """Return how much of the activity falls between two dates.

        The window runs from midnight of ``range_start`` up to, but excluding,
        midnight of ``range_end``. A running activity counts up to the current
        time of ``clock``.
        """
        lower = datetime.combine(range_start, time.min)
        upper = datetime.combine(range_end, time.min)

        start = self.start
        end = self.end
        if end is None:
            end = self.clock()

        if start >= upper or end <= lower or end <= start:
            return timedelta(0)

        duration = end - start
        if start < lower:
            duration -= lower - start
        if end > upper:
            duration -= end - upper
        return duration

    def set_duration(self, duration: timedelta) -> None:
        """Move the end time so the activity lasts ``duration`` and mark it edited."""
        self.end = self.start + duration
        self.manual = True

    def compare_to(self, other: "Activity") -> int:
        if self.start < other.start:
            return -1
        if self.start > other.start:
            return 1
        return 0

    def __lt__(self, other: "Activity") -> bool:
        if not isinstance(other, Activity):
            return NotImplemented
        return self.start < other.start

    def __le__(self, other: "Activity") -> bool:
        if not isinstance(other, Activity):
            return NotImplemented
        return self.start <= other.start

    def __gt__(self, other: "Activity") -> bool:
        if not isinstance(other, Activity):
            return NotImplemented
        return self.start > other.start

    def __ge__(self, other: "Activity") -> bool:
        if not isinstance(other, Activity):
            return NotImplemented
        return self.start >= other.start
