"""Configuration models and helpers for the time tracker."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Optional

from .models import Clock
from .paths import get_db_path


@dataclass(slots=True)
class TrackerSettings:
    """Runtime configuration shared by the CLI and the reports."""

    db_path: Path
    date_format: str = "%Y-%m-%d"
    time_format: str = "%H:%M"
    clock: Clock = field(default=datetime.now, repr=False)

    @classmethod
    def from_options(
        cls,
        db_path: Optional[Path] = None,
        clock: Optional[Clock] = None,
    ) -> "TrackerSettings":
        settings = cls(db_path=Path(db_path) if db_path else get_db_path())
        if clock is not None:
            settings.clock = clock
        return settings

    def now(self) -> datetime:
        return self.clock()
