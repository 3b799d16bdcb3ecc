"""
Clock capability for the amenity engine.

Business logic never reads the wall clock directly; services receive a
Clock so "is it open right now" questions are deterministic in tests.
"""

from datetime import date, datetime
from typing import Optional, Protocol

import pytz

from .config import settings


class Clock(Protocol):
    def now(self) -> datetime:
        """Current aware datetime in the resort's timezone."""
        ...


class ResortClock:
    """System clock localized to the resort timezone."""

    def __init__(self, tz_name: Optional[str] = None):
        self.tz = pytz.timezone(tz_name or settings.resort_timezone)

    def now(self) -> datetime:
        return datetime.now(self.tz)


class FixedClock:
    """Clock pinned to a single instant. Useful for tests and replays."""

    def __init__(self, instant: datetime):
        self.instant = instant

    def now(self) -> datetime:
        return self.instant


def day_of_week_for(value: date) -> int:
    """
    Return the day-of-week index used by amenity schedules.

    Schedules number days 0=Sunday through 6=Saturday, while Python's
    ``date.weekday()`` uses 0=Monday.
    """
    return (value.weekday() + 1) % 7
