from __future__ import annotations

import re
from typing import NamedTuple, Union

from ..core.exceptions import ValidationException

MINUTES_PER_DAY = 24 * 60

_TIME_PATTERN = re.compile(r"^\s*(\d{1,2}):(\d{2})\s*$")


class TimeOfDay(NamedTuple):
    hours: int
    minutes: int


TimeLike = Union[str, TimeOfDay]


def parse_time(value: str) -> TimeOfDay:
    """
    Parse an ``H:MM`` or ``HH:MM`` string.

    "24:00" is accepted as the end-of-day sentinel. Anything else outside
    00:00-23:59 raises ValidationException instead of silently becoming
    midnight.
    """
    match = _TIME_PATTERN.match(value) if isinstance(value, str) else None
    if not match:
        raise ValidationException(
            f"Invalid time format: {value!r}", details={"time": str(value)}
        )

    hours, minutes = int(match.group(1)), int(match.group(2))
    if minutes > 59 or hours > 24 or (hours == 24 and minutes != 0):
        raise ValidationException(
            f"Invalid time format: {value!r}", details={"time": value}
        )
    return TimeOfDay(hours, minutes)


def format_time(hours: int, minutes: int) -> str:
    return f"{hours:02d}:{minutes:02d}"


def normalize_time(value: str) -> str:
    """Return the canonical zero-padded ``HH:MM`` form of a time string."""
    return format_time(*parse_time(value))


def to_minutes(value: TimeLike) -> int:
    """
    Convert a time to minutes since midnight (0-1440).

    Accepts either a raw string or an already parsed TimeOfDay.
    """
    parsed = value if isinstance(value, TimeOfDay) else parse_time(value)
    return parsed.hours * 60 + parsed.minutes


def minutes_to_time_str(minutes: int) -> str:
    """
    Convert minutes since midnight to HH:MM.

    1440 is rendered as "24:00".
    """
    if not 0 <= minutes <= MINUTES_PER_DAY:
        raise ValueError(f"minutes out of range: {minutes}")
    return format_time(minutes // 60, minutes % 60)


def is_valid_time_range(start: TimeLike, end: TimeLike) -> bool:
    """End must be strictly after start; zero-length ranges are invalid."""
    return to_minutes(end) > to_minutes(start)


def duration_minutes(start: TimeLike, end: TimeLike) -> int:
    """
    Minutes between start and end.

    Negative when the range is inverted; validate with is_valid_time_range first.
    """
    return to_minutes(end) - to_minutes(start)
