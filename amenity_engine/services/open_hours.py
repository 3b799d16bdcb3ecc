# amenity_engine/services/open_hours.py
"""
Open-hours resolution.

An amenity has default opening/closing times and up to seven per-weekday
overrides. These helpers decide which window applies to a given day and
whether an instant falls inside it. Everything here is pure: callers pass
in the amenity and its schedule rows, nothing is cached between calls.
"""

from typing import Any, Iterable, Optional, Tuple

from ..core.enums import AmenityStatus
from ..utils.time_utils import TimeLike, to_minutes


def is_amenity_operational(amenity: Any) -> bool:
    """An inactive or non-available amenity is closed regardless of its hours."""
    return bool(amenity.is_active) and AmenityStatus(amenity.status) == AmenityStatus.AVAILABLE


def find_day_schedule(schedules: Iterable[Any], day_of_week: int) -> Optional[Any]:
    for entry in schedules:
        if entry.day_of_week == day_of_week:
            return entry
    return None


def resolve_operating_hours(
    amenity: Any, schedules: Iterable[Any], day_of_week: int
) -> Optional[Tuple[str, str]]:
    """
    Return the (opening, closing) window for a weekday, or None if closed that day.

    A schedule override wins over the amenity's default hours; a day with no
    override falls back to the defaults.
    """
    override = find_day_schedule(schedules, day_of_week)
    if override is None:
        return amenity.opening_time, amenity.closing_time
    if override.is_closed:
        return None
    return override.opening_time, override.closing_time


def is_within_window(time: TimeLike, opening: TimeLike, closing: TimeLike) -> bool:
    """Half-open check: the opening minute is open, the closing minute is not."""
    minute = to_minutes(time)
    return to_minutes(opening) <= minute < to_minutes(closing)


def is_open_at(amenity: Any, schedules: Iterable[Any], day_of_week: int, time: TimeLike) -> bool:
    if not is_amenity_operational(amenity):
        return False

    window = resolve_operating_hours(amenity, schedules, day_of_week)
    if window is None:
        return False
    return is_within_window(time, *window)
