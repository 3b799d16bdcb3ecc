# amenity_engine/services/availability.py
"""
Overlap and free-slot calculation for amenity reservations.

Intervals are [start, end) in minutes since midnight. Touching intervals
(one ends exactly when the other starts) do not overlap. Cancelled and
no-show reservations never block time.
"""

from typing import Any, Iterable, List, NamedTuple

from ..core.enums import ReservationStatus
from ..utils.time_utils import TimeLike, minutes_to_time_str, to_minutes

NON_BLOCKING_STATUSES = frozenset({ReservationStatus.CANCELLED, ReservationStatus.NO_SHOW})


class FreeSlot(NamedTuple):
    start_time: str
    end_time: str


def times_overlap(start1: TimeLike, end1: TimeLike, start2: TimeLike, end2: TimeLike) -> bool:
    return to_minutes(start1) < to_minutes(end2) and to_minutes(end1) > to_minutes(start2)


def blocks_time(reservation: Any) -> bool:
    return ReservationStatus(reservation.status) not in NON_BLOCKING_STATUSES


def active_reservations(reservations: Iterable[Any]) -> List[Any]:
    return [r for r in reservations if blocks_time(r)]


def find_conflicts(start: TimeLike, end: TimeLike, reservations: Iterable[Any]) -> List[Any]:
    """Active reservations whose interval overlaps [start, end)."""
    return [
        r
        for r in active_reservations(reservations)
        if times_overlap(start, end, r.start_time, r.end_time)
    ]


def is_interval_free(start: TimeLike, end: TimeLike, reservations: Iterable[Any]) -> bool:
    return not find_conflicts(start, end, reservations)


def compute_free_slots(
    opening: TimeLike, closing: TimeLike, reservations: Iterable[Any]
) -> List[FreeSlot]:
    """
    Sweep the operating window left to right and emit the gaps between bookings.

    The cursor starts at opening time and only ever moves forward, so
    overlapping or nested bookings are handled without merging them first.
    Slots are clipped to [opening, closing].
    """
    open_minute = to_minutes(opening)
    close_minute = to_minutes(closing)

    ordered = sorted(active_reservations(reservations), key=lambda r: to_minutes(r.start_time))

    slots: List[FreeSlot] = []
    cursor = open_minute
    for reservation in ordered:
        if cursor >= close_minute:
            break
        gap_end = min(to_minutes(reservation.start_time), close_minute)
        if cursor < gap_end:
            slots.append(FreeSlot(minutes_to_time_str(cursor), minutes_to_time_str(gap_end)))
        cursor = max(cursor, to_minutes(reservation.end_time))

    if cursor < close_minute:
        slots.append(FreeSlot(minutes_to_time_str(cursor), minutes_to_time_str(close_minute)))

    return slots
