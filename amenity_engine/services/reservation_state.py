# amenity_engine/services/reservation_state.py
"""
Reservation lifecycle rules.

    pending ──► confirmed ──► completed
       │            ├───────► no_show
       └──► cancelled ◄──┘

completed, cancelled and no_show are terminal.
"""

from typing import Dict, FrozenSet, Union

from ..core.enums import ReservationStatus
from ..core.exceptions import InvalidStatusTransitionException

ALLOWED_TRANSITIONS: Dict[ReservationStatus, FrozenSet[ReservationStatus]] = {
    ReservationStatus.PENDING: frozenset(
        {ReservationStatus.CONFIRMED, ReservationStatus.CANCELLED}
    ),
    ReservationStatus.CONFIRMED: frozenset(
        {ReservationStatus.COMPLETED, ReservationStatus.CANCELLED, ReservationStatus.NO_SHOW}
    ),
    ReservationStatus.COMPLETED: frozenset(),
    ReservationStatus.CANCELLED: frozenset(),
    ReservationStatus.NO_SHOW: frozenset(),
}

TERMINAL_STATUSES = frozenset(
    status for status, targets in ALLOWED_TRANSITIONS.items() if not targets
)

# Message shown when the requested target status is refused
_REJECTION_MESSAGES: Dict[ReservationStatus, str] = {
    ReservationStatus.CONFIRMED: "Can only confirm pending reservations",
    ReservationStatus.CANCELLED: "Cannot cancel reservation in current status",
    ReservationStatus.COMPLETED: "Can only complete confirmed reservations",
    ReservationStatus.NO_SHOW: "Can only mark confirmed reservations as no-show",
}

StatusLike = Union[ReservationStatus, str]


def is_terminal(status: StatusLike) -> bool:
    return ReservationStatus(status) in TERMINAL_STATUSES


def can_transition(current: StatusLike, requested: StatusLike) -> bool:
    return ReservationStatus(requested) in ALLOWED_TRANSITIONS[ReservationStatus(current)]


def ensure_transition(current: StatusLike, requested: StatusLike) -> ReservationStatus:
    """
    Validate a status change and return the requested status as an enum member.

    Raises:
        InvalidStatusTransitionException: the transition is not in ALLOWED_TRANSITIONS
    """
    current_status = ReservationStatus(current)
    requested_status = ReservationStatus(requested)

    if requested_status not in ALLOWED_TRANSITIONS[current_status]:
        message = _REJECTION_MESSAGES.get(
            requested_status,
            f"Cannot move reservation from {current_status.value} to {requested_status.value}",
        )
        raise InvalidStatusTransitionException(
            message,
            current_status=current_status.value,
            requested_status=requested_status.value,
        )
    return requested_status
