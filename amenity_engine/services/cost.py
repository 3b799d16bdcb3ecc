"""Reservation cost from duration and the amenity's hourly rate."""

from decimal import ROUND_HALF_UP, Decimal
from typing import Any

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def calculate_cost(amenity: Any, duration_minutes: int) -> Decimal:
    """
    Charge for booking ``amenity`` for ``duration_minutes``.

    Complimentary amenities and amenities without a rate cost nothing.
    Otherwise the prorated hourly rate is rounded half-up to the cent.
    """
    rate = amenity.price_per_hour
    if amenity.is_complimentary or not rate:
        return ZERO

    hours = Decimal(duration_minutes) / Decimal(60)
    return (hours * Decimal(str(rate))).quantize(CENT, rounding=ROUND_HALF_UP)
