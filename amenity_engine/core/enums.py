# amenity_engine/core/enums.py
"""
Core enums for the amenity reservation engine.

Statuses and categories are closed sets; storing them as str-valued
enums keeps the database representation readable while letting the
service layer match on members instead of bare strings.
"""

from enum import Enum


class AmenityCategory(str, Enum):
    """Kinds of bookable resort facilities."""

    POOL = "pool"
    SPA = "spa"
    FITNESS = "fitness"
    DINING = "dining"
    ENTERTAINMENT = "entertainment"
    SPORTS = "sports"
    RECREATION = "recreation"
    BUSINESS = "business"
    KIDS = "kids"
    OTHER = "other"


class AmenityStatus(str, Enum):
    """Operational status of an amenity."""

    AVAILABLE = "available"
    MAINTENANCE = "maintenance"
    CLOSED = "closed"
    RESERVED = "reserved"


class ReservationStatus(str, Enum):
    """Reservation lifecycle statuses."""

    PENDING = "pending"  # Default on creation
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    NO_SHOW = "no_show"  # Guest didn't attend
