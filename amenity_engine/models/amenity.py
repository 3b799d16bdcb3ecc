# amenity_engine/models/amenity.py
"""
Amenity models.

An Amenity is a bookable resort facility with default operating hours.
AmenitySchedule rows override those hours for a single day of the week
(0=Sunday .. 6=Saturday). AmenityReservation rows are bookings against
an amenity on a calendar date; cancelling one changes its status and
only deleting the amenity removes it.

Times of day are stored as canonical "HH:MM" strings. The service layer
converts them to minutes for every comparison.
"""

from datetime import datetime, timezone
import logging
import uuid

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from ..core.enums import AmenityStatus, ReservationStatus
from ..database import Base

logger = logging.getLogger(__name__)


def _new_id() -> str:
    return str(uuid.uuid4())


def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


class Amenity(Base):
    """Bookable facility with default opening hours and optional hourly pricing."""

    __tablename__ = "amenities"

    id = Column(String(36), primary_key=True, index=True, default=_new_id)

    name = Column(String(200), nullable=False)
    description = Column(Text, nullable=False, default="")
    category = Column(String(30), nullable=False, index=True)
    status = Column(String(20), nullable=False, default=AmenityStatus.AVAILABLE.value)
    location = Column(String(200), nullable=False, default="")

    # Max party size for a single reservation; NULL means unlimited
    capacity = Column(Integer, nullable=True)

    opening_time = Column(String(5), nullable=False)
    closing_time = Column(String(5), nullable=False)

    requires_reservation = Column(Boolean, nullable=False, default=False)
    price_per_hour = Column(Numeric(10, 2), nullable=True)
    is_complimentary = Column(Boolean, nullable=False, default=True)

    images = Column(JSON, nullable=False, default=list)
    rules = Column(JSON, nullable=False, default=list)
    age_restriction = Column(Integer, nullable=True)

    is_active = Column(Boolean, nullable=False, default=True, index=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=_now_utc)
    updated_at = Column(DateTime(timezone=True), nullable=True, onupdate=_now_utc)

    schedules = relationship(
        "AmenitySchedule",
        back_populates="amenity",
        cascade="all, delete-orphan",
        order_by="AmenitySchedule.day_of_week",
    )
    reservations = relationship(
        "AmenityReservation",
        back_populates="amenity",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        CheckConstraint(
            "status IN ('available', 'maintenance', 'closed', 'reserved')",
            name="ck_amenities_status",
        ),
        CheckConstraint("capacity IS NULL OR capacity >= 1", name="ck_amenities_capacity"),
    )

    def __repr__(self) -> str:
        return f"<Amenity {self.name} ({self.category}) {self.opening_time}-{self.closing_time}>"


class AmenitySchedule(Base):
    """Per-day-of-week override of an amenity's opening hours."""

    __tablename__ = "amenity_schedules"

    id = Column(String(36), primary_key=True, default=_new_id)
    amenity_id = Column(
        String(36), ForeignKey("amenities.id", ondelete="CASCADE"), nullable=False, index=True
    )
    day_of_week = Column(Integer, nullable=False)
    opening_time = Column(String(5), nullable=False)
    closing_time = Column(String(5), nullable=False)
    is_closed = Column(Boolean, nullable=False, default=False)

    amenity = relationship("Amenity", back_populates="schedules")

    __table_args__ = (
        UniqueConstraint("amenity_id", "day_of_week", name="uq_amenity_schedules_day"),
        CheckConstraint("day_of_week BETWEEN 0 AND 6", name="ck_amenity_schedules_day"),
    )

    def __repr__(self) -> str:
        if self.is_closed:
            return f"<AmenitySchedule day={self.day_of_week} closed>"
        return f"<AmenitySchedule day={self.day_of_week} {self.opening_time}-{self.closing_time}>"


class AmenityReservation(Base):
    """A single booking against an amenity on a specific date."""

    __tablename__ = "amenity_reservations"

    id = Column(String(36), primary_key=True, index=True, default=_new_id)
    amenity_id = Column(
        String(36), ForeignKey("amenities.id", ondelete="CASCADE"), nullable=False
    )

    guest_id = Column(String(64), nullable=False, index=True)
    guest_name = Column(String(200), nullable=False)

    reservation_date = Column(Date, nullable=False)
    start_time = Column(String(5), nullable=False)
    end_time = Column(String(5), nullable=False)
    party_size = Column(Integer, nullable=False)

    status = Column(String(20), nullable=False, default=ReservationStatus.PENDING.value, index=True)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=_now_utc)
    updated_at = Column(DateTime(timezone=True), nullable=True, onupdate=_now_utc)

    amenity = relationship("Amenity", back_populates="reservations")

    __table_args__ = (
        Index("ix_amenity_reservations_amenity_date", "amenity_id", "reservation_date"),
        CheckConstraint(
            "status IN ('pending', 'confirmed', 'completed', 'cancelled', 'no_show')",
            name="ck_amenity_reservations_status",
        ),
        CheckConstraint("party_size >= 1", name="ck_amenity_reservations_party_size"),
    )

    def __repr__(self) -> str:
        return (
            f"<AmenityReservation {self.id} {self.reservation_date} "
            f"{self.start_time}-{self.end_time} {self.status}>"
        )
