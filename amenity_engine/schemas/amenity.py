# amenity_engine/schemas/amenity.py
"""
Request and response schemas for amenities, schedules and reservations.

Request models only enforce shape and normalize "HH:MM" strings. Business
rules (time range ordering, party size, capacity, day-of-week bounds) are
checked by AmenityService so that the same messages are produced whether
the call comes from HTTP or from another service.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import Field, field_validator

from ..core.enums import AmenityCategory, AmenityStatus, ReservationStatus
from ..core.exceptions import ValidationException
from ..utils.time_utils import normalize_time
from .base import Money, StandardizedModel, StrictRequestModel


def _normalize_time_field(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    try:
        return normalize_time(v)
    except ValidationException as exc:
        raise ValueError(f"{exc.message}. Expected HH:MM format.") from exc


class AmenityCreate(StrictRequestModel):
    name: str = Field(..., max_length=200)
    description: str = ""
    category: AmenityCategory
    location: str = ""
    capacity: Optional[int] = Field(None, ge=1)
    opening_time: str = Field(..., description="Default opening time, HH:MM")
    closing_time: str = Field(..., description="Default closing time, HH:MM")
    requires_reservation: bool = False
    price_per_hour: Optional[Decimal] = Field(None, ge=0, decimal_places=2)
    is_complimentary: Optional[bool] = Field(
        None, description="Defaults to the configured complimentary policy"
    )
    images: List[str] = Field(default_factory=list)
    rules: List[str] = Field(default_factory=list)
    age_restriction: Optional[int] = Field(None, ge=0)

    @field_validator("opening_time", "closing_time", mode="before")
    @classmethod
    def normalize_times(cls, v: Optional[str]) -> Optional[str]:
        return _normalize_time_field(v)


class AmenityUpdate(StrictRequestModel):
    """Partial update; only fields that were explicitly set are applied."""

    name: Optional[str] = Field(None, max_length=200)
    description: Optional[str] = None
    category: Optional[AmenityCategory] = None
    location: Optional[str] = None
    capacity: Optional[int] = Field(None, ge=1)
    opening_time: Optional[str] = None
    closing_time: Optional[str] = None
    requires_reservation: Optional[bool] = None
    price_per_hour: Optional[Decimal] = Field(None, ge=0, decimal_places=2)
    is_complimentary: Optional[bool] = None
    images: Optional[List[str]] = None
    rules: Optional[List[str]] = None
    age_restriction: Optional[int] = Field(None, ge=0)

    @field_validator("opening_time", "closing_time", mode="before")
    @classmethod
    def normalize_times(cls, v: Optional[str]) -> Optional[str]:
        return _normalize_time_field(v)


class AmenityStatusUpdate(StrictRequestModel):
    status: AmenityStatus


class ScheduleEntryInput(StrictRequestModel):
    day_of_week: int = Field(..., description="0=Sunday .. 6=Saturday")
    opening_time: str = "00:00"
    closing_time: str = "00:00"
    is_closed: bool = False

    @field_validator("opening_time", "closing_time", mode="before")
    @classmethod
    def normalize_times(cls, v: Optional[str]) -> Optional[str]:
        return _normalize_time_field(v)


class ScheduleUpdate(StrictRequestModel):
    entries: List[ScheduleEntryInput]


class ReservationCreate(StrictRequestModel):
    amenity_id: str
    guest_id: str = Field(..., min_length=1, max_length=64)
    guest_name: str = Field(..., min_length=1, max_length=200)
    reservation_date: date
    start_time: str
    end_time: str
    party_size: int
    notes: Optional[str] = Field(None, max_length=1000)

    @field_validator("start_time", "end_time", mode="before")
    @classmethod
    def normalize_times(cls, v: Optional[str]) -> Optional[str]:
        return _normalize_time_field(v)

    @field_validator("notes")
    @classmethod
    def clean_notes(cls, v: Optional[str]) -> Optional[str]:
        return v.strip() if v else v


class AmenityResponse(StandardizedModel):
    id: str
    name: str
    description: str
    category: AmenityCategory
    status: AmenityStatus
    location: str
    capacity: Optional[int] = None
    opening_time: str
    closing_time: str
    requires_reservation: bool
    price_per_hour: Optional[Money] = None
    is_complimentary: bool
    images: List[str]
    rules: List[str]
    age_restriction: Optional[int] = None
    is_active: bool
    created_at: datetime
    updated_at: Optional[datetime] = None


class ScheduleEntryResponse(StandardizedModel):
    id: str
    amenity_id: str
    day_of_week: int
    opening_time: str
    closing_time: str
    is_closed: bool


class ReservationResponse(StandardizedModel):
    id: str
    amenity_id: str
    guest_id: str
    guest_name: str
    reservation_date: date
    start_time: str
    end_time: str
    party_size: int
    status: ReservationStatus
    notes: Optional[str] = None
    created_at: datetime


class ReservationCreatedResponse(ReservationResponse):
    cost: Money


class TimeSlot(StandardizedModel):
    start_time: str
    end_time: str


class AvailabilityResponse(StandardizedModel):
    amenity_id: str
    reservation_date: date
    start_time: str
    end_time: str
    available: bool


class OpenStatusResponse(StandardizedModel):
    amenity_id: str
    day_of_week: int
    time: str
    is_open: bool


class ReservationQuote(StandardizedModel):
    amenity_id: str
    start_time: str
    end_time: str
    duration_minutes: int
    cost: Money
