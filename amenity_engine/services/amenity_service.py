# amenity_engine/services/amenity_service.py
"""
Amenity Service

Business logic for bookable resort amenities:
- Amenity CRUD, status and activation changes
- Weekly schedule overrides and open-hours checks
- Reservation creation (capacity, opening hours and overlap checks)
- Reservation lifecycle transitions
- Free-slot discovery and cost quotes

The pure pieces live in open_hours, availability, reservation_state and
cost; this class fetches state through AmenityRepository, applies those
rules in order and owns the transaction boundaries.
"""

from datetime import date
from decimal import Decimal
import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple

from sqlalchemy.orm import Session

from ..core.clock import Clock, ResortClock, day_of_week_for
from ..core.config import settings
from ..core.enums import AmenityCategory, AmenityStatus, ReservationStatus
from ..core.exceptions import (
    BusinessRuleException,
    DomainException,
    NotFoundException,
    ReservationConflictException,
    ValidationException,
)
from ..models.amenity import Amenity, AmenityReservation, AmenitySchedule
from ..monitoring.prometheus_metrics import prometheus_metrics
from ..repositories import RepositoryFactory
from ..repositories.amenity_repository import AmenityRepository
from ..schemas.amenity import (
    AmenityCreate,
    AmenityUpdate,
    ReservationCreate,
    ScheduleEntryInput,
)
from ..utils import time_utils
from . import availability, open_hours, reservation_state
from .availability import FreeSlot
from .base import BaseService
from .cost import calculate_cost

logger = logging.getLogger(__name__)

# Columns that may be explicitly cleared with null on update
_NULLABLE_AMENITY_FIELDS = {"capacity", "price_per_hour", "age_restriction"}


class AmenityService(BaseService):
    """
    Service for amenities, their schedules and their reservations.

    One instance per database session. The clock is injectable so
    "open right now" checks are deterministic under test.
    """

    def __init__(
        self,
        db: Session,
        repository: Optional[AmenityRepository] = None,
        clock: Optional[Clock] = None,
    ):
        super().__init__(db)
        self.repository = repository or RepositoryFactory.create_amenity_repository(db)
        self.clock: Clock = clock or ResortClock()

    # Utilities

    @staticmethod
    def is_valid_time_range(start_time: str, end_time: str) -> bool:
        return time_utils.is_valid_time_range(start_time, end_time)

    @staticmethod
    def parse_time(value: str) -> time_utils.TimeOfDay:
        return time_utils.parse_time(value)

    @staticmethod
    def format_time(hours: int, minutes: int) -> str:
        return time_utils.format_time(hours, minutes)

    @staticmethod
    def calculate_duration_minutes(start_time: str, end_time: str) -> int:
        return time_utils.duration_minutes(start_time, end_time)

    @staticmethod
    def calculate_cost(amenity: Amenity, duration_minutes: int) -> Decimal:
        return calculate_cost(amenity, duration_minutes)

    # Amenity CRUD

    def _get_amenity_or_raise(self, amenity_id: str) -> Amenity:
        amenity = self.repository.get_by_id(amenity_id)
        if not amenity:
            raise NotFoundException("Amenity not found", details={"amenity_id": amenity_id})
        return amenity

    @BaseService.measure_operation("create_amenity")
    def create_amenity(self, data: AmenityCreate) -> Amenity:
        name = data.name.strip()
        if not name:
            raise ValidationException("Amenity name is required")

        if not time_utils.is_valid_time_range(data.opening_time, data.closing_time):
            raise ValidationException(
                "Invalid time range: closing time must be after opening time",
                details={"opening_time": data.opening_time, "closing_time": data.closing_time},
            )

        is_complimentary = (
            data.is_complimentary
            if data.is_complimentary is not None
            else settings.default_amenity_complimentary
        )

        with self.transaction():
            amenity = self.repository.create(
                name=name,
                description=data.description,
                category=AmenityCategory(data.category).value,
                status=AmenityStatus.AVAILABLE.value,
                location=data.location,
                capacity=data.capacity,
                opening_time=data.opening_time,
                closing_time=data.closing_time,
                requires_reservation=data.requires_reservation,
                price_per_hour=data.price_per_hour,
                is_complimentary=is_complimentary,
                images=list(data.images),
                rules=list(data.rules),
                age_restriction=data.age_restriction,
                is_active=True,
            )

        self.logger.info(
            "Amenity created", extra={"amenity_id": amenity.id, "amenity_name": amenity.name}
        )
        return amenity

    def get_amenity(self, amenity_id: str) -> Optional[Amenity]:
        return self.repository.get_by_id(amenity_id)

    def get_amenities(self) -> List[Amenity]:
        return self.repository.get_all_amenities()

    def get_amenities_by_category(self, category: AmenityCategory) -> List[Amenity]:
        return self.repository.get_by_category(AmenityCategory(category))

    def get_active_amenities(self) -> List[Amenity]:
        return self.repository.get_active()

    @BaseService.measure_operation("update_amenity")
    def update_amenity(self, amenity_id: str, data: AmenityUpdate) -> Amenity:
        amenity = self._get_amenity_or_raise(amenity_id)
        updates: Dict[str, Any] = data.model_dump(exclude_unset=True)

        new_opening = updates.get("opening_time")
        new_closing = updates.get("closing_time")
        if new_opening or new_closing:
            if not time_utils.is_valid_time_range(
                new_opening or amenity.opening_time, new_closing or amenity.closing_time
            ):
                raise ValidationException(
                    "Invalid time range: closing time must be after opening time",
                    details={
                        "opening_time": new_opening or amenity.opening_time,
                        "closing_time": new_closing or amenity.closing_time,
                    },
                )

        if "name" in updates:
            name = (updates["name"] or "").strip()
            if not name:
                raise ValidationException("Amenity name cannot be empty")
            updates["name"] = name

        if updates.get("category") is not None:
            updates["category"] = AmenityCategory(updates["category"]).value

        updates = {
            key: value
            for key, value in updates.items()
            if value is not None or key in _NULLABLE_AMENITY_FIELDS
        }

        with self.transaction():
            updated = self.repository.update(amenity_id, **updates)

        self.logger.info(
            "Amenity updated", extra={"amenity_id": amenity_id, "fields": sorted(updates)}
        )
        return updated

    @BaseService.measure_operation("delete_amenity")
    def delete_amenity(self, amenity_id: str) -> None:
        self._get_amenity_or_raise(amenity_id)

        with self.transaction():
            self.repository.delete(amenity_id)

        self.logger.info("Amenity deleted", extra={"amenity_id": amenity_id})

    # Status operations

    @BaseService.measure_operation("set_amenity_status")
    def set_status(self, amenity_id: str, status: AmenityStatus) -> Amenity:
        self._get_amenity_or_raise(amenity_id)
        status = AmenityStatus(status)

        with self.transaction():
            updated = self.repository.update(amenity_id, status=status.value)

        self.logger.info(
            "Amenity status changed", extra={"amenity_id": amenity_id, "status": status.value}
        )
        return updated

    def open_amenity(self, amenity_id: str) -> Amenity:
        return self.set_status(amenity_id, AmenityStatus.AVAILABLE)

    def close_amenity(self, amenity_id: str) -> Amenity:
        return self.set_status(amenity_id, AmenityStatus.CLOSED)

    def set_maintenance(self, amenity_id: str) -> Amenity:
        return self.set_status(amenity_id, AmenityStatus.MAINTENANCE)

    def _set_active(self, amenity_id: str, is_active: bool) -> Amenity:
        self._get_amenity_or_raise(amenity_id)

        with self.transaction():
            updated = self.repository.update(amenity_id, is_active=is_active)

        self.logger.info(
            "Amenity activated" if is_active else "Amenity deactivated",
            extra={"amenity_id": amenity_id},
        )
        return updated

    @BaseService.measure_operation("activate_amenity")
    def activate_amenity(self, amenity_id: str) -> Amenity:
        return self._set_active(amenity_id, True)

    @BaseService.measure_operation("deactivate_amenity")
    def deactivate_amenity(self, amenity_id: str) -> Amenity:
        return self._set_active(amenity_id, False)

    # Schedule management

    def get_schedule(self, amenity_id: str) -> List[AmenitySchedule]:
        return self.repository.get_schedule(amenity_id)

    @BaseService.measure_operation("set_schedule")
    def set_schedule(
        self, amenity_id: str, entries: Sequence[ScheduleEntryInput]
    ) -> List[AmenitySchedule]:
        """Replace the amenity's whole weekly schedule. Days without an entry use default hours."""
        self._get_amenity_or_raise(amenity_id)

        seen_days = set()
        for entry in entries:
            if entry.day_of_week < 0 or entry.day_of_week > 6:
                raise ValidationException(
                    "Invalid day of week: must be 0-6", details={"day_of_week": entry.day_of_week}
                )
            if not entry.is_closed and not time_utils.is_valid_time_range(
                entry.opening_time, entry.closing_time
            ):
                raise ValidationException(
                    "Invalid time range in schedule", details={"day_of_week": entry.day_of_week}
                )
            if entry.day_of_week in seen_days:
                raise ValidationException(
                    "Duplicate schedule entry for day of week",
                    details={"day_of_week": entry.day_of_week},
                )
            seen_days.add(entry.day_of_week)

        with self.transaction():
            saved = self.repository.set_schedule(
                amenity_id, [entry.model_dump() for entry in entries]
            )

        self.logger.info(
            "Schedule updated", extra={"amenity_id": amenity_id, "days": sorted(seen_days)}
        )
        return saved

    def is_open_at(self, amenity_id: str, day_of_week: int, time: str) -> bool:
        """Unknown amenities are reported as closed rather than raising."""
        amenity = self.repository.get_by_id(amenity_id)
        if not amenity:
            return False

        schedule = self.repository.get_schedule(amenity_id)
        return open_hours.is_open_at(amenity, schedule, day_of_week, time)

    def current_day_and_time(self) -> Tuple[int, str]:
        """Resort-local (day_of_week, "HH:MM") from the injected clock."""
        now = self.clock.now()
        return day_of_week_for(now.date()), time_utils.format_time(now.hour, now.minute)

    def is_open_now(self, amenity_id: str) -> bool:
        return self.is_open_at(amenity_id, *self.current_day_and_time())

    # Reservations

    @BaseService.measure_operation("create_reservation")
    def create_reservation(self, data: ReservationCreate) -> AmenityReservation:
        """
        Validate and persist a new pending reservation.

        Checks run in a fixed order and the first failure wins. The amenity
        row is locked for the whole read-check-insert sequence so two
        overlapping requests cannot both pass the overlap check.
        """
        try:
            with self.transaction():
                amenity = self.repository.lock_amenity(data.amenity_id)
                self._validate_reservation_request(amenity, data)

                existing = self.repository.get_reservations_by_amenity(
                    data.amenity_id, data.reservation_date
                )
                conflicts = availability.find_conflicts(data.start_time, data.end_time, existing)
                if conflicts:
                    raise ReservationConflictException(
                        details={
                            "amenity_id": data.amenity_id,
                            "reservation_date": data.reservation_date.isoformat(),
                            "conflicting_reservation_ids": [r.id for r in conflicts],
                        }
                    )

                reservation = self.repository.create_reservation(
                    amenity_id=data.amenity_id,
                    guest_id=data.guest_id,
                    guest_name=data.guest_name,
                    reservation_date=data.reservation_date,
                    start_time=data.start_time,
                    end_time=data.end_time,
                    party_size=data.party_size,
                    status=ReservationStatus.PENDING.value,
                    notes=data.notes,
                )
        except DomainException as exc:
            prometheus_metrics.record_reservation_rejection(exc.code)
            self.logger.warning(
                f"Reservation rejected: {exc.message}",
                extra={"amenity_id": data.amenity_id, "code": exc.code},
            )
            raise

        prometheus_metrics.record_reservation_transition(ReservationStatus.PENDING.value)
        self.logger.info(
            "Amenity reservation created",
            extra={"reservation_id": reservation.id, "amenity_id": data.amenity_id},
        )
        return reservation

    def _validate_reservation_request(
        self, amenity: Optional[Amenity], data: ReservationCreate
    ) -> None:
        if not amenity:
            raise NotFoundException("Amenity not found", details={"amenity_id": data.amenity_id})

        if not amenity.is_active:
            raise BusinessRuleException("Amenity is not active", code="AMENITY_INACTIVE")

        if AmenityStatus(amenity.status) != AmenityStatus.AVAILABLE:
            raise BusinessRuleException(
                "Amenity is not available",
                code="AMENITY_UNAVAILABLE",
                details={"status": amenity.status},
            )

        if not time_utils.is_valid_time_range(data.start_time, data.end_time):
            raise ValidationException(
                "Invalid time range: end time must be after start time",
                details={"start_time": data.start_time, "end_time": data.end_time},
            )

        if data.party_size < 1:
            raise ValidationException("Party size must be at least 1")

        if amenity.capacity and data.party_size > amenity.capacity:
            raise ValidationException(
                "Party size exceeds amenity capacity",
                details={"party_size": data.party_size, "capacity": amenity.capacity},
            )

        day_of_week = day_of_week_for(data.reservation_date)
        window = open_hours.resolve_operating_hours(
            amenity, self.repository.get_schedule(amenity.id), day_of_week
        )
        if window is None or not (
            time_utils.to_minutes(window[0]) <= time_utils.to_minutes(data.start_time)
            and time_utils.to_minutes(data.end_time) <= time_utils.to_minutes(window[1])
        ):
            raise BusinessRuleException(
                "Requested time is outside operating hours",
                code="OUTSIDE_OPERATING_HOURS",
                details={
                    "day_of_week": day_of_week,
                    "opening_time": window[0] if window else None,
                    "closing_time": window[1] if window else None,
                },
            )

    def get_reservation(self, reservation_id: str) -> Optional[AmenityReservation]:
        return self.repository.get_reservation_by_id(reservation_id)

    def get_reservations_for_amenity(
        self, amenity_id: str, reservation_date: date
    ) -> List[AmenityReservation]:
        return self.repository.get_reservations_by_amenity(amenity_id, reservation_date)

    def get_reservations_for_guest(self, guest_id: str) -> List[AmenityReservation]:
        return self.repository.get_reservations_by_guest(guest_id)

    def _transition(
        self, reservation_id: str, requested: ReservationStatus
    ) -> AmenityReservation:
        with self.transaction():
            reservation = self.repository.lock_reservation(reservation_id)
            if not reservation:
                raise NotFoundException(
                    "Reservation not found", details={"reservation_id": reservation_id}
                )

            try:
                target = reservation_state.ensure_transition(reservation.status, requested)
            except DomainException:
                self.logger.warning(
                    f"Rejected reservation transition {reservation.status} -> {requested.value}",
                    extra={"reservation_id": reservation_id},
                )
                raise

            updated = self.repository.update_reservation_status(reservation_id, target)

        prometheus_metrics.record_reservation_transition(target.value)
        self.logger.info(
            f"Reservation {target.value}",
            extra={"reservation_id": reservation_id, "status": target.value},
        )
        return updated

    @BaseService.measure_operation("confirm_reservation")
    def confirm_reservation(self, reservation_id: str) -> AmenityReservation:
        return self._transition(reservation_id, ReservationStatus.CONFIRMED)

    @BaseService.measure_operation("cancel_reservation")
    def cancel_reservation(self, reservation_id: str) -> AmenityReservation:
        return self._transition(reservation_id, ReservationStatus.CANCELLED)

    @BaseService.measure_operation("complete_reservation")
    def complete_reservation(self, reservation_id: str) -> AmenityReservation:
        return self._transition(reservation_id, ReservationStatus.COMPLETED)

    @BaseService.measure_operation("mark_no_show")
    def mark_no_show(self, reservation_id: str) -> AmenityReservation:
        return self._transition(reservation_id, ReservationStatus.NO_SHOW)

    # Availability

    @BaseService.measure_operation("check_availability")
    def check_availability(
        self, amenity_id: str, reservation_date: date, start_time: str, end_time: str
    ) -> bool:
        """True when [start_time, end_time) overlaps no active reservation on that date."""
        self._get_amenity_or_raise(amenity_id)
        if not time_utils.is_valid_time_range(start_time, end_time):
            raise ValidationException(
                "Invalid time range: end time must be after start time",
                details={"start_time": start_time, "end_time": end_time},
            )

        reservations = self.repository.get_reservations_by_amenity(amenity_id, reservation_date)
        return availability.is_interval_free(start_time, end_time, reservations)

    @BaseService.measure_operation("get_available_slots")
    def get_available_slots(self, amenity_id: str, reservation_date: date) -> List[FreeSlot]:
        """
        Free intervals inside the operating window for that date's weekday.

        A day closed by a schedule override has no slots.
        """
        amenity = self._get_amenity_or_raise(amenity_id)
        window = open_hours.resolve_operating_hours(
            amenity,
            self.repository.get_schedule(amenity_id),
            day_of_week_for(reservation_date),
        )
        if window is None:
            return []

        reservations = self.repository.get_reservations_by_amenity(amenity_id, reservation_date)
        return availability.compute_free_slots(window[0], window[1], reservations)

    def quote_reservation(self, amenity_id: str, start_time: str, end_time: str) -> Dict[str, Any]:
        amenity = self._get_amenity_or_raise(amenity_id)
        if not time_utils.is_valid_time_range(start_time, end_time):
            raise ValidationException(
                "Invalid time range: end time must be after start time",
                details={"start_time": start_time, "end_time": end_time},
            )

        duration = time_utils.duration_minutes(start_time, end_time)
        return {
            "amenity_id": amenity_id,
            "start_time": time_utils.normalize_time(start_time),
            "end_time": time_utils.normalize_time(end_time),
            "duration_minutes": duration,
            "cost": calculate_cost(amenity, duration),
        }
