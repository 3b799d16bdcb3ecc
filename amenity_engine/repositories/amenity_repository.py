# amenity_engine/repositories/amenity_repository.py
"""
Amenity Repository

Data access for amenities, their weekly schedule overrides and their
reservations. This is the only collaborator AmenityService talks to.

Locking contract:
    AmenityService.create_reservation runs inside a single transaction and
    calls lock_amenity() before reading the reservations it checks for
    overlap; status transitions load the reservation through
    lock_reservation(). On PostgreSQL (and any dialect with row locks) these
    are SELECT ... FOR UPDATE, so concurrent writers for the same row
    serialize until the first one commits. SQLite has no row locks, so the
    transaction is opened with BEGIN IMMEDIATE instead: the database write
    lock is taken before the read, and a second writer waits (up to the
    driver's busy timeout) until the first commits or rolls back.
"""

from datetime import date
import logging
from typing import Any, Dict, Iterable, List, Optional, cast

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Query, Session

from ..core.enums import AmenityCategory, ReservationStatus
from ..core.exceptions import RepositoryException
from ..models.amenity import Amenity, AmenityReservation, AmenitySchedule
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)

_DIALECTS_WITHOUT_ROW_LOCKS = {"sqlite"}


class AmenityRepository(BaseRepository[Amenity]):
    """Repository for amenities, schedules and reservations."""

    def __init__(self, db: Session):
        """Initialize with Amenity model as primary."""
        super().__init__(db, Amenity)
        self.logger = logging.getLogger(__name__)

    # Locking helpers

    def _begin_immediate(self) -> None:
        """Take SQLite's database write lock unless this connection already holds a transaction."""
        connection = self.db.connection()
        if not connection.connection.driver_connection.in_transaction:
            connection.exec_driver_sql("BEGIN IMMEDIATE")

    def _for_write(self, query: Query) -> Query:
        if self.dialect_name in _DIALECTS_WITHOUT_ROW_LOCKS:
            self._begin_immediate()
        else:
            query = query.with_for_update()
        return query.populate_existing()

    # Amenity queries

    def get_all_amenities(self) -> List[Amenity]:
        return cast(
            List[Amenity],
            self._execute_query(self._build_query().order_by(Amenity.name)),
        )

    def get_by_category(self, category: AmenityCategory) -> List[Amenity]:
        query = self._build_query().filter(Amenity.category == category.value).order_by(Amenity.name)
        return cast(List[Amenity], self._execute_query(query))

    def get_active(self) -> List[Amenity]:
        query = self._build_query().filter(Amenity.is_active.is_(True)).order_by(Amenity.name)
        return cast(List[Amenity], self._execute_query(query))

    def lock_amenity(self, amenity_id: str) -> Optional[Amenity]:
        """Load an amenity and hold a write lock covering it until the transaction ends."""
        try:
            return self._for_write(self._build_query().filter(Amenity.id == amenity_id)).first()
        except SQLAlchemyError as e:
            self.logger.error(f"Error locking amenity {amenity_id}: {str(e)}")
            raise RepositoryException(f"Failed to lock amenity: {str(e)}")

    # Schedule queries

    def get_schedule(self, amenity_id: str) -> List[AmenitySchedule]:
        query = (
            self.db.query(AmenitySchedule)
            .filter(AmenitySchedule.amenity_id == amenity_id)
            .order_by(AmenitySchedule.day_of_week)
        )
        return cast(List[AmenitySchedule], self._execute_query(query))

    def set_schedule(
        self, amenity_id: str, entries: Iterable[Dict[str, Any]]
    ) -> List[AmenitySchedule]:
        """
        Replace the full schedule of an amenity.

        Existing rows are deleted and flushed before the new rows are inserted
        so the (amenity_id, day_of_week) unique constraint never sees both.
        """
        try:
            for existing in self.get_schedule(amenity_id):
                self.db.delete(existing)
            self.db.flush()

            created = []
            for entry in entries:
                row = AmenitySchedule(amenity_id=amenity_id, **entry)
                self.db.add(row)
                created.append(row)
            self.db.flush()

            amenity = self.db.get(Amenity, amenity_id)
            if amenity is not None:
                self.db.expire(amenity, ["schedules"])

            return sorted(created, key=lambda row: row.day_of_week)
        except SQLAlchemyError as e:
            self.logger.error(f"Error replacing schedule for amenity {amenity_id}: {str(e)}")
            raise RepositoryException(f"Failed to set schedule: {str(e)}")

    # Reservation queries

    def get_reservation_by_id(self, reservation_id: str) -> Optional[AmenityReservation]:
        try:
            return (
                self.db.query(AmenityReservation)
                .filter(AmenityReservation.id == reservation_id)
                .first()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error getting reservation {reservation_id}: {str(e)}")
            raise RepositoryException(f"Failed to retrieve reservation: {str(e)}")

    def lock_reservation(self, reservation_id: str) -> Optional[AmenityReservation]:
        """Load a reservation for a status change, holding a write lock until the transaction ends."""
        try:
            query = self.db.query(AmenityReservation).filter(AmenityReservation.id == reservation_id)
            return self._for_write(query).first()
        except SQLAlchemyError as e:
            self.logger.error(f"Error locking reservation {reservation_id}: {str(e)}")
            raise RepositoryException(f"Failed to lock reservation: {str(e)}")

    def get_reservations_by_amenity(
        self, amenity_id: str, reservation_date: date
    ) -> List[AmenityReservation]:
        """
        All reservations for an amenity on a date, in every status.

        Unpaginated: overlap checks and slot sweeps need the whole day.
        """
        query = (
            self.db.query(AmenityReservation)
            .filter(
                AmenityReservation.amenity_id == amenity_id,
                AmenityReservation.reservation_date == reservation_date,
            )
            .order_by(AmenityReservation.start_time)
            .populate_existing()
        )
        return cast(List[AmenityReservation], self._execute_query(query))

    def get_reservations_by_guest(self, guest_id: str) -> List[AmenityReservation]:
        query = (
            self.db.query(AmenityReservation)
            .filter(AmenityReservation.guest_id == guest_id)
            .order_by(AmenityReservation.reservation_date, AmenityReservation.start_time)
        )
        return cast(List[AmenityReservation], self._execute_query(query))

    def create_reservation(self, **data: Any) -> AmenityReservation:
        try:
            reservation = AmenityReservation(**data)
            self.db.add(reservation)
            self.db.flush()
            return reservation
        except SQLAlchemyError as e:
            self.logger.error(f"Error creating reservation: {str(e)}")
            raise RepositoryException(f"Failed to create reservation: {str(e)}")

    def update_reservation_status(
        self, reservation_id: str, status: ReservationStatus
    ) -> Optional[AmenityReservation]:
        try:
            reservation = self.get_reservation_by_id(reservation_id)
            if reservation is None:
                return None
            reservation.status = status.value
            self.db.flush()
            return reservation
        except SQLAlchemyError as e:
            self.logger.error(f"Error updating reservation {reservation_id}: {str(e)}")
            raise RepositoryException(f"Failed to update reservation: {str(e)}")
