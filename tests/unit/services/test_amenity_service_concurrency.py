# tests/unit/services/test_amenity_service_concurrency.py
"""
Two sessions racing on one file-backed SQLite database.

Each worker's repository pauses after reading. Unless the write lock is
taken before that read, both workers see the same state and both write.
"""

from datetime import date, datetime
import threading
import time

import pytest
import pytz
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from amenity_engine.core.clock import FixedClock
from amenity_engine.core.enums import AmenityCategory, ReservationStatus
from amenity_engine.core.exceptions import (
    InvalidStatusTransitionException,
    ReservationConflictException,
)
from amenity_engine.database import Base
from amenity_engine.models.amenity import AmenityReservation
from amenity_engine.repositories.amenity_repository import AmenityRepository
from amenity_engine.schemas.amenity import AmenityCreate, ReservationCreate
from amenity_engine.services.amenity_service import AmenityService

pytestmark = pytest.mark.unit

MONDAY = date(2026, 10, 19)
CLOCK = FixedClock(pytz.utc.localize(datetime(2026, 10, 19, 9, 30)))
PAUSE = 0.2


class PausingRepository(AmenityRepository):
    def get_reservations_by_amenity(self, amenity_id, reservation_date):
        reservations = super().get_reservations_by_amenity(amenity_id, reservation_date)
        time.sleep(PAUSE)
        return reservations

    def lock_reservation(self, reservation_id):
        reservation = super().lock_reservation(reservation_id)
        time.sleep(PAUSE)
        return reservation


@pytest.fixture
def session_factory(tmp_path):
    engine = create_engine(
        f"sqlite+pysqlite:///{tmp_path / 'amenities.db'}",
        future=True,
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(engine)
    yield sessionmaker(bind=engine, expire_on_commit=False, future=True)
    engine.dispose()


@pytest.fixture
def pool_id(session_factory):
    session = session_factory()
    try:
        amenity = AmenityService(session, clock=CLOCK).create_amenity(
            AmenityCreate(
                name="Lagoon Pool",
                category=AmenityCategory.POOL,
                opening_time="08:00",
                closing_time="18:00",
            )
        )
        return amenity.id
    finally:
        session.close()


def booking(amenity_id, start, end, guest_id):
    return ReservationCreate(
        amenity_id=amenity_id,
        guest_id=guest_id,
        guest_name=f"Guest {guest_id}",
        reservation_date=MONDAY,
        start_time=start,
        end_time=end,
        party_size=1,
    )


def run_concurrently(session_factory, calls):
    """Run each call(service) on its own thread and session; return outcomes in call order."""
    barrier = threading.Barrier(len(calls))
    outcomes = [None] * len(calls)

    def worker(index, call):
        session = session_factory()
        service = AmenityService(session, repository=PausingRepository(session), clock=CLOCK)
        try:
            barrier.wait()
            call(service)
            outcomes[index] = "ok"
        except (ReservationConflictException, InvalidStatusTransitionException) as exc:
            outcomes[index] = exc
        finally:
            session.close()

    threads = [
        threading.Thread(target=worker, args=(index, call)) for index, call in enumerate(calls)
    ]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=10)
    return outcomes


def test_overlapping_bookings_do_not_both_succeed(session_factory, pool_id):
    outcomes = run_concurrently(
        session_factory,
        [
            lambda service: service.create_reservation(booking(pool_id, "10:00", "12:00", "g1")),
            lambda service: service.create_reservation(booking(pool_id, "11:00", "13:00", "g2")),
        ],
    )

    assert outcomes.count("ok") == 1
    assert [type(o) for o in outcomes if o != "ok"] == [ReservationConflictException]

    session = session_factory()
    try:
        assert session.query(AmenityReservation).count() == 1
    finally:
        session.close()


def test_disjoint_bookings_both_succeed(session_factory, pool_id):
    outcomes = run_concurrently(
        session_factory,
        [
            lambda service: service.create_reservation(booking(pool_id, "10:00", "11:00", "g1")),
            lambda service: service.create_reservation(booking(pool_id, "11:00", "12:00", "g2")),
        ],
    )

    assert outcomes == ["ok", "ok"]


def test_concurrent_terminal_transitions_leave_one_winner(session_factory, pool_id):
    session = session_factory()
    try:
        service = AmenityService(session, clock=CLOCK)
        reservation = service.create_reservation(booking(pool_id, "10:00", "12:00", "g1"))
        service.confirm_reservation(reservation.id)
        reservation_id = reservation.id
    finally:
        session.close()

    outcomes = run_concurrently(
        session_factory,
        [
            lambda service: service.complete_reservation(reservation_id),
            lambda service: service.mark_no_show(reservation_id),
        ],
    )

    assert outcomes.count("ok") == 1
    loser = next(o for o in outcomes if o != "ok")
    assert isinstance(loser, InvalidStatusTransitionException)

    winner = [ReservationStatus.COMPLETED, ReservationStatus.NO_SHOW][outcomes.index("ok")]
    session = session_factory()
    try:
        assert session.get(AmenityReservation, reservation_id).status == winner.value
    finally:
        session.close()
