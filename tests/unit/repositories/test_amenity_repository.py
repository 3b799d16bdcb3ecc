# tests/unit/repositories/test_amenity_repository.py
from datetime import date
from unittest.mock import Mock

import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from amenity_engine.core.enums import AmenityCategory, ReservationStatus
from amenity_engine.core.exceptions import RepositoryException
from amenity_engine.models.amenity import AmenityReservation
from amenity_engine.repositories import AmenityRepository, RepositoryFactory

pytestmark = pytest.mark.unit

DAY = date(2026, 10, 19)


@pytest.fixture
def repository(unit_db):
    return RepositoryFactory.create_amenity_repository(unit_db)


@pytest.fixture
def amenity(repository, unit_db):
    amenity = repository.create(
        name="Rooftop Spa",
        category=AmenityCategory.SPA.value,
        opening_time="09:00",
        closing_time="20:00",
    )
    unit_db.commit()
    return amenity


def add_reservation(repository, amenity_id, start, end, **overrides):
    values = dict(
        amenity_id=amenity_id,
        guest_id="guest-1",
        guest_name="Ada Guest",
        reservation_date=DAY,
        start_time=start,
        end_time=end,
        party_size=1,
    )
    values.update(overrides)
    return repository.create_reservation(**values)


def test_factory_builds_repositories(unit_db):
    assert isinstance(RepositoryFactory.create_amenity_repository(unit_db), AmenityRepository)


def test_model_defaults(amenity):
    assert len(amenity.id) == 36
    assert amenity.status == "available"
    assert amenity.is_active is True
    assert amenity.is_complimentary is True
    assert amenity.images == []


def test_lock_amenity_on_sqlite_takes_the_write_lock(repository, amenity, unit_db):
    assert repository.dialect_name == "sqlite"
    assert not unit_db.connection().connection.driver_connection.in_transaction

    assert repository.lock_amenity(amenity.id) is amenity

    assert unit_db.connection().connection.driver_connection.in_transaction
    unit_db.commit()
    assert repository.lock_amenity("missing") is None


def test_lock_reservation_reloads_current_status(repository, amenity, unit_db):
    reservation = add_reservation(repository, amenity.id, "10:00", "11:00")
    unit_db.commit()
    unit_db.execute(
        AmenityReservation.__table__.update()
        .where(AmenityReservation.id == reservation.id)
        .values(status="cancelled")
    )

    locked = repository.lock_reservation(reservation.id)

    assert locked is reservation
    assert locked.status == "cancelled"
    assert repository.lock_reservation("missing") is None


def test_category_and_active_filters(repository, amenity, unit_db):
    other = repository.create(
        name="Kids Club",
        category=AmenityCategory.KIDS.value,
        opening_time="09:00",
        closing_time="17:00",
        is_active=False,
    )
    unit_db.commit()

    assert repository.get_by_category(AmenityCategory.SPA) == [amenity]
    assert repository.get_active() == [amenity]
    assert repository.get_all_amenities() == [other, amenity]


def test_reservations_by_amenity_are_ordered_and_scoped_to_date(repository, amenity):
    late = add_reservation(repository, amenity.id, "15:00", "16:00")
    early = add_reservation(repository, amenity.id, "10:00", "11:00", status="cancelled")
    add_reservation(repository, amenity.id, "10:00", "11:00", reservation_date=date(2026, 10, 20))

    assert repository.get_reservations_by_amenity(amenity.id, DAY) == [early, late]


def test_update_reservation_status(repository, amenity):
    reservation = add_reservation(repository, amenity.id, "10:00", "11:00")

    updated = repository.update_reservation_status(reservation.id, ReservationStatus.CONFIRMED)

    assert updated.status == "confirmed"
    assert repository.update_reservation_status("missing", ReservationStatus.CONFIRMED) is None


def test_set_schedule_replaces_rows(repository, amenity, unit_db):
    repository.set_schedule(
        amenity.id,
        [
            {"day_of_week": 3, "opening_time": "10:00", "closing_time": "12:00", "is_closed": False},
            {"day_of_week": 0, "opening_time": "00:00", "closing_time": "00:00", "is_closed": True},
        ],
    )
    unit_db.commit()

    saved = repository.set_schedule(
        amenity.id,
        [{"day_of_week": 3, "opening_time": "11:00", "closing_time": "13:00", "is_closed": False}],
    )
    unit_db.commit()

    assert [row.day_of_week for row in saved] == [3]
    assert [(row.day_of_week, row.opening_time) for row in repository.get_schedule(amenity.id)] == [
        (3, "11:00")
    ]
    assert [row.day_of_week for row in amenity.schedules] == [3]


def test_sqlalchemy_errors_become_repository_exceptions():
    error = OperationalError("SELECT", {}, Exception("connection lost"))
    db = Mock(spec=Session)
    query = db.query.return_value
    query.filter.return_value.first.side_effect = error
    ordered = query.filter.return_value.order_by.return_value
    ordered.populate_existing.return_value.all.side_effect = error
    repository = AmenityRepository(db)

    with pytest.raises(RepositoryException):
        repository.get_reservation_by_id("r1")
    with pytest.raises(RepositoryException):
        repository.get_reservations_by_amenity("a1", DAY)


def test_lock_failures_become_repository_exceptions():
    db = Mock(spec=Session)
    db.get_bind.return_value.dialect.name = "postgresql"
    locked = db.query.return_value.filter.return_value.with_for_update.return_value
    locked.populate_existing.return_value.first.side_effect = OperationalError(
        "SELECT", {}, Exception("lock timeout")
    )
    repository = AmenityRepository(db)

    with pytest.raises(RepositoryException) as exc_info:
        repository.lock_reservation("r1")

    assert "Failed to lock reservation" in str(exc_info.value)
