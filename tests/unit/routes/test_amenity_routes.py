# tests/unit/routes/test_amenity_routes.py
"""
Router tests for /api/v1/amenities.

The service dependency is overridden with one bound to the per-test
in-memory database and a fixed clock.
"""

from datetime import datetime
from unittest.mock import patch

from fastapi.testclient import TestClient
import pytest
import pytz

from amenity_engine.core.clock import FixedClock
from amenity_engine.main import app
from amenity_engine.routes.v1.amenities import get_amenity_service
from amenity_engine.services.amenity_service import AmenityService

pytestmark = pytest.mark.unit

BASE = "/api/v1/amenities"
# Monday 2026-10-19, 09:30 UTC
NOW = pytz.utc.localize(datetime(2026, 10, 19, 9, 30))


@pytest.fixture
def client(unit_db):
    app.dependency_overrides[get_amenity_service] = lambda: AmenityService(
        unit_db, clock=FixedClock(NOW)
    )
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def court(client):
    response = client.post(
        BASE,
        json={
            "name": "Padel Court",
            "category": "sports",
            "opening_time": "8:00",
            "closing_time": "20:00",
            "capacity": 4,
            "price_per_hour": "30.00",
            "is_complimentary": False,
        },
    )
    assert response.status_code == 201
    return response.json()


def book(client, amenity_id, **overrides):
    payload = {
        "amenity_id": amenity_id,
        "guest_id": "guest-1",
        "guest_name": "Ada Guest",
        "reservation_date": "2026-10-19",
        "start_time": "10:00",
        "end_time": "12:00",
        "party_size": 2,
    }
    payload.update(overrides)
    return client.post(f"{BASE}/reservations", json=payload)


def test_create_and_get_amenity(client, court):
    assert court["opening_time"] == "08:00"
    assert court["status"] == "available"
    assert court["price_per_hour"] == 30.0

    response = client.get(f"{BASE}/{court['id']}")

    assert response.status_code == 200
    assert response.json()["name"] == "Padel Court"


def test_list_amenities_by_category(client, court):
    assert [a["id"] for a in client.get(BASE, params={"category": "sports"}).json()] == [court["id"]]
    assert client.get(BASE, params={"category": "spa"}).json() == []


def test_unknown_amenity_is_404(client):
    response = client.get(f"{BASE}/missing")

    assert response.status_code == 404
    assert response.json()["detail"]["message"] == "Amenity not found"


def test_create_amenity_with_bad_time_is_422(client):
    response = client.post(
        BASE,
        json={"name": "Gym", "category": "fitness", "opening_time": "25:99", "closing_time": "22:00"},
    )

    assert response.status_code == 422


def test_reservation_flow(client, court):
    created = book(client, court["id"])
    assert created.status_code == 201
    body = created.json()
    assert body["status"] == "pending"
    assert body["cost"] == 60.0

    slots = client.get(f"{BASE}/{court['id']}/slots", params={"date": "2026-10-19"})
    assert slots.json() == [
        {"start_time": "08:00", "end_time": "10:00"},
        {"start_time": "12:00", "end_time": "20:00"},
    ]

    availability = client.get(
        f"{BASE}/{court['id']}/availability",
        params={"date": "2026-10-19", "start_time": "9:00", "end_time": "11:00"},
    )
    assert availability.json()["available"] is False
    assert availability.json()["start_time"] == "09:00"

    cancelled = client.post(f"{BASE}/reservations/{body['id']}/cancel")
    assert cancelled.json()["status"] == "cancelled"

    availability = client.get(
        f"{BASE}/{court['id']}/availability",
        params={"date": "2026-10-19", "start_time": "09:00", "end_time": "11:00"},
    )
    assert availability.json()["available"] is True


def test_overlapping_reservation_is_409(client, court):
    book(client, court["id"])

    response = book(client, court["id"], start_time="11:00", end_time="13:00")

    assert response.status_code == 409
    assert response.json()["detail"]["code"] == "RESERVATION_CONFLICT"


def test_capacity_violation_is_400(client, court):
    response = book(client, court["id"], party_size=5)

    assert response.status_code == 400
    assert response.json()["detail"]["message"] == "Party size exceeds amenity capacity"


def test_invalid_transition_is_422(client, court):
    reservation = book(client, court["id"]).json()

    response = client.post(f"{BASE}/reservations/{reservation['id']}/no-show")

    assert response.status_code == 422
    assert response.json()["detail"]["message"] == "Can only mark confirmed reservations as no-show"


def test_confirm_and_complete(client, court):
    reservation = book(client, court["id"]).json()

    assert client.post(f"{BASE}/reservations/{reservation['id']}/confirm").json()["status"] == "confirmed"
    assert client.post(f"{BASE}/reservations/{reservation['id']}/complete").json()["status"] == "completed"
    assert client.get(f"{BASE}/reservations/{reservation['id']}").json()["status"] == "completed"


def test_guest_and_date_listings(client, court):
    book(client, court["id"])

    by_guest = client.get(f"{BASE}/reservations", params={"guest_id": "guest-1"}).json()
    by_date = client.get(f"{BASE}/{court['id']}/reservations", params={"date": "2026-10-19"}).json()

    assert len(by_guest) == 1
    assert [r["id"] for r in by_date] == [by_guest[0]["id"]]


def test_schedule_and_open_status(client, court):
    response = client.put(
        f"{BASE}/{court['id']}/schedule",
        json={"entries": [{"day_of_week": 1, "opening_time": "10:00", "closing_time": "14:00"}]},
    )
    assert response.status_code == 200
    assert client.get(f"{BASE}/{court['id']}/schedule").json()[0]["day_of_week"] == 1

    now = client.get(f"{BASE}/{court['id']}/open").json()
    assert now == {"amenity_id": court["id"], "day_of_week": 1, "time": "09:30", "is_open": False}

    later = client.get(f"{BASE}/{court['id']}/open", params={"day_of_week": 1, "time": "11:00"})
    assert later.json()["is_open"] is True

    slots = client.get(f"{BASE}/{court['id']}/slots", params={"date": "2026-10-19"})
    assert slots.json() == [{"start_time": "10:00", "end_time": "14:00"}]


def test_open_without_parameters_asks_the_service_about_now(client, court):
    with patch.object(AmenityService, "is_open_now", return_value=True) as is_open_now:
        response = client.get(f"{BASE}/{court['id']}/open")

    assert response.json()["is_open"] is True
    is_open_now.assert_called_once_with(court["id"])


def test_schedule_with_bad_day_is_400(client, court):
    response = client.put(
        f"{BASE}/{court['id']}/schedule", json={"entries": [{"day_of_week": 9, "is_closed": True}]}
    )

    assert response.status_code == 400
    assert response.json()["detail"]["message"] == "Invalid day of week: must be 0-6"


def test_status_update_blocks_booking(client, court):
    response = client.put(f"{BASE}/{court['id']}/status", json={"status": "maintenance"})
    assert response.json()["status"] == "maintenance"

    assert book(client, court["id"]).status_code == 422


def test_update_and_delete(client, court):
    updated = client.patch(f"{BASE}/{court['id']}", json={"description": "Glass walls"})
    assert updated.json()["description"] == "Glass walls"

    assert client.delete(f"{BASE}/{court['id']}").status_code == 204
    assert client.get(f"{BASE}/{court['id']}").status_code == 404


def test_quote(client, court):
    response = client.get(
        f"{BASE}/{court['id']}/quote", params={"start_time": "10:00", "end_time": "10:45"}
    )

    assert response.json()["duration_minutes"] == 45
    assert response.json()["cost"] == 22.5


def test_health_and_metrics(client):
    assert client.get("/health").json()["status"] == "healthy"

    metrics = client.get("/metrics")
    assert metrics.status_code == 200
    assert "amenity_service_operations_total" in metrics.text
