# tests/unit/services/test_open_hours.py
from types import SimpleNamespace

import pytest

from amenity_engine.services.open_hours import (
    find_day_schedule,
    is_amenity_operational,
    is_open_at,
    is_within_window,
    resolve_operating_hours,
)

pytestmark = pytest.mark.unit


def make_amenity(**overrides):
    values = dict(opening_time="08:00", closing_time="18:00", is_active=True, status="available")
    values.update(overrides)
    return SimpleNamespace(**values)


def make_entry(day, opening="10:00", closing="14:00", is_closed=False):
    return SimpleNamespace(
        day_of_week=day, opening_time=opening, closing_time=closing, is_closed=is_closed
    )


class TestResolveOperatingHours:
    def test_no_schedule_falls_back_to_defaults_every_day(self):
        amenity = make_amenity()

        for day in range(7):
            assert resolve_operating_hours(amenity, [], day) == ("08:00", "18:00")

    def test_override_wins_for_its_day_only(self):
        amenity = make_amenity()
        schedule = [make_entry(6)]

        assert resolve_operating_hours(amenity, schedule, 6) == ("10:00", "14:00")
        assert resolve_operating_hours(amenity, schedule, 5) == ("08:00", "18:00")

    def test_closed_override_has_no_window(self):
        schedule = [make_entry(0, is_closed=True)]

        assert resolve_operating_hours(make_amenity(), schedule, 0) is None

    def test_find_day_schedule(self):
        monday = make_entry(1)

        assert find_day_schedule([make_entry(0), monday], 1) is monday
        assert find_day_schedule([monday], 3) is None


class TestIsOpenAt:
    def test_window_is_half_open(self):
        assert is_within_window("08:00", "08:00", "18:00")
        assert is_within_window("17:59", "08:00", "18:00")
        assert not is_within_window("18:00", "08:00", "18:00")
        assert not is_within_window("07:59", "08:00", "18:00")

    def test_open_within_default_hours(self):
        assert is_open_at(make_amenity(), [], 2, "12:00")

    def test_override_hours_apply(self):
        schedule = [make_entry(2, "10:00", "14:00")]

        assert not is_open_at(make_amenity(), schedule, 2, "09:00")
        assert is_open_at(make_amenity(), schedule, 2, "13:59")

    def test_closed_day(self):
        schedule = [make_entry(3, is_closed=True)]

        assert not is_open_at(make_amenity(), schedule, 3, "12:00")

    @pytest.mark.parametrize(
        "overrides",
        [{"is_active": False}, {"status": "maintenance"}, {"status": "closed"}],
    )
    def test_non_operational_amenity_is_never_open(self, overrides):
        amenity = make_amenity(**overrides)

        assert not is_amenity_operational(amenity)
        assert not is_open_at(amenity, [], 1, "12:00")
