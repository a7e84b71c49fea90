"""
Tests for trip date validation, day scaffolding and day reconciliation.
"""
import datetime as dt
from uuid import uuid4

import pytest

from travel_planner.domain.date_range import (
    inclusive_day_count,
    normalize_date,
    reconcile_days,
    scaffold_days,
    validate_trip_dates,
)
from travel_planner.domain.errors import DateRangeError, ValidationError


class TestNormalizeDate:

    def test_datetime_keeps_its_calendar_date(self):
        assert normalize_date(dt.datetime(2025, 6, 1, 23, 30)) == dt.date(2025, 6, 1)

    def test_iso_string_with_time(self):
        assert normalize_date("2025-06-01T23:59:59+02:00") == dt.date(2025, 6, 1)

    def test_invalid_string(self):
        with pytest.raises(ValidationError):
            normalize_date("next tuesday")


class TestValidateTripDates:

    def test_single_day_trip(self):
        assert validate_trip_dates("2025-06-01", "2025-06-01") == (dt.date(2025, 6, 1), dt.date(2025, 6, 1))

    def test_end_before_start_rejected(self):
        with pytest.raises(DateRangeError) as exc:
            validate_trip_dates(dt.date(2025, 6, 3), dt.date(2025, 6, 1))
        assert "before" in exc.value.message

    def test_thirty_day_span_allowed(self):
        validate_trip_dates(dt.date(2025, 6, 1), dt.date(2025, 7, 1))

    def test_thirty_one_day_span_rejected(self):
        with pytest.raises(DateRangeError):
            validate_trip_dates(dt.date(2025, 6, 1), dt.date(2025, 7, 2))

    def test_custom_limit(self):
        with pytest.raises(DateRangeError):
            validate_trip_dates(dt.date(2025, 6, 1), dt.date(2025, 6, 5), max_span_days=3)


def test_inclusive_day_count():
    assert inclusive_day_count("2025-06-01", "2025-06-03") == 3
    assert inclusive_day_count("2025-06-01", "2025-06-01") == 1


class TestScaffoldDays:

    def test_rome_trip_gets_three_numbered_days(self):
        trip_id = uuid4()
        days = scaffold_days(trip_id, dt.date(2025, 6, 1), dt.date(2025, 6, 3))

        assert [d.day_number for d in days] == [1, 2, 3]
        assert [d.date for d in days] == [dt.date(2025, 6, 1), dt.date(2025, 6, 2), dt.date(2025, 6, 3)]
        assert all(d.trip_id == trip_id for d in days)
        assert len({d.id for d in days}) == 3

    def test_crosses_month_boundary(self):
        days = scaffold_days(uuid4(), "2025-01-30", "2025-02-02")
        assert [d.date.isoformat() for d in days] == ["2025-01-30", "2025-01-31", "2025-02-01", "2025-02-02"]

    def test_late_evening_timestamps_do_not_shift_days(self):
        days = scaffold_days(uuid4(), dt.datetime(2025, 6, 1, 23, 0), dt.datetime(2025, 6, 2, 0, 30))
        assert [d.date for d in days] == [dt.date(2025, 6, 1), dt.date(2025, 6, 2)]


class TestReconcileDays:

    @pytest.fixture
    def trip_id(self):
        return uuid4()

    @pytest.fixture
    def days(self, trip_id):
        return scaffold_days(trip_id, dt.date(2025, 6, 1), dt.date(2025, 6, 3))

    def test_unchanged_range(self, trip_id, days):
        result = reconcile_days(trip_id, days, dt.date(2025, 6, 1), dt.date(2025, 6, 3))
        assert not result.changed
        assert [d.id for d in result.kept] == [d.id for d in days]

    def test_extending_end_appends_days(self, trip_id, days):
        result = reconcile_days(trip_id, days, dt.date(2025, 6, 1), dt.date(2025, 6, 5))

        assert [d.date for d in result.to_create] == [dt.date(2025, 6, 4), dt.date(2025, 6, 5)]
        assert [d.day_number for d in result.to_create] == [4, 5]
        assert result.renumbered == []
        assert result.to_remove == []

    def test_earlier_start_renumbers_existing_days(self, trip_id, days):
        result = reconcile_days(trip_id, days, dt.date(2025, 5, 31), dt.date(2025, 6, 3))

        assert [(d.date, d.day_number) for d in result.to_create] == [(dt.date(2025, 5, 31), 1)]
        assert [(d.id, d.day_number) for d in result.renumbered] == [(d.id, d.day_number + 1) for d in days]

    def test_shrinking_drops_empty_days(self, trip_id, days):
        result = reconcile_days(trip_id, days, dt.date(2025, 6, 2), dt.date(2025, 6, 3))

        assert [d.id for d in result.to_remove] == [days[0].id]
        assert [d.day_number for d in result.kept] == [1, 2]

    def test_dropping_a_day_with_activities_is_blocked(self, trip_id, days):
        with pytest.raises(ValidationError) as exc:
            reconcile_days(
                trip_id,
                days,
                dt.date(2025, 6, 1),
                dt.date(2025, 6, 2),
                days_with_activities=[days[2].id],
            )
        assert exc.value.field == "end_date"
