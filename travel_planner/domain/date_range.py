"""
Date-range utilities: trip date validation and day scaffolding.

Trip dates are inclusive calendar dates. Days are generated once when a trip
is created (one per date, numbered from 1). When a trip's dates are edited
later, reconcile_days() works out which days survive and how they are
renumbered.
"""
import datetime as dt
from dataclasses import dataclass, field
from typing import Iterable, Iterator, Union
from uuid import UUID

from travel_planner.domain.errors import DateRangeError, ValidationError
from travel_planner.domain.models import Day

MAX_TRIP_SPAN_DAYS = 30

DateLike = Union[dt.date, dt.datetime, str]


def normalize_date(value: DateLike) -> dt.date:
    """
    Strip the time-of-day from a date-like value.

    Accepts date, datetime or ISO-8601 strings ("2025-06-01" or
    "2025-06-01T23:30:00"). Datetimes are truncated, not converted between
    timezones, so a late-evening timestamp stays on its own calendar date.
    """
    if isinstance(value, dt.datetime):
        return value.date()
    if isinstance(value, dt.date):
        return value
    if isinstance(value, str):
        text = value.strip()
        try:
            return dt.date.fromisoformat(text[:10])
        except ValueError:
            raise ValidationError(f"Invalid date: {value!r}", field="date")
    raise ValidationError(f"Invalid date: {value!r}", field="date")


def inclusive_day_count(start: DateLike, end: DateLike) -> int:
    """Number of calendar days from start to end, both included."""
    return (normalize_date(end) - normalize_date(start)).days + 1


def validate_trip_dates(
    start: DateLike,
    end: DateLike,
    max_span_days: int = MAX_TRIP_SPAN_DAYS,
) -> tuple[dt.date, dt.date]:
    """
    Validate a trip date range.

    Raises:
        DateRangeError: if end < start or end - start > max_span_days
    """
    start_date = normalize_date(start)
    end_date = normalize_date(end)
    span = (end_date - start_date).days

    if span < 0:
        raise DateRangeError("End date cannot be before start date.")
    if span > max_span_days:
        raise DateRangeError(
            f"Trip is too long ({span} days). The maximum is {max_span_days} days."
        )
    return start_date, end_date


def iter_dates(start: DateLike, end: DateLike) -> Iterator[dt.date]:
    current = normalize_date(start)
    last = normalize_date(end)
    while current <= last:
        yield current
        current += dt.timedelta(days=1)


def scaffold_days(trip_id: UUID, start: DateLike, end: DateLike) -> list[Day]:
    """One Day per date from start to end inclusive, numbered 1..N."""
    return [
        Day(trip_id=trip_id, date=day_date, day_number=number)
        for number, day_date in enumerate(iter_dates(start, end), start=1)
    ]


@dataclass
class DayReconciliation:
    """Outcome of fitting existing days onto a new date range."""
    kept: list[Day] = field(default_factory=list)  # numbered for the new range
    renumbered: list[Day] = field(default_factory=list)  # subset of kept
    to_create: list[Day] = field(default_factory=list)
    to_remove: list[Day] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.to_create or self.to_remove or self.renumbered)


def reconcile_days(
    trip_id: UUID,
    existing_days: Iterable[Day],
    start: DateLike,
    end: DateLike,
    days_with_activities: Iterable[UUID] = (),
) -> DayReconciliation:
    """
    Fit a trip's existing days onto an edited date range.

    Days whose date is still inside the range are kept (and renumbered),
    missing dates get new days, and days outside the range are removed.
    A day that would be removed while it still holds activities blocks
    the edit.

    Raises:
        ValidationError: if a day outside the new range has activities
    """
    start_date = normalize_date(start)
    end_date = normalize_date(end)
    busy = set(days_with_activities)
    by_date = {day.date: day for day in existing_days}

    result = DayReconciliation()
    for day in by_date.values():
        if not start_date <= day.date <= end_date:
            if day.id in busy:
                raise ValidationError(
                    f"Day {day.day_number} ({day.date.isoformat()}) still has activities. "
                    "Move or delete them before changing the trip dates.",
                    field="start_date" if day.date < start_date else "end_date",
                )
            result.to_remove.append(day)

    for number, day_date in enumerate(iter_dates(start_date, end_date), start=1):
        existing = by_date.get(day_date)
        if existing is None:
            result.to_create.append(Day(trip_id=trip_id, date=day_date, day_number=number))
        else:
            kept = existing.model_copy(update={"day_number": number})
            result.kept.append(kept)
            if existing.day_number != number:
                result.renumbered.append(kept)

    result.to_remove.sort(key=lambda d: d.date)
    return result
