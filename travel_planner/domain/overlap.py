"""
Overlap detection for trips (whole days) and activities (minutes).

All ranges are half-open: [start, end). Ranges that only touch
(one ends exactly where the other starts) do not overlap.
"""
import datetime as dt
from typing import Iterable, Optional, Sequence, TypeVar
from uuid import UUID

from travel_planner.domain.errors import OverlapConflictError
from travel_planner.domain.models import Activity, Trip

T = TypeVar("T")


def overlaps(candidate_start: T, candidate_end: T, existing_start: T, existing_end: T) -> bool:
    """Half-open interval intersection test. Symmetric in its two ranges."""
    return candidate_start < existing_end and candidate_end > existing_start


def find_trip_conflict(
    start: dt.date,
    end: dt.date,
    trips: Iterable[Trip],
    exclude_trip_id: Optional[UUID] = None,
) -> Optional[Trip]:
    """
    First trip whose [start_date, end_date) range overlaps the candidate.

    Dates are compared as whole days, so a trip ending on the day another
    one starts is not a conflict. The trip being edited is skipped.
    """
    for trip in trips:
        if exclude_trip_id is not None and trip.id == exclude_trip_id:
            continue
        if overlaps(start, end, trip.start_date, trip.end_date):
            return trip
    return None


def time_to_minutes(value: dt.time) -> int:
    return value.hour * 60 + value.minute


def minutes_to_label(minutes: int) -> str:
    hours, mins = divmod(minutes, 60)
    return f"{hours:02d}:{mins:02d}"


def activity_interval(
    start_time: Optional[dt.time],
    duration_minutes: Optional[int],
) -> Optional[tuple[int, int]]:
    """[start, start + duration) in minutes since midnight; None without a start time."""
    if start_time is None:
        return None
    start = time_to_minutes(start_time)
    return start, start + (duration_minutes or 0)


def find_activity_conflict(
    start_time: Optional[dt.time],
    duration_minutes: Optional[int],
    activities: Iterable[Activity],
    exclude_activity_id: Optional[UUID] = None,
) -> Optional[Activity]:
    """
    First same-day activity whose time interval overlaps the candidate.

    Activities without a start time never conflict. The activity being
    edited is skipped, so re-saving an unchanged slot is always accepted.
    """
    candidate = activity_interval(start_time, duration_minutes)
    if candidate is None:
        return None

    for activity in activities:
        if exclude_activity_id is not None and activity.id == exclude_activity_id:
            continue
        existing = activity_interval(activity.start_time, activity.duration_minutes)
        if existing is None:
            continue
        if overlaps(candidate[0], candidate[1], existing[0], existing[1]):
            return activity
    return None


def ensure_no_trip_conflict(
    start: dt.date,
    end: dt.date,
    siblings: Sequence[Trip],
    exclude_trip_id: Optional[UUID] = None,
) -> None:
    """Raise OverlapConflictError naming the first conflicting trip."""
    conflict = find_trip_conflict(start, end, siblings, exclude_trip_id)
    if conflict is not None:
        raise OverlapConflictError(
            f'Dates overlap with "{conflict.title}" '
            f"({conflict.start_date.isoformat()} - {conflict.end_date.isoformat()}).",
            conflict=conflict,
        )


def ensure_no_activity_conflict(
    start_time: Optional[dt.time],
    duration_minutes: Optional[int],
    same_day: Sequence[Activity],
    exclude_activity_id: Optional[UUID] = None,
) -> None:
    """Raise OverlapConflictError naming the first conflicting activity."""
    conflict = find_activity_conflict(start_time, duration_minutes, same_day, exclude_activity_id)
    if conflict is not None:
        start, end = activity_interval(conflict.start_time, conflict.duration_minutes)
        raise OverlapConflictError(
            f'Time overlaps with "{conflict.title}" '
            f"({minutes_to_label(start)} - {minutes_to_label(end)}).",
            conflict=conflict,
        )
