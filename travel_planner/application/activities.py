"""
Activities of a day: required-field validation, same-day time overlap,
and the reads used by the itinerary and the export.
"""
import datetime as dt
import logging
from dataclasses import dataclass
from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from travel_planner.application.access import require_activity_access, require_day_access
from travel_planner.domain.errors import ValidationError
from travel_planner.domain.models import Activity, ActivityCategory
from travel_planner.domain.overlap import ensure_no_activity_conflict
from travel_planner.domain.schemas import ActivityForm, ActivitySuggestion
from travel_planner.infrastructure.models import ActivityModel, DayModel

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ValidActivity:
    """An activity form that passed the required-field checks."""
    title: str
    category: ActivityCategory
    start_time: dt.time
    duration_minutes: Optional[int]
    notes: Optional[str]


def validate_activity_form(form: ActivityForm) -> ValidActivity:
    """
    Check required fields; a transport leg builds the title and forces the category.

    Raises:
        ValidationError: missing title or start time, negative duration
    """
    category = form.category
    title = (form.title or "").strip()
    if form.transport is not None:
        category = ActivityCategory.TRANSPORT
        title = title or form.transport.to_title()

    if not title:
        raise ValidationError("Title is required.", field="title")
    if form.start_time is None:
        raise ValidationError("Start time is required.", field="start_time")
    if form.duration_minutes is not None and form.duration_minutes < 0:
        raise ValidationError("Duration cannot be negative.", field="duration_minutes")

    notes = form.notes.strip() if form.notes else None
    return ValidActivity(
        title=title,
        category=category,
        start_time=form.start_time.replace(second=0, microsecond=0, tzinfo=None),
        duration_minutes=form.duration_minutes,
        notes=notes or None,
    )


def form_from_suggestion(suggestion: ActivitySuggestion, start_time: Optional[dt.time] = None) -> ActivityForm:
    """Pre-filled creation form for an accepted AI suggestion."""
    return ActivityForm(
        title=suggestion.title,
        category=suggestion.category,
        start_time=start_time,
        duration_minutes=suggestion.duration_minutes,
        notes=suggestion.description,
    )


def activity_order(query):
    """Untimed activities first, then by start time."""
    return query.order_by(
        ActivityModel.start_time.is_(None).desc(),
        ActivityModel.start_time,
        ActivityModel.created_at,
    )


class ActivityService:
    """Activity reads and validated writes."""

    async def list_day_activities(self, db: AsyncSession, day_id: UUID) -> list[ActivityModel]:
        result = await db.execute(activity_order(select(ActivityModel).where(ActivityModel.day_id == day_id)))
        return list(result.scalars().all())

    async def list_trip_activities(self, db: AsyncSession, trip_id: UUID) -> list[ActivityModel]:
        """All activities of all days of a trip in one query."""
        result = await db.execute(
            activity_order(
                select(ActivityModel)
                .join(DayModel, ActivityModel.day_id == DayModel.id)
                .where(DayModel.trip_id == trip_id)
            )
        )
        return list(result.scalars().all())

    async def _check_overlap(
        self,
        db: AsyncSession,
        day_id: UUID,
        data: ValidActivity,
        exclude_activity_id: Optional[UUID] = None,
    ) -> None:
        same_day = await self.list_day_activities(db, day_id)
        ensure_no_activity_conflict(
            data.start_time,
            data.duration_minutes,
            [Activity.model_validate(a) for a in same_day],
            exclude_activity_id=exclude_activity_id,
        )

    async def create_activity(
        self,
        db: AsyncSession,
        day_id: UUID,
        user_id: UUID,
        form: ActivityForm,
    ) -> ActivityModel:
        """
        Raises:
            ValidationError: missing required field
            OverlapConflictError: time overlaps another activity of the day
        """
        day, _, _ = await require_day_access(db, day_id, user_id)
        data = validate_activity_form(form)
        await self._check_overlap(db, day.id, data)

        activity = ActivityModel(
            day_id=day.id,
            title=data.title,
            category=data.category,
            start_time=data.start_time,
            duration_minutes=data.duration_minutes,
            notes=data.notes,
        )
        db.add(activity)
        await db.flush()

        logger.info(f"Activity {activity.id} added to day {day.id}")
        return activity

    async def update_activity(
        self,
        db: AsyncSession,
        activity_id: UUID,
        user_id: UUID,
        form: ActivityForm,
    ) -> ActivityModel:
        """Full replacement of the editable fields; the activity never conflicts with itself."""
        activity, day, _ = await require_activity_access(db, activity_id, user_id)
        data = validate_activity_form(form)
        await self._check_overlap(db, day.id, data, exclude_activity_id=activity.id)

        activity.title = data.title
        activity.category = data.category
        activity.start_time = data.start_time
        activity.duration_minutes = data.duration_minutes
        activity.notes = data.notes
        await db.flush()
        return activity

    async def delete_activity(self, db: AsyncSession, activity_id: UUID, user_id: UUID) -> None:
        activity, _, _ = await require_activity_access(db, activity_id, user_id)
        await db.delete(activity)
        await db.flush()
        logger.info(f"Activity {activity_id} deleted by {user_id}")


# Global service instance
activity_service = ActivityService()

