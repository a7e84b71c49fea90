"""
Trip access rules.

The owner of a trip may do everything. An accepted collaborator may read
the trip and create, edit or delete its activities. Pending invitees and
strangers cannot see the trip at all: for them it does not exist.
"""
from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from travel_planner.domain.errors import NotFoundError, PermissionDeniedError
from travel_planner.domain.models import CollaboratorStatus, TripRole
from travel_planner.infrastructure.models import (
    ActivityModel,
    CollectionModel,
    DayModel,
    TripCollaboratorModel,
    TripModel,
)


async def get_trip_model(db: AsyncSession, trip_id: UUID) -> TripModel:
    result = await db.execute(select(TripModel).where(TripModel.id == trip_id))
    trip = result.scalar_one_or_none()
    if trip is None:
        raise NotFoundError("Trip not found")
    return trip


async def resolve_trip_role(db: AsyncSession, trip: TripModel, user_id: UUID) -> Optional[TripRole]:
    """Role of the user on the trip, or None without access."""
    if trip.owner_id == user_id:
        return TripRole.OWNER

    result = await db.execute(
        select(TripCollaboratorModel.id).where(
            TripCollaboratorModel.trip_id == trip.id,
            TripCollaboratorModel.user_id == user_id,
            TripCollaboratorModel.status == CollaboratorStatus.ACCEPTED,
        )
    )
    if result.scalar_one_or_none() is not None:
        return TripRole.COLLABORATOR
    return None


async def require_trip_access(
    db: AsyncSession,
    trip_id: UUID,
    user_id: UUID,
) -> tuple[TripModel, TripRole]:
    """
    Load a trip the user may read and edit the itinerary of.

    Raises:
        NotFoundError: trip missing or not visible to the user
    """
    trip = await get_trip_model(db, trip_id)
    role = await resolve_trip_role(db, trip, user_id)
    if role is None:
        raise NotFoundError("Trip not found")
    return trip, role


async def require_trip_owner(db: AsyncSession, trip_id: UUID, user_id: UUID) -> TripModel:
    """
    Load a trip for an owner-only operation.

    Raises:
        NotFoundError: trip missing or not visible to the user
        PermissionDeniedError: the user is only a collaborator
    """
    trip, role = await require_trip_access(db, trip_id, user_id)
    if role != TripRole.OWNER:
        raise PermissionDeniedError("Only the trip owner can do this")
    return trip


async def require_day_access(
    db: AsyncSession,
    day_id: UUID,
    user_id: UUID,
) -> tuple[DayModel, TripModel, TripRole]:
    result = await db.execute(select(DayModel).where(DayModel.id == day_id))
    day = result.scalar_one_or_none()
    if day is None:
        raise NotFoundError("Day not found")
    trip, role = await require_trip_access(db, day.trip_id, user_id)
    return day, trip, role


async def require_activity_access(
    db: AsyncSession,
    activity_id: UUID,
    user_id: UUID,
) -> tuple[ActivityModel, DayModel, TripModel]:
    result = await db.execute(select(ActivityModel).where(ActivityModel.id == activity_id))
    activity = result.scalar_one_or_none()
    if activity is None:
        raise NotFoundError("Activity not found")
    day, trip, _ = await require_day_access(db, activity.day_id, user_id)
    return activity, day, trip


async def require_collection_owner(
    db: AsyncSession,
    collection_id: UUID,
    user_id: UUID,
) -> CollectionModel:
    """Collections are private to their owner; others get NotFoundError."""
    result = await db.execute(select(CollectionModel).where(CollectionModel.id == collection_id))
    collection = result.scalar_one_or_none()
    if collection is None or collection.owner_id != user_id:
        raise NotFoundError("Collection not found")
    return collection
