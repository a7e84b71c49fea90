"""
Trip lifecycle: create (with its days), read, edit, delete, move between collections.

Every write is validated before anything is flushed, and a trip is always
created together with its days in the caller's transaction.
"""
import logging
from dataclasses import dataclass, field
from typing import Optional
from uuid import UUID

from sqlalchemy import delete, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from travel_planner.application.access import (
    require_collection_owner,
    require_trip_access,
    require_trip_owner,
)
from travel_planner.config import settings, Settings
from travel_planner.domain.date_range import reconcile_days, scaffold_days, validate_trip_dates
from travel_planner.domain.models import CollaboratorStatus, Day, Trip, TripRole
from travel_planner.domain.overlap import ensure_no_trip_conflict
from travel_planner.domain.schemas import (
    DayResponse,
    TripCreateRequest,
    TripDetailResponse,
    TripResponse,
    TripUpdateRequest,
)
from travel_planner.domain.errors import ValidationError
from travel_planner.infrastructure.image_search import ImageSearchService, get_image_search_service
from travel_planner.infrastructure.models import (
    ActivityModel,
    DayModel,
    TripCollaboratorModel,
    TripModel,
)

logger = logging.getLogger(__name__)


@dataclass
class TripView:
    """A trip as seen by one user."""
    trip: TripModel
    role: TripRole
    days: list[DayModel] = field(default_factory=list)

    def to_response(self) -> TripResponse:
        return trip_response(self.trip, self.role)

    def to_detail(self) -> TripDetailResponse:
        base = trip_response(self.trip, self.role)
        return TripDetailResponse(
            **base.model_dump(),
            days=[DayResponse.model_validate(d) for d in self.days],
        )


def trip_response(trip: TripModel, role: TripRole = TripRole.OWNER) -> TripResponse:
    response = TripResponse.model_validate(trip)
    response.role = role
    return response


def ordered_trips(query):
    return query.order_by(TripModel.start_date, TripModel.position, TripModel.created_at)


async def list_collection_trips(db: AsyncSession, collection_id: UUID) -> list[TripModel]:
    result = await db.execute(
        ordered_trips(select(TripModel).where(TripModel.collection_id == collection_id))
    )
    return list(result.scalars().all())


async def list_trip_days(db: AsyncSession, trip_id: UUID) -> list[DayModel]:
    result = await db.execute(
        select(DayModel).where(DayModel.trip_id == trip_id).order_by(DayModel.day_number)
    )
    return list(result.scalars().all())


class TripService:
    """Service for trip operations."""

    def __init__(
        self,
        image_search: Optional[ImageSearchService] = None,
        app_settings: Optional[Settings] = None,
    ):
        self._settings = app_settings or settings
        self._image_search = image_search

    @property
    def image_search(self) -> ImageSearchService:
        return self._image_search or get_image_search_service()

    def _validate_dates(self, start, end):
        return validate_trip_dates(start, end, self._settings.max_trip_span_days)

    async def _ensure_fits_collection(
        self,
        db: AsyncSession,
        collection_id: UUID,
        start,
        end,
        exclude_trip_id: Optional[UUID] = None,
    ) -> None:
        """Date-overlap check against the other trips already in the collection."""
        siblings = await list_collection_trips(db, collection_id)
        ensure_no_trip_conflict(
            start,
            end,
            [Trip.model_validate(t) for t in siblings],
            exclude_trip_id=exclude_trip_id,
        )

    async def create_trip(
        self,
        db: AsyncSession,
        owner_id: UUID,
        request: TripCreateRequest,
    ) -> TripView:
        """
        Create a trip and one day per date of its range.

        Raises:
            DateRangeError: end before start or range too long
            NotFoundError: collection missing or not owned
            OverlapConflictError: dates overlap a trip in the target collection
        """
        start, end = self._validate_dates(request.start_date, request.end_date)
        title = request.title.strip()
        destination = request.destination.strip()
        if not title:
            raise ValidationError("Title is required.", field="title")
        if not destination:
            raise ValidationError("Destination is required.", field="destination")

        if request.collection_id is not None:
            await require_collection_owner(db, request.collection_id, owner_id)
            await self._ensure_fits_collection(db, request.collection_id, start, end)

        image_url = await self.image_search.cover_image_for(destination)

        trip = TripModel(
            owner_id=owner_id,
            title=title,
            destination=destination,
            start_date=start,
            end_date=end,
            lodging_name=request.lodging_name,
            arrival_info=request.arrival_info,
            image_url=image_url,
            collection_id=request.collection_id,
            position=request.position,
        )
        db.add(trip)
        await db.flush()

        days = [
            DayModel(id=d.id, trip_id=trip.id, date=d.date, day_number=d.day_number)
            for d in scaffold_days(trip.id, start, end)
        ]
        db.add_all(days)
        await db.flush()

        logger.info(f"Trip {trip.id} created with {len(days)} days")
        return TripView(trip=trip, role=TripRole.OWNER, days=days)

    async def get_trip(self, db: AsyncSession, trip_id: UUID, user_id: UUID) -> TripView:
        trip, role = await require_trip_access(db, trip_id, user_id)
        return TripView(trip=trip, role=role, days=await list_trip_days(db, trip.id))

    async def list_trips(
        self,
        db: AsyncSession,
        user_id: UUID,
        collection_id: Optional[UUID] = None,
        standalone: Optional[bool] = None,
    ) -> list[TripView]:
        """
        Trips the user owns plus trips shared with them (accepted invitations).

        With collection_id only the user's trips in that collection are
        returned. With standalone=True owned trips inside a collection are
        left out; shared trips always count as standalone for the invitee.
        """
        if collection_id is not None:
            await require_collection_owner(db, collection_id, user_id)
            return [
                TripView(trip=t, role=TripRole.OWNER)
                for t in await list_collection_trips(db, collection_id)
            ]

        shared_ids = select(TripCollaboratorModel.trip_id).where(
            TripCollaboratorModel.user_id == user_id,
            TripCollaboratorModel.status == CollaboratorStatus.ACCEPTED,
        )
        owned = TripModel.owner_id == user_id
        if standalone:
            owned = owned & TripModel.collection_id.is_(None)

        result = await db.execute(
            ordered_trips(select(TripModel).where(or_(owned, TripModel.id.in_(shared_ids))))
        )
        return [
            TripView(trip=t, role=TripRole.OWNER if t.owner_id == user_id else TripRole.COLLABORATOR)
            for t in result.scalars().all()
        ]

    async def update_trip(
        self,
        db: AsyncSession,
        trip_id: UUID,
        user_id: UUID,
        request: TripUpdateRequest,
    ) -> TripView:
        """
        Partial update by the owner.

        Changed dates are re-validated, re-checked against the trip's
        collection and reconciled with the existing days (see reconcile_days).
        A changed destination fetches a new cover image.
        """
        trip = await require_trip_owner(db, trip_id, user_id)
        updates = request.model_dump(exclude_unset=True)

        start, end = self._validate_dates(
            updates.get("start_date") or trip.start_date,
            updates.get("end_date") or trip.end_date,
        )
        dates_changed = (start, end) != (trip.start_date, trip.end_date)

        for key in ("title", "destination"):
            if key in updates and (updates[key] is None or not updates[key].strip()):
                raise ValidationError(f"{key.capitalize()} is required.", field=key)

        if dates_changed and trip.collection_id is not None:
            await self._ensure_fits_collection(db, trip.collection_id, start, end, exclude_trip_id=trip.id)

        reconciliation = None
        existing_days = await list_trip_days(db, trip.id)
        if dates_changed:
            day_ids = [d.id for d in existing_days]
            busy = await db.execute(
                select(ActivityModel.day_id).where(ActivityModel.day_id.in_(day_ids)).distinct()
            )
            reconciliation = reconcile_days(
                trip.id,
                [Day.model_validate(d) for d in existing_days],
                start,
                end,
                days_with_activities=busy.scalars().all(),
            )

        new_destination = updates.get("destination")
        if new_destination is not None:
            new_destination = new_destination.strip()
            if new_destination.lower() != trip.destination.lower():
                trip.image_url = await self.image_search.cover_image_for(new_destination)
            trip.destination = new_destination

        if "title" in updates:
            trip.title = updates["title"].strip()
        for key in ("lodging_name", "arrival_info", "position"):
            if key in updates:
                setattr(trip, key, updates[key])
        trip.start_date, trip.end_date = start, end

        if reconciliation is not None and reconciliation.changed:
            by_id = {d.id: d for d in existing_days}
            removed_ids = [d.id for d in reconciliation.to_remove]
            if removed_ids:
                await db.execute(delete(DayModel).where(DayModel.id.in_(removed_ids)))
            for kept in reconciliation.renumbered:
                by_id[kept.id].day_number = kept.day_number
            db.add_all(
                DayModel(id=d.id, trip_id=trip.id, date=d.date, day_number=d.day_number)
                for d in reconciliation.to_create
            )
            logger.info(
                f"Trip {trip.id} days reconciled: +{len(reconciliation.to_create)} "
                f"-{len(reconciliation.to_remove)} renumbered {len(reconciliation.renumbered)}"
            )

        await db.flush()
        days = await list_trip_days(db, trip.id) if dates_changed else existing_days
        return TripView(trip=trip, role=TripRole.OWNER, days=days)

    async def delete_trip(self, db: AsyncSession, trip_id: UUID, user_id: UUID) -> None:
        """
        Delete a trip with its days, activities and collaborator rows.
        Owner only; callers go through the deletion confirmation flow.
        """
        trip = await require_trip_owner(db, trip_id, user_id)

        day_ids = select(DayModel.id).where(DayModel.trip_id == trip.id)
        await db.execute(delete(ActivityModel).where(ActivityModel.day_id.in_(day_ids)))
        await db.execute(delete(DayModel).where(DayModel.trip_id == trip.id))
        await db.execute(delete(TripCollaboratorModel).where(TripCollaboratorModel.trip_id == trip.id))
        await db.delete(trip)
        await db.flush()

        logger.info(f"Trip {trip_id} deleted by {user_id}")

    async def move_trip(
        self,
        db: AsyncSession,
        trip_id: UUID,
        user_id: UUID,
        collection_id: Optional[UUID],
    ) -> TripView:
        """
        Put a trip into a collection (drag-and-drop) or detach it (collection_id=None).

        Raises:
            OverlapConflictError: dates overlap a trip already in the collection
        """
        trip = await require_trip_owner(db, trip_id, user_id)

        if collection_id is not None and collection_id != trip.collection_id:
            await require_collection_owner(db, collection_id, user_id)
            await self._ensure_fits_collection(
                db, collection_id, trip.start_date, trip.end_date, exclude_trip_id=trip.id
            )

        trip.collection_id = collection_id
        await db.flush()

        logger.info(f"Trip {trip.id} moved to collection {collection_id}")
        return TripView(trip=trip, role=TripRole.OWNER)


# Global service instance
trip_service = TripService()
