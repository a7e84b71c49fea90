"""
Trips API endpoints: dashboard list, create, edit and move between collections.

Deleting a trip goes through /api/deletions.
"""
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from travel_planner.application.itinerary import ItinerarySession
from travel_planner.application.trip_service import trip_service
from travel_planner.auth.dependencies import get_current_user
from travel_planner.auth.models import UserModel
from travel_planner.domain.schemas import (
    MoveTripRequest,
    TripCreateRequest,
    TripDetailResponse,
    TripListResponse,
    TripUpdateRequest,
)
from travel_planner.infrastructure.database import get_db


router = APIRouter(prefix="/trips", tags=["trips"])


@router.post(
    "",
    response_model=TripDetailResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new trip",
    description="Create a trip together with one day per date of its range."
)
async def create_trip(
    request: TripCreateRequest,
    db: AsyncSession = Depends(get_db),
    user: UserModel = Depends(get_current_user),
) -> TripDetailResponse:
    """
    Create a new trip from the trip form.

    - end_date must not be before start_date and the range is at most 30 days
    - inside a collection the dates must not overlap a sibling trip
    - a cover image is looked up for the destination (placeholder on failure)
    """
    view = await trip_service.create_trip(db, user.id, request)
    await db.commit()
    return view.to_detail()


@router.get(
    "",
    response_model=TripListResponse,
    summary="List trips",
    description="Own trips and trips shared with the user, by start date."
)
async def list_trips(
    collection_id: Optional[UUID] = Query(default=None, description="Only trips of this collection"),
    standalone: Optional[bool] = Query(default=None, description="Only trips outside any collection"),
    db: AsyncSession = Depends(get_db),
    user: UserModel = Depends(get_current_user),
) -> TripListResponse:
    views = await trip_service.list_trips(db, user.id, collection_id=collection_id, standalone=standalone)
    return TripListResponse(trips=[v.to_response() for v in views], total=len(views))


@router.get(
    "/{trip_id}",
    response_model=TripDetailResponse,
    summary="Get trip by ID",
    description="Fetch a trip with its ordered days (owner or collaborator)."
)
async def get_trip(
    trip_id: UUID,
    db: AsyncSession = Depends(get_db),
    user: UserModel = Depends(get_current_user),
) -> TripDetailResponse:
    view = await trip_service.get_trip(db, trip_id, user.id)
    return view.to_detail()


@router.patch(
    "/{trip_id}",
    response_model=TripDetailResponse,
    summary="Update trip",
    description=(
        "Partial update by the owner. Changed dates reconcile the day list: days still in range "
        "are kept and renumbered, new dates get days, and dropping a day that has activities is refused."
    )
)
async def update_trip(
    trip_id: UUID,
    request: TripUpdateRequest,
    db: AsyncSession = Depends(get_db),
    user: UserModel = Depends(get_current_user),
) -> TripDetailResponse:
    view = await trip_service.update_trip(db, trip_id, user.id, request)
    await db.commit()
    return view.to_detail()


@router.put(
    "/{trip_id}/collection",
    response_model=TripDetailResponse,
    summary="Move trip",
    description="Drop a trip into a collection, or detach it with collection_id=null."
)
async def move_trip(
    trip_id: UUID,
    request: MoveTripRequest,
    db: AsyncSession = Depends(get_db),
    user: UserModel = Depends(get_current_user),
) -> TripDetailResponse:
    session = await ItinerarySession(db, user.id, trip_id).load()
    view = await session.move_trip_into_collection(request.collection_id)
    await db.commit()
    return view.to_detail()
