"""
Itinerary API endpoints: days, activities, AI suggestions and PDF export.

Every write answers with the selected day re-read from the database, so
the client always renders persisted state.
"""
import logging
from urllib.parse import quote
from uuid import UUID

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from travel_planner.application.activities import activity_service, form_from_suggestion
from travel_planner.application.export import ExportFormatter
from travel_planner.application.itinerary import ItinerarySession
from travel_planner.application.suggestions import ActivitySuggester, get_activity_suggester, suggest_for_trip
from travel_planner.application.trip_service import trip_response
from travel_planner.auth.dependencies import get_current_user
from travel_planner.auth.models import UserModel
from travel_planner.domain.models import Activity, Day, Trip
from travel_planner.domain.schemas import (
    AcceptSuggestionRequest,
    ActivityForm,
    DayActivitiesResponse,
    DeletionConfirmRequest,
    DeletionTicketResponse,
    ItineraryResponse,
    SuggestionRequest,
    SuggestionsResponse,
)
from travel_planner.infrastructure.database import get_db
from travel_planner.infrastructure.image_search import ImageLoader, get_image_loader
from travel_planner.infrastructure.pdf_renderer import PdfRenderer

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/trips/{trip_id}", tags=["itinerary"])


async def _open(db: AsyncSession, user: UserModel, trip_id: UUID) -> ItinerarySession:
    return await ItinerarySession(db, user.id, trip_id).load()


@router.get(
    "/itinerary",
    response_model=ItineraryResponse,
    summary="Full itinerary",
    description="Trip, ordered days and each day's activities in time order."
)
async def get_itinerary(
    trip_id: UUID,
    db: AsyncSession = Depends(get_db),
    user: UserModel = Depends(get_current_user),
) -> ItineraryResponse:
    session = await _open(db, user, trip_id)
    return ItineraryResponse(
        trip=trip_response(session.trip, session.role),
        days=await session.full_tree(),
    )


@router.get(
    "/days/{day_id}",
    response_model=DayActivitiesResponse,
    summary="Select day",
    description="One day with its activities, read fresh."
)
async def get_day(
    trip_id: UUID,
    day_id: UUID,
    db: AsyncSession = Depends(get_db),
    user: UserModel = Depends(get_current_user),
) -> DayActivitiesResponse:
    session = await _open(db, user, trip_id)
    await session.select_day(day_id)
    return session.selected_day_response()


@router.post(
    "/days/{day_id}/activities",
    response_model=DayActivitiesResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add activity",
    description="Create an activity; fails with 409 when it overlaps another one of the day."
)
async def create_activity(
    trip_id: UUID,
    day_id: UUID,
    form: ActivityForm,
    db: AsyncSession = Depends(get_db),
    user: UserModel = Depends(get_current_user),
) -> DayActivitiesResponse:
    session = await _open(db, user, trip_id)
    await session.create_activity(day_id, form)
    await db.commit()
    return session.selected_day_response()


@router.put(
    "/activities/{activity_id}",
    response_model=DayActivitiesResponse,
    summary="Edit activity",
    description="Replace the editable fields of an activity."
)
async def update_activity(
    trip_id: UUID,
    activity_id: UUID,
    form: ActivityForm,
    db: AsyncSession = Depends(get_db),
    user: UserModel = Depends(get_current_user),
) -> DayActivitiesResponse:
    session = await _open(db, user, trip_id)
    await session.update_activity(activity_id, form)
    await db.commit()
    return session.selected_day_response()


@router.post(
    "/activities/{activity_id}/delete-request",
    response_model=DeletionTicketResponse,
    summary="Ask to delete activity",
    description="First step of deleting an activity; nothing is removed yet."
)
async def request_activity_deletion(
    trip_id: UUID,
    activity_id: UUID,
    db: AsyncSession = Depends(get_db),
    user: UserModel = Depends(get_current_user),
) -> DeletionTicketResponse:
    session = await _open(db, user, trip_id)
    ticket = await session.request_delete_activity(activity_id)
    return DeletionTicketResponse(
        token=ticket.token,
        target=ticket.target,
        message=ticket.message,
        expires_in=ticket.expires_in,
    )


@router.post(
    "/activities/delete-confirm",
    response_model=DayActivitiesResponse,
    summary="Confirm activity deletion",
    description="Redeem the deletion ticket and return the refreshed day."
)
async def confirm_activity_deletion(
    trip_id: UUID,
    request: DeletionConfirmRequest,
    db: AsyncSession = Depends(get_db),
    user: UserModel = Depends(get_current_user),
) -> DayActivitiesResponse:
    session = await _open(db, user, trip_id)
    await session.confirm_delete_activity(request.token)
    await db.commit()
    return session.selected_day_response()


@router.post(
    "/suggestions",
    response_model=SuggestionsResponse,
    summary="AI activity suggestions",
    description="Ideas for the trip that avoid activities already planned or shown."
)
async def suggest_activities(
    trip_id: UUID,
    request: SuggestionRequest,
    db: AsyncSession = Depends(get_db),
    user: UserModel = Depends(get_current_user),
    suggester: ActivitySuggester = Depends(get_activity_suggester),
) -> SuggestionsResponse:
    return await suggest_for_trip(db, trip_id, user.id, request, suggester)


@router.post(
    "/days/{day_id}/suggestions/accept",
    response_model=DayActivitiesResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Accept a suggestion",
    description="Turn an AI suggestion into an activity of the day."
)
async def accept_suggestion(
    trip_id: UUID,
    day_id: UUID,
    request: AcceptSuggestionRequest,
    db: AsyncSession = Depends(get_db),
    user: UserModel = Depends(get_current_user),
) -> DayActivitiesResponse:
    session = await _open(db, user, trip_id)
    await session.create_activity(day_id, form_from_suggestion(request.suggestion, request.start_time))
    await db.commit()
    return session.selected_day_response()


@router.get(
    "/export",
    summary="Export itinerary as PDF",
    description="Paginated PDF of the whole itinerary, with the cover image when it can be loaded.",
    response_class=Response,
    responses={200: {"content": {"application/pdf": {}}}},
)
async def export_itinerary(
    trip_id: UUID,
    db: AsyncSession = Depends(get_db),
    user: UserModel = Depends(get_current_user),
    image_loader: ImageLoader = Depends(get_image_loader),
) -> Response:
    session = await _open(db, user, trip_id)
    activities = await activity_service.list_trip_activities(db, trip_id)

    cover = await image_loader.load(session.trip.image_url) if session.trip.image_url else None
    document = ExportFormatter().build(
        Trip.model_validate(session.trip),
        [Day.model_validate(d) for d in session.days],
        [Activity.model_validate(a) for a in activities],
        cover_image=cover,
    )
    pdf = PdfRenderer().render(document)

    logger.info(f"Exported trip {trip_id} ({document.page_count} pages)")
    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={"Content-Disposition": f"attachment; filename*=UTF-8''{quote(document.filename)}"},
    )
