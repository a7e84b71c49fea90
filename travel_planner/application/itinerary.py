"""
Itinerary aggregate: Trip -> ordered Days -> Activities.

ItinerarySession is the state of one open trip: its days, the selected
day and that day's activities. Switching day or writing an activity
always re-reads the selected day from the database; nothing is updated
optimistically.
"""
import logging
from typing import Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from travel_planner.application.access import require_activity_access, require_trip_access
from travel_planner.application.activities import ActivityService, activity_service
from travel_planner.application.deletion import DeletionService, DeletionTicket, deletion_service
from travel_planner.application.trip_service import TripService, TripView, list_trip_days, trip_service
from travel_planner.domain.errors import NotFoundError
from travel_planner.domain.models import ActivityTarget, TripRole
from travel_planner.domain.schemas import (
    ActivityForm,
    ActivityResponse,
    DayActivitiesResponse,
    DayResponse,
)
from travel_planner.infrastructure.models import ActivityModel, DayModel, TripModel

logger = logging.getLogger(__name__)


class ItinerarySession:
    """
    The open itinerary of one trip for one user.

    Holds the trip, its days, the selected day and the selected day's
    activities. load() selects the first day.
    """

    def __init__(
        self,
        db: AsyncSession,
        user_id: UUID,
        trip_id: UUID,
        activities: Optional[ActivityService] = None,
        trips: Optional[TripService] = None,
        deletions: Optional[DeletionService] = None,
    ):
        self.db = db
        self.user_id = user_id
        self.trip_id = trip_id
        self._activities = activities or activity_service
        self._trips = trips or trip_service
        self._deletions = deletions or deletion_service

        self.trip: Optional[TripModel] = None
        self.role: Optional[TripRole] = None
        self.days: list[DayModel] = []
        self.selected_day: Optional[DayModel] = None
        self.activities: list[ActivityModel] = []

    async def load(self) -> "ItinerarySession":
        self.trip, self.role = await require_trip_access(self.db, self.trip_id, self.user_id)
        self.days = await list_trip_days(self.db, self.trip_id)
        if self.days:
            await self.select_day(self.days[0].id)
        return self

    def _day(self, day_id: UUID) -> DayModel:
        for day in self.days:
            if day.id == day_id:
                return day
        raise NotFoundError("Day not found")

    async def select_day(self, day_id: UUID) -> list[ActivityModel]:
        """Switch the active day and read its activities fresh."""
        self.selected_day = self._day(day_id)
        self.activities = await self._activities.list_day_activities(self.db, day_id)
        return self.activities

    async def create_activity(self, day_id: UUID, form: ActivityForm) -> ActivityModel:
        self._day(day_id)
        activity = await self._activities.create_activity(self.db, day_id, self.user_id, form)
        await self.select_day(day_id)
        return activity

    async def update_activity(self, activity_id: UUID, form: ActivityForm) -> ActivityModel:
        _, day, _ = await require_activity_access(self.db, activity_id, self.user_id)
        self._day(day.id)
        activity = await self._activities.update_activity(self.db, activity_id, self.user_id, form)
        await self.select_day(activity.day_id)
        return activity

    async def request_delete_activity(self, activity_id: UUID) -> DeletionTicket:
        """First step of deleting: nothing is removed until the ticket is confirmed."""
        _, day, _ = await require_activity_access(self.db, activity_id, self.user_id)
        self._day(day.id)
        return await self._deletions.request_deletion(
            self.db, ActivityTarget(id=activity_id), self.user_id
        )

    async def confirm_delete_activity(self, token: str) -> None:
        """Second step: redeem an activity ticket and show the day it was on."""
        target = self._deletions.read_ticket(token, self.user_id)
        day_id = None
        if isinstance(target, ActivityTarget):
            _, day, _ = await require_activity_access(self.db, target.id, self.user_id)
            day_id = self._day(day.id).id
        await self._deletions.confirm_deletion(self.db, token, self.user_id, expected_kind="activity")
        if day_id is not None:
            await self.select_day(day_id)

    async def move_trip_into_collection(self, collection_id: Optional[UUID]) -> TripView:
        """Drop the open trip into a collection, or detach it with None."""
        view = await self._trips.move_trip(self.db, self.trip_id, self.user_id, collection_id)
        self.trip = view.trip
        return TripView(trip=view.trip, role=view.role, days=self.days)

    def selected_day_response(self) -> DayActivitiesResponse:
        if self.selected_day is None:
            raise NotFoundError("Trip has no days")
        return DayActivitiesResponse(
            day=DayResponse.model_validate(self.selected_day),
            activities=[ActivityResponse.model_validate(a) for a in self.activities],
        )

    async def full_tree(self) -> list[DayActivitiesResponse]:
        """Every day with its activities, read in one bulk query."""
        all_activities = await self._activities.list_trip_activities(self.db, self.trip_id)
        grouped: dict[UUID, list[ActivityResponse]] = {d.id: [] for d in self.days}
        for activity in all_activities:
            grouped.setdefault(activity.day_id, []).append(ActivityResponse.model_validate(activity))
        return [
            DayActivitiesResponse(day=DayResponse.model_validate(d), activities=grouped[d.id])
            for d in self.days
        ]
