"""
Request/Response schemas for API endpoints.
These schemas define the contract between the desktop app and the backend.
"""
import datetime as dt
from enum import Enum
from typing import Optional
from pydantic import BaseModel, ConfigDict, EmailStr, Field
from uuid import UUID

from travel_planner.domain.models import (
    ActivityCategory,
    CollaboratorStatus,
    DeleteTarget,
    FriendshipStatus,
    TransportDetails,
    TripRole,
)


# =============================================================================
# Trips & days
# =============================================================================

class TripCreateRequest(BaseModel):
    """Request schema for creating a new trip (form submission)."""
    title: str = Field(description="Trip title", min_length=1, max_length=200)
    destination: str = Field(description="Destination city", min_length=1, max_length=200)
    start_date: dt.date = Field(description="Trip start date")
    end_date: dt.date = Field(description="Trip end date (inclusive)")
    lodging_name: Optional[str] = Field(default=None, max_length=300, description="Hotel or accommodation")
    arrival_info: Optional[str] = Field(default=None, max_length=300, description="Arrival airport / station")
    collection_id: Optional[UUID] = Field(default=None, description="Create directly inside a collection")
    position: Optional[int] = Field(default=None, ge=0)

    model_config = ConfigDict(json_schema_extra={
        "example": {
            "title": "Roman holiday",
            "destination": "Rome",
            "start_date": "2025-06-01",
            "end_date": "2025-06-03",
            "lodging_name": "Hotel Artemide",
            "arrival_info": "FCO",
        }
    })


class TripUpdateRequest(BaseModel):
    """Request schema for updating an existing trip (partial updates)."""
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    destination: Optional[str] = Field(default=None, min_length=1, max_length=200)
    start_date: Optional[dt.date] = None
    end_date: Optional[dt.date] = None
    lodging_name: Optional[str] = Field(default=None, max_length=300)
    arrival_info: Optional[str] = Field(default=None, max_length=300)
    position: Optional[int] = Field(default=None, ge=0)


class MoveTripRequest(BaseModel):
    """Put a trip into a collection, or detach it with collection_id=null."""
    collection_id: Optional[UUID] = None


class DayResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    trip_id: UUID
    date: dt.date
    day_number: int


class TripResponse(BaseModel):
    """Trip card data."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    owner_id: UUID
    title: str
    destination: str
    start_date: dt.date
    end_date: dt.date
    lodging_name: Optional[str] = None
    arrival_info: Optional[str] = None
    image_url: Optional[str] = None
    collection_id: Optional[UUID] = None
    position: Optional[int] = None
    role: TripRole = TripRole.OWNER
    created_at: Optional[dt.datetime] = None
    updated_at: Optional[dt.datetime] = None


class TripDetailResponse(TripResponse):
    """Trip with its ordered days."""
    days: list[DayResponse] = Field(default_factory=list)


class TripListResponse(BaseModel):
    trips: list[TripResponse]
    total: int


# =============================================================================
# Activities
# =============================================================================

class ActivityForm(BaseModel):
    """
    Activity create/edit form.

    Title and start time are optional here so that a half-filled form can be
    pre-populated (e.g. from an AI suggestion); they are required on save.
    """
    title: Optional[str] = Field(default=None, max_length=300)
    category: ActivityCategory = ActivityCategory.CULTURE
    start_time: Optional[dt.time] = None
    duration_minutes: Optional[int] = Field(default=60, ge=0, le=24 * 60)
    notes: Optional[str] = Field(default=None, max_length=5000)
    transport: Optional[TransportDetails] = Field(
        default=None, description="Structured transport leg; builds the title"
    )


class ActivityResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    day_id: UUID
    title: str
    category: ActivityCategory
    start_time: Optional[dt.time] = None
    duration_minutes: Optional[int] = None
    notes: Optional[str] = None


class DayActivitiesResponse(BaseModel):
    """One day of the itinerary with its activities in time order."""
    day: DayResponse
    activities: list[ActivityResponse]


class ItineraryResponse(BaseModel):
    """Full itinerary tree: trip, ordered days, activities per day."""
    trip: TripResponse
    days: list[DayActivitiesResponse]


# =============================================================================
# Collections
# =============================================================================

class CollectionCreateRequest(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, max_length=2000)


class CollectionUpdateRequest(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, max_length=2000)


class CollectionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    owner_id: UUID
    title: str
    description: Optional[str] = None
    created_at: dt.datetime
    trip_count: int = 0


class CollectionDetailResponse(CollectionResponse):
    trips: list[TripResponse] = Field(default_factory=list)


# =============================================================================
# Friends & collaborators
# =============================================================================

class UserSummary(BaseModel):
    """Public profile fields shown in friend and collaborator lists."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    email: str
    display_name: Optional[str] = None
    avatar_url: Optional[str] = None


class FriendRequestCreate(BaseModel):
    email: EmailStr = Field(description="E-mail of the user to befriend")


class FriendshipDirection(str, Enum):
    SENT = "sent"
    RECEIVED = "received"


class FriendshipResponse(BaseModel):
    id: UUID
    status: FriendshipStatus
    direction: FriendshipDirection
    friend: UserSummary
    created_at: Optional[dt.datetime] = None


class FriendListResponse(BaseModel):
    friends: list[FriendshipResponse]
    total: int


class PendingRequestsResponse(BaseModel):
    """Incoming friend requests; count feeds the notification badge."""
    requests: list[FriendshipResponse]
    count: int


class CollaboratorInviteRequest(BaseModel):
    user_id: UUID = Field(description="Accepted friend to share the trip with")


class CollaboratorResponse(BaseModel):
    id: UUID
    trip_id: UUID
    status: CollaboratorStatus
    user: UserSummary


class CollaboratorListResponse(BaseModel):
    collaborators: list[CollaboratorResponse]
    invitable_friends: list[UserSummary] = Field(default_factory=list)


class InvitationResponse(BaseModel):
    """Pending share invitation addressed to the current user."""
    id: UUID
    status: CollaboratorStatus
    trip: TripResponse
    invited_by: UserSummary


class RemovalResponse(BaseModel):
    """
    Result of removing a collaborator row.

    close_view is true when users removed themselves ("leave"): the client
    should go back to the dashboard. For a kick the trip view stays open.
    """
    outcome: str
    trip_id: UUID
    user_id: UUID
    close_view: bool


# =============================================================================
# Delete confirmation
# =============================================================================

class DeletionRequest(BaseModel):
    target: DeleteTarget


class DeletionTicketResponse(BaseModel):
    """Issued by the first step; the client shows `message` and confirms with `token`."""
    token: str
    target: DeleteTarget
    message: str
    expires_in: int


class DeletionConfirmRequest(BaseModel):
    token: str = Field(min_length=1)


class DeletionResultResponse(BaseModel):
    target: DeleteTarget
    deleted: bool = True


# =============================================================================
# AI suggestions
# =============================================================================

class SuggestionRequest(BaseModel):
    day_id: Optional[UUID] = Field(default=None, description="Day the suggestions are for")
    already_suggested: list[str] = Field(
        default_factory=list, description="Titles already shown, to avoid repeats"
    )


class ActivitySuggestion(BaseModel):
    title: str
    description: Optional[str] = None
    duration_minutes: int = Field(default=60, ge=0, le=24 * 60)
    cost_estimate: Optional[str] = None
    category: ActivityCategory = ActivityCategory.CULTURE


class SuggestionsResponse(BaseModel):
    mood: str
    suggestions: list[ActivitySuggestion]


class AcceptSuggestionRequest(BaseModel):
    suggestion: ActivitySuggestion
    start_time: Optional[dt.time] = None


# =============================================================================
# Places
# =============================================================================

class CityResponse(BaseModel):
    name: str
    country: Optional[str] = None
    admin1: Optional[str] = None
    latitude: float
    longitude: float

    @property
    def label(self) -> str:
        return ", ".join(p for p in (self.name, self.admin1, self.country) if p)


class CitySearchResponse(BaseModel):
    results: list[CityResponse]
