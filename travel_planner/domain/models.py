"""
Core domain models for the Trip Planner backend.
All models use Pydantic v2 for type safety and validation.
"""
import datetime as dt
from enum import Enum
from typing import Annotated, Literal, Optional, Union
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field


# Enums for constrained values
class ActivityCategory(str, Enum):
    """Kind of itinerary activity (the draggable tool it was created from)."""
    CULTURE = "culture"
    FOOD = "food"
    TRANSPORT = "transport"
    HOTEL = "hotel"
    LEISURE = "leisure"


class FriendshipStatus(str, Enum):
    """Friendship state. Directional while pending, symmetric once accepted."""
    PENDING = "pending"
    ACCEPTED = "accepted"


class CollaboratorStatus(str, Enum):
    """Trip sharing invite state."""
    PENDING = "pending"
    ACCEPTED = "accepted"


class TripRole(str, Enum):
    """Access level of a user on a trip."""
    OWNER = "owner"
    COLLABORATOR = "collaborator"


class TransportMode(str, Enum):
    """Means of transport for transport activities."""
    PLANE = "plane"
    TRAIN = "train"
    BUS = "bus"
    METRO = "metro"
    TRAM = "tram"
    TAXI = "taxi"
    SHIP = "ship"
    OTHER = "other"


# Domain Models

class Trip(BaseModel):
    """A user's planned journey over an inclusive calendar date range."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID = Field(default_factory=uuid4, description="Unique trip ID")
    owner_id: UUID = Field(description="Owning user")
    title: str = Field(description="Trip title")
    destination: str = Field(description="Free-text or geocoded city name")
    start_date: dt.date = Field(description="First day of the trip")
    end_date: dt.date = Field(description="Last day of the trip (inclusive)")
    lodging_name: Optional[str] = Field(default=None, description="Where the travellers stay")
    arrival_info: Optional[str] = Field(default=None, description="Arrival airport / station")
    image_url: Optional[str] = Field(default=None, description="Cover image URL")
    collection_id: Optional[UUID] = Field(default=None, description="Parent collection; None means standalone")
    position: Optional[int] = Field(default=None, description="Optional ordering index")


class Day(BaseModel):
    """One calendar date within a trip."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID = Field(default_factory=uuid4)
    trip_id: UUID
    date: dt.date
    day_number: int = Field(ge=1, description="1-based position within the trip")


class Activity(BaseModel):
    """A scheduled item within a day."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID = Field(default_factory=uuid4)
    day_id: UUID
    title: str
    category: ActivityCategory
    start_time: Optional[dt.time] = None
    duration_minutes: Optional[int] = Field(default=None, ge=0)
    notes: Optional[str] = None


class TripCollection(BaseModel):
    """Optional grouping folder for trips."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID = Field(default_factory=uuid4)
    owner_id: UUID
    title: str
    description: Optional[str] = None
    created_at: dt.datetime = Field(default_factory=dt.datetime.utcnow)


class Friendship(BaseModel):
    """Mutual-consent relationship between two users."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID = Field(default_factory=uuid4)
    sender_id: UUID
    receiver_id: UUID
    status: FriendshipStatus = FriendshipStatus.PENDING

    def involves(self, user_id: UUID) -> bool:
        return user_id in (self.sender_id, self.receiver_id)

    def other_party(self, user_id: UUID) -> UUID:
        return self.receiver_id if self.sender_id == user_id else self.sender_id


class TripCollaborator(BaseModel):
    """Grants a non-owner user access to a trip's itinerary."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID = Field(default_factory=uuid4)
    trip_id: UUID
    user_id: UUID
    status: CollaboratorStatus = CollaboratorStatus.PENDING


class TransportDetails(BaseModel):
    """Structured details of a transport leg, rendered into the activity title."""
    mode: TransportMode = TransportMode.PLANE
    origin: Optional[str] = Field(default=None, max_length=100)
    destination: Optional[str] = Field(default=None, max_length=100)
    number: Optional[str] = Field(default=None, max_length=20, description="Flight / train number")

    def to_title(self) -> str:
        """e.g. 'Plane AZ610: Rome -> New York'"""
        title = self.mode.value.capitalize()
        if self.number:
            title += f" {self.number.strip()}"
        route = " -> ".join(p.strip() for p in (self.origin, self.destination) if p and p.strip())
        if route:
            title += f": {route}"
        return title


# Deletion targets (one tagged variant instead of parallel nullable fields)

class TripTarget(BaseModel):
    kind: Literal["trip"] = "trip"
    id: UUID


class CollectionTarget(BaseModel):
    kind: Literal["collection"] = "collection"
    id: UUID


class ActivityTarget(BaseModel):
    kind: Literal["activity"] = "activity"
    id: UUID


DeleteTarget = Annotated[
    Union[TripTarget, CollectionTarget, ActivityTarget],
    Field(discriminator="kind"),
]
