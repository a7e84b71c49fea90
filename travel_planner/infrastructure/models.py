"""
SQLAlchemy ORM models for database tables.
These are separate from domain models to maintain clean architecture.
"""
from sqlalchemy import (
    Column,
    Date,
    DateTime,
    Enum as SQLEnum,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    Time,
    UniqueConstraint,
)
import uuid

from travel_planner.domain.models import ActivityCategory, CollaboratorStatus, FriendshipStatus
from travel_planner.infrastructure.database import Base
from travel_planner.infrastructure.db_types import GUID, utcnow


class CollectionModel(Base):
    """Grouping folder for trips. Members point at it through trips.collection_id."""
    __tablename__ = "collections"

    id = Column(GUID(), primary_key=True, default=uuid.uuid4)
    owner_id = Column(GUID(), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)

    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)


class TripModel(Base):
    """Database model for Trip."""
    __tablename__ = "trips"

    id = Column(GUID(), primary_key=True, default=uuid.uuid4)
    owner_id = Column(GUID(), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String, nullable=False)
    destination = Column(String, nullable=False)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)

    lodging_name = Column(String, nullable=True)
    arrival_info = Column(String, nullable=True)
    image_url = Column(String, nullable=True)

    # NULL means standalone; deleting a collection detaches rather than deletes
    collection_id = Column(
        GUID(), ForeignKey("collections.id", ondelete="SET NULL"), nullable=True, index=True
    )
    position = Column(Integer, nullable=True)

    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)


class DayModel(Base):
    """One calendar date of a trip."""
    __tablename__ = "days"

    __table_args__ = (
        UniqueConstraint("trip_id", "date", name="uq_days_trip_date"),
    )

    id = Column(GUID(), primary_key=True, default=uuid.uuid4)
    trip_id = Column(GUID(), ForeignKey("trips.id", ondelete="CASCADE"), nullable=False, index=True)
    date = Column(Date, nullable=False)
    day_number = Column(Integer, nullable=False)


class ActivityModel(Base):
    """Scheduled item within a day."""
    __tablename__ = "activities"

    id = Column(GUID(), primary_key=True, default=uuid.uuid4)
    day_id = Column(GUID(), ForeignKey("days.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String, nullable=False)
    category = Column(SQLEnum(ActivityCategory), nullable=False)
    start_time = Column(Time, nullable=True)
    duration_minutes = Column(Integer, nullable=True)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)


class FriendshipModel(Base):
    """Friend request / friendship between two users."""
    __tablename__ = "friendships"

    __table_args__ = (
        UniqueConstraint("sender_id", "receiver_id", name="uq_friendships_pair"),
    )

    id = Column(GUID(), primary_key=True, default=uuid.uuid4)
    sender_id = Column(GUID(), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    receiver_id = Column(GUID(), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    status = Column(SQLEnum(FriendshipStatus), nullable=False, default=FriendshipStatus.PENDING)

    created_at = Column(DateTime, nullable=False, default=utcnow)


class TripCollaboratorModel(Base):
    """Sharing of a trip with a non-owner user."""
    __tablename__ = "trip_collaborators"

    __table_args__ = (
        UniqueConstraint("trip_id", "user_id", name="uq_trip_collaborators_trip_user"),
        Index("ix_trip_collaborators_user_status", "user_id", "status"),
    )

    id = Column(GUID(), primary_key=True, default=uuid.uuid4)
    trip_id = Column(GUID(), ForeignKey("trips.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(GUID(), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    status = Column(SQLEnum(CollaboratorStatus), nullable=False, default=CollaboratorStatus.PENDING)

    created_at = Column(DateTime, nullable=False, default=utcnow)
