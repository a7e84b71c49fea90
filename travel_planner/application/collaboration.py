"""
Trip sharing.

    none -> pending (owner invites an accepted friend) -> accepted (invitee accepts)
    pending | accepted -> removed (invitee leaves, or owner kicks)

Leaving and kicking are the same row deletion. The outcome tells the
client what to do next: after LEAVE the trip is no longer visible and the
view closes, after KICK the owner stays on the trip and reloads the list.
"""
import logging
from dataclasses import dataclass
from enum import Enum
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from travel_planner.application.access import get_trip_model, require_trip_access, require_trip_owner
from travel_planner.application.friendships import are_friends, list_friend_users
from travel_planner.application.trip_service import trip_response
from travel_planner.auth.models import UserModel
from travel_planner.domain.errors import NotFoundError, PermissionDeniedError, ValidationError
from travel_planner.domain.models import CollaboratorStatus, TripCollaborator, TripRole
from travel_planner.domain.schemas import (
    CollaboratorResponse,
    InvitationResponse,
    RemovalResponse,
    UserSummary,
)
from travel_planner.infrastructure.models import TripCollaboratorModel, TripModel

logger = logging.getLogger(__name__)


class RemovalOutcome(str, Enum):
    LEAVE = "leave"  # actor removed themselves
    KICK = "kick"  # trip owner removed someone else


@dataclass(frozen=True)
class Removal:
    outcome: RemovalOutcome
    trip_id: UUID
    user_id: UUID

    @property
    def close_view(self) -> bool:
        return self.outcome == RemovalOutcome.LEAVE

    def to_response(self) -> RemovalResponse:
        return RemovalResponse(
            outcome=self.outcome.value,
            trip_id=self.trip_id,
            user_id=self.user_id,
            close_view=self.close_view,
        )


def removal_outcome(actor_id: UUID, subject_id: UUID, owner_id: UUID) -> RemovalOutcome:
    """
    Raises:
        PermissionDeniedError: actor is neither the subject nor the trip owner
    """
    if actor_id == subject_id:
        return RemovalOutcome.LEAVE
    if actor_id == owner_id:
        return RemovalOutcome.KICK
    raise PermissionDeniedError("Only the trip owner can remove other collaborators")


class CollaborationService:
    """Service for trip collaborator invitations."""

    async def _get(self, db: AsyncSession, collaborator_id: UUID) -> TripCollaboratorModel:
        result = await db.execute(
            select(TripCollaboratorModel).where(TripCollaboratorModel.id == collaborator_id)
        )
        row = result.scalar_one_or_none()
        if row is None:
            raise NotFoundError("Collaborator not found")
        return row

    async def invite(
        self,
        db: AsyncSession,
        trip_id: UUID,
        owner_id: UUID,
        user_id: UUID,
    ) -> CollaboratorResponse:
        """
        Raises:
            PermissionDeniedError: actor is not the trip owner
            ValidationError: invitee is the owner, not a friend, or already invited
        """
        trip = await require_trip_owner(db, trip_id, owner_id)
        if user_id == trip.owner_id:
            raise ValidationError("The owner is already part of the trip.", field="user_id")
        if not await are_friends(db, owner_id, user_id):
            raise ValidationError("You can only share trips with friends.", field="user_id")

        existing = await db.execute(
            select(TripCollaboratorModel.id).where(
                TripCollaboratorModel.trip_id == trip.id,
                TripCollaboratorModel.user_id == user_id,
            )
        )
        if existing.first() is not None:
            raise ValidationError(
                "This friend is already invited.", field="user_id", code="COLLABORATOR_EXISTS"
            )

        row = TripCollaboratorModel(trip_id=trip.id, user_id=user_id, status=CollaboratorStatus.PENDING)
        db.add(row)
        await db.flush()

        logger.info(f"User {user_id} invited to trip {trip.id}")
        user = await db.get(UserModel, user_id)
        return CollaboratorResponse(
            id=row.id, trip_id=trip.id, status=row.status, user=UserSummary.model_validate(user)
        )

    async def list_collaborators(
        self,
        db: AsyncSession,
        trip_id: UUID,
        user_id: UUID,
    ) -> list[CollaboratorResponse]:
        """Everyone invited to the trip, pending and accepted, with their profile."""
        trip, _ = await require_trip_access(db, trip_id, user_id)
        result = await db.execute(
            select(TripCollaboratorModel, UserModel)
            .join(UserModel, UserModel.id == TripCollaboratorModel.user_id)
            .where(TripCollaboratorModel.trip_id == trip.id)
            .order_by(TripCollaboratorModel.created_at)
        )
        return [
            CollaboratorResponse(
                id=row.id, trip_id=row.trip_id, status=row.status, user=UserSummary.model_validate(user)
            )
            for row, user in result.all()
        ]

    async def invitable_friends(self, db: AsyncSession, trip_id: UUID, owner_id: UUID) -> list[UserSummary]:
        """Accepted friends of the owner who are not on the trip yet."""
        trip = await require_trip_owner(db, trip_id, owner_id)
        invited = await db.execute(
            select(TripCollaboratorModel.user_id).where(TripCollaboratorModel.trip_id == trip.id)
        )
        taken = set(invited.scalars().all())
        return [
            UserSummary.model_validate(u)
            for u in await list_friend_users(db, owner_id)
            if u.id not in taken
        ]

    async def my_invitations(self, db: AsyncSession, user_id: UUID) -> list[InvitationResponse]:
        """Pending invitations addressed to the user."""
        result = await db.execute(
            select(TripCollaboratorModel, TripModel, UserModel)
            .join(TripModel, TripModel.id == TripCollaboratorModel.trip_id)
            .join(UserModel, UserModel.id == TripModel.owner_id)
            .where(
                TripCollaboratorModel.user_id == user_id,
                TripCollaboratorModel.status == CollaboratorStatus.PENDING,
            )
            .order_by(TripCollaboratorModel.created_at.desc())
        )
        return [
            InvitationResponse(
                id=row.id,
                status=row.status,
                trip=trip_response(trip, TripRole.COLLABORATOR),
                invited_by=UserSummary.model_validate(owner),
            )
            for row, trip, owner in result.all()
        ]

    async def accept(self, db: AsyncSession, collaborator_id: UUID, user_id: UUID) -> CollaboratorResponse:
        """Only the invitee can accept."""
        row = await self._get(db, collaborator_id)
        if row.user_id != user_id:
            raise NotFoundError("Collaborator not found")
        if row.status != CollaboratorStatus.PENDING:
            raise ValidationError("Invitation is not pending.")

        row.status = CollaboratorStatus.ACCEPTED
        await db.flush()

        logger.info(f"User {user_id} joined trip {row.trip_id}")
        user = await db.get(UserModel, user_id)
        return CollaboratorResponse(
            id=row.id, trip_id=row.trip_id, status=row.status, user=UserSummary.model_validate(user)
        )

    async def remove(self, db: AsyncSession, collaborator_id: UUID, actor_id: UUID) -> Removal:
        """
        Delete a collaborator row: the invitee leaving or declining, or the
        owner kicking.
        """
        row = await self._get(db, collaborator_id)
        collaborator = TripCollaborator.model_validate(row)
        trip = await get_trip_model(db, collaborator.trip_id)

        outcome = removal_outcome(actor_id, collaborator.user_id, trip.owner_id)

        removal = Removal(outcome=outcome, trip_id=collaborator.trip_id, user_id=collaborator.user_id)
        await db.delete(row)
        await db.flush()

        logger.info(f"Collaborator {collaborator.user_id} removed from trip {collaborator.trip_id} ({outcome.value})")
        return removal


# Global service instance
collaboration_service = CollaborationService()
