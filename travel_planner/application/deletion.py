"""
Two-step deletion of trips, collections and activities.

request_deletion() checks that the target exists and that the actor may
delete it, then issues a short-lived signed ticket naming exactly that
target. confirm_deletion() redeems the ticket and deletes. Nothing is
deleted without a confirmed ticket and there is no undo.
"""
import logging
from dataclasses import dataclass
from typing import Optional
from uuid import UUID

from pydantic import TypeAdapter
from sqlalchemy.ext.asyncio import AsyncSession

from travel_planner.application.access import (
    require_activity_access,
    require_collection_owner,
    require_trip_owner,
)
from travel_planner.application.activities import activity_service
from travel_planner.application.collections import collection_service
from travel_planner.application.trip_service import trip_service
from travel_planner.auth.jwt import (
    TokenExpiredError,
    TokenInvalidError,
    create_deletion_token,
    get_deletion_expiry_seconds,
    verify_token,
)
from travel_planner.domain.errors import ConfirmationError
from travel_planner.domain.models import (
    ActivityTarget,
    CollectionTarget,
    DeleteTarget,
    TripTarget,
)

logger = logging.getLogger(__name__)

_target_adapter = TypeAdapter(DeleteTarget)


@dataclass(frozen=True)
class DeletionTicket:
    token: str
    target: DeleteTarget
    message: str
    expires_in: int


class DeletionService:
    """Confirmation flow shared by every destructive action."""

    async def _describe(self, db: AsyncSession, target: DeleteTarget, actor_id: UUID) -> str:
        """Permission check plus the confirmation text for the target."""
        if isinstance(target, TripTarget):
            trip = await require_trip_owner(db, target.id, actor_id)
            return f'Delete trip "{trip.title}"? All its days and activities will be removed.'
        if isinstance(target, CollectionTarget):
            collection = await require_collection_owner(db, target.id, actor_id)
            return f'Delete collection "{collection.title}"? Its trips will be kept as standalone trips.'
        activity, _, _ = await require_activity_access(db, target.id, actor_id)
        return f'Delete activity "{activity.title}"?'

    async def request_deletion(
        self,
        db: AsyncSession,
        target: DeleteTarget,
        actor_id: UUID,
    ) -> DeletionTicket:
        message = await self._describe(db, target, actor_id)
        token = create_deletion_token(actor_id, target.kind, target.id)
        return DeletionTicket(
            token=token,
            target=target,
            message=message,
            expires_in=get_deletion_expiry_seconds(),
        )

    def read_ticket(self, token: str, actor_id: UUID) -> DeleteTarget:
        """
        Raises:
            ConfirmationError: expired, tampered, or issued to someone else
        """
        try:
            payload = verify_token(token, expected_type="delete")
        except TokenExpiredError:
            raise ConfirmationError("Confirmation expired, please try again.")
        except TokenInvalidError:
            raise ConfirmationError("Invalid confirmation.")

        if payload.get("sub") != str(actor_id):
            raise ConfirmationError("Invalid confirmation.")

        return _target_adapter.validate_python({"kind": payload.get("kind"), "id": payload.get("tid")})

    async def confirm_deletion(
        self,
        db: AsyncSession,
        token: str,
        actor_id: UUID,
        expected_kind: Optional[str] = None,
    ) -> DeleteTarget:
        """Redeem a ticket; permissions are checked again at delete time."""
        target = self.read_ticket(token, actor_id)
        if expected_kind is not None and target.kind != expected_kind:
            raise ConfirmationError("Invalid confirmation.")

        if isinstance(target, TripTarget):
            await trip_service.delete_trip(db, target.id, actor_id)
        elif isinstance(target, CollectionTarget):
            await collection_service.delete_collection(db, target.id, actor_id)
        elif isinstance(target, ActivityTarget):
            await activity_service.delete_activity(db, target.id, actor_id)

        logger.info(f"{target.kind.capitalize()} {target.id} deleted after confirmation")
        return target


# Global service instance
deletion_service = DeletionService()
