"""
Friendships.

    none -> pending (sender asks by e-mail) -> accepted (receiver accepts)
    pending | accepted -> removed (either party rejects or unfriends)

A pending request is directional; an accepted friendship is symmetric.
Only accepted friends can be invited to collaborate on a trip.
"""
import logging
from uuid import UUID

from sqlalchemy import and_, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from travel_planner.auth.models import UserModel
from travel_planner.auth.service import auth_service
from travel_planner.domain.errors import NotFoundError, PermissionDeniedError, ValidationError
from travel_planner.domain.models import Friendship, FriendshipStatus
from travel_planner.domain.schemas import FriendshipDirection, FriendshipResponse, UserSummary
from travel_planner.infrastructure.models import FriendshipModel

logger = logging.getLogger(__name__)


def between(user_a: UUID, user_b: UUID):
    """Either direction of a pair."""
    return or_(
        and_(FriendshipModel.sender_id == user_a, FriendshipModel.receiver_id == user_b),
        and_(FriendshipModel.sender_id == user_b, FriendshipModel.receiver_id == user_a),
    )


def involving(user_id: UUID):
    return or_(FriendshipModel.sender_id == user_id, FriendshipModel.receiver_id == user_id)


async def are_friends(db: AsyncSession, user_a: UUID, user_b: UUID) -> bool:
    result = await db.execute(
        select(FriendshipModel.id).where(
            between(user_a, user_b),
            FriendshipModel.status == FriendshipStatus.ACCEPTED,
        )
    )
    return result.first() is not None


async def list_friend_users(db: AsyncSession, user_id: UUID) -> list[UserModel]:
    """Users with an accepted friendship with user_id, by display name."""
    result = await db.execute(
        select(FriendshipModel).where(
            involving(user_id),
            FriendshipModel.status == FriendshipStatus.ACCEPTED,
        )
    )
    friend_ids = [Friendship.model_validate(f).other_party(user_id) for f in result.scalars().all()]
    if not friend_ids:
        return []
    users = await db.execute(
        select(UserModel).where(UserModel.id.in_(friend_ids)).order_by(UserModel.display_name, UserModel.email)
    )
    return list(users.scalars().all())


class FriendshipService:
    """Service for friend requests and friend lists."""

    async def _present(
        self,
        db: AsyncSession,
        friendships: list[FriendshipModel],
        user_id: UUID,
    ) -> list[FriendshipResponse]:
        other_ids = {Friendship.model_validate(f).other_party(user_id) for f in friendships}
        if not other_ids:
            return []
        result = await db.execute(select(UserModel).where(UserModel.id.in_(other_ids)))
        users = {u.id: u for u in result.scalars().all()}

        responses = []
        for f in friendships:
            sent = f.sender_id == user_id
            other = users.get(f.receiver_id if sent else f.sender_id)
            if other is None:
                continue
            responses.append(FriendshipResponse(
                id=f.id,
                status=f.status,
                direction=FriendshipDirection.SENT if sent else FriendshipDirection.RECEIVED,
                friend=UserSummary.model_validate(other),
                created_at=f.created_at,
            ))
        return responses

    async def _get(self, db: AsyncSession, friendship_id: UUID) -> FriendshipModel:
        result = await db.execute(select(FriendshipModel).where(FriendshipModel.id == friendship_id))
        friendship = result.scalar_one_or_none()
        if friendship is None:
            raise NotFoundError("Friend request not found")
        return friendship

    async def send_request(self, db: AsyncSession, sender: UserModel, email: str) -> FriendshipResponse:
        """
        Raises:
            ValidationError: own e-mail, or a request/friendship already exists
            NotFoundError: no user with that e-mail
        """
        email = email.strip().lower()
        if email == sender.email.lower():
            raise ValidationError("You cannot add yourself as a friend.", field="email")

        receiver = await auth_service.find_user_by_email(db, email)
        if receiver is None:
            raise NotFoundError("User not found")

        existing = await db.execute(select(FriendshipModel.id).where(between(sender.id, receiver.id)))
        if existing.first() is not None:
            raise ValidationError(
                "Request already sent or already friends.", field="email", code="FRIENDSHIP_EXISTS"
            )

        friendship = FriendshipModel(sender_id=sender.id, receiver_id=receiver.id, status=FriendshipStatus.PENDING)
        db.add(friendship)
        await db.flush()

        logger.info(f"Friend request {friendship.id} sent")
        return (await self._present(db, [friendship], sender.id))[0]

    async def list_friends(self, db: AsyncSession, user_id: UUID) -> list[FriendshipResponse]:
        """Accepted friendships in either direction."""
        result = await db.execute(
            select(FriendshipModel)
            .where(involving(user_id), FriendshipModel.status == FriendshipStatus.ACCEPTED)
            .order_by(FriendshipModel.created_at)
        )
        return await self._present(db, list(result.scalars().all()), user_id)

    async def list_pending(self, db: AsyncSession, user_id: UUID) -> list[FriendshipResponse]:
        """Incoming requests waiting for this user's answer."""
        result = await db.execute(
            select(FriendshipModel)
            .where(
                FriendshipModel.receiver_id == user_id,
                FriendshipModel.status == FriendshipStatus.PENDING,
            )
            .order_by(FriendshipModel.created_at.desc())
        )
        return await self._present(db, list(result.scalars().all()), user_id)

    async def list_sent(self, db: AsyncSession, user_id: UUID) -> list[FriendshipResponse]:
        result = await db.execute(
            select(FriendshipModel)
            .where(
                FriendshipModel.sender_id == user_id,
                FriendshipModel.status == FriendshipStatus.PENDING,
            )
            .order_by(FriendshipModel.created_at.desc())
        )
        return await self._present(db, list(result.scalars().all()), user_id)

    async def accept(self, db: AsyncSession, friendship_id: UUID, user_id: UUID) -> FriendshipResponse:
        """Only the receiver of a pending request can accept it."""
        friendship = await self._get(db, friendship_id)
        if not Friendship.model_validate(friendship).involves(user_id):
            raise NotFoundError("Friend request not found")
        if friendship.receiver_id != user_id:
            raise PermissionDeniedError("Only the receiver can accept a friend request")
        if friendship.status != FriendshipStatus.PENDING:
            raise ValidationError("Friend request is not pending.")

        friendship.status = FriendshipStatus.ACCEPTED
        await db.flush()

        logger.info(f"Friendship {friendship.id} accepted")
        return (await self._present(db, [friendship], user_id))[0]

    async def remove(self, db: AsyncSession, friendship_id: UUID, user_id: UUID) -> None:
        """Reject, cancel or unfriend; either party may do it."""
        friendship = await self._get(db, friendship_id)
        if not Friendship.model_validate(friendship).involves(user_id):
            raise NotFoundError("Friend request not found")

        await db.delete(friendship)
        await db.flush()
        logger.info(f"Friendship {friendship_id} removed by {user_id}")


# Global service instance
friendship_service = FriendshipService()
