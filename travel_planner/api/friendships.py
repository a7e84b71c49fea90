"""
Friends API endpoints.
"""
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from travel_planner.application.friendships import friendship_service
from travel_planner.auth.dependencies import get_current_user
from travel_planner.auth.models import UserModel
from travel_planner.domain.schemas import (
    FriendListResponse,
    FriendRequestCreate,
    FriendshipResponse,
    PendingRequestsResponse,
)
from travel_planner.infrastructure.database import get_db


router = APIRouter(prefix="/friends", tags=["friends"])


@router.post(
    "/requests",
    response_model=FriendshipResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Send friend request",
    description="Ask a registered user, found by e-mail, to become friends."
)
async def send_friend_request(
    request: FriendRequestCreate,
    db: AsyncSession = Depends(get_db),
    user: UserModel = Depends(get_current_user),
) -> FriendshipResponse:
    friendship = await friendship_service.send_request(db, user, request.email)
    await db.commit()
    return friendship


@router.get(
    "",
    response_model=FriendListResponse,
    summary="List friends",
)
async def list_friends(
    db: AsyncSession = Depends(get_db),
    user: UserModel = Depends(get_current_user),
) -> FriendListResponse:
    friends = await friendship_service.list_friends(db, user.id)
    return FriendListResponse(friends=friends, total=len(friends))


@router.get(
    "/requests",
    response_model=PendingRequestsResponse,
    summary="Incoming friend requests",
    description="Pending requests addressed to the user; count drives the badge."
)
async def list_pending_requests(
    db: AsyncSession = Depends(get_db),
    user: UserModel = Depends(get_current_user),
) -> PendingRequestsResponse:
    requests = await friendship_service.list_pending(db, user.id)
    return PendingRequestsResponse(requests=requests, count=len(requests))


@router.get(
    "/requests/sent",
    response_model=PendingRequestsResponse,
    summary="Outgoing friend requests",
)
async def list_sent_requests(
    db: AsyncSession = Depends(get_db),
    user: UserModel = Depends(get_current_user),
) -> PendingRequestsResponse:
    requests = await friendship_service.list_sent(db, user.id)
    return PendingRequestsResponse(requests=requests, count=len(requests))


@router.post(
    "/requests/{friendship_id}/accept",
    response_model=FriendshipResponse,
    summary="Accept friend request",
)
async def accept_friend_request(
    friendship_id: UUID,
    db: AsyncSession = Depends(get_db),
    user: UserModel = Depends(get_current_user),
) -> FriendshipResponse:
    friendship = await friendship_service.accept(db, friendship_id, user.id)
    await db.commit()
    return friendship


@router.delete(
    "/{friendship_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Reject, cancel or unfriend",
)
async def remove_friendship(
    friendship_id: UUID,
    db: AsyncSession = Depends(get_db),
    user: UserModel = Depends(get_current_user),
) -> None:
    await friendship_service.remove(db, friendship_id, user.id)
    await db.commit()
