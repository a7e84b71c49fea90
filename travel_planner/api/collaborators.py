"""
Trip sharing API endpoints.
"""
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from travel_planner.application.access import require_trip_access
from travel_planner.application.collaboration import collaboration_service
from travel_planner.auth.dependencies import get_current_user
from travel_planner.auth.models import UserModel
from travel_planner.domain.models import TripRole
from travel_planner.domain.schemas import (
    CollaboratorInviteRequest,
    CollaboratorListResponse,
    CollaboratorResponse,
    InvitationResponse,
    RemovalResponse,
)
from travel_planner.infrastructure.database import get_db


router = APIRouter(tags=["collaborators"])


@router.post(
    "/trips/{trip_id}/collaborators",
    response_model=CollaboratorResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Invite a friend",
    description="Owner only; the invitee must be an accepted friend."
)
async def invite_collaborator(
    trip_id: UUID,
    request: CollaboratorInviteRequest,
    db: AsyncSession = Depends(get_db),
    user: UserModel = Depends(get_current_user),
) -> CollaboratorResponse:
    collaborator = await collaboration_service.invite(db, trip_id, user.id, request.user_id)
    await db.commit()
    return collaborator


@router.get(
    "/trips/{trip_id}/collaborators",
    response_model=CollaboratorListResponse,
    summary="List collaborators",
    description="Everyone invited to the trip; the owner also gets the friends still invitable."
)
async def list_collaborators(
    trip_id: UUID,
    db: AsyncSession = Depends(get_db),
    user: UserModel = Depends(get_current_user),
) -> CollaboratorListResponse:
    collaborators = await collaboration_service.list_collaborators(db, trip_id, user.id)
    _, role = await require_trip_access(db, trip_id, user.id)
    invitable = []
    if role == TripRole.OWNER:
        invitable = await collaboration_service.invitable_friends(db, trip_id, user.id)
    return CollaboratorListResponse(collaborators=collaborators, invitable_friends=invitable)


@router.get(
    "/invitations",
    response_model=list[InvitationResponse],
    summary="My pending invitations",
)
async def list_invitations(
    db: AsyncSession = Depends(get_db),
    user: UserModel = Depends(get_current_user),
) -> list[InvitationResponse]:
    return await collaboration_service.my_invitations(db, user.id)


@router.post(
    "/collaborators/{collaborator_id}/accept",
    response_model=CollaboratorResponse,
    summary="Accept invitation",
)
async def accept_invitation(
    collaborator_id: UUID,
    db: AsyncSession = Depends(get_db),
    user: UserModel = Depends(get_current_user),
) -> CollaboratorResponse:
    collaborator = await collaboration_service.accept(db, collaborator_id, user.id)
    await db.commit()
    return collaborator


@router.delete(
    "/collaborators/{collaborator_id}",
    response_model=RemovalResponse,
    summary="Leave or remove",
    description="The invitee leaves (or declines), or the owner removes a collaborator."
)
async def remove_collaborator(
    collaborator_id: UUID,
    db: AsyncSession = Depends(get_db),
    user: UserModel = Depends(get_current_user),
) -> RemovalResponse:
    removal = await collaboration_service.remove(db, collaborator_id, user.id)
    await db.commit()
    return removal.to_response()
