"""
Delete confirmation API endpoints.

Deleting a trip, a collection or an activity is always two calls:
request (nothing happens, a ticket is issued) and confirm (the ticket is
redeemed and the target deleted).
"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from travel_planner.application.deletion import deletion_service
from travel_planner.auth.dependencies import get_current_user
from travel_planner.auth.models import UserModel
from travel_planner.domain.schemas import (
    DeletionConfirmRequest,
    DeletionRequest,
    DeletionResultResponse,
    DeletionTicketResponse,
)
from travel_planner.infrastructure.database import get_db


router = APIRouter(prefix="/deletions", tags=["deletions"])


@router.post(
    "",
    response_model=DeletionTicketResponse,
    summary="Request deletion",
    description="Check permissions and issue a short-lived confirmation ticket."
)
async def request_deletion(
    request: DeletionRequest,
    db: AsyncSession = Depends(get_db),
    user: UserModel = Depends(get_current_user),
) -> DeletionTicketResponse:
    ticket = await deletion_service.request_deletion(db, request.target, user.id)
    return DeletionTicketResponse(
        token=ticket.token,
        target=ticket.target,
        message=ticket.message,
        expires_in=ticket.expires_in,
    )


@router.post(
    "/confirm",
    response_model=DeletionResultResponse,
    summary="Confirm deletion",
    description="Redeem a confirmation ticket. There is no undo."
)
async def confirm_deletion(
    request: DeletionConfirmRequest,
    db: AsyncSession = Depends(get_db),
    user: UserModel = Depends(get_current_user),
) -> DeletionResultResponse:
    target = await deletion_service.confirm_deletion(db, request.token, user.id)
    await db.commit()
    return DeletionResultResponse(target=target)
