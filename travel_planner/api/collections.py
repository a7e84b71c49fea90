"""
Collections API endpoints.

Deleting a collection goes through /api/deletions; its trips are kept.
"""
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from travel_planner.application.collections import collection_service
from travel_planner.auth.dependencies import get_current_user
from travel_planner.auth.models import UserModel
from travel_planner.domain.schemas import (
    CollectionCreateRequest,
    CollectionDetailResponse,
    CollectionResponse,
    CollectionUpdateRequest,
)
from travel_planner.infrastructure.database import get_db


router = APIRouter(prefix="/collections", tags=["collections"])


@router.post(
    "",
    response_model=CollectionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create collection",
)
async def create_collection(
    request: CollectionCreateRequest,
    db: AsyncSession = Depends(get_db),
    user: UserModel = Depends(get_current_user),
) -> CollectionResponse:
    view = await collection_service.create_collection(db, user.id, request)
    await db.commit()
    return view.to_response()


@router.get(
    "",
    response_model=list[CollectionResponse],
    summary="List collections",
    description="Own collections, newest first, with their trip counts."
)
async def list_collections(
    db: AsyncSession = Depends(get_db),
    user: UserModel = Depends(get_current_user),
) -> list[CollectionResponse]:
    return [v.to_response() for v in await collection_service.list_collections(db, user.id)]


@router.get(
    "/{collection_id}",
    response_model=CollectionDetailResponse,
    summary="Get collection",
    description="A collection with its trips in start-date order."
)
async def get_collection(
    collection_id: UUID,
    db: AsyncSession = Depends(get_db),
    user: UserModel = Depends(get_current_user),
) -> CollectionDetailResponse:
    view = await collection_service.get_collection(db, collection_id, user.id)
    return view.to_detail()


@router.patch(
    "/{collection_id}",
    response_model=CollectionDetailResponse,
    summary="Rename collection",
)
async def update_collection(
    collection_id: UUID,
    request: CollectionUpdateRequest,
    db: AsyncSession = Depends(get_db),
    user: UserModel = Depends(get_current_user),
) -> CollectionDetailResponse:
    view = await collection_service.update_collection(db, collection_id, user.id, request)
    await db.commit()
    return view.to_detail()
