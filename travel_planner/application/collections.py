"""
Collections: optional folders grouping a user's trips.

Membership lives on the trip (trips.collection_id). Deleting a collection
detaches its trips, which become standalone again; trips are never deleted
with their collection.
"""
import logging
from dataclasses import dataclass, field
from typing import Optional
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from travel_planner.application.access import require_collection_owner
from travel_planner.application.trip_service import list_collection_trips, trip_response
from travel_planner.domain.errors import ValidationError
from travel_planner.domain.models import TripCollection
from travel_planner.domain.schemas import (
    CollectionCreateRequest,
    CollectionDetailResponse,
    CollectionResponse,
    CollectionUpdateRequest,
)
from travel_planner.infrastructure.models import CollectionModel, TripModel

logger = logging.getLogger(__name__)


@dataclass
class CollectionView:
    collection: CollectionModel
    trip_count: int = 0
    trips: list[TripModel] = field(default_factory=list)

    def to_response(self) -> CollectionResponse:
        collection = TripCollection.model_validate(self.collection)
        return CollectionResponse(**collection.model_dump(), trip_count=self.trip_count)

    def to_detail(self) -> CollectionDetailResponse:
        return CollectionDetailResponse(
            **self.to_response().model_dump(),
            trips=[trip_response(t) for t in self.trips],
        )


def _clean_title(title: Optional[str]) -> str:
    text = (title or "").strip()
    if not text:
        raise ValidationError("Title is required.", field="title")
    return text


class CollectionService:
    """Service for collection operations."""

    async def create_collection(
        self,
        db: AsyncSession,
        owner_id: UUID,
        request: CollectionCreateRequest,
    ) -> CollectionView:
        collection = CollectionModel(
            owner_id=owner_id,
            title=_clean_title(request.title),
            description=(request.description or "").strip() or None,
        )
        db.add(collection)
        await db.flush()

        logger.info(f"Collection {collection.id} created")
        return CollectionView(collection=collection)

    async def list_collections(self, db: AsyncSession, owner_id: UUID) -> list[CollectionView]:
        """Own collections, newest first, with the number of trips in each."""
        counts = (
            select(TripModel.collection_id, func.count(TripModel.id).label("trip_count"))
            .where(TripModel.collection_id.is_not(None))
            .group_by(TripModel.collection_id)
            .subquery()
        )
        result = await db.execute(
            select(CollectionModel, func.coalesce(counts.c.trip_count, 0))
            .outerjoin(counts, counts.c.collection_id == CollectionModel.id)
            .where(CollectionModel.owner_id == owner_id)
            .order_by(CollectionModel.created_at.desc())
        )
        return [CollectionView(collection=c, trip_count=n) for c, n in result.all()]

    async def get_collection(self, db: AsyncSession, collection_id: UUID, owner_id: UUID) -> CollectionView:
        collection = await require_collection_owner(db, collection_id, owner_id)
        trips = await list_collection_trips(db, collection.id)
        return CollectionView(collection=collection, trip_count=len(trips), trips=trips)

    async def update_collection(
        self,
        db: AsyncSession,
        collection_id: UUID,
        owner_id: UUID,
        request: CollectionUpdateRequest,
    ) -> CollectionView:
        collection = await require_collection_owner(db, collection_id, owner_id)
        updates = request.model_dump(exclude_unset=True)

        if "title" in updates:
            collection.title = _clean_title(updates["title"])
        if "description" in updates:
            collection.description = (updates["description"] or "").strip() or None
        await db.flush()

        return await self.get_collection(db, collection.id, owner_id)

    async def delete_collection(self, db: AsyncSession, collection_id: UUID, owner_id: UUID) -> int:
        """
        Delete a collection; its trips become standalone.

        Returns:
            Number of trips detached
        """
        collection = await require_collection_owner(db, collection_id, owner_id)

        result = await db.execute(
            update(TripModel)
            .where(TripModel.collection_id == collection.id)
            .values(collection_id=None)
        )
        await db.delete(collection)
        await db.flush()

        logger.info(f"Collection {collection_id} deleted, {result.rowcount} trips detached")
        return result.rowcount


# Global service instance
collection_service = CollectionService()
