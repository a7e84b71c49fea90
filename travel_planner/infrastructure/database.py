"""
Async database engine and session management.
"""
from typing import AsyncIterator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import NullPool

from travel_planner.config import settings


class Base(DeclarativeBase):
    """Declarative base for all ORM models."""
    pass


def _engine_kwargs(database_url: str) -> dict:
    kwargs = {"echo": settings.debug}
    if database_url.startswith("sqlite"):
        # aiosqlite connections are bound to the loop that opened them
        kwargs["poolclass"] = NullPool
    return kwargs


engine = create_async_engine(settings.database_url, **_engine_kwargs(settings.database_url))

AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_db() -> AsyncIterator[AsyncSession]:
    """FastAPI dependency yielding a database session."""
    async with AsyncSessionLocal() as session:
        yield session


async def create_all() -> None:
    """Create all tables (development and tests; production uses Alembic)."""
    # Import models so their tables are registered on the metadata
    from travel_planner.infrastructure import models  # noqa: F401
    from travel_planner.auth import models as auth_models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def drop_all() -> None:
    """Drop all tables."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
