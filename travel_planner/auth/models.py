"""
SQLAlchemy ORM models for authentication tables.
"""
from sqlalchemy import Column, String, DateTime, ForeignKey, Index
from sqlalchemy.orm import relationship
from datetime import datetime
import uuid

from travel_planner.infrastructure.database import Base
from travel_planner.infrastructure.db_types import GUID, utcnow


class UserModel(Base):
    """
    User account model.
    A user can sign in with a password and/or linked identities (Google).
    """
    __tablename__ = "users"

    id = Column(GUID(), primary_key=True, default=uuid.uuid4)
    email = Column(String, nullable=False, unique=True, index=True)
    display_name = Column(String, nullable=True)
    avatar_url = Column(String, nullable=True)

    # Null for accounts that only sign in through a provider
    password_hash = Column(String, nullable=True)

    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    identities = relationship("AuthIdentityModel", back_populates="user", cascade="all, delete-orphan")
    sessions = relationship("SessionModel", back_populates="user", cascade="all, delete-orphan")


class AuthIdentityModel(Base):
    """
    Authentication identity - links a user to an external provider.
    """
    __tablename__ = "auth_identities"

    id = Column(GUID(), primary_key=True, default=uuid.uuid4)
    user_id = Column(GUID(), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    provider = Column(String, nullable=False)  # "google"
    provider_subject = Column(String, nullable=False)  # Provider's unique user ID
    email = Column(String, nullable=True)

    created_at = Column(DateTime, nullable=False, default=utcnow)

    # One identity per provider+subject
    __table_args__ = (
        Index("ix_auth_identities_provider_subject", "provider", "provider_subject", unique=True),
    )

    user = relationship("UserModel", back_populates="identities")


class SessionModel(Base):
    """
    User session - stores refresh token hash for token refresh/revocation.
    """
    __tablename__ = "sessions"

    id = Column(GUID(), primary_key=True, default=uuid.uuid4)
    user_id = Column(GUID(), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    # Refresh token hash (the raw token is never stored)
    refresh_token_hash = Column(String, nullable=False, unique=True)
    client_name = Column(String, nullable=True)  # "desktop", "web"

    created_at = Column(DateTime, nullable=False, default=utcnow)
    expires_at = Column(DateTime, nullable=False)
    revoked_at = Column(DateTime, nullable=True)

    user = relationship("UserModel", back_populates="sessions")

    @property
    def is_valid(self) -> bool:
        """Check if session is still valid (not expired, not revoked)."""
        return self.revoked_at is None and self.expires_at > datetime.utcnow()
