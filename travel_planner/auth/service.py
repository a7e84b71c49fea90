"""
Authentication service - business logic for user authentication.
"""
import logging
import uuid
from typing import Optional, Tuple
from uuid import UUID
from datetime import datetime, timedelta
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from travel_planner.auth.models import (
    UserModel,
    AuthIdentityModel,
    SessionModel,
)
from travel_planner.auth.schemas import UserResponse, SessionResponse
from travel_planner.auth.jwt import (
    create_access_token,
    create_refresh_token,
    verify_token,
    hash_token,
    get_token_expiry_seconds,
    TokenExpiredError,
    TokenInvalidError,
)
from travel_planner.auth.passwords import hash_password, verify_password, needs_rehash
from travel_planner.auth.providers import google_provider
from travel_planner.auth.deep_link import parse_auth_callback
from travel_planner.auth.config import auth_settings

logger = logging.getLogger(__name__)


class AuthenticationError(ValueError):
    """Credentials or tokens were rejected."""
    pass


class EmailAlreadyRegisteredError(ValueError):
    """Sign-up with an e-mail that already has a password account."""
    pass


class AuthService:
    """Service class for authentication operations."""

    async def signup(
        self,
        db: AsyncSession,
        email: str,
        password: str,
        display_name: Optional[str] = None,
        client_name: Optional[str] = None,
    ) -> SessionResponse:
        """
        Create an e-mail + password account and open a session.

        A user that so far only signed in with Google gets a password added
        to the existing account.

        Raises:
            AuthenticationError: password too short
            EmailAlreadyRegisteredError: account already has a password
        """
        if len(password) < auth_settings.password_min_length:
            raise AuthenticationError(
                f"Password must be at least {auth_settings.password_min_length} characters"
            )

        email = email.strip().lower()
        user = await self.find_user_by_email(db, email)

        if user and user.password_hash:
            raise EmailAlreadyRegisteredError("An account with this e-mail already exists")

        if not user:
            user = UserModel(email=email, display_name=display_name or email.split("@")[0])
            db.add(user)
        elif display_name and not user.display_name:
            user.display_name = display_name

        user.password_hash = hash_password(password)
        await db.flush()

        logger.info("User %s signed up with e-mail", user.id)
        return await self._create_session(db, user, client_name)

    async def login(
        self,
        db: AsyncSession,
        email: str,
        password: str,
        client_name: Optional[str] = None,
    ) -> SessionResponse:
        """
        Authenticate with e-mail and password.

        Raises:
            AuthenticationError: unknown e-mail or wrong password
        """
        user = await self.find_user_by_email(db, email)
        if not user or not user.password_hash or not verify_password(password, user.password_hash):
            raise AuthenticationError("Invalid e-mail or password")

        if needs_rehash(user.password_hash):
            user.password_hash = hash_password(password)

        return await self._create_session(db, user, client_name)

    async def authenticate_google(
        self,
        db: AsyncSession,
        id_token: str,
        client_name: Optional[str] = None,
    ) -> SessionResponse:
        """
        Authenticate user with Google Sign-In.

        Raises:
            TokenVerificationError: If the ID token is rejected
        """
        claims = await google_provider.verify_token(id_token)

        user, _ = await self._find_or_create_user(
            db=db,
            provider="google",
            provider_subject=claims["sub"],
            email=claims["email"],
            display_name=claims.get("name"),
            avatar_url=claims.get("picture"),
        )

        return await self._create_session(db, user, client_name)

    async def refresh_session(
        self,
        db: AsyncSession,
        refresh_token: str,
        client_name: Optional[str] = None,
    ) -> SessionResponse:
        """
        Rotate a refresh token: the old session is revoked and a new one opened.

        Raises:
            AuthenticationError: If refresh token invalid or session revoked
        """
        try:
            payload = verify_token(refresh_token, expected_type="refresh")
            user_id = UUID(payload["sub"])
            session_id = UUID(payload["sid"])
        except TokenExpiredError:
            raise AuthenticationError("Refresh token expired")
        except TokenInvalidError as e:
            raise AuthenticationError(f"Invalid refresh token: {str(e)}")
        except (KeyError, ValueError):
            raise AuthenticationError("Invalid refresh token: malformed claims")

        token_hash = hash_token(refresh_token)
        result = await db.execute(
            select(SessionModel).where(
                SessionModel.id == session_id,
                SessionModel.refresh_token_hash == token_hash,
            )
        )
        session = result.scalar_one_or_none()

        if not session or not session.is_valid:
            raise AuthenticationError("Session expired or revoked")

        result = await db.execute(
            select(UserModel).where(UserModel.id == user_id)
        )
        user = result.scalar_one_or_none()

        if not user:
            raise AuthenticationError("User not found")

        session.revoked_at = datetime.utcnow()

        return await self._create_session(db, user, client_name or session.client_name)

    async def exchange_deep_link(
        self,
        db: AsyncSession,
        url: str,
    ) -> SessionResponse:
        """
        Turn an OAuth callback deep link into a fresh session.

        The access token from the link must belong to the same user as the
        refresh token; the refresh token is then rotated.

        Raises:
            DeepLinkError: the URL could not be parsed
            AuthenticationError: tokens rejected
        """
        callback = parse_auth_callback(url)

        try:
            access_claims = verify_token(callback.access_token, expected_type="access")
        except TokenExpiredError:
            # An expired access token is expected for older links; the refresh token decides.
            access_claims = None
        except TokenInvalidError as e:
            raise AuthenticationError(f"Invalid access token: {str(e)}")

        session = await self.refresh_session(db, callback.refresh_token, client_name="desktop")

        if access_claims is not None and access_claims.get("sub") != str(session.user.id):
            raise AuthenticationError("Tokens in callback belong to different users")

        return session

    async def logout(
        self,
        db: AsyncSession,
        user_id: UUID,
        refresh_token: Optional[str] = None,
    ) -> int:
        """
        Logout user by revoking one session, or all of them when no token is given.

        Returns:
            Number of sessions revoked
        """
        now = datetime.utcnow()

        query = select(SessionModel).where(
            SessionModel.user_id == user_id,
            SessionModel.revoked_at.is_(None),
        )
        if refresh_token:
            query = query.where(SessionModel.refresh_token_hash == hash_token(refresh_token))

        result = await db.execute(query)
        sessions = result.scalars().all()
        for session in sessions:
            session.revoked_at = now

        return len(sessions)

    async def find_user_by_email(self, db: AsyncSession, email: str) -> Optional[UserModel]:
        result = await db.execute(
            select(UserModel).where(UserModel.email == email.strip().lower())
        )
        return result.scalar_one_or_none()

    async def _find_or_create_user(
        self,
        db: AsyncSession,
        provider: str,
        provider_subject: str,
        email: str,
        display_name: Optional[str] = None,
        avatar_url: Optional[str] = None,
    ) -> Tuple[UserModel, bool]:
        """
        Find existing user by identity or create new user.

        Returns:
            Tuple of (user, created) where created is True if new user
        """
        result = await db.execute(
            select(AuthIdentityModel).where(
                AuthIdentityModel.provider == provider,
                AuthIdentityModel.provider_subject == provider_subject,
            )
        )
        identity = result.scalar_one_or_none()

        if identity:
            result = await db.execute(
                select(UserModel).where(UserModel.id == identity.user_id)
            )
            user = result.scalar_one()

            # Fill in profile fields the user has not set yet
            if display_name and not user.display_name:
                user.display_name = display_name
            if avatar_url and not user.avatar_url:
                user.avatar_url = avatar_url

            await db.flush()
            return user, False

        # Link the identity to an existing account with the same e-mail
        user = await self.find_user_by_email(db, email)
        created = user is None

        if created:
            user = UserModel(
                email=email.lower(),
                display_name=display_name,
                avatar_url=avatar_url,
            )
            db.add(user)
            await db.flush()

        identity = AuthIdentityModel(
            user_id=user.id,
            provider=provider,
            provider_subject=provider_subject,
            email=email.lower(),
        )
        db.add(identity)
        await db.flush()

        if created:
            logger.info("User %s created via %s", user.id, provider)
        return user, created

    async def _create_session(
        self,
        db: AsyncSession,
        user: UserModel,
        client_name: Optional[str] = None,
    ) -> SessionResponse:
        """Create new session with access and refresh tokens."""
        access_token = create_access_token(user.id)

        # The refresh token embeds the session ID, so the ID is assigned up front
        session_id = uuid.uuid4()
        refresh_token = create_refresh_token(user.id, session_id)

        expires_at = datetime.utcnow() + timedelta(days=auth_settings.refresh_token_expire_days)
        session = SessionModel(
            id=session_id,
            user_id=user.id,
            refresh_token_hash=hash_token(refresh_token),
            client_name=client_name,
            expires_at=expires_at,
        )
        db.add(session)
        await db.flush()

        return SessionResponse(
            access_token=access_token,
            refresh_token=refresh_token,
            expires_in=get_token_expiry_seconds(),
            user=UserResponse.model_validate(user),
        )


# Global service instance
auth_service = AuthService()
