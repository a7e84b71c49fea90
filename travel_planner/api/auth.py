"""
Authentication API endpoints.
"""
import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from travel_planner.infrastructure.database import get_db
from travel_planner.auth.schemas import (
    DeepLinkRequest,
    GoogleAuthRequest,
    LoginRequest,
    LogoutRequest,
    RefreshRequest,
    SessionResponse,
    SignupRequest,
    UserResponse,
)
from travel_planner.auth.service import AuthenticationError, EmailAlreadyRegisteredError, auth_service
from travel_planner.auth.providers import ProviderError, TokenVerificationError
from travel_planner.auth.deep_link import DeepLinkError
from travel_planner.auth.dependencies import get_current_user
from travel_planner.auth.models import UserModel

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


def _error(status_code: int, code: str, message: str) -> HTTPException:
    return HTTPException(status_code=status_code, detail={"code": code, "message": message})


@router.post(
    "/signup",
    response_model=SessionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Sign up with e-mail",
    description="Create an e-mail + password account and open a session."
)
async def auth_signup(
    request: SignupRequest,
    db: AsyncSession = Depends(get_db),
) -> SessionResponse:
    try:
        session = await auth_service.signup(
            db=db,
            email=request.email,
            password=request.password,
            display_name=request.display_name,
        )
        await db.commit()
        return session

    except EmailAlreadyRegisteredError as e:
        await db.rollback()
        raise _error(status.HTTP_409_CONFLICT, "EMAIL_TAKEN", str(e))
    except AuthenticationError as e:
        await db.rollback()
        raise _error(status.HTTP_400_BAD_REQUEST, "WEAK_PASSWORD", str(e))


@router.post(
    "/login",
    response_model=SessionResponse,
    summary="Log in with e-mail",
    description="Authenticate with e-mail and password."
)
async def auth_login(
    request: LoginRequest,
    db: AsyncSession = Depends(get_db),
) -> SessionResponse:
    try:
        session = await auth_service.login(db=db, email=request.email, password=request.password)
        await db.commit()
        return session

    except AuthenticationError as e:
        await db.rollback()
        raise _error(status.HTTP_401_UNAUTHORIZED, "INVALID_CREDENTIALS", str(e))


@router.post(
    "/google",
    response_model=SessionResponse,
    summary="Sign in with Google",
    description="Authenticate using a Google Sign-In ID token."
)
async def auth_google(
    request: GoogleAuthRequest,
    db: AsyncSession = Depends(get_db),
) -> SessionResponse:
    """
    Authenticate with Google Sign-In.

    The desktop app completes the Google flow in the browser and sends the
    resulting ID token here for verification and session creation.
    """
    try:
        session = await auth_service.authenticate_google(db=db, id_token=request.id_token)
        await db.commit()
        return session

    except TokenVerificationError as e:
        await db.rollback()
        raise _error(status.HTTP_401_UNAUTHORIZED, "INVALID_ID_TOKEN", str(e))
    except ProviderError as e:
        await db.rollback()
        logger.exception("Google sign-in failed")
        raise _error(status.HTTP_503_SERVICE_UNAVAILABLE, "PROVIDER_UNAVAILABLE", str(e))


@router.post(
    "/deep-link",
    response_model=SessionResponse,
    summary="Complete OAuth via deep link",
    description="Exchange a travel-planner:// callback URL for a fresh session."
)
async def auth_deep_link(
    request: DeepLinkRequest,
    db: AsyncSession = Depends(get_db),
) -> SessionResponse:
    try:
        session = await auth_service.exchange_deep_link(db=db, url=request.url)
        await db.commit()
        return session

    except DeepLinkError as e:
        await db.rollback()
        raise _error(status.HTTP_400_BAD_REQUEST, "INVALID_CALLBACK", str(e))
    except AuthenticationError as e:
        await db.rollback()
        raise _error(status.HTTP_401_UNAUTHORIZED, "INVALID_SESSION", str(e))


@router.post(
    "/refresh",
    response_model=SessionResponse,
    summary="Refresh access token",
    description="Get a new access token using a refresh token."
)
async def auth_refresh(
    request: RefreshRequest,
    db: AsyncSession = Depends(get_db),
) -> SessionResponse:
    """
    Rotate the refresh token.

    Use this when the access token expires to get a new one without
    requiring the user to re-authenticate.
    """
    try:
        session = await auth_service.refresh_session(db=db, refresh_token=request.refresh_token)
        await db.commit()
        return session

    except AuthenticationError as e:
        await db.rollback()
        raise _error(status.HTTP_401_UNAUTHORIZED, "INVALID_SESSION", str(e))


@router.post(
    "/logout",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Logout",
    description="Revoke the current session or all sessions."
)
async def auth_logout(
    request: LogoutRequest = LogoutRequest(),
    user: UserModel = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> None:
    """
    If refresh_token is provided, only that session is revoked.
    Otherwise, all sessions for the user are revoked.
    """
    revoked = await auth_service.logout(db=db, user_id=user.id, refresh_token=request.refresh_token)
    await db.commit()
    logger.info(f"User {user.id} logged out ({revoked} sessions revoked)")


@router.get(
    "/me",
    response_model=UserResponse,
    summary="Get current user",
    description="Get information about the currently authenticated user."
)
async def auth_me(user: UserModel = Depends(get_current_user)) -> UserResponse:
    return UserResponse.model_validate(user)
