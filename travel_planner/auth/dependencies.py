"""
FastAPI dependencies for authentication.
"""
from typing import Optional
from uuid import UUID
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from travel_planner.infrastructure.database import get_db
from travel_planner.auth.models import UserModel
from travel_planner.auth.jwt import verify_token, TokenExpiredError, TokenInvalidError


# Required bearer token scheme
required_bearer = HTTPBearer(auto_error=True)


def _unauthorized(message: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail={"code": "UNAUTHORIZED", "message": message},
        headers={"WWW-Authenticate": "Bearer"},
    )


async def _load_user(db: AsyncSession, token: str) -> Optional[UserModel]:
    payload = verify_token(token, expected_type="access")
    user_id = UUID(payload["sub"])

    result = await db.execute(
        select(UserModel).where(UserModel.id == user_id)
    )
    return result.scalar_one_or_none()


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(required_bearer),
    db: AsyncSession = Depends(get_db),
) -> UserModel:
    """
    Get the current authenticated user. Raises 401 if not authenticated.
    """
    try:
        user = await _load_user(db, credentials.credentials)
    except TokenExpiredError:
        raise _unauthorized("Token has expired")
    except TokenInvalidError as e:
        raise _unauthorized(str(e))
    except (KeyError, ValueError):
        raise _unauthorized("Malformed token subject")

    if not user:
        raise _unauthorized("User not found")

    return user
