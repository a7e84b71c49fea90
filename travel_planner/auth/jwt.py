"""
JWT token utilities: access/refresh tokens and delete-confirmation tokens.
"""
import hashlib
from datetime import datetime, timedelta
from typing import Optional, Dict, Any
from uuid import UUID
import jwt

from travel_planner.auth.config import auth_settings


class TokenError(Exception):
    """Base exception for token-related errors."""
    pass


class TokenExpiredError(TokenError):
    """Token has expired."""
    pass


class TokenInvalidError(TokenError):
    """Token is invalid or malformed."""
    pass


def _encode(payload: Dict[str, Any]) -> str:
    return jwt.encode(
        payload,
        auth_settings.jwt_secret_key,
        algorithm=auth_settings.jwt_algorithm
    )


def create_access_token(
    user_id: UUID,
    additional_claims: Optional[Dict[str, Any]] = None
) -> str:
    """
    Create a short-lived access token for API authentication.

    Args:
        user_id: The user's UUID
        additional_claims: Optional additional claims to include in token

    Returns:
        Encoded JWT access token string
    """
    now = datetime.utcnow()
    expires = now + timedelta(minutes=auth_settings.access_token_expire_minutes)

    payload = {
        "sub": str(user_id),
        "type": "access",
        "iat": now,
        "exp": expires,
    }

    if additional_claims:
        payload.update(additional_claims)

    return _encode(payload)


def create_refresh_token(user_id: UUID, session_id: UUID) -> str:
    """
    Create a long-lived refresh token for obtaining new access tokens.

    The session ID is embedded so the session can be revoked server-side.
    """
    now = datetime.utcnow()
    expires = now + timedelta(days=auth_settings.refresh_token_expire_days)

    payload = {
        "sub": str(user_id),
        "sid": str(session_id),
        "type": "refresh",
        "iat": now,
        "exp": expires,
    }
    return _encode(payload)


def create_deletion_token(user_id: UUID, kind: str, target_id: UUID) -> str:
    """
    Create a short-lived token confirming that a user asked to delete
    one specific trip, collection or activity.
    """
    now = datetime.utcnow()
    expires = now + timedelta(minutes=auth_settings.deletion_token_expire_minutes)

    payload = {
        "sub": str(user_id),
        "type": "delete",
        "kind": kind,
        "tid": str(target_id),
        "iat": now,
        "exp": expires,
    }
    return _encode(payload)


def verify_token(token: str, expected_type: str = "access") -> Dict[str, Any]:
    """
    Verify and decode a JWT token.

    Args:
        token: The JWT token string
        expected_type: Expected token type ("access", "refresh" or "delete")

    Returns:
        Decoded token payload

    Raises:
        TokenExpiredError: If token has expired
        TokenInvalidError: If token is invalid or wrong type
    """
    try:
        payload = jwt.decode(
            token,
            auth_settings.jwt_secret_key,
            algorithms=[auth_settings.jwt_algorithm]
        )
    except jwt.ExpiredSignatureError:
        raise TokenExpiredError("Token has expired")
    except jwt.InvalidTokenError as e:
        raise TokenInvalidError(f"Invalid token: {str(e)}")

    if payload.get("type") != expected_type:
        raise TokenInvalidError(f"Expected {expected_type} token, got {payload.get('type')}")

    return payload


def hash_token(token: str) -> str:
    """Hash a token for storage; raw refresh tokens are never persisted."""
    return hashlib.sha256(token.encode()).hexdigest()


def get_token_expiry_seconds() -> int:
    """Get access token expiration time in seconds."""
    return auth_settings.access_token_expire_minutes * 60


def get_deletion_expiry_seconds() -> int:
    return auth_settings.deletion_token_expire_minutes * 60
