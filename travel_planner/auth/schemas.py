"""
Pydantic schemas for authentication API requests and responses.
"""
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, EmailStr
from uuid import UUID
from datetime import datetime


# =============================================================================
# User & Session Responses
# =============================================================================

class UserResponse(BaseModel):
    """User data returned to client."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    email: str
    display_name: Optional[str] = None
    avatar_url: Optional[str] = None
    created_at: datetime


class SessionResponse(BaseModel):
    """Session data returned after successful authentication."""
    access_token: str
    refresh_token: str
    token_type: str = "Bearer"
    expires_in: int  # Access token expiration in seconds
    user: UserResponse


# =============================================================================
# E-mail + password
# =============================================================================

class SignupRequest(BaseModel):
    """Create an account with e-mail and password."""
    email: EmailStr
    password: str = Field(..., min_length=1, max_length=256)
    display_name: Optional[str] = Field(None, max_length=100)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1, max_length=256)


# =============================================================================
# Google Sign-In
# =============================================================================

class GoogleAuthRequest(BaseModel):
    """Request for Google Sign-In authentication."""
    id_token: str = Field(..., description="Google ID token from Google Sign-In")


# =============================================================================
# Token Refresh / Logout / Deep link
# =============================================================================

class RefreshRequest(BaseModel):
    """Request to refresh access token."""
    refresh_token: str = Field(..., description="Refresh token from previous session")


class LogoutRequest(BaseModel):
    """Request to logout (revoke session)."""
    refresh_token: Optional[str] = Field(None, description="Refresh token to revoke (optional)")


class DeepLinkRequest(BaseModel):
    """OAuth callback URL received by the desktop app, e.g. travel-planner://auth#access_token=..."""
    url: str = Field(..., min_length=1, max_length=4096)


# =============================================================================
# Error Responses
# =============================================================================

class AuthErrorResponse(BaseModel):
    """Error response for authentication errors."""
    code: str
    message: str
    detail: Optional[str] = None
