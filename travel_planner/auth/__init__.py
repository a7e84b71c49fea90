"""
Authentication module for the Trip Planner backend.
Provides JWT-based auth with e-mail/password and Google sign-in,
plus exchange of OAuth callback deep links.
"""
from travel_planner.auth.models import (
    UserModel,
    AuthIdentityModel,
    SessionModel,
)
from travel_planner.auth.schemas import (
    UserResponse,
    SessionResponse,
    SignupRequest,
    LoginRequest,
    GoogleAuthRequest,
    RefreshRequest,
    DeepLinkRequest,
)
from travel_planner.auth.dependencies import (
    get_current_user,
)
from travel_planner.auth.jwt import create_access_token, create_refresh_token, verify_token
from travel_planner.auth.deep_link import parse_auth_callback, DeepLinkError

__all__ = [
    # Models
    "UserModel",
    "AuthIdentityModel",
    "SessionModel",
    # Schemas
    "UserResponse",
    "SessionResponse",
    "SignupRequest",
    "LoginRequest",
    "GoogleAuthRequest",
    "RefreshRequest",
    "DeepLinkRequest",
    # Dependencies
    "get_current_user",
    # JWT
    "create_access_token",
    "create_refresh_token",
    "verify_token",
    # Deep links
    "parse_auth_callback",
    "DeepLinkError",
]
