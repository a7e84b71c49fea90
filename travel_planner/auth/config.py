"""
Authentication configuration settings.
Loaded from environment variables via Pydantic Settings.
"""
from typing import Optional
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AuthSettings(BaseSettings):
    """Authentication-related settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # JWT Configuration
    jwt_secret_key: str = Field(
        default="CHANGE_ME_IN_PRODUCTION_USE_SECURE_RANDOM_STRING",
        description="Secret key for signing JWT tokens. MUST be changed in production!"
    )
    jwt_algorithm: str = Field(
        default="HS256",
        description="Algorithm for JWT signing"
    )
    access_token_expire_minutes: int = Field(
        default=60,
        description="Access token expiration time in minutes"
    )
    refresh_token_expire_days: int = Field(
        default=30,
        description="Refresh token expiration time in days"
    )

    # Passwords
    password_min_length: int = Field(
        default=8,
        description="Minimum password length for email sign-up"
    )

    # Google Sign-In
    google_client_id: Optional[str] = Field(
        default=None,
        description="Google OAuth client ID for the desktop app"
    )
    google_client_id_web: Optional[str] = Field(
        default=None,
        description="Google OAuth client ID for web (if different)"
    )

    # Destructive actions
    deletion_token_expire_minutes: int = Field(
        default=5,
        description="Lifetime of a delete confirmation token"
    )


# Global auth settings instance
auth_settings = AuthSettings()
