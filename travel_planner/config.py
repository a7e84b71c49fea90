"""
Configuration management for the Trip Planner backend.
Uses Pydantic Settings to load configuration from environment variables.
"""
from typing import Optional
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Database
    database_url: str = Field(
        default="postgresql+asyncpg://tripplanner:tripplanner@db:5432/tripplanner",
        description="Async SQLAlchemy connection URL (asyncpg or aiosqlite driver)"
    )

    # LLM Provider Selection
    llm_provider: str = Field(
        default="ionet",
        description="LLM provider to use: 'ionet' or 'anthropic'"
    )

    # IO Intelligence (io.net) - OpenAI-compatible API
    ionet_api_key: Optional[str] = Field(
        default=None,
        description="IO Intelligence API key"
    )
    ionet_base_url: str = Field(
        default="https://api.intelligence.io.solutions/api/v1/",
        description="Base URL for IO Intelligence API"
    )

    # Anthropic Claude (alternative provider)
    anthropic_api_key: Optional[str] = Field(
        default=None,
        description="Anthropic API key for Claude"
    )
    anthropic_base_url: str = Field(
        default="https://api.anthropic.com",
        description="Base URL for Anthropic API"
    )
    anthropic_model: str = Field(
        default="claude-3-5-haiku-20241022",
        description="Claude model used when llm_provider is 'anthropic'"
    )

    # Activity suggestions
    suggestion_model: str = Field(
        default="meta-llama/Llama-3.3-70B-Instruct",
        description="Model used for activity suggestions. Use full model path for io.net."
    )
    suggestion_count: int = Field(
        default=5,
        description="Number of activity suggestions requested per call"
    )

    # Unsplash image search (trip cover images)
    unsplash_access_key: Optional[str] = Field(
        default=None,
        description="Unsplash API access key; cover images fall back to the placeholder when unset"
    )
    unsplash_base_url: str = Field(
        default="https://api.unsplash.com/search/photos",
        description="Unsplash photo search endpoint"
    )
    default_cover_image_url: str = Field(
        default="https://images.unsplash.com/photo-1469854523086-cc02fe5d8800?q=80&w=2021&auto=format&fit=crop",
        description="Placeholder cover image used when search is unavailable or empty"
    )

    # City autocomplete (Open-Meteo geocoding)
    geocoding_base_url: str = Field(
        default="https://geocoding-api.open-meteo.com/v1/search",
        description="Open-Meteo geocoding search endpoint"
    )
    geocoding_language: str = Field(
        default="en",
        description="Language for city names in autocomplete results"
    )
    geocoding_max_results: int = Field(
        default=5,
        description="Maximum number of autocomplete candidates"
    )
    geocoding_min_query_length: int = Field(
        default=2,
        description="Queries shorter than this return no candidates"
    )

    http_timeout_seconds: int = Field(
        default=10,
        description="HTTP timeout for external API calls"
    )

    # Trip rules
    max_trip_span_days: int = Field(
        default=30,
        description="Maximum number of days between trip start and end date"
    )

    # Desktop deep links
    deep_link_scheme: str = Field(
        default="travel-planner",
        description="Custom URI scheme used for OAuth completion deep links"
    )

    # Logging
    log_level: str = Field(default="INFO", description="Root log level")
    log_file: Optional[str] = Field(
        default=None,
        description="Optional path of a rotating log file"
    )

    # Server
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=8000, description="Server port")
    debug: bool = Field(default=False, description="Debug mode")


# Global settings instance
settings = Settings()
