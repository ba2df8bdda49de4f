"""Application configuration using Pydantic BaseSettings."""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from messenger_platform.constants import FACEBOOK_API_TIMEOUT_SECONDS


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        # .env.local is read after .env, so its values win
        env_file=[".env", ".env.local"],
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Facebook Configuration
    facebook_page_access_token: str = Field(
        ..., description="Facebook Page access token"
    )
    facebook_verify_token: str = Field(..., description="Webhook verification token")
    facebook_app_id: str | None = Field(
        default=None, description="Facebook App ID (required for OAuth token exchange)"
    )
    facebook_app_secret: str | None = Field(
        default=None,
        description="Facebook App secret (OAuth and webhook signature verification)",
    )
    facebook_page_id: str | None = Field(
        default=None,
        description="Only dispatch webhook entries for this Page ID (optional)",
    )
    facebook_api_timeout_seconds: float = Field(
        default=FACEBOOK_API_TIMEOUT_SECONDS,
        description="Timeout for Facebook Graph API calls (seconds)",
    )

    # Webhook dispatch
    dispatcher_enable_logging: bool = Field(
        default=False,
        description="Log skipped entries and callback failures in the dispatchers",
    )
    handle_standby_events: bool = Field(
        default=True, description="Dispatch echo events delivered on standby"
    )

    # Environment
    env: Literal["local", "railway", "prod"] = Field(
        default="local", description="Current environment"
    )
    log_level: str = Field(default="INFO", description="Python logging level")

    # Sentry Configuration
    sentry_dsn: str | None = Field(
        default=None, description="Sentry DSN for error tracking (optional)"
    )
    sentry_traces_sample_rate: float = Field(
        default=1.0, description="Sentry traces sample rate (0.0 to 1.0)"
    )

    # Logfire Configuration
    logfire_token: str | None = Field(
        default=None, description="Pydantic Logfire token for observability"
    )


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
