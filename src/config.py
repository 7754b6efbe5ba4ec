"""Application configuration using Pydantic BaseSettings."""

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.constants import FACEBOOK_API_TIMEOUT_SECONDS, SCREENSHOT_ASSET_PATH


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        # Load .env first, then .env.local (for local/test overrides)
        # Later files override earlier ones, so .env.local takes precedence
        env_file=[".env", ".env.local"],
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
    )

    # Facebook Configuration
    facebook_app_secret: str = Field(
        ..., min_length=1, description="Facebook App secret for signature verification"
    )
    facebook_verify_token: str = Field(
        ..., min_length=1, description="Webhook verification token"
    )
    facebook_page_access_token: str = Field(
        ..., min_length=1, description="Facebook Page access token"
    )

    # Public host serving the screenshot assets, without protocol
    server_url: str = Field(
        ..., min_length=1, description="Public server host (e.g. abc123.ngrok.io)"
    )

    # Menu navigation
    navigation_mode: Literal["linear", "branching"] = Field(
        default="linear",
        description="Help menu navigation: linear guided tour or branching carousel",
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

    facebook_api_timeout_seconds: float = Field(
        default=FACEBOOK_API_TIMEOUT_SECONDS,
        description="Timeout for Facebook Graph API calls (seconds)",
    )

    @field_validator("server_url")
    @classmethod
    def _strip_protocol(cls, value: str) -> str:
        # The asset base always uses https, so a pasted scheme is dropped
        host = value.strip()
        for scheme in ("https://", "http://"):
            if host.lower().startswith(scheme):
                host = host[len(scheme):]
        host = host.rstrip("/")
        if not host:
            raise ValueError("server_url must name a host")
        return host

    @property
    def image_base_url(self) -> str:
        """Base URL of the step screenshots."""
        return f"https://{self.server_url}{SCREENSHOT_ASSET_PATH}"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
