"""Application configuration using Pydantic BaseSettings."""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.constants import (
    FACEBOOK_API_TIMEOUT_SECONDS,
    GRACEFUL_SHUTDOWN_TIMEOUT_SECONDS,
    ORDER_COOLDOWN_SECONDS,
    ORDER_RETENTION_SECONDS,
    STATE_SWEEP_INTERVAL_SECONDS,
    TELEGRAM_API_TIMEOUT_SECONDS,
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Provider credentials are optional: a missing credential is detected by
    the outbound call that needs it, which logs and skips the operation.
    """

    model_config = SettingsConfigDict(
        # Load .env first, then .env.local (for local/test overrides)
        # Later files override earlier ones, so .env.local takes precedence
        env_file=[".env", ".env.local"],
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Facebook Configuration
    facebook_page_access_token: str | None = Field(
        default=None, description="Facebook Page access token"
    )
    facebook_verify_token: str | None = Field(
        default=None, description="Webhook verification token"
    )
    facebook_app_secret: str | None = Field(
        default=None,
        description="Facebook App secret (optional, for signature verification)",
    )

    # Telegram Configuration
    telegram_bot_token: str | None = Field(
        default=None, description="Telegram bot token from @BotFather"
    )
    telegram_chat_id: str | None = Field(
        default=None, description="Staff chat that receives order photos"
    )
    telegram_webhook_secret: str | None = Field(
        default=None,
        description="Secret echoed by Telegram in X-Telegram-Bot-Api-Secret-Token",
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

    # ==========================================================================
    # Timeout Configuration
    # ==========================================================================
    # Defaults are sourced from src/constants.py.

    facebook_api_timeout_seconds: float = Field(
        default=FACEBOOK_API_TIMEOUT_SECONDS,
        description="Timeout for Facebook Graph API calls (seconds)",
    )
    telegram_api_timeout_seconds: float = Field(
        default=TELEGRAM_API_TIMEOUT_SECONDS,
        description="Timeout for Telegram Bot API calls (seconds)",
    )

    # ==========================================================================
    # Order Workflow Configuration
    # ==========================================================================

    order_cooldown_seconds: int = Field(
        default=ORDER_COOLDOWN_SECONDS,
        description="Minimum seconds between two accepted photos per sender",
    )
    order_retention_seconds: int = Field(
        default=ORDER_RETENTION_SECONDS,
        description="Orders older than this are evicted from memory",
    )
    state_sweep_interval_seconds: float = Field(
        default=STATE_SWEEP_INTERVAL_SECONDS,
        description="Interval of the background eviction sweep (seconds)",
    )
    graceful_shutdown_timeout_seconds: float = Field(
        default=GRACEFUL_SHUTDOWN_TIMEOUT_SECONDS,
        description="Time allowed for background tasks to finish on shutdown",
    )


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
