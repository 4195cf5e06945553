import os
import sys

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _should_load_env_file() -> str | None:
    """Determine if .env should be loaded.

    For local development, load `.env` automatically. Do NOT auto-load `.env`
    when running under pytest or in CI so tests see only the defaults and
    the variables they set themselves.
    """
    if any("pytest" in str(x) for x in sys.argv if x):
        return None
    if os.environ.get("CI") in ("1", "true", "True"):
        return None
    return ".env"


class Settings(BaseSettings):
    # Environment configuration
    ENVIRONMENT: str = Field(
        default="development",
        description="Environment: 'development', 'staging', or 'production'",
    )

    DATABASE_URL: str = "sqlite:///./data/parley.db"

    # Database connection pool settings
    DB_POOL_SIZE: int = Field(
        default=5,
        description="Number of persistent connections in pool",
    )
    DB_MAX_OVERFLOW: int = Field(
        default=10,
        description="Extra connections when pool exhausted",
    )
    DB_POOL_TIMEOUT: int = Field(
        default=30,
        description="Seconds to wait for connection from pool",
    )
    DB_POOL_RECYCLE: int = Field(
        default=1800,
        description="Recycle connections after N seconds (30 min default)",
    )

    LOGS_DIR: str = Field(
        default="logs",
        description="Directory for the rotating application log file",
    )

    # Moderation
    MESSAGE_ABUSE_THRESHOLD: int = Field(
        default=3,
        ge=0,
        description="Distinct reporters tolerated before a message is deactivated "
        "(deactivation happens when the report count exceeds this value)",
    )

    # Attachment store
    ATTACHMENTS_ROOT: str = Field(
        default="./public/attachments",
        description="Root directory holding one sub-directory of files per message",
    )
    ATTACHMENT_LOCKDOWN_ENABLED: bool = Field(
        default=True,
        description="Restrict file permissions of attachments of deactivated messages",
    )
    ATTACHMENT_MAX_BYTES: int = Field(
        default=5 * 1024 * 1024,
        description="Attachments must be strictly smaller than this size",
    )

    # Conversation event publishing (pub/sub over HTTP)
    PUBSUB_URL: str = Field(
        default="",
        description="Pub/sub server URL; empty disables event publishing",
    )
    PUBSUB_TOPIC_PREFIX: str = Field(
        default="parley",
        description="Prefix for conversation channel topics",
    )
    PUBSUB_AUTH_TOKEN: str = Field(
        default="",
        description="Optional bearer token for publishing",
    )
    PUBSUB_ENABLED: bool = Field(
        default=True,
        description="Enable/disable event publishing globally",
    )
    PUBSUB_TIMEOUT_SECONDS: float = Field(
        default=5.0,
        description="HTTP timeout for a single publish",
    )

    RECENT_CONVERSATIONS_LIMIT: int = Field(
        default=10,
        description="Number of conversations returned by the recent list",
    )

    @field_validator("PUBSUB_URL", mode="before")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Normalize the pub/sub URL so topics can be appended with '/'."""
        if isinstance(v, str):
            return v.strip().rstrip("/")
        return v

    model_config = SettingsConfigDict(
        env_file=_should_load_env_file(),
        env_file_encoding="utf-8",
        extra="ignore",  # Allow extra env vars (e.g., SENTRY_DSN) without validation errors
    )


settings = Settings()
