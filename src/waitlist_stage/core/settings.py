"""Application settings and configuration.

This module defines all configuration options for the Waitlist Stage service.
Settings are loaded from environment variables with sensible defaults.
"""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Settings can be overridden via environment variables or a ``.env`` file.
    """

    # Application metadata
    app_name: str = Field(default="Waitlist Stage", alias="APP_NAME")
    app_version: str = Field(default="0.1.0", alias="APP_VERSION")
    debug: bool = Field(default=False, alias="DEBUG")

    # Storage backend: one durable backend per deployment
    storage_backend: Literal["sql", "json"] = Field(default="sql", alias="STORAGE_BACKEND")
    database_url: str = Field(default="sqlite:///./waitlist.db", alias="DATABASE_URL")
    sql_debug: bool = Field(default=False, alias="SQL_DEBUG")
    json_store_path: str = Field(default="emails.json", alias="JSON_STORE_PATH")

    # Baseline "social proof" number added to real signups
    seed_count: int = Field(default=1247, ge=0, alias="SEED_COUNT")

    # Administrative listing; open when unset
    admin_token: str | None = Field(default=None, alias="ADMIN_TOKEN")

    # Realtime broadcast channel
    realtime_queue_size: int = Field(default=64, ge=1, alias="REALTIME_QUEUE_SIZE")

    # Client counter view timings
    counter_poll_interval_seconds: float = Field(
        default=5.0,
        gt=0,
        alias="COUNTER_POLL_INTERVAL_SECONDS",
    )
    counter_reconnect_delay_seconds: float = Field(
        default=3.0,
        gt=0,
        alias="COUNTER_RECONNECT_DELAY_SECONDS",
    )
    counter_tween_duration_seconds: float = Field(
        default=0.8,
        ge=0,
        alias="COUNTER_TWEEN_DURATION_SECONDS",
    )
    counter_tween_max_steps: int = Field(default=30, ge=1, alias="COUNTER_TWEEN_MAX_STEPS")

    # CORS configuration for the landing page
    cors_origins: list[str] = Field(
        default=["*"],
        alias="CORS_ORIGINS",
    )
    cors_allow_credentials: bool = Field(default=True, alias="CORS_ALLOW_CREDENTIALS")
    cors_allow_methods: list[str] = Field(
        default=["GET", "POST", "OPTIONS"],
        alias="CORS_ALLOW_METHODS",
    )
    cors_allow_headers: list[str] = Field(
        default=["*"],
        alias="CORS_ALLOW_HEADERS",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        validate_assignment=True,
        extra="ignore",
        populate_by_name=True,
    )

    @property
    def database_url_sync(self) -> str:
        """Return a sync-compatible database URL for tooling.

        Converts asyncpg URLs to psycopg for synchronous database operations
        like Alembic migrations.
        """
        url = self.database_url
        if url.startswith("postgresql+asyncpg"):
            return url.replace("postgresql+asyncpg", "postgresql+psycopg", 1)
        return url


settings = Settings()
