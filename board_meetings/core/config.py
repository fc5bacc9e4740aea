# board_meetings/core/config.py
from functools import lru_cache

from pydantic import AnyHttpUrl, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Global application configuration.

    Values are loaded from environment variables (or a local `.env` file)
    at runtime.

    These settings drive:
    - DB connection
    - Directory service credentials (boards, rosters, actors)
    - Internal API key
    - Recurrence bounds and lifecycle guards
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    APP_NAME: str = "Board Meetings Engine"
    APP_ENV: str = Field("local", description="Environment name: local/dev/stage/prod")
    LOG_LEVEL: str = Field("INFO", description="Root log level for the service.")

    DB_URL: str = Field(
        "sqlite+aiosqlite:///./board_meetings.db",
        description="SQLAlchemy-compatible async database URL",
    )

    INTERNAL_API_KEY: str | None = Field(
        default=None,
        description="API key required for hitting /internal endpoints",
    )

    DEFAULT_TIMEZONE: str = Field(
        "Africa/Nairobi",
        description="IANA timezone applied to meetings created without one.",
    )

    # --- Recurrence ---
    RECURRENCE_MAX_OCCURRENCES: int = Field(
        default=52,
        description="Hard cap on the number of dates a recurrence pattern may generate.",
    )
    RECURRENCE_HORIZON_YEARS: int = Field(
        default=2,
        description=(
            "Loop bound for patterns that terminate by occurrence count: "
            "no date at or beyond start_date + N years is generated."
        ),
    )

    # --- Lifecycle ---
    ENFORCE_START_TIME: bool = Field(
        default=True,
        description=(
            "When false, a meeting may be started before its scheduled start. "
            "Intended for manual testing only."
        ),
    )
    ARCHIVE_RETENTION_DAYS: int = Field(
        default=30,
        description="Days a completed meeting stays 'recent' before the archive job moves it.",
    )

    # --- Directory service (boards, participant rosters, actor profiles) ---
    DIRECTORY_BASE_URL: AnyHttpUrl | None = None
    DIRECTORY_TOKEN_URL: AnyHttpUrl | None = None
    DIRECTORY_CLIENT_ID: str | None = None
    DIRECTORY_CLIENT_SECRET: str | None = None
    DIRECTORY_SCOPE: str | None = Field(
        default=None,
        description="OAuth2 scope requested for the directory service token.",
    )


@lru_cache()
def get_settings() -> Settings:
    """
    Cached accessor for application settings.

    Using LRU cache ensures settings are read and validated only once,
    while still being easily importable across the app.
    """
    return Settings()
