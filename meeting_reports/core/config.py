# meeting_reports/core/config.py
from functools import lru_cache

from pydantic import AnyHttpUrl, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Global application configuration.

    Values are loaded from environment variables at runtime.

    These settings are used for:
    - Portal REST API location and credentials
    - Attendance join strategy (sequential vs. bounded fan-out)
    - Logging verbosity
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    APP_NAME: str = "Meeting Reports"
    APP_ENV: str = Field("local", description="Environment name: local/dev/stage/prod")
    LOG_LEVEL: str = Field("INFO", description="Root log level for the service.")

    PORTAL_API_BASE_URL: AnyHttpUrl = Field(
        "http://localhost:8800/api",
        description="Base URL of the meeting portal REST API.",
    )
    PORTAL_API_TOKEN: str | None = Field(
        default=None,
        description="Bearer token sent with every portal API request.",
    )
    HTTP_TIMEOUT_SECONDS: float = Field(
        default=10.0,
        description="Timeout applied to each portal API request.",
    )

    MEETINGS_FETCH_LIMIT: int = Field(
        default=50,
        description="Fixed page size used when fetching meetings for a window.",
    )

    ATTENDANCE_JOIN_STRATEGY: str = Field(
        default="sequential",
        description="How participation lists are fetched: 'sequential' or 'concurrent'.",
    )
    ATTENDANCE_FANOUT_LIMIT: int = Field(
        default=5,
        description="Maximum in-flight participation fetches for the concurrent strategy.",
    )


@lru_cache()
def get_settings() -> Settings:
    """
    Cached accessor for application settings.

    Using LRU cache ensures settings are read and validated only once,
    while still being easily importable across the app.
    """
    return Settings()
