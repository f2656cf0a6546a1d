import os
from pathlib import Path

from loguru import logger
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def get_database_url() -> str:
    """Get database URL, using an absolute path for the local SQLite fallback.

    SQLite is only meant for local development. Set DATABASE_URL to a
    PostgreSQL connection string for anything that must survive a rebuild.
    """
    db_url = os.getenv("DATABASE_URL", "")
    if db_url:
        logger.info(f"Using DATABASE_URL from environment: {db_url}")
        return db_url

    db_path = Path(__file__).parent.parent.parent / "bullpen.db"
    db_url = f"sqlite:///{db_path.resolve()}"
    logger.warning(f"Using SQLite database (LOCAL DEV ONLY): {db_url}")
    return db_url


class Settings(BaseSettings):
    database_url: str = Field(
        default_factory=get_database_url,
        validation_alias="DATABASE_URL",
    )
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    log_file: str | None = Field(default=None, validation_alias="LOG_FILE")
    log_serialize: bool = Field(default=False, validation_alias="LOG_SERIALIZE")
    directory_service_url: str = Field(
        default="http://localhost:3000/api/v1",
        validation_alias="DIRECTORY_SERVICE_URL",
        description="Base URL of the service that owns events, workout assignments and workouts",
    )
    calendar_service_url: str = Field(
        default="http://localhost:3000/api/v1",
        validation_alias="CALENDAR_SERVICE_URL",
        description="Base URL of the calendar event service (status updates)",
    )
    service_api_token: str = Field(default="", validation_alias="SERVICE_API_TOKEN")
    service_timeout_seconds: float = Field(default=10.0, validation_alias="SERVICE_TIMEOUT_SECONDS")
    default_progress_denominator: int = Field(
        default=30,
        validation_alias="DEFAULT_PROGRESS_DENOMINATOR",
        description="Pitch count used for progress of open (unscripted) sessions",
    )
    recent_throws_limit: int = Field(default=5, validation_alias="RECENT_THROWS_LIMIT")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        """Validate that log level is one of the standard logging levels."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper_value = value.upper()
        if upper_value not in valid_levels:
            logger.warning(f"Invalid LOG_LEVEL '{value}'. Valid levels are: {', '.join(valid_levels)}. Defaulting to INFO.")
            return "INFO"
        return upper_value

    @field_validator("directory_service_url", "calendar_service_url")
    @classmethod
    def strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @field_validator("default_progress_denominator", "recent_throws_limit")
    @classmethod
    def validate_positive(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("must be a positive integer")
        return value

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )


settings = Settings()
