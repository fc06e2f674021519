"""Configuration management for critterhabits."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Calendar Preferences
    week_start_day: int = Field(
        default=0,
        ge=0,
        le=6,
        description="First day of the week for week-based schedules (0=Sunday, 6=Saturday)",
    )

    # Developer time travel
    dev_offset_days: int = Field(
        default=0, description="Days added to the host clock when computing the evaluation date"
    )

    # Pydantic Logfire Configuration (optional)
    logfire_token: str | None = Field(default=None, description="Pydantic Logfire token for observability")
    environment: str = Field(default="production", description="Deployment environment reported to Logfire")


# Application Constants
class Constants:
    """Application-wide constants."""

    # Key formats
    DAY_KEY_FORMAT: str = "%Y-%m-%d"
    MONTH_KEY_FORMAT: str = "%Y-%m"

    # Calendar
    DAYS_PER_WEEK: int = 7
    MONTHS_PER_YEAR: int = 12
    MAX_DAY_OF_MONTH: int = 31
    WEEKDAY_NAMES: tuple[str, ...] = ("Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday")

    # Scheduling
    NEXT_DUE_SEARCH_DAYS: int = 3 * 366  # Covers every-N-months intervals up to three years

    # Task ids
    TASK_ID_PREFIX: str = "task"
    TASK_ID_SUFFIX_LENGTH: int = 6


def get_settings() -> Settings:
    """Get application settings (singleton pattern)."""
    return Settings()


# Global settings instance
settings = get_settings()
constants = Constants()
