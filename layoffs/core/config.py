"""Centralized configuration management using Pydantic Settings."""

from datetime import datetime
from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(str, Enum):
    """Application environment."""

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


class MalformedDatePolicy(str, Enum):
    """What to do with a date string that does not match the date format."""

    FAIL = "fail"
    NULL = "null"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = Field(default="LayoffCleaner", description="Application name")
    app_env: Environment = Field(default=Environment.DEVELOPMENT, description="Environment")
    debug: bool = Field(default=False, description="Debug mode")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Logging level"
    )
    log_to_files: bool = Field(default=True, description="Write rotating log files under logs/")

    # Database
    database_url: str = Field(
        default="sqlite:///./data/layoffs.db", description="Database connection URL"
    )

    # Files
    raw_csv_path: str = Field(default="./data/layoffs.csv", description="Raw dataset CSV")
    cleaned_csv_path: str = Field(
        default="./data/layoffs_cleaned.csv", description="Cleaned dataset CSV"
    )

    # Cleaning
    date_format: str = Field(default="%m/%d/%Y", description="strptime format of raw dates")
    malformed_date_policy: MalformedDatePolicy = Field(
        default=MalformedDatePolicy.FAIL, description="Abort or null out unparsable dates"
    )
    null_token: str = Field(default="NULL", description="Text marker for missing values")
    industry_synonyms_file: str | None = Field(
        default=None, description="JSON file mapping canonical industry to its variants"
    )

    @field_validator("date_format")
    @classmethod
    def validate_date_format(cls, v: str) -> str:
        """Ensure the date format round-trips through strftime/strptime."""
        sample = datetime(2022, 3, 4)
        try:
            parsed = datetime.strptime(sample.strftime(v), v)
        except ValueError as e:
            raise ValueError(f"invalid date_format {v!r}: {e}") from e
        if parsed.date() != sample.date():
            raise ValueError(f"date_format {v!r} must carry year, month and day")
        return v

    @property
    def is_sqlite(self) -> bool:
        """Check if using SQLite database."""
        return self.database_url.startswith("sqlite")

    @property
    def logs_dir(self) -> Path:
        """Get logs directory path."""
        path = Path("./logs")
        path.mkdir(parents=True, exist_ok=True)
        return path


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()
