"""
Application settings for Sales Insights.

Values come from environment variables, with a `.env` file in the project root
as a fallback for local runs. Settings are validated on load.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# sales_insights/core/config.py -> sales_insights -> project root
PROJECT_ROOT = Path(__file__).resolve().parents[2]

DEFAULT_FEED_URL = "https://s3.amazonaws.com/roxiler.com/product_transaction.json"


class Settings(BaseSettings):
    """Settings loaded from environment variables and `.env`."""

    model_config = SettingsConfigDict(
        env_file=PROJECT_ROOT / ".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    environment: str = "development"
    log_level: str = "INFO"

    # Store
    store_backend: str = "local"
    data_dir: Path = PROJECT_ROOT / "data"
    firestore_collection: str = "transactions"

    # Feed seeding
    seed_feed_url: str = DEFAULT_FEED_URL
    seed_timeout: float = Field(default=30.0, gt=0)

    # Pagination
    default_per_page: int = Field(default=10, ge=1)
    max_per_page: int = Field(default=100, ge=1)

    @field_validator("log_level")
    @classmethod
    def _upper_level(cls, value: str) -> str:
        return value.upper()

    @field_validator("store_backend")
    @classmethod
    def _lower_backend(cls, value: str) -> str:
        return value.lower()


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get or create the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reload_settings() -> Settings:
    """Rebuild the global settings from the current environment."""
    global _settings
    _settings = Settings()
    return _settings
