"""Configuration management for Splitly."""

from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigurationError


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="SPLITLY_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Display settings
    currency_symbol: str = "₹"
    digit_grouping: Literal["indian", "western"] = "indian"
    owner_name: str = "You"  # Display name for the ledger owner

    # Database path
    database_path: Path = Path.home() / ".splitly" / "splitly.db"

    def __init__(self, **kwargs):
        """Initialize settings and create database directory if needed."""
        super().__init__(**kwargs)
        self.database_path.parent.mkdir(parents=True, exist_ok=True)


def load_settings() -> Settings:
    """Load application settings from environment variables."""
    try:
        return Settings()
    except Exception as e:
        raise ConfigurationError(
            f"Failed to load settings. Check the SPLITLY_* variables in your "
            f"environment or .env file.\n"
            f"Error: {e}"
        ) from e
