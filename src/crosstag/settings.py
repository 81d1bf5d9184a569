"""Configuration management using Pydantic Settings."""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Global settings singleton
_settings: CrossTagSettings | None = None


class CrossTagSettings(BaseSettings):
    """CrossTag settings loaded from environment variables and ``.env``."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="CROSSTAG_",
        extra="ignore",
    )

    # Storage
    storage_backend: Literal["json", "memory"] = Field(default="json")
    data_dir: Path = Field(default_factory=lambda: Path.home() / ".config" / "crosstag")
    store_filename: str = Field(default="store.json")

    # Engine limits
    click_history_limit: int = Field(default=100, ge=1)
    hot_tags_limit: int = Field(default=6, ge=1)
    hot_bookmarks_limit: int = Field(default=10, ge=1)
    seed_default_tags: bool = Field(default=True)

    # Logging
    log_to_file: bool = Field(
        default=False, description="Also write a daily log file and prune old ones"
    )

    # Browser ingestion
    browser_bookmarks_file: Path | None = Field(
        default=None, description="Chromium profile 'Bookmarks' file"
    )

    # Export metadata
    product_name: str = Field(default="CrossTag Bookmarks")
    export_version: str = Field(default="1.0")

    @property
    def store_path(self) -> Path:
        """Location of the JSON file backing the entity store."""
        return self.data_dir / self.store_filename


def get_settings() -> CrossTagSettings:
    """Get or create the global settings singleton."""
    global _settings
    if _settings is None:
        load_dotenv()
        _settings = CrossTagSettings()
    return _settings


def reset_settings() -> None:
    """Reset the global settings (for testing)."""
    global _settings
    _settings = None
