"""Utility helpers for CrossTag."""

from .errors import (
    BrowserBookmarksUnavailableError,
    ConfigurationError,
    CrossTagError,
    ImportFormatError,
    StoreError,
)
from .helpers import favicon_url, generate_id, now_ms, unique

__all__ = [
    "CrossTagError",
    "StoreError",
    "ImportFormatError",
    "BrowserBookmarksUnavailableError",
    "ConfigurationError",
    "favicon_url",
    "generate_id",
    "now_ms",
    "unique",
]
