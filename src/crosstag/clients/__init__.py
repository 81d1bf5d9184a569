"""Clients for external data sources."""

from .browser_bookmarks import (
    BrowserBookmarkNode,
    BrowserBookmarkSource,
    ChromeBookmarksFileSource,
    StaticBookmarkSource,
)

__all__ = [
    "BrowserBookmarkNode",
    "BrowserBookmarkSource",
    "ChromeBookmarksFileSource",
    "StaticBookmarkSource",
]
