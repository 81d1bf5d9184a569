"""
Browser bookmark tree sources.

A source delivers a read-only forest of ``BrowserBookmarkNode``. The
forest mirrors the browser's own API: the returned roots contain the
top-level groups (bookmarks bar, other bookmarks, ...) which in turn
contain the user's folders and bookmarks.
"""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Protocol

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from crosstag.utils.errors import BrowserBookmarksUnavailableError

logger = logging.getLogger(__name__)

# Chromium stores times as microseconds since 1601-01-01 UTC
_WEBKIT_EPOCH_OFFSET_MS = 11_644_473_600_000

CHROME_ROOT_GROUPS = ("bookmark_bar", "other", "synced")


class BrowserBookmarkNode(BaseModel):
    """A folder (has ``children``) or a bookmark (has ``url``)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str | None = None
    title: str | None = None
    url: str | None = None
    date_added: int | None = Field(default=None, description="Epoch milliseconds")
    children: list[BrowserBookmarkNode] | None = None


BrowserBookmarkNode.model_rebuild()


class BrowserBookmarkSource(Protocol):
    """Anything that can deliver the browser bookmark forest."""

    async def get_tree(self) -> list[BrowserBookmarkNode]: ...


class StaticBookmarkSource:
    """Source wrapping an already fetched tree (e.g. from an extension bridge)."""

    def __init__(self, nodes: list[BrowserBookmarkNode] | list[dict[str, Any]]):
        self._nodes = [
            node
            if isinstance(node, BrowserBookmarkNode)
            else BrowserBookmarkNode.model_validate(node)
            for node in nodes
        ]

    async def get_tree(self) -> list[BrowserBookmarkNode]:
        return self._nodes


def webkit_to_epoch_ms(value: str | int | None) -> int | None:
    """Convert a Chromium ``date_added`` value to epoch milliseconds."""
    if value in (None, "", "0", 0):
        return None
    try:
        return int(value) // 1000 - _WEBKIT_EPOCH_OFFSET_MS
    except (TypeError, ValueError):
        return None


def _convert_chrome_node(raw: dict[str, Any]) -> BrowserBookmarkNode:
    children = raw.get("children")
    return BrowserBookmarkNode(
        id=str(raw["id"]) if raw.get("id") is not None else None,
        title=raw.get("name"),
        url=raw.get("url") if raw.get("type", "url") == "url" else None,
        date_added=webkit_to_epoch_ms(raw.get("date_added")),
        children=(
            [_convert_chrome_node(child) for child in children]
            if isinstance(children, list)
            else None
        ),
    )


class ChromeBookmarksFileSource:
    """Reads the ``Bookmarks`` JSON file of a Chromium-based browser profile."""

    def __init__(self, path: Path | str):
        self.path = Path(path)

    def _load(self) -> dict[str, Any]:
        try:
            with open(self.path, encoding="utf-8") as f:
                return json.load(f)
        except FileNotFoundError as e:
            raise BrowserBookmarksUnavailableError(
                f"Browser bookmarks file not found: {self.path}",
                suggestion="Point to the 'Bookmarks' file inside the browser profile",
            ) from e
        except (OSError, json.JSONDecodeError, UnicodeDecodeError) as e:
            raise BrowserBookmarksUnavailableError(
                f"Failed to read browser bookmarks file {self.path}: {e}"
            ) from e

    async def get_tree(self) -> list[BrowserBookmarkNode]:
        document = await asyncio.to_thread(self._load)
        roots = document.get("roots") if isinstance(document, dict) else None
        if not isinstance(roots, dict):
            raise BrowserBookmarksUnavailableError(
                f"{self.path} has no 'roots' object; not a Chromium bookmarks file"
            )

        groups = [
            _convert_chrome_node(roots[name])
            for name in CHROME_ROOT_GROUPS
            if isinstance(roots.get(name), dict)
        ]
        logger.debug(f"Loaded {len(groups)} bookmark groups from {self.path}")
        return [BrowserBookmarkNode(id="0", title="", children=groups)]
