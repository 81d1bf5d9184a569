"""
Entity store interface.

The store holds whole collections under fixed keys. There is no partial
update: callers read a full map, change it in memory and write it back.
"""

from abc import ABC, abstractmethod
from typing import Any


class StorageKey:
    """Keys of the collections kept in the entity store."""

    BOOKMARKS = "tbm.bookmarks"
    TAGS = "tbm.tags"
    WORKSTATIONS = "tbm.workstations"
    COOCCURRENCE = "tbm.cooccurrence"

    ALL = (BOOKMARKS, TAGS, WORKSTATIONS, COOCCURRENCE)


class EntityStore(ABC):
    """Async key-value store of JSON-compatible maps."""

    @abstractmethod
    async def read(self, key: str) -> dict[str, Any]:
        """Return the map stored under ``key``, or an empty dict."""

    @abstractmethod
    async def write(self, key: str, value: dict[str, Any]) -> None:
        """Replace the map stored under ``key``."""

    async def write_many(self, entries: dict[str, dict[str, Any]]) -> None:
        """
        Replace several maps.

        Backends that can persist all entries in one step override this so
        that readers never observe a partial write. The default writes in
        the given order.
        """
        for key, value in entries.items():
            await self.write(key, value)

    @abstractmethod
    async def remove(self, key: str) -> None:
        """Delete ``key`` if present."""

    async def clear(self) -> None:
        """Delete every known collection."""
        for key in StorageKey.ALL:
            await self.remove(key)
