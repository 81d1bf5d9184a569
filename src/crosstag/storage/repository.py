"""
Typed whole-collection access on top of an ``EntityStore``.

Each getter returns a fresh ``{id: model}`` map; each saver writes the
full map back. Mutating services wrap their read-modify-write cycle in
``transaction()`` so that callers sharing one repository are serialized.
"""

import asyncio
from collections.abc import AsyncIterator, Mapping
from contextlib import asynccontextmanager
import logging
from typing import TypeVar

from pydantic import BaseModel

from crosstag.models import BookmarkItem, Tag, Workstation
from crosstag.models.base import EntityModel
from crosstag.storage.base import EntityStore, StorageKey

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


def _parse_map(raw: dict, model: type[M]) -> dict[str, M]:
    parsed: dict[str, M] = {}
    for entity_id, payload in raw.items():
        if not isinstance(payload, dict):
            logger.warning(f"Skipping malformed {model.__name__} record {entity_id!r}")
            continue
        parsed[entity_id] = model.model_validate({"id": entity_id, **payload})
    return parsed


def _dump_map(entities: Mapping[str, EntityModel]) -> dict:
    return {entity_id: entity.to_storage() for entity_id, entity in entities.items()}


class EntityRepository:
    """Read and write whole entity collections."""

    def __init__(self, store: EntityStore):
        self.store = store
        self._lock = asyncio.Lock()

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[None]:
        """Serialize a read-modify-write cycle against this repository."""
        async with self._lock:
            yield

    # -------------------- Collections --------------------

    async def get_bookmarks_map(self) -> dict[str, BookmarkItem]:
        return _parse_map(await self.store.read(StorageKey.BOOKMARKS), BookmarkItem)

    async def save_bookmarks_map(self, bookmarks: dict[str, BookmarkItem]) -> None:
        await self.store.write(StorageKey.BOOKMARKS, _dump_map(bookmarks))

    async def get_tags_map(self) -> dict[str, Tag]:
        return _parse_map(await self.store.read(StorageKey.TAGS), Tag)

    async def save_tags_map(self, tags: dict[str, Tag]) -> None:
        await self.store.write(StorageKey.TAGS, _dump_map(tags))

    async def get_workstations_map(self) -> dict[str, Workstation]:
        return _parse_map(await self.store.read(StorageKey.WORKSTATIONS), Workstation)

    async def save_workstations_map(self, workstations: dict[str, Workstation]) -> None:
        await self.store.write(StorageKey.WORKSTATIONS, _dump_map(workstations))

    async def get_cooccurrence_map(self) -> dict[str, int]:
        raw = await self.store.read(StorageKey.COOCCURRENCE)
        return {key: int(count) for key, count in raw.items()}

    async def save_cooccurrence_map(self, cooccurrence: dict[str, int]) -> None:
        await self.store.write(StorageKey.COOCCURRENCE, dict(cooccurrence))

    async def save_collections(
        self,
        *,
        tags: dict[str, Tag] | None = None,
        bookmarks: dict[str, BookmarkItem] | None = None,
        workstations: dict[str, Workstation] | None = None,
        cooccurrence: dict[str, int] | None = None,
    ) -> None:
        """
        Write several collections in a single store call.

        Entries are ordered so that referenced collections (tags, then
        bookmarks) precede the collections that reference them.
        """
        entries: dict[str, dict] = {}
        if tags is not None:
            entries[StorageKey.TAGS] = _dump_map(tags)
        if bookmarks is not None:
            entries[StorageKey.BOOKMARKS] = _dump_map(bookmarks)
        if workstations is not None:
            entries[StorageKey.WORKSTATIONS] = _dump_map(workstations)
        if cooccurrence is not None:
            entries[StorageKey.COOCCURRENCE] = dict(cooccurrence)
        if entries:
            await self.store.write_many(entries)

    async def snapshot(
        self,
    ) -> tuple[dict[str, BookmarkItem], dict[str, Tag], dict[str, Workstation]]:
        """Read bookmarks, tags and workstations."""
        bookmarks, tags, workstations = await asyncio.gather(
            self.get_bookmarks_map(),
            self.get_tags_map(),
            self.get_workstations_map(),
        )
        return bookmarks, tags, workstations

    async def reset(self) -> None:
        """Remove every collection from the store."""
        async with self._lock:
            await self.store.clear()
