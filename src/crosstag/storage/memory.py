"""In-memory entity store used when no persistent backend is configured."""

import copy
from typing import Any

from crosstag.storage.base import EntityStore


class MemoryStore(EntityStore):
    """Dictionary-backed store. Values are deep-copied in and out."""

    def __init__(self, initial: dict[str, dict[str, Any]] | None = None):
        self._data: dict[str, dict[str, Any]] = copy.deepcopy(initial or {})

    async def read(self, key: str) -> dict[str, Any]:
        return copy.deepcopy(self._data.get(key, {}))

    async def write(self, key: str, value: dict[str, Any]) -> None:
        self._data[key] = copy.deepcopy(value)

    async def write_many(self, entries: dict[str, dict[str, Any]]) -> None:
        staged = copy.deepcopy(entries)
        self._data.update(staged)

    async def remove(self, key: str) -> None:
        self._data.pop(key, None)

    async def clear(self) -> None:
        self._data.clear()
