"""Entity store backends and typed repository."""

from crosstag.storage.base import EntityStore, StorageKey
from crosstag.storage.json_store import JsonFileStore
from crosstag.storage.memory import MemoryStore
from crosstag.storage.repository import EntityRepository

__all__ = [
    "EntityStore",
    "StorageKey",
    "MemoryStore",
    "JsonFileStore",
    "EntityRepository",
]
