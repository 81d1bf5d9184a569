"""
JSON file entity store.

All collections live in one JSON document. Every write replaces the
document through a temporary file and an atomic rename, so a multi-key
``write_many`` is all-or-nothing on disk.
"""

import asyncio
import json
import logging
import os
from pathlib import Path
import tempfile
from typing import Any

from crosstag.storage.base import EntityStore
from crosstag.utils.errors import StoreError

logger = logging.getLogger(__name__)


class JsonFileStore(EntityStore):
    """Persistent store backed by a single JSON file."""

    def __init__(self, path: Path | str):
        """
        Initialize the store.

        Args:
            path: Location of the JSON document. Parent directories are
                created on first write.
        """
        self.path = Path(path)

    # -------------------- File Access --------------------

    def _load(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, encoding="utf-8") as f:
                document = json.load(f)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise StoreError(
                f"Store file {self.path} is not valid JSON: {e}",
                suggestion="Restore it from an export or remove the file",
            ) from e
        except OSError as e:
            raise StoreError(f"Failed to read store file {self.path}: {e}") from e

        if not isinstance(document, dict):
            raise StoreError(f"Store file {self.path} does not contain an object")
        return document

    def _dump(self, document: dict[str, Any]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(document, f, ensure_ascii=False)
                os.replace(tmp_name, self.path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise StoreError(f"Failed to write store file {self.path}: {e}") from e

    def _update(
        self, entries: dict[str, dict[str, Any]], removed: tuple[str, ...] = ()
    ) -> None:
        document = self._load()
        document.update(entries)
        for key in removed:
            document.pop(key, None)
        self._dump(document)
        logger.debug(f"Wrote {sorted(entries) or list(removed)} to {self.path}")

    # -------------------- EntityStore --------------------

    async def read(self, key: str) -> dict[str, Any]:
        document = await asyncio.to_thread(self._load)
        value = document.get(key)
        return value if isinstance(value, dict) else {}

    async def write(self, key: str, value: dict[str, Any]) -> None:
        await asyncio.to_thread(self._update, {key: value})

    async def write_many(self, entries: dict[str, dict[str, Any]]) -> None:
        await asyncio.to_thread(self._update, dict(entries))

    async def remove(self, key: str) -> None:
        await asyncio.to_thread(self._update, {}, (key,))

    async def clear(self) -> None:
        await asyncio.to_thread(self._dump, {})
