"""
Service for exporting the library to a portable JSON snapshot and merging
snapshots back in.

Two import modes exist:

- ``overwrite`` replaces all three collections with the snapshot.
- ``incremental`` adds only entities that are not already present, in
  dependency order (tags, then bookmarks, then workstations), remapping
  ids so that every cross reference stays valid.

Both modes build the final collections in memory and write them with a
single store call, then tag aggregates reflect the merged bookmarks.
"""

import asyncio
from collections.abc import Callable
from datetime import datetime
import json
import logging
from pathlib import Path

from pydantic import ValidationError

from crosstag.models import (
    BookmarkItem,
    ImportExportData,
    ImportExportFile,
    ImportExportMetadata,
    ImportFileData,
    ImportOptions,
    ImportResult,
    SnapshotBookmark,
    SnapshotTag,
    SnapshotWorkstation,
    Tag,
    Workstation,
)
from crosstag.services.colors import ColorTally, resolve_color
from crosstag.services.derived import commit_with_derived
from crosstag.storage import EntityRepository
from crosstag.utils.errors import ImportFormatError
from crosstag.utils.helpers import favicon_url, generate_id, now_ms

logger = logging.getLogger(__name__)

PRODUCT_NAME = "CrossTag Bookmarks"
EXPORT_VERSION = "1.0"
CLICK_HISTORY_LIMIT = 100


# -------------------- Parsing --------------------


def parse_import_content(content: str | bytes) -> ImportFileData:
    """
    Parse and validate the text of an export file.

    Raises:
        ImportFormatError: invalid JSON, missing ``metadata``/``data``,
            a ``data`` block with neither ``bookmarks`` nor ``tags``, or
            entities lacking required fields
    """
    try:
        parsed = json.loads(content)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ImportFormatError("Invalid JSON file format", suggestion=str(e)) from e

    if (
        not isinstance(parsed, dict)
        or not parsed.get("metadata")
        or "data" not in parsed
    ):
        raise ImportFormatError(
            "Invalid import file format: missing required fields",
            suggestion="Expected top-level 'metadata' and 'data' objects",
        )

    data = parsed["data"]
    if not isinstance(data, dict) or (
        data.get("bookmarks") is None and data.get("tags") is None
    ):
        raise ImportFormatError(
            "Invalid import file format: missing data fields",
            suggestion="'data' must contain 'bookmarks' or 'tags'",
        )

    workstations = data.get("workstations")
    if workstations is not None and not isinstance(workstations, dict):
        raise ImportFormatError(
            "Invalid import file format: 'workstations' must be an object",
            suggestion="Expected a map of workstation id to workstation",
        )

    # Only absent collections default to empty; wrong types fail validation
    normalized = {
        "bookmarks": {} if data.get("bookmarks") is None else data["bookmarks"],
        "tags": {} if data.get("tags") is None else data["tags"],
        "workstations": workstations,
    }
    try:
        file = ImportExportFile.model_validate(
            {"metadata": parsed["metadata"], "data": normalized}
        )
    except ValidationError as e:
        raise ImportFormatError(
            f"Invalid import file entries ({e.error_count()} errors)",
            suggestion=str(e.errors()[0]["loc"]),
        ) from e

    return ImportFileData(
        metadata=file.metadata,
        data=file.data,
        bookmarks_count=len(file.data.bookmarks),
        tags_count=len(file.data.tags),
        workstations_count=len(file.data.workstations or {}),
    )


def generate_export_filename(
    product_name: str = PRODUCT_NAME, moment: datetime | None = None
) -> str:
    """Export file name such as ``CrossTag Bookmarks_20250101_093000.json``."""
    stamp = (moment or datetime.now()).strftime("%Y%m%d_%H%M%S")
    return f"{product_name}_{stamp}.json"


# -------------------- Service --------------------


class ImportExportService:
    """Serialize the library and merge external snapshots into it."""

    def __init__(
        self,
        repository: EntityRepository,
        clock: Callable[[], int] = now_ms,
        product_name: str = PRODUCT_NAME,
        version: str = EXPORT_VERSION,
        click_history_limit: int = CLICK_HISTORY_LIMIT,
    ):
        self.repository = repository
        self.clock = clock
        self.product_name = product_name
        self.version = version
        self.click_history_limit = click_history_limit

    # -------------------- Export --------------------

    async def export_snapshot(self, include_history: bool = False) -> ImportExportFile:
        """
        Build the export snapshot with derived counters stripped.

        ``clickHistory`` is kept only when ``include_history`` is set and
        the bookmark has any history.
        """
        bookmarks, tags, workstations = await self.repository.snapshot()

        export_bookmarks: dict[str, SnapshotBookmark] = {}
        for bookmark_id, bookmark in bookmarks.items():
            payload = bookmark.model_dump(exclude={"click_count", "click_history"})
            if include_history and bookmark.click_history:
                payload["click_history"] = bookmark.click_history
            export_bookmarks[bookmark_id] = SnapshotBookmark.model_validate(payload)

        export_tags = {
            tag_id: SnapshotTag.model_validate(
                tag.model_dump(exclude={"usage_count", "click_count"})
            )
            for tag_id, tag in tags.items()
        }
        export_workstations = {
            ws_id: SnapshotWorkstation.model_validate(
                ws.model_dump(exclude={"click_count"})
            )
            for ws_id, ws in workstations.items()
        }

        has_history = any(b.click_history for b in bookmarks.values())
        metadata = ImportExportMetadata(
            version=self.version,
            exported_at=self.clock(),
            has_click_history=include_history and has_history,
            product_name=self.product_name,
        )
        return ImportExportFile(
            metadata=metadata,
            data=ImportExportData(
                bookmarks=export_bookmarks,
                tags=export_tags,
                workstations=export_workstations,
            ),
        )

    async def export_data(self, include_history: bool = False) -> str:
        """Export the library as pretty-printed JSON."""
        snapshot = await self.export_snapshot(include_history)
        logger.info(
            f"📦 Exported {len(snapshot.data.bookmarks)} bookmarks, "
            f"{len(snapshot.data.tags)} tags, "
            f"{len(snapshot.data.workstations or {})} workstations"
        )
        return json.dumps(snapshot.to_export(), indent=2, ensure_ascii=False)

    async def write_export(
        self, path: Path | str, include_history: bool = False
    ) -> Path:
        """Export to ``path``; a directory gets a generated file name."""
        target = Path(path)
        if target.is_dir():
            target = target / generate_export_filename(self.product_name)
        content = await self.export_data(include_history)
        await asyncio.to_thread(target.write_text, content, encoding="utf-8")
        return target

    # -------------------- Import --------------------

    async def parse_import_file(self, path: Path | str) -> ImportFileData:
        """Read and validate an export file from disk."""
        try:
            content = await asyncio.to_thread(Path(path).read_bytes)
        except OSError as e:
            raise ImportFormatError(f"Failed to read import file {path}: {e}") from e
        return parse_import_content(content)

    async def import_data(
        self, file_data: ImportFileData, options: ImportOptions | None = None
    ) -> ImportResult:
        """
        Merge a parsed snapshot into the library.

        Args:
            file_data: Result of ``parse_import_content``/``parse_import_file``
            options: Import mode and whether click history is imported

        Returns:
            Imported and skipped counters per collection
        """
        options = options or ImportOptions()
        logger.info(
            f"📥 Importing snapshot (mode={options.mode}, "
            f"history={options.include_history}): "
            f"{file_data.bookmarks_count} bookmarks, {file_data.tags_count} tags, "
            f"{file_data.workstations_count} workstations"
        )

        async with self.repository.transaction():
            if options.mode == "overwrite":
                result = await self._import_overwrite(file_data.data, options)
            else:
                result = await self._import_incremental(file_data.data, options)

        logger.info(
            f"📊 Import complete: imported {result.imported.model_dump()}, "
            f"skipped {result.skipped.model_dump()}"
        )
        return result

    async def _import_overwrite(
        self, data: ImportExportData, options: ImportOptions
    ) -> ImportResult:
        now = self.clock()
        tally = ColorTally()

        tags = {
            tag_id: self._build_tag(tag_id, snap, now, tally)
            for tag_id, snap in data.tags.items()
        }
        bookmarks = {
            bookmark_id: self._build_bookmark(
                bookmark_id, snap, now, options.include_history
            )
            for bookmark_id, snap in data.bookmarks.items()
        }
        ws_tally = ColorTally()
        workstations = {
            ws_id: self._build_workstation(ws_id, snap, now, ws_tally)
            for ws_id, snap in (data.workstations or {}).items()
        }

        await commit_with_derived(
            self.repository, bookmarks, tags, workstations=workstations
        )

        result = ImportResult()
        result.imported.tags = len(tags)
        result.imported.bookmarks = len(bookmarks)
        result.imported.workstations = len(workstations)
        return result

    async def _import_incremental(
        self, data: ImportExportData, options: ImportOptions
    ) -> ImportResult:
        bookmarks, tags, workstations = await self.repository.snapshot()
        now = self.clock()
        result = ImportResult()

        # Phase 1: tags, deduplicated by exact name
        tag_ids_by_name: dict[str, str] = {}
        for tag in tags.values():
            tag_ids_by_name.setdefault(tag.name, tag.id)
        tally = ColorTally(tag.color for tag in tags.values())
        tag_id_map: dict[str, str] = {}

        for old_id, snap in data.tags.items():
            existing_id = tag_ids_by_name.get(snap.name)
            if existing_id is not None:
                tag_id_map[old_id] = existing_id
                result.skipped.tags += 1
                continue

            new_id = old_id if old_id not in tags else generate_id("tag", tags)
            tags[new_id] = self._build_tag(new_id, snap, now, tally)
            tag_id_map[old_id] = new_id
            tag_ids_by_name[snap.name] = new_id
            result.imported.tags += 1

        def remap_tags(tag_ids: list[str] | None) -> list[str]:
            mapped = []
            for tag_id in tag_ids or []:
                target = tag_id_map.get(tag_id, tag_id if tag_id in tags else None)
                if target is not None:
                    mapped.append(target)
            return mapped

        # Phase 2: bookmarks, deduplicated by case-insensitive URL
        bookmark_ids_by_url: dict[str, str] = {}
        for bookmark in bookmarks.values():
            bookmark_ids_by_url.setdefault(bookmark.url.lower(), bookmark.id)
        bookmark_id_map: dict[str, str] = {}

        for old_id, snap in data.bookmarks.items():
            normalized_url = snap.url.lower()
            existing_id = bookmark_ids_by_url.get(normalized_url)
            if existing_id is not None:
                bookmark_id_map[old_id] = existing_id
                result.skipped.bookmarks += 1
                continue

            new_id = old_id if old_id not in bookmarks else generate_id("bm", bookmarks)
            remapped = snap.model_copy(
                update={
                    "tags": remap_tags(snap.tags),
                    "path_tag_ids": (
                        None
                        if snap.path_tag_ids is None
                        else remap_tags(snap.path_tag_ids)
                    ),
                }
            )
            bookmarks[new_id] = self._build_bookmark(
                new_id, remapped, now, options.include_history
            )
            bookmark_id_map[old_id] = new_id
            bookmark_ids_by_url[normalized_url] = new_id
            result.imported.bookmarks += 1

        # Phase 3: workstations, deduplicated by exact name
        workstation_names = {ws.name for ws in workstations.values()}
        ws_tally = ColorTally(ws.color for ws in workstations.values())

        for old_id, snap in (data.workstations or {}).items():
            if snap.name in workstation_names:
                result.skipped.workstations += 1
                continue

            new_id = (
                old_id
                if old_id not in workstations
                else generate_id("ws", workstations)
            )
            members = [
                bookmark_id_map[b] for b in snap.bookmarks or [] if b in bookmark_id_map
            ]
            workstations[new_id] = self._build_workstation(
                new_id, snap.model_copy(update={"bookmarks": members}), now, ws_tally
            )
            workstation_names.add(snap.name)
            result.imported.workstations += 1

        await commit_with_derived(
            self.repository, bookmarks, tags, workstations=workstations
        )
        return result

    # -------------------- Entity Builders --------------------

    def _build_tag(
        self, tag_id: str, snap: SnapshotTag, now: int, tally: ColorTally
    ) -> Tag:
        return Tag(
            id=tag_id,
            name=snap.name,
            color=resolve_color(snap.color, tally),
            description=snap.description,
            pinned=bool(snap.pinned),
            created_at=snap.created_at if snap.created_at is not None else now,
            updated_at=snap.updated_at if snap.updated_at is not None else now,
        )

    def _build_bookmark(
        self,
        bookmark_id: str,
        snap: SnapshotBookmark,
        now: int,
        include_history: bool,
    ) -> BookmarkItem:
        history: list[int] = []
        if include_history and snap.click_history:
            history = sorted(snap.click_history, reverse=True)[
                : self.click_history_limit
            ]
        return BookmarkItem(
            id=bookmark_id,
            url=snap.url,
            title=snap.title,
            note=snap.note or "",
            tags=snap.tags or [],
            path_tag_ids=snap.path_tag_ids,
            thumbnail=snap.thumbnail or favicon_url(snap.url),
            pinned=bool(snap.pinned),
            click_count=len(history),
            click_history=history,
            created_at=snap.created_at if snap.created_at is not None else now,
            updated_at=snap.updated_at if snap.updated_at is not None else now,
        )

    def _build_workstation(
        self, ws_id: str, snap: SnapshotWorkstation, now: int, tally: ColorTally
    ) -> Workstation:
        return Workstation(
            id=ws_id,
            name=snap.name,
            description=snap.description,
            color=resolve_color(snap.color, tally),
            bookmarks=snap.bookmarks or [],
            pinned=bool(snap.pinned),
            created_at=snap.created_at if snap.created_at is not None else now,
            updated_at=snap.updated_at if snap.updated_at is not None else now,
        )
