"""
Pydantic models for CrossTag.

Provides entity models (tags, bookmarks, workstations), their input
payloads, and the import/export snapshot format.
"""

from crosstag.models.bookmark import (
    BookmarkCreate,
    BookmarkItem,
    BookmarkUpdate,
    FilterOptions,
)
from crosstag.models.exchange import (
    EntityCounts,
    ImportExportData,
    ImportExportFile,
    ImportExportMetadata,
    ImportFileData,
    ImportResult,
    SnapshotBookmark,
    SnapshotTag,
    SnapshotWorkstation,
)
from crosstag.models.operations import (
    ImportMode,
    ImportOptions,
    IngestionOptions,
    IngestionResult,
    PathMode,
)
from crosstag.models.tag import Tag, TagCreate, TagUpdate
from crosstag.models.workstation import (
    Workstation,
    WorkstationCreate,
    WorkstationUpdate,
)

__all__ = [
    # Tag models
    "Tag",
    "TagCreate",
    "TagUpdate",
    # Bookmark models
    "BookmarkItem",
    "BookmarkCreate",
    "BookmarkUpdate",
    "FilterOptions",
    # Workstation models
    "Workstation",
    "WorkstationCreate",
    "WorkstationUpdate",
    # Import/export models
    "ImportExportMetadata",
    "ImportExportData",
    "ImportExportFile",
    "ImportFileData",
    "ImportResult",
    "EntityCounts",
    "SnapshotTag",
    "SnapshotBookmark",
    "SnapshotWorkstation",
    # Operation models
    "ImportMode",
    "ImportOptions",
    "PathMode",
    "IngestionOptions",
    "IngestionResult",
]
