"""
Portable snapshot models for JSON import and export.

The export file carries ``metadata`` and ``data``. Entities inside
``data`` have their derived counters stripped; optional fields may be
missing and are defaulted on import.
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class SnapshotModel(BaseModel):
    """Base for models that travel inside an export file."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    def to_export(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class ImportExportMetadata(SnapshotModel):
    """Header of an export file."""

    version: str = ""
    exported_at: int = 0
    has_click_history: bool = False
    product_name: str = ""
    hash: str | None = None


class SnapshotTag(SnapshotModel):
    """Tag as exported, without ``usageCount``/``clickCount``."""

    id: str | None = None
    name: str
    color: str | None = None
    description: str | None = None
    pinned: bool | None = None
    created_at: int | None = None
    updated_at: int | None = None


class SnapshotBookmark(SnapshotModel):
    """Bookmark as exported, without ``clickCount``."""

    id: str | None = None
    url: str
    title: str = ""
    note: str | None = None
    tags: list[str] | None = None
    path_tag_ids: list[str] | None = None
    thumbnail: str | None = None
    pinned: bool | None = None
    click_history: list[int] | None = None
    created_at: int | None = None
    updated_at: int | None = None


class SnapshotWorkstation(SnapshotModel):
    """Workstation as exported, without ``clickCount``."""

    id: str | None = None
    name: str
    description: str | None = None
    color: str | None = None
    bookmarks: list[str] | None = None
    pinned: bool | None = None
    created_at: int | None = None
    updated_at: int | None = None


class ImportExportData(SnapshotModel):
    """Entity maps keyed by id."""

    bookmarks: dict[str, SnapshotBookmark] = Field(default_factory=dict)
    tags: dict[str, SnapshotTag] = Field(default_factory=dict)
    workstations: dict[str, SnapshotWorkstation] | None = None


class ImportExportFile(SnapshotModel):
    """A complete export file."""

    metadata: ImportExportMetadata
    data: ImportExportData


class ImportFileData(BaseModel):
    """A parsed, validated import file with entity counts for previews."""

    metadata: ImportExportMetadata
    data: ImportExportData
    bookmarks_count: int = 0
    tags_count: int = 0
    workstations_count: int = 0


class EntityCounts(BaseModel):
    """Per-collection counters."""

    bookmarks: int = 0
    tags: int = 0
    workstations: int = 0


class ImportResult(BaseModel):
    """Outcome of ``import_data``."""

    imported: EntityCounts = Field(default_factory=EntityCounts)
    skipped: EntityCounts = Field(default_factory=EntityCounts)
