"""Shared operation parameter and result models for service entrypoints."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

ImportMode = Literal["overwrite", "incremental"]
PathMode = Literal["hierarchical", "independent"]


class ImportOptions(BaseModel):
    """Explicit runtime parameters for ``ImportExportService.import_data``."""

    model_config = ConfigDict(extra="forbid")

    mode: ImportMode = Field(default="incremental")
    include_history: bool = Field(default=False)


class IngestionOptions(BaseModel):
    """Explicit runtime parameters for browser bookmark ingestion."""

    model_config = ConfigDict(extra="forbid")

    convert_path_to_tags: bool = Field(default=False)
    path_mode: PathMode = Field(default="hierarchical")
    convert_existing: bool = Field(
        default=False,
        description="Re-derive path tags on bookmarks that already exist",
    )


class IngestionResult(BaseModel):
    """Counters returned by browser bookmark ingestion."""

    imported: int = 0
    skipped: int = 0
    updated_existing: int = 0
    total: int = 0
