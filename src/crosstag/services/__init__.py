"""Services for the CrossTag data synchronization engine."""

from .aggregation import recompute_tag_aggregates, recompute_tag_click_counts
from .bookmark_service import BookmarkService
from .browser_import import (
    BrowserImportService,
    compute_path_tag_names,
    extract_bookmark_nodes,
)
from .colors import TAG_COLOR_PALETTE, ColorTally, pick_color
from .cooccurrence import CooccurrenceService, pair_key, recompute_cooccurrence
from .data_access import DataAccessService
from .import_export import (
    ImportExportService,
    generate_export_filename,
    parse_import_content,
)
from .tag_service import TagService
from .workstation_service import WorkstationService

__all__ = [
    "recompute_tag_aggregates",
    "recompute_tag_click_counts",
    "recompute_cooccurrence",
    "pair_key",
    "TAG_COLOR_PALETTE",
    "ColorTally",
    "pick_color",
    "TagService",
    "BookmarkService",
    "WorkstationService",
    "CooccurrenceService",
    "ImportExportService",
    "parse_import_content",
    "generate_export_filename",
    "BrowserImportService",
    "extract_bookmark_nodes",
    "compute_path_tag_names",
    "DataAccessService",
]
