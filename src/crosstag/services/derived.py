"""Commit helper that refreshes derived data alongside a bookmark write."""

import logging

from crosstag.models import BookmarkItem, Tag, Workstation
from crosstag.services.aggregation import recompute_tag_aggregates
from crosstag.services.cooccurrence import recompute_cooccurrence
from crosstag.storage import EntityRepository
from crosstag.utils.logging_config import PerformanceMonitor

logger = logging.getLogger(__name__)


async def commit_with_derived(
    repository: EntityRepository,
    bookmarks: dict[str, BookmarkItem],
    tags: dict[str, Tag],
    *,
    workstations: dict[str, Workstation] | None = None,
    write_bookmarks: bool = True,
    cooccurrence: bool = True,
) -> dict[str, Tag]:
    """
    Recompute tag aggregates (and optionally the co-occurrence index) and
    write everything in one store call.

    Returns:
        The tag map with fresh aggregates
    """
    with PerformanceMonitor(
        logger, "Derived data recompute", bookmarks=len(bookmarks), tags=len(tags)
    ):
        tags = recompute_tag_aggregates(bookmarks, tags)
        index = recompute_cooccurrence(bookmarks) if cooccurrence else None

    await repository.save_collections(
        tags=tags,
        bookmarks=bookmarks if write_bookmarks else None,
        workstations=workstations,
        cooccurrence=index,
    )
    return tags
