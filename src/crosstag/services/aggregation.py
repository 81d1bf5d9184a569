"""
Tag aggregate recomputation.

``usage_count`` and ``click_count`` on a tag are caches of sums over the
bookmark collection. They are rebuilt with a full pass after every
bookmark mutation and after every import.
"""

from collections import Counter

from crosstag.models import BookmarkItem, Tag


def recompute_tag_aggregates(
    bookmarks: dict[str, BookmarkItem], tags: dict[str, Tag]
) -> dict[str, Tag]:
    """
    Recompute usage and click counts for every tag.

    Args:
        bookmarks: Current bookmark collection
        tags: Current tag collection (not modified)

    Returns:
        A new tag map where each tag's ``usage_count`` is the number of
        bookmarks referencing it and ``click_count`` is the sum of those
        bookmarks' ``click_count``.
    """
    usage: Counter[str] = Counter()
    clicks: Counter[str] = Counter()
    for bookmark in bookmarks.values():
        for tag_id in set(bookmark.tags):
            usage[tag_id] += 1
            clicks[tag_id] += bookmark.click_count or 0

    return {
        tag_id: tag.model_copy(
            update={"usage_count": usage[tag_id], "click_count": clicks[tag_id]}
        )
        for tag_id, tag in tags.items()
    }


def recompute_tag_click_counts(
    bookmarks: dict[str, BookmarkItem], tags: dict[str, Tag]
) -> dict[str, Tag]:
    """Recompute only ``click_count``; used when tag membership is unchanged."""
    clicks: Counter[str] = Counter()
    for bookmark in bookmarks.values():
        for tag_id in set(bookmark.tags):
            clicks[tag_id] += bookmark.click_count or 0

    return {
        tag_id: tag.model_copy(update={"click_count": clicks[tag_id]})
        for tag_id, tag in tags.items()
    }
