"""
Tag co-occurrence index.

Counts, for every unordered pair of tags, how many bookmarks carry both.
Only pairs with a non-zero count are stored.
"""

from collections import Counter
from itertools import combinations
import logging

from crosstag.models import BookmarkItem
from crosstag.storage import EntityRepository

logger = logging.getLogger(__name__)


def pair_key(first: str, second: str) -> str:
    """Canonical key for a tag pair: both ids sorted and joined with ``|``."""
    if first < second:
        return f"{first}|{second}"
    return f"{second}|{first}"


def recompute_cooccurrence(bookmarks: dict[str, BookmarkItem]) -> dict[str, int]:
    """Build the sparse pair-count map from scratch."""
    counts: Counter[str] = Counter()
    for bookmark in bookmarks.values():
        for first, second in combinations(bookmark.tags, 2):
            if first == second:
                continue
            counts[pair_key(first, second)] += 1
    return dict(counts)


class CooccurrenceService:
    """Keeps the stored co-occurrence index in step with the bookmarks."""

    def __init__(self, repository: EntityRepository):
        self.repository = repository

    async def sync(self) -> dict[str, int]:
        """Recompute the index from stored bookmarks and write it back."""
        async with self.repository.transaction():
            bookmarks = await self.repository.get_bookmarks_map()
            cooccurrence = recompute_cooccurrence(bookmarks)
            await self.repository.save_cooccurrence_map(cooccurrence)
        logger.debug(f"Co-occurrence index refreshed: {len(cooccurrence)} pairs")
        return cooccurrence

    async def get_cooccurrence(self) -> dict[str, int]:
        return await self.repository.get_cooccurrence_map()
