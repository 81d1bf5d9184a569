"""
Service for bookmark lifecycle operations and click tracking.

Create, update and delete finish by recomputing tag aggregates and the
co-occurrence index. A click only changes click counts, so it refreshes
the aggregates and leaves the co-occurrence index alone.
"""

from collections.abc import Callable
import logging

from crosstag.models import (
    BookmarkCreate,
    BookmarkItem,
    BookmarkUpdate,
    FilterOptions,
)
from crosstag.services.aggregation import recompute_tag_click_counts
from crosstag.services.derived import commit_with_derived
from crosstag.storage import EntityRepository
from crosstag.utils.helpers import favicon_url, generate_id, now_ms

logger = logging.getLogger(__name__)

CLICK_HISTORY_LIMIT = 100


class BookmarkService:
    """Create, update, delete, click and query bookmarks."""

    def __init__(
        self,
        repository: EntityRepository,
        clock: Callable[[], int] = now_ms,
        click_history_limit: int = CLICK_HISTORY_LIMIT,
    ):
        self.repository = repository
        self.clock = clock
        self.click_history_limit = click_history_limit

    # -------------------- Queries --------------------

    async def get_all_bookmarks(self) -> list[BookmarkItem]:
        bookmarks = await self.repository.get_bookmarks_map()
        return list(bookmarks.values())

    async def get_bookmark(self, bookmark_id: str) -> BookmarkItem | None:
        bookmarks = await self.repository.get_bookmarks_map()
        return bookmarks.get(bookmark_id)

    async def get_bookmark_by_url(self, url: str) -> BookmarkItem | None:
        """Find a bookmark by URL, ignoring case."""
        normalized = url.lower()
        for bookmark in await self.get_all_bookmarks():
            if bookmark.url.lower() == normalized:
                return bookmark
        return None

    async def get_hot_bookmarks(self, limit: int = 10) -> list[BookmarkItem]:
        bookmarks = await self.get_all_bookmarks()
        return sorted(bookmarks, key=lambda b: b.click_count, reverse=True)[:limit]

    async def get_pinned_bookmarks(self) -> list[BookmarkItem]:
        bookmarks = await self.get_all_bookmarks()
        pinned = [b for b in bookmarks if b.pinned]
        return sorted(pinned, key=lambda b: b.updated_at, reverse=True)

    async def filter_bookmarks(self, options: FilterOptions) -> list[BookmarkItem]:
        """
        Filter bookmarks by text query, required tags and pinned flag.

        The query is a case-insensitive substring match over title, note
        and URL. Every tag in ``options.tags`` must be present.
        """
        query = (options.query or "").lower()
        required = set(options.tags)

        def matches(bookmark: BookmarkItem) -> bool:
            if options.only_pinned and not bookmark.pinned:
                return False
            if required and not required.issubset(bookmark.tags):
                return False
            if query:
                text = f"{bookmark.title} {bookmark.note or ''} {bookmark.url}".lower()
                if query not in text:
                    return False
            return True

        results = [b for b in await self.get_all_bookmarks() if matches(b)]
        return sorted(results, key=lambda b: b.updated_at, reverse=True)

    # -------------------- Mutations --------------------

    async def create_bookmark(self, payload: BookmarkCreate) -> BookmarkItem:
        async with self.repository.transaction():
            bookmarks = await self.repository.get_bookmarks_map()
            tags = await self.repository.get_tags_map()
            now = self.clock()
            bookmark_id = generate_id("bm", bookmarks)
            bookmark = BookmarkItem(
                id=bookmark_id,
                url=payload.url,
                title=payload.title,
                note=payload.note or "",
                tags=payload.tags,
                thumbnail=payload.thumbnail or favicon_url(payload.url),
                pinned=payload.pinned,
                created_at=now,
                updated_at=now,
            )
            bookmarks[bookmark_id] = bookmark
            await commit_with_derived(self.repository, bookmarks, tags)

        logger.debug(f"Created bookmark {bookmark_id} ({bookmark.url})")
        return bookmark

    async def update_bookmark(
        self, bookmark_id: str, patch: BookmarkUpdate
    ) -> BookmarkItem | None:
        """
        Apply a partial patch. Returns None if the bookmark does not exist.
        """
        async with self.repository.transaction():
            bookmarks = await self.repository.get_bookmarks_map()
            target = bookmarks.get(bookmark_id)
            if target is None:
                logger.debug(f"update_bookmark: {bookmark_id} not found")
                return None

            changes = {
                key: value
                for key, value in patch.model_dump(exclude_unset=True).items()
                if value is not None
            }
            if not (changes.get("thumbnail") or target.thumbnail):
                changes["thumbnail"] = favicon_url(changes.get("url", target.url))
            updated = target.with_changes(**changes, updated_at=self.clock())
            bookmarks[bookmark_id] = updated

            tags = await self.repository.get_tags_map()
            await commit_with_derived(self.repository, bookmarks, tags)

        return updated

    async def delete_bookmark(self, bookmark_id: str) -> bool:
        """
        Delete a bookmark. Workstations that list it keep the dangling id.

        Returns:
            False if the bookmark did not exist
        """
        async with self.repository.transaction():
            bookmarks = await self.repository.get_bookmarks_map()
            if bookmark_id not in bookmarks:
                logger.debug(f"delete_bookmark: {bookmark_id} not found")
                return False
            del bookmarks[bookmark_id]

            tags = await self.repository.get_tags_map()
            await commit_with_derived(self.repository, bookmarks, tags)

        logger.debug(f"Deleted bookmark {bookmark_id}")
        return True

    async def increment_click(self, bookmark_id: str) -> BookmarkItem | None:
        """
        Record one click: bump ``click_count`` and push a timestamp onto
        ``click_history`` (newest first, capped).
        """
        async with self.repository.transaction():
            bookmarks = await self.repository.get_bookmarks_map()
            bookmark = bookmarks.get(bookmark_id)
            if bookmark is None:
                logger.debug(f"increment_click: {bookmark_id} not found")
                return None

            timestamp = self.clock()
            history = [timestamp, *bookmark.click_history][: self.click_history_limit]
            bookmark = bookmark.model_copy(
                update={
                    "click_count": bookmark.click_count + 1,
                    "click_history": history,
                    "updated_at": timestamp,
                }
            )
            bookmarks[bookmark_id] = bookmark

            tags = recompute_tag_click_counts(
                bookmarks, await self.repository.get_tags_map()
            )
            await self.repository.save_collections(tags=tags, bookmarks=bookmarks)

        return bookmark

    async def sync_usage_counts(self) -> None:
        """Recompute tag aggregates and the co-occurrence index on demand."""
        async with self.repository.transaction():
            bookmarks = await self.repository.get_bookmarks_map()
            tags = await self.repository.get_tags_map()
            await commit_with_derived(
                self.repository, bookmarks, tags, write_bookmarks=False
            )
