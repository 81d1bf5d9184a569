"""
Service for ingesting the browser's native bookmark tree.

Every bookmark leaf is deduplicated by case-insensitive URL against the
library (including bookmarks created earlier in the same run). Folder
paths can optionally become tags, either one tag for the whole path
(``hierarchical``) or one tag per folder (``independent``). Tags created
from paths are recorded in ``path_tag_ids`` so a later run can replace
them without touching tags the user added by hand.
"""

from collections.abc import Callable
import logging

from crosstag.clients.browser_bookmarks import (
    BrowserBookmarkNode,
    BrowserBookmarkSource,
)
from crosstag.models import (
    BookmarkItem,
    IngestionOptions,
    IngestionResult,
    PathMode,
    Tag,
)
from crosstag.services.aggregation import recompute_tag_aggregates
from crosstag.services.colors import ColorTally
from crosstag.services.cooccurrence import recompute_cooccurrence
from crosstag.storage import EntityRepository
from crosstag.utils.errors import BrowserBookmarksUnavailableError
from crosstag.utils.helpers import favicon_url, generate_id, now_ms, unique

logger = logging.getLogger(__name__)

PATH_SEPARATOR = "/"


def extract_bookmark_nodes(
    tree: list[BrowserBookmarkNode],
) -> list[tuple[BrowserBookmarkNode, list[str]]]:
    """
    Flatten the forest into ``(leaf, folder_path)`` pairs.

    The roots and the top-level groups directly below them (bookmarks
    bar, other bookmarks, ...) do not contribute to the path. Folders with
    blank titles are skipped as well.
    """
    result: list[tuple[BrowserBookmarkNode, list[str]]] = []

    def traverse(nodes: list[BrowserBookmarkNode], depth: int, path: list[str]) -> None:
        for node in nodes:
            if node.url:
                result.append((node, path))
            if node.children:
                title = (node.title or "").strip()
                child_path = [*path, title] if depth >= 2 and title else path
                traverse(node.children, depth + 1, child_path)

    traverse(tree, 0, [])
    return result


def compute_path_tag_names(path: list[str], mode: PathMode) -> list[str]:
    """Tag names derived from a folder path."""
    if not path:
        return []
    if mode == "hierarchical":
        return [PATH_SEPARATOR.join(path)]

    seen: set[str] = set()
    names: list[str] = []
    for segment in path:
        key = segment.lower()
        if key not in seen:
            seen.add(key)
            names.append(segment)
    return names


class BrowserImportService:
    """Merge browser bookmarks into the library."""

    def __init__(
        self,
        repository: EntityRepository,
        source: BrowserBookmarkSource | None = None,
        clock: Callable[[], int] = now_ms,
    ):
        self.repository = repository
        self.source = source
        self.clock = clock

    async def import_browser_bookmarks(
        self,
        options: IngestionOptions | None = None,
        source: BrowserBookmarkSource | None = None,
    ) -> IngestionResult:
        """
        Import every bookmark from the browser tree.

        Args:
            options: Path-to-tag conversion settings
            source: Overrides the source given at construction

        Returns:
            Counts of imported, skipped (already present), updated-existing
            (path tags re-applied) and total leaves seen

        Raises:
            BrowserBookmarksUnavailableError: no source is available
        """
        options = options or IngestionOptions()
        source = source or self.source
        if source is None:
            raise BrowserBookmarksUnavailableError(
                "Browser bookmarks API is not available",
                suggestion="Provide a source such as a Chrome 'Bookmarks' file",
            )

        tree = await source.get_tree()
        leaves = extract_bookmark_nodes(tree)
        logger.info(f"🔍 Found {len(leaves)} browser bookmarks")

        async with self.repository.transaction():
            result = await self._ingest(leaves, options)

        logger.info(
            f"📊 Browser import complete: {result.imported} imported, "
            f"{result.skipped} skipped, {result.updated_existing} updated"
        )
        return result

    async def _ingest(
        self,
        leaves: list[tuple[BrowserBookmarkNode, list[str]]],
        options: IngestionOptions,
    ) -> IngestionResult:
        bookmarks = await self.repository.get_bookmarks_map()
        tags = await self.repository.get_tags_map()
        now = self.clock()
        result = IngestionResult(total=len(leaves))

        bookmark_ids_by_url: dict[str, str] = {}
        for bookmark in bookmarks.values():
            bookmark_ids_by_url.setdefault(bookmark.url.lower(), bookmark.id)
        tag_ids_by_name: dict[str, str] = {}
        for tag in tags.values():
            tag_ids_by_name.setdefault(tag.name.lower(), tag.id)
        tally = ColorTally(tag.color for tag in tags.values())

        tags_changed = False
        bookmarks_changed = False
        handled_ids: set[str] = set()

        def ensure_tag(name: str) -> str:
            nonlocal tags_changed
            key = name.lower()
            existing = tag_ids_by_name.get(key)
            if existing is not None:
                return existing
            tag_id = generate_id("tag", tags)
            tags[tag_id] = Tag(
                id=tag_id,
                name=name,
                color=tally.assign(),
                created_at=now,
                updated_at=now,
            )
            tag_ids_by_name[key] = tag_id
            tags_changed = True
            return tag_id

        def path_tags_for(path: list[str]) -> list[str]:
            if not options.convert_path_to_tags:
                return []
            names = compute_path_tag_names(path, options.path_mode)
            return unique(ensure_tag(name) for name in names)

        for node, path in leaves:
            url = node.url or ""
            existing_id = bookmark_ids_by_url.get(url.lower())
            if existing_id is not None:
                result.skipped += 1
                # A bookmark takes the path of its first occurrence in the tree
                if (
                    options.convert_path_to_tags
                    and options.convert_existing
                    and existing_id not in handled_ids
                ):
                    updated = self._reapply_path_tags(
                        bookmarks[existing_id], path_tags_for(path), now
                    )
                    if updated is not None:
                        bookmarks[existing_id] = updated
                        bookmarks_changed = True
                        result.updated_existing += 1
                    handled_ids.add(existing_id)
                continue

            path_tag_ids = path_tags_for(path)
            bookmark_id = generate_id("bm", bookmarks)
            bookmarks[bookmark_id] = BookmarkItem(
                id=bookmark_id,
                url=url,
                title=node.title or url,
                tags=path_tag_ids,
                path_tag_ids=path_tag_ids if options.convert_path_to_tags else None,
                thumbnail=favicon_url(url),
                created_at=node.date_added or now,
                updated_at=now,
            )
            bookmark_ids_by_url[url.lower()] = bookmark_id
            handled_ids.add(bookmark_id)
            bookmarks_changed = True
            result.imported += 1

        if tags_changed or bookmarks_changed:
            tags = recompute_tag_aggregates(bookmarks, tags)
            await self.repository.save_collections(
                tags=tags,
                bookmarks=bookmarks if bookmarks_changed else None,
                cooccurrence=recompute_cooccurrence(bookmarks),
            )

        return result

    @staticmethod
    def _reapply_path_tags(
        bookmark: BookmarkItem, path_tag_ids: list[str], now: int
    ) -> BookmarkItem | None:
        """
        Swap the bookmark's previous path tags for ``path_tag_ids``.

        Returns None when neither the tag set nor the recorded path tags
        would change.
        """
        previous = bookmark.path_tag_ids or []
        manual = [tag_id for tag_id in bookmark.tags if tag_id not in previous]
        new_tags = unique([*manual, *path_tag_ids])

        if set(new_tags) == set(bookmark.tags) and set(previous) == set(path_tag_ids):
            return None

        return bookmark.with_changes(
            tags=new_tags, path_tag_ids=path_tag_ids, updated_at=now
        )
