"""
Service for tag lifecycle operations.

Every mutation reads the full collection, changes it in memory and writes
the full collection back. Deleting a tag also strips its id from every
bookmark.
"""

from collections.abc import Callable
import logging

from crosstag.models import Tag, TagCreate, TagUpdate
from crosstag.services.colors import TAG_COLOR_PALETTE, ColorTally, resolve_color
from crosstag.services.derived import commit_with_derived
from crosstag.storage import EntityRepository
from crosstag.utils.helpers import generate_id, now_ms

logger = logging.getLogger(__name__)

DEFAULT_TAGS: tuple[tuple[str, str], ...] = (
    ("Inspiration", TAG_COLOR_PALETTE[0]),
    ("Reading List", TAG_COLOR_PALETTE[7]),
    ("Tools", TAG_COLOR_PALETTE[12]),
)


class TagService:
    """Create, update, delete and rank tags."""

    def __init__(
        self,
        repository: EntityRepository,
        clock: Callable[[], int] = now_ms,
    ):
        self.repository = repository
        self.clock = clock

    # -------------------- Queries --------------------

    async def get_all_tags(self) -> list[Tag]:
        tags = await self.repository.get_tags_map()
        return list(tags.values())

    async def get_tag(self, tag_id: str) -> Tag | None:
        tags = await self.repository.get_tags_map()
        return tags.get(tag_id)

    async def get_hot_tags(self, limit: int = 6) -> list[Tag]:
        """Tags with the highest aggregated click counts."""
        tags = await self.get_all_tags()
        return sorted(tags, key=lambda tag: tag.click_count, reverse=True)[:limit]

    # -------------------- Mutations --------------------

    async def ensure_defaults(self) -> bool:
        """
        Seed the default tags into an empty tag collection.

        Returns:
            True if default tags were created
        """
        async with self.repository.transaction():
            tags = await self.repository.get_tags_map()
            if tags:
                return False

            now = self.clock()
            for name, color in DEFAULT_TAGS:
                tag_id = generate_id("tag", tags)
                tags[tag_id] = Tag(
                    id=tag_id,
                    name=name,
                    color=color,
                    created_at=now,
                    updated_at=now,
                )
            bookmarks = await self.repository.get_bookmarks_map()
            await self.repository.save_collections(tags=tags, bookmarks=bookmarks)

        logger.info(f"Seeded {len(DEFAULT_TAGS)} default tags")
        return True

    async def create_tag(self, payload: TagCreate) -> Tag:
        async with self.repository.transaction():
            tags = await self.repository.get_tags_map()
            tally = ColorTally(tag.color for tag in tags.values())
            now = self.clock()
            tag_id = generate_id("tag", tags)
            tag = Tag(
                id=tag_id,
                name=payload.name,
                color=resolve_color(payload.color, tally),
                description=payload.description,
                created_at=now,
                updated_at=now,
            )
            tags[tag_id] = tag
            await self.repository.save_tags_map(tags)

        logger.debug(f"Created tag {tag_id} ({tag.name})")
        return tag

    async def update_tag(self, tag_id: str, patch: TagUpdate) -> Tag | None:
        """
        Apply a partial patch. Returns None if the tag does not exist.
        """
        async with self.repository.transaction():
            tags = await self.repository.get_tags_map()
            target = tags.get(tag_id)
            if target is None:
                logger.debug(f"update_tag: {tag_id} not found")
                return None

            changes = {
                key: value
                for key, value in patch.model_dump(exclude_unset=True).items()
                if value is not None or key == "description"
            }
            updated = target.with_changes(**changes, updated_at=self.clock())
            tags[tag_id] = updated
            await self.repository.save_tags_map(tags)

        return updated

    async def delete_tag(self, tag_id: str) -> bool:
        """
        Delete a tag and remove its id from every bookmark.

        Returns:
            False if the tag did not exist
        """
        async with self.repository.transaction():
            tags = await self.repository.get_tags_map()
            if tag_id not in tags:
                logger.debug(f"delete_tag: {tag_id} not found")
                return False
            del tags[tag_id]

            bookmarks = await self.repository.get_bookmarks_map()
            touched = 0
            for bookmark_id, bookmark in bookmarks.items():
                if tag_id not in bookmark.tags:
                    continue
                path_tags = bookmark.path_tag_ids
                bookmarks[bookmark_id] = bookmark.with_changes(
                    tags=[t for t in bookmark.tags if t != tag_id],
                    path_tag_ids=(
                        None
                        if path_tags is None
                        else [t for t in path_tags if t != tag_id]
                    ),
                )
                touched += 1

            await commit_with_derived(self.repository, bookmarks, tags)

        logger.debug(f"Deleted tag {tag_id}, removed from {touched} bookmarks")
        return True
