"""
Service for workstation lifecycle operations.

Workstations reference bookmarks by id. Deleting a bookmark does not
touch workstations, so readers resolve ids and skip the ones that no
longer exist.
"""

from collections.abc import Awaitable, Callable
import logging

from crosstag.models import (
    BookmarkItem,
    Workstation,
    WorkstationCreate,
    WorkstationUpdate,
)
from crosstag.services.colors import ColorTally, resolve_color
from crosstag.storage import EntityRepository
from crosstag.utils.helpers import generate_id, now_ms

logger = logging.getLogger(__name__)

UrlOpener = Callable[[list[str]], Awaitable[None]]


class WorkstationService:
    """Create, update, delete and open workstations."""

    def __init__(
        self,
        repository: EntityRepository,
        clock: Callable[[], int] = now_ms,
    ):
        self.repository = repository
        self.clock = clock

    # -------------------- Queries --------------------

    async def get_all_workstations(self) -> list[Workstation]:
        workstations = await self.repository.get_workstations_map()
        return list(workstations.values())

    async def get_workstation(self, workstation_id: str) -> Workstation | None:
        workstations = await self.repository.get_workstations_map()
        return workstations.get(workstation_id)

    async def get_workstation_bookmarks(
        self, workstation_id: str
    ) -> list[BookmarkItem] | None:
        """Resolve member bookmarks in list order, skipping dangling ids."""
        workstation = await self.get_workstation(workstation_id)
        if workstation is None:
            return None
        bookmarks = await self.repository.get_bookmarks_map()
        return [bookmarks[b] for b in workstation.bookmarks if b in bookmarks]

    # -------------------- Mutations --------------------

    async def create_workstation(self, payload: WorkstationCreate) -> Workstation:
        async with self.repository.transaction():
            workstations = await self.repository.get_workstations_map()
            tally = ColorTally(ws.color for ws in workstations.values())
            now = self.clock()
            workstation_id = generate_id("ws", workstations)
            workstation = Workstation(
                id=workstation_id,
                name=payload.name,
                description=payload.description,
                color=resolve_color(payload.color, tally),
                pinned=payload.pinned,
                created_at=now,
                updated_at=now,
            )
            workstations[workstation_id] = workstation
            await self.repository.save_workstations_map(workstations)

        logger.debug(f"Created workstation {workstation_id} ({workstation.name})")
        return workstation

    async def update_workstation(
        self, workstation_id: str, patch: WorkstationUpdate
    ) -> Workstation | None:
        async with self.repository.transaction():
            workstations = await self.repository.get_workstations_map()
            target = workstations.get(workstation_id)
            if target is None:
                logger.debug(f"update_workstation: {workstation_id} not found")
                return None

            changes = {
                key: value
                for key, value in patch.model_dump(exclude_unset=True).items()
                if value is not None or key == "description"
            }
            updated = target.with_changes(**changes, updated_at=self.clock())
            workstations[workstation_id] = updated
            await self.repository.save_workstations_map(workstations)

        return updated

    async def delete_workstation(self, workstation_id: str) -> bool:
        async with self.repository.transaction():
            workstations = await self.repository.get_workstations_map()
            if workstation_id not in workstations:
                logger.debug(f"delete_workstation: {workstation_id} not found")
                return False
            del workstations[workstation_id]
            await self.repository.save_workstations_map(workstations)
        return True

    async def add_bookmark_to_workstation(
        self, workstation_id: str, bookmark_id: str
    ) -> Workstation | None:
        """Append a bookmark id; unchanged if already a member."""
        async with self.repository.transaction():
            workstations = await self.repository.get_workstations_map()
            workstation = workstations.get(workstation_id)
            if workstation is None:
                return None
            if bookmark_id in workstation.bookmarks:
                return workstation

            updated = workstation.with_changes(
                bookmarks=[*workstation.bookmarks, bookmark_id],
                updated_at=self.clock(),
            )
            workstations[workstation_id] = updated
            await self.repository.save_workstations_map(workstations)

        return updated

    async def remove_bookmark_from_workstation(
        self, workstation_id: str, bookmark_id: str
    ) -> Workstation | None:
        async with self.repository.transaction():
            workstations = await self.repository.get_workstations_map()
            workstation = workstations.get(workstation_id)
            if workstation is None:
                return None

            updated = workstation.with_changes(
                bookmarks=[b for b in workstation.bookmarks if b != bookmark_id],
                updated_at=self.clock(),
            )
            workstations[workstation_id] = updated
            await self.repository.save_workstations_map(workstations)

        return updated

    async def open_workstation(
        self, workstation_id: str, opener: UrlOpener | None = None
    ) -> list[str] | None:
        """
        Open every member bookmark and count the open.

        Args:
            workstation_id: Workstation to open
            opener: Optional async callback receiving the resolved URLs

        Returns:
            The URLs that were resolved, or None if the workstation does
            not exist
        """
        async with self.repository.transaction():
            workstations = await self.repository.get_workstations_map()
            workstation = workstations.get(workstation_id)
            if workstation is None:
                return None

            bookmarks = await self.repository.get_bookmarks_map()
            urls = [
                bookmarks[b].url
                for b in workstation.bookmarks
                if b in bookmarks and bookmarks[b].url
            ]
            workstations[workstation_id] = workstation.model_copy(
                update={
                    "click_count": workstation.click_count + 1,
                    "updated_at": self.clock(),
                }
            )
            await self.repository.save_workstations_map(workstations)

        # The store lock is not re-entrant; openers may call back into services
        if urls and opener is not None:
            await opener(urls)

        logger.debug(f"Opened workstation {workstation_id} ({len(urls)} urls)")
        return urls
