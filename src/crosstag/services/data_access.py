"""
Facade wiring every service to one entity store.

Callers (CLI, extension bridges, tests) construct a single
``DataAccessService`` and reach tags, bookmarks, workstations, import/export
and browser ingestion through it. All services share one repository and
therefore one transaction lock.
"""

from collections.abc import Callable
import logging

from crosstag.clients.browser_bookmarks import BrowserBookmarkSource
from crosstag.services.bookmark_service import BookmarkService
from crosstag.services.browser_import import BrowserImportService
from crosstag.services.cooccurrence import CooccurrenceService
from crosstag.services.import_export import ImportExportService
from crosstag.services.tag_service import TagService
from crosstag.services.workstation_service import WorkstationService
from crosstag.settings import CrossTagSettings, get_settings
from crosstag.storage import EntityRepository, EntityStore, JsonFileStore, MemoryStore
from crosstag.utils.errors import ConfigurationError
from crosstag.utils.helpers import now_ms

logger = logging.getLogger(__name__)


def create_store(settings: CrossTagSettings) -> EntityStore:
    """Build the configured store backend."""
    if settings.storage_backend == "memory":
        return MemoryStore()
    if settings.storage_backend == "json":
        return JsonFileStore(settings.store_path)
    raise ConfigurationError(f"Unknown storage backend: {settings.storage_backend}")


class DataAccessService:
    """Single entry point over all CrossTag services."""

    def __init__(
        self,
        store: EntityStore | None = None,
        settings: CrossTagSettings | None = None,
        browser_source: BrowserBookmarkSource | None = None,
        clock: Callable[[], int] = now_ms,
    ):
        self.settings = settings or get_settings()
        self.store = store if store is not None else create_store(self.settings)
        self.repository = EntityRepository(self.store)

        self.tags = TagService(self.repository, clock=clock)
        self.bookmarks = BookmarkService(
            self.repository,
            clock=clock,
            click_history_limit=self.settings.click_history_limit,
        )
        self.workstations = WorkstationService(self.repository, clock=clock)
        self.cooccurrence = CooccurrenceService(self.repository)
        self.transfer = ImportExportService(
            self.repository,
            clock=clock,
            product_name=self.settings.product_name,
            version=self.settings.export_version,
            click_history_limit=self.settings.click_history_limit,
        )
        self.browser = BrowserImportService(
            self.repository, source=browser_source, clock=clock
        )
        logger.debug(f"Data access ready ({type(self.store).__name__})")

    async def initialize(self) -> None:
        """Seed default tags when configured and the library is empty."""
        if self.settings.seed_default_tags:
            await self.tags.ensure_defaults()

    async def reset(self) -> None:
        """Delete all stored data."""
        await self.repository.reset()
        logger.info("All stored data removed")
