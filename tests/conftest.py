import itertools

import pytest

from crosstag.services.data_access import DataAccessService
from crosstag.settings import CrossTagSettings
from crosstag.storage import EntityRepository, MemoryStore


class CounterClock:
    """Deterministic clock returning strictly increasing milliseconds."""

    def __init__(self, start: int = 1_700_000_000_000):
        self._ticks = itertools.count(start)

    def __call__(self) -> int:
        return next(self._ticks)


@pytest.fixture
def clock():
    return CounterClock()


@pytest.fixture
def memory_store():
    return MemoryStore()


@pytest.fixture
def repository(memory_store):
    return EntityRepository(memory_store)


@pytest.fixture
def memory_settings(tmp_path):
    return CrossTagSettings(
        storage_backend="memory",
        data_dir=tmp_path,
        seed_default_tags=False,
    )


@pytest.fixture
def data_service(memory_store, memory_settings, clock):
    """DataAccessService over an empty in-memory store."""
    return DataAccessService(store=memory_store, settings=memory_settings, clock=clock)
