"""Tests for settings and store wiring."""

import os
from pathlib import Path
from unittest.mock import patch

import pytest

from crosstag.models import BookmarkCreate
from crosstag.services.data_access import DataAccessService, create_store
from crosstag.settings import CrossTagSettings, get_settings, reset_settings
from crosstag.storage import JsonFileStore, MemoryStore


@pytest.fixture(autouse=True)
def clear_settings():
    reset_settings()
    yield
    reset_settings()


def test_defaults():
    with patch.dict(os.environ, {}, clear=True):
        settings = CrossTagSettings(_env_file=None)

    assert settings.storage_backend == "json"
    assert settings.click_history_limit == 100
    assert settings.hot_tags_limit == 6
    assert settings.product_name == "CrossTag Bookmarks"
    assert settings.store_path == settings.data_dir / "store.json"
    assert settings.log_to_file is False


def test_environment_overrides(tmp_path):
    env = {
        "CROSSTAG_STORAGE_BACKEND": "memory",
        "CROSSTAG_DATA_DIR": str(tmp_path),
        "CROSSTAG_CLICK_HISTORY_LIMIT": "10",
        "CROSSTAG_LOG_TO_FILE": "true",
    }
    with patch.dict(os.environ, env, clear=True):
        settings = get_settings()

    assert settings.storage_backend == "memory"
    assert settings.data_dir == Path(tmp_path)
    assert settings.click_history_limit == 10
    assert settings.log_to_file is True
    assert get_settings() is settings


def test_create_store_selects_backend(tmp_path):
    json_settings = CrossTagSettings(_env_file=None, data_dir=tmp_path)
    memory_settings = CrossTagSettings(_env_file=None, storage_backend="memory")

    json_store = create_store(json_settings)

    assert isinstance(json_store, JsonFileStore)
    assert json_store.path == tmp_path / "store.json"
    assert isinstance(create_store(memory_settings), MemoryStore)


@pytest.mark.asyncio
async def test_initialize_seeds_defaults_when_enabled(tmp_path):
    settings = CrossTagSettings(
        _env_file=None, storage_backend="memory", seed_default_tags=True
    )
    service = DataAccessService(settings=settings)

    await service.initialize()
    await service.initialize()

    assert len(await service.tags.get_all_tags()) == 3


@pytest.mark.asyncio
async def test_click_history_limit_comes_from_settings(clock):
    settings = CrossTagSettings(
        _env_file=None, storage_backend="memory", click_history_limit=3
    )
    service = DataAccessService(settings=settings, clock=clock)
    bookmark = await service.bookmarks.create_bookmark(
        BookmarkCreate(url="https://a.com")
    )

    for _ in range(5):
        await service.bookmarks.increment_click(bookmark.id)

    stored = await service.bookmarks.get_bookmark(bookmark.id)
    assert len(stored.click_history) == 3
    assert stored.click_count == 5


@pytest.mark.asyncio
async def test_reset_removes_everything(data_service, memory_store):
    await data_service.tags.ensure_defaults()

    await data_service.reset()

    assert memory_store._data == {}
