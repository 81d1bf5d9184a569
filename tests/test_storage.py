"""Tests for entity stores and the repository."""

import asyncio
import json
from unittest.mock import AsyncMock

import pytest

from crosstag.models import BookmarkCreate, Tag
from crosstag.services.bookmark_service import BookmarkService
from crosstag.storage import EntityRepository, JsonFileStore, MemoryStore, StorageKey
from crosstag.utils.errors import StoreError


@pytest.mark.asyncio
async def test_memory_store_isolates_callers():
    store = MemoryStore()
    value = {"t1": {"name": "Dev"}}
    await store.write(StorageKey.TAGS, value)
    value["t1"]["name"] = "Changed"

    read = await store.read(StorageKey.TAGS)
    read["t1"]["name"] = "Also changed"

    assert (await store.read(StorageKey.TAGS))["t1"]["name"] == "Dev"
    assert await store.read("absent") == {}


@pytest.mark.asyncio
async def test_json_store_round_trip(tmp_path):
    path = tmp_path / "nested" / "store.json"
    store = JsonFileStore(path)

    await store.write_many(
        {StorageKey.TAGS: {"t1": {"name": "Dev"}}, StorageKey.BOOKMARKS: {}}
    )
    await store.write(StorageKey.COOCCURRENCE, {"a|b": 1})
    await store.remove(StorageKey.BOOKMARKS)

    reopened = JsonFileStore(path)
    assert await reopened.read(StorageKey.TAGS) == {"t1": {"name": "Dev"}}
    assert await reopened.read(StorageKey.COOCCURRENCE) == {"a|b": 1}
    assert await reopened.read(StorageKey.BOOKMARKS) == {}
    assert [p.name for p in path.parent.iterdir()] == ["store.json"]


@pytest.mark.asyncio
async def test_json_store_clear(tmp_path):
    store = JsonFileStore(tmp_path / "store.json")
    await store.write(StorageKey.TAGS, {"t1": {"name": "Dev"}})

    await store.clear()

    assert json.loads((tmp_path / "store.json").read_text(encoding="utf-8")) == {}


@pytest.mark.asyncio
@pytest.mark.parametrize("content", [b"{not json", b"\xff\xfe\x00{", b"[1, 2]"])
async def test_json_store_rejects_corrupt_file(tmp_path, content):
    path = tmp_path / "store.json"
    path.write_bytes(content)

    with pytest.raises(StoreError):
        await JsonFileStore(path).read(StorageKey.TAGS)


@pytest.mark.asyncio
async def test_store_failures_propagate_without_retry(clock):
    store = AsyncMock(spec=MemoryStore)
    store.read.return_value = {}
    store.write_many.side_effect = StoreError("disk full")
    service = BookmarkService(EntityRepository(store), clock=clock)

    with pytest.raises(StoreError):
        await service.create_bookmark(BookmarkCreate(url="https://a.com"))

    assert store.write_many.await_count == 1


@pytest.mark.asyncio
async def test_repository_injects_ids_and_skips_malformed_records(memory_store):
    await memory_store.write(
        StorageKey.TAGS, {"t1": {"name": "Dev", "usageCount": 2}, "t2": "garbage"}
    )
    repository = EntityRepository(memory_store)

    tags = await repository.get_tags_map()

    assert tags == {"t1": Tag(id="t1", name="Dev", usage_count=2)}


@pytest.mark.asyncio
async def test_repository_writes_camel_case(repository, memory_store):
    await repository.save_tags_map({"t1": Tag(id="t1", name="Dev", created_at=5)})

    stored = await memory_store.read(StorageKey.TAGS)

    assert stored["t1"]["createdAt"] == 5
    assert "created_at" not in stored["t1"]


@pytest.mark.asyncio
async def test_concurrent_mutations_are_serialized(data_service):
    await asyncio.gather(
        *(
            data_service.bookmarks.create_bookmark(
                BookmarkCreate(url=f"https://site{i}.com")
            )
            for i in range(20)
        )
    )

    assert len(await data_service.bookmarks.get_all_bookmarks()) == 20


@pytest.mark.asyncio
async def test_concurrent_json_store_mutations_are_serialized(tmp_path, clock):
    service = BookmarkService(
        EntityRepository(JsonFileStore(tmp_path / "store.json")), clock=clock
    )

    await asyncio.gather(
        *(
            service.create_bookmark(BookmarkCreate(url=f"https://site{i}.com"))
            for i in range(10)
        )
    )

    assert len(await service.get_all_bookmarks()) == 10
