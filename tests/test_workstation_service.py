"""Tests for WorkstationService."""

import asyncio
from unittest.mock import AsyncMock

import pytest

from crosstag.models import BookmarkCreate, WorkstationCreate, WorkstationUpdate


async def _populate(data_service):
    first = await data_service.bookmarks.create_bookmark(
        BookmarkCreate(url="https://a.com")
    )
    second = await data_service.bookmarks.create_bookmark(
        BookmarkCreate(url="https://b.com")
    )
    workstation = await data_service.workstations.create_workstation(
        WorkstationCreate(name="Research")
    )
    return data_service, workstation, first, second


@pytest.mark.asyncio
async def test_add_bookmark_keeps_members_unique(data_service):
    service, workstation, first, _ = await _populate(data_service)

    await service.workstations.add_bookmark_to_workstation(workstation.id, first.id)
    updated = await service.workstations.add_bookmark_to_workstation(
        workstation.id, first.id
    )

    assert updated.bookmarks == [first.id]


@pytest.mark.asyncio
async def test_remove_bookmark(data_service):
    service, workstation, first, second = await _populate(data_service)
    await service.workstations.add_bookmark_to_workstation(workstation.id, first.id)
    await service.workstations.add_bookmark_to_workstation(workstation.id, second.id)

    updated = await service.workstations.remove_bookmark_from_workstation(
        workstation.id, first.id
    )

    assert updated.bookmarks == [second.id]


@pytest.mark.asyncio
async def test_bookmark_delete_leaves_dangling_member_that_readers_skip(data_service):
    service, workstation, first, second = await _populate(data_service)
    await service.workstations.add_bookmark_to_workstation(workstation.id, first.id)
    await service.workstations.add_bookmark_to_workstation(workstation.id, second.id)

    await service.bookmarks.delete_bookmark(first.id)

    stored = await service.workstations.get_workstation(workstation.id)
    assert stored.bookmarks == [first.id, second.id]
    members = await service.workstations.get_workstation_bookmarks(workstation.id)
    assert [b.id for b in members] == [second.id]


@pytest.mark.asyncio
async def test_open_workstation_passes_urls_and_counts(data_service):
    service, workstation, first, second = await _populate(data_service)
    await service.workstations.add_bookmark_to_workstation(workstation.id, first.id)
    await service.workstations.add_bookmark_to_workstation(workstation.id, second.id)
    await service.bookmarks.delete_bookmark(second.id)
    opener = AsyncMock()

    urls = await service.workstations.open_workstation(workstation.id, opener=opener)

    assert urls == ["https://a.com"]
    opener.assert_awaited_once_with(["https://a.com"])
    stored = await service.workstations.get_workstation(workstation.id)
    assert stored.click_count == 1


@pytest.mark.asyncio
async def test_opener_can_call_back_into_services(data_service):
    service, workstation, first, _ = await _populate(data_service)
    await service.workstations.add_bookmark_to_workstation(workstation.id, first.id)

    async def record_clicks(urls):
        for url in urls:
            bookmark = await service.bookmarks.get_bookmark_by_url(url)
            await service.bookmarks.increment_click(bookmark.id)

    urls = await asyncio.wait_for(
        service.workstations.open_workstation(workstation.id, opener=record_clicks),
        timeout=2,
    )

    assert urls == ["https://a.com"]
    assert (await service.bookmarks.get_bookmark(first.id)).click_count == 1
    assert (await service.workstations.get_workstation(workstation.id)).click_count == 1


@pytest.mark.asyncio
async def test_open_empty_workstation_skips_opener(data_service):
    service, workstation, _, _ = await _populate(data_service)
    opener = AsyncMock()

    urls = await service.workstations.open_workstation(workstation.id, opener=opener)

    assert urls == []
    opener.assert_not_awaited()


@pytest.mark.asyncio
async def test_missing_workstation_operations_return_none(data_service):
    workstations = data_service.workstations

    assert await workstations.open_workstation("ws_missing") is None
    assert await workstations.get_workstation_bookmarks("ws_missing") is None
    assert (
        await workstations.add_bookmark_to_workstation("ws_missing", "bm_x") is None
    )
    assert (
        await workstations.update_workstation("ws_missing", WorkstationUpdate(name="x"))
        is None
    )
    assert await workstations.delete_workstation("ws_missing") is False


@pytest.mark.asyncio
async def test_update_and_delete_workstation(data_service):
    service, workstation, _, _ = await _populate(data_service)

    updated = await service.workstations.update_workstation(
        workstation.id, WorkstationUpdate(name="Reading", pinned=True)
    )
    assert updated.name == "Reading"
    assert updated.pinned is True
    assert updated.color == workstation.color

    assert await service.workstations.delete_workstation(workstation.id) is True
    assert await service.workstations.get_all_workstations() == []
