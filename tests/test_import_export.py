"""Tests for snapshot export and the import merge engine."""

from datetime import datetime
import json

import pytest

from crosstag.models import (
    BookmarkCreate,
    ImportOptions,
    TagCreate,
    WorkstationCreate,
)
from crosstag.services.data_access import DataAccessService
from crosstag.services.import_export import (
    generate_export_filename,
    parse_import_content,
)
from crosstag.storage import MemoryStore
from crosstag.utils.errors import ImportFormatError


def _snapshot(data, has_history=False):
    return json.dumps(
        {
            "metadata": {
                "version": "1.0",
                "exportedAt": 1,
                "hasClickHistory": has_history,
                "productName": "CrossTag Bookmarks",
            },
            "data": data,
        }
    )


async def _seed_library(service):
    dev = await service.tags.create_tag(TagCreate(name="Dev"))
    docs = await service.tags.create_tag(TagCreate(name="Docs"))
    first = await service.bookmarks.create_bookmark(
        BookmarkCreate(url="https://a.com", title="A", tags=[dev.id, docs.id])
    )
    second = await service.bookmarks.create_bookmark(
        BookmarkCreate(url="https://b.com", title="B", tags=[dev.id])
    )
    workstation = await service.workstations.create_workstation(
        WorkstationCreate(name="Daily")
    )
    await service.workstations.add_bookmark_to_workstation(workstation.id, first.id)
    await service.workstations.add_bookmark_to_workstation(workstation.id, second.id)
    await service.bookmarks.increment_click(first.id)
    return dev, docs, first, second, workstation


# -------------------- Parsing --------------------


@pytest.mark.parametrize(
    "content",
    [
        "not json",
        json.dumps({"data": {"bookmarks": {}}}),
        json.dumps({"metadata": {"version": "1.0"}}),
        json.dumps({"metadata": {"version": "1.0"}, "data": {"workstations": {}}}),
        _snapshot({"bookmarks": {"b1": {"title": "no url"}}}),
        _snapshot({"tags": {"t1": {"color": "#fff"}}}),
        _snapshot({"bookmarks": [], "tags": []}),
        _snapshot({"bookmarks": 0, "tags": {}}),
        _snapshot({"bookmarks": {}, "tags": ""}),
        _snapshot({"bookmarks": {}, "tags": False}),
        _snapshot({"bookmarks": {}, "workstations": []}),
    ],
)
def test_malformed_files_are_rejected(content):
    with pytest.raises(ImportFormatError):
        parse_import_content(content)


def test_parse_reports_entity_counts():
    file_data = parse_import_content(
        _snapshot(
            {
                "tags": {"t1": {"name": "Dev"}},
                "bookmarks": {"b1": {"url": "https://a.com"}},
            }
        )
    )

    assert file_data.tags_count == 1
    assert file_data.bookmarks_count == 1
    assert file_data.workstations_count == 0
    assert file_data.metadata.product_name == "CrossTag Bookmarks"


@pytest.mark.asyncio
async def test_malformed_import_writes_nothing(data_service, memory_store, tmp_path):
    bad = tmp_path / "bad.json"
    bad.write_text("{broken", encoding="utf-8")

    with pytest.raises(ImportFormatError):
        await data_service.transfer.parse_import_file(bad)

    assert memory_store._data == {}


@pytest.mark.asyncio
async def test_list_shaped_collections_cannot_wipe_library(data_service, tmp_path):
    _, _, first, second, _ = await _seed_library(data_service)
    bad = tmp_path / "lists.json"
    bad.write_text(
        json.dumps(
            {"metadata": {"version": "1.0"}, "data": {"bookmarks": [], "tags": []}}
        ),
        encoding="utf-8",
    )

    with pytest.raises(ImportFormatError):
        file_data = await data_service.transfer.parse_import_file(bad)
        await data_service.transfer.import_data(
            file_data, ImportOptions(mode="overwrite")
        )

    bookmarks = await data_service.bookmarks.get_all_bookmarks()
    assert {b.id for b in bookmarks} == {first.id, second.id}
    assert len(await data_service.tags.get_all_tags()) == 2


@pytest.mark.asyncio
async def test_missing_import_file_raises_format_error(data_service, tmp_path):
    with pytest.raises(ImportFormatError):
        await data_service.transfer.parse_import_file(tmp_path / "absent.json")


def test_generate_export_filename():
    name = generate_export_filename("CrossTag Bookmarks", datetime(2025, 1, 2, 3, 4, 5))

    assert name == "CrossTag Bookmarks_20250102_030405.json"


# -------------------- Export --------------------


@pytest.mark.asyncio
async def test_export_strips_derived_fields(data_service):
    await _seed_library(data_service)

    exported = json.loads(await data_service.transfer.export_data())

    assert exported["metadata"]["version"] == "1.0"
    assert exported["metadata"]["hasClickHistory"] is False
    for tag in exported["data"]["tags"].values():
        assert "usageCount" not in tag
        assert "clickCount" not in tag
    for bookmark in exported["data"]["bookmarks"].values():
        assert "clickCount" not in bookmark
        assert "clickHistory" not in bookmark
    for workstation in exported["data"]["workstations"].values():
        assert "clickCount" not in workstation


@pytest.mark.asyncio
async def test_export_includes_history_only_when_requested(data_service):
    _, _, first, second, _ = await _seed_library(data_service)

    exported = json.loads(await data_service.transfer.export_data(include_history=True))

    bookmarks = exported["data"]["bookmarks"]
    assert exported["metadata"]["hasClickHistory"] is True
    assert len(bookmarks[first.id]["clickHistory"]) == 1
    assert "clickHistory" not in bookmarks[second.id]


@pytest.mark.asyncio
async def test_write_export_into_directory(data_service, tmp_path):
    await _seed_library(data_service)

    target = await data_service.transfer.write_export(tmp_path)

    assert target.parent == tmp_path
    assert target.name.startswith("CrossTag Bookmarks_")
    assert parse_import_content(target.read_text(encoding="utf-8")).tags_count == 2


# -------------------- Incremental import --------------------


@pytest.mark.asyncio
async def test_incremental_merge_with_overlap(data_service, memory_store):
    await memory_store.write_many(
        {
            "tbm.tags": {"dev": {"name": "Dev"}},
            "tbm.bookmarks": {"a": {"url": "https://a.com", "tags": ["dev"]}},
        }
    )
    file_data = parse_import_content(
        _snapshot(
            {
                "tags": {"x_dev": {"name": "Dev"}},
                "bookmarks": {
                    "x_a": {"url": "https://A.com", "tags": ["x_dev"]},
                    "x_b": {"url": "https://b.com", "tags": ["x_dev"]},
                },
            }
        )
    )

    result = await data_service.transfer.import_data(file_data)

    assert result.imported.tags == 0
    assert result.skipped.tags == 1
    assert result.imported.bookmarks == 1
    assert result.skipped.bookmarks == 1
    tags = await data_service.tags.get_all_tags()
    assert [(tag.name, tag.usage_count) for tag in tags] == [("Dev", 2)]
    imported = await data_service.bookmarks.get_bookmark_by_url("https://b.com")
    assert imported.tags == ["dev"]


@pytest.mark.asyncio
async def test_incremental_import_is_idempotent(data_service, clock):
    await _seed_library(data_service)
    file_data = parse_import_content(await data_service.transfer.export_data())
    target = DataAccessService(
        store=MemoryStore(), settings=data_service.settings, clock=clock
    )

    first = await target.transfer.import_data(file_data)
    second = await target.transfer.import_data(file_data)

    assert first.imported.model_dump() == {"bookmarks": 2, "tags": 2, "workstations": 1}
    assert set(second.imported.model_dump().values()) == {0}
    assert second.skipped.model_dump() == first.imported.model_dump()
    assert len(await target.tags.get_all_tags()) == 2
    assert len(await target.bookmarks.get_all_bookmarks()) == 2


@pytest.mark.asyncio
async def test_incremental_import_remaps_colliding_ids(data_service, memory_store):
    await memory_store.write_many(
        {
            "tbm.tags": {"t1": {"name": "Existing"}},
            "tbm.bookmarks": {"b1": {"url": "https://existing.com"}},
        }
    )
    file_data = parse_import_content(
        _snapshot(
            {
                "tags": {"t1": {"name": "Incoming"}},
                "bookmarks": {
                    "b1": {
                        "url": "https://new.com",
                        "tags": ["t1", "unknown"],
                        "pathTagIds": ["t1"],
                    }
                },
                "workstations": {
                    "w1": {"name": "Desk", "bookmarks": ["b1", "nowhere"]}
                },
            }
        )
    )

    await data_service.transfer.import_data(file_data)

    tags = {tag.name: tag.id for tag in await data_service.tags.get_all_tags()}
    new_tag_id = tags["Incoming"]
    assert new_tag_id != "t1"
    bookmark = await data_service.bookmarks.get_bookmark_by_url("https://new.com")
    assert bookmark.id != "b1"
    assert bookmark.tags == [new_tag_id]
    assert bookmark.path_tag_ids == [new_tag_id]
    workstations = await data_service.workstations.get_all_workstations()
    assert workstations[0].bookmarks == [bookmark.id]


@pytest.mark.asyncio
async def test_incremental_workstation_name_collision_is_skipped(data_service):
    existing = await data_service.workstations.create_workstation(
        WorkstationCreate(name="Desk")
    )
    file_data = parse_import_content(
        _snapshot(
            {
                "bookmarks": {"b9": {"url": "https://z.com"}},
                "workstations": {"w9": {"name": "Desk", "bookmarks": ["b9"]}},
            }
        )
    )

    result = await data_service.transfer.import_data(file_data)

    assert result.skipped.workstations == 1
    stored = await data_service.workstations.get_workstation(existing.id)
    assert stored.bookmarks == []


@pytest.mark.asyncio
async def test_incremental_tag_match_is_case_sensitive(data_service):
    await data_service.tags.create_tag(TagCreate(name="dev"))
    file_data = parse_import_content(_snapshot({"tags": {"t": {"name": "Dev"}}}))

    result = await data_service.transfer.import_data(file_data)

    assert result.imported.tags == 1
    assert len(await data_service.tags.get_all_tags()) == 2


@pytest.mark.asyncio
async def test_incremental_history_sets_click_count(data_service):
    file_data = parse_import_content(
        _snapshot(
            {"bookmarks": {"b": {"url": "https://a.com", "clickHistory": [1, 3, 2]}}},
            has_history=True,
        )
    )

    await data_service.transfer.import_data(
        file_data, ImportOptions(include_history=True)
    )

    bookmark = await data_service.bookmarks.get_bookmark_by_url("https://a.com")
    assert bookmark.click_count == 3
    assert bookmark.click_history == [3, 2, 1]


# -------------------- Overwrite import --------------------


@pytest.mark.asyncio
async def test_overwrite_replaces_everything(data_service):
    await _seed_library(data_service)
    file_data = parse_import_content(
        _snapshot(
            {
                "tags": {"t1": {"name": "Only"}},
                "bookmarks": {
                    "b1": {
                        "url": "https://only.com",
                        "tags": ["t1"],
                        "clickHistory": list(range(150)),
                    }
                },
            }
        )
    )

    result = await data_service.transfer.import_data(
        file_data, ImportOptions(mode="overwrite", include_history=True)
    )

    assert result.imported.model_dump() == {
        "bookmarks": 1,
        "tags": 1,
        "workstations": 0,
    }
    bookmarks = await data_service.bookmarks.get_all_bookmarks()
    assert [b.id for b in bookmarks] == ["b1"]
    assert bookmarks[0].click_count == 100
    assert bookmarks[0].click_history[0] == 149
    assert bookmarks[0].pinned is False
    tag = await data_service.tags.get_tag("t1")
    assert tag.usage_count == 1
    assert tag.click_count == 100
    assert await data_service.workstations.get_all_workstations() == []


@pytest.mark.asyncio
async def test_overwrite_without_history_zeroes_click_counts(data_service):
    file_data = parse_import_content(
        _snapshot(
            {"bookmarks": {"b1": {"url": "https://a.com", "clickHistory": [5, 6]}}}
        )
    )

    await data_service.transfer.import_data(file_data, ImportOptions(mode="overwrite"))

    bookmark = await data_service.bookmarks.get_bookmark("b1")
    assert bookmark.click_count == 0
    assert bookmark.click_history == []


@pytest.mark.asyncio
async def test_overwrite_writes_collections_in_one_store_call(
    data_service, memory_store
):
    calls = []
    original = memory_store.write_many

    async def tracking_write_many(entries):
        calls.append(list(entries))
        await original(entries)

    memory_store.write_many = tracking_write_many
    file_data = parse_import_content(
        _snapshot(
            {
                "tags": {"t1": {"name": "A"}},
                "bookmarks": {"b1": {"url": "https://a.com"}},
                "workstations": {"w1": {"name": "W"}},
            }
        )
    )

    await data_service.transfer.import_data(file_data, ImportOptions(mode="overwrite"))

    assert calls == [
        ["tbm.tags", "tbm.bookmarks", "tbm.workstations", "tbm.cooccurrence"]
    ]
