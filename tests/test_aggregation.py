"""Tests for tag aggregate recomputation."""

from crosstag.models import BookmarkItem, Tag
from crosstag.services.aggregation import (
    recompute_tag_aggregates,
    recompute_tag_click_counts,
)


def _tags(*ids):
    return {tag_id: Tag(id=tag_id, name=tag_id.upper()) for tag_id in ids}


def test_usage_and_click_counts_match_bookmarks():
    tags = _tags("t1", "t2", "t3")
    bookmarks = {
        "b1": BookmarkItem(
            id="b1", url="https://a.com", tags=["t1", "t2"], click_count=3
        ),
        "b2": BookmarkItem(id="b2", url="https://b.com", tags=["t1"], click_count=5),
        "b3": BookmarkItem(id="b3", url="https://c.com", tags=[], click_count=7),
    }

    result = recompute_tag_aggregates(bookmarks, tags)

    assert result["t1"].usage_count == 2
    assert result["t1"].click_count == 8
    assert result["t2"].usage_count == 1
    assert result["t2"].click_count == 3
    assert result["t3"].usage_count == 0
    assert result["t3"].click_count == 0


def test_recompute_is_idempotent_and_does_not_mutate_input():
    tags = _tags("t1")
    tags["t1"] = tags["t1"].model_copy(update={"usage_count": 42, "click_count": 9})
    bookmarks = {
        "b1": BookmarkItem(id="b1", url="https://a.com", tags=["t1"], click_count=1)
    }

    first = recompute_tag_aggregates(bookmarks, tags)
    second = recompute_tag_aggregates(bookmarks, first)

    assert first == second
    assert first["t1"].usage_count == 1
    assert tags["t1"].usage_count == 42


def test_stale_counts_are_overwritten_for_unreferenced_tags():
    tags = {"t1": Tag(id="t1", name="Old", usage_count=5, click_count=10)}

    result = recompute_tag_aggregates({}, tags)

    assert result["t1"].usage_count == 0
    assert result["t1"].click_count == 0


def test_click_counts_only_leave_usage_untouched():
    tags = {"t1": Tag(id="t1", name="Dev", usage_count=99)}
    bookmarks = {
        "b1": BookmarkItem(id="b1", url="https://a.com", tags=["t1"], click_count=4)
    }

    result = recompute_tag_click_counts(bookmarks, tags)

    assert result["t1"].click_count == 4
    assert result["t1"].usage_count == 99


def test_dangling_tag_ids_on_bookmarks_are_ignored():
    tags = _tags("t1")
    bookmarks = {
        "b1": BookmarkItem(id="b1", url="https://a.com", tags=["t1", "gone"])
    }

    result = recompute_tag_aggregates(bookmarks, tags)

    assert set(result) == {"t1"}
    assert result["t1"].usage_count == 1
