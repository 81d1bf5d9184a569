"""
Bookmark models.
"""

from pydantic import Field, ValidationInfo, field_validator

from crosstag.models.base import EntityModel, InputModel
from crosstag.utils.helpers import unique


class BookmarkItem(EntityModel):
    """A saved URL with tags and click statistics.

    ``tags`` never holds duplicate ids and ``path_tag_ids`` is always a
    subset of ``tags``.
    """

    id: str
    url: str
    title: str = ""
    note: str | None = ""
    tags: list[str] = Field(default_factory=list)
    path_tag_ids: list[str] | None = Field(
        default=None,
        description="Tag ids generated from the browser folder path",
    )
    thumbnail: str | None = None
    pinned: bool = False
    click_count: int = Field(default=0, ge=0)
    click_history: list[int] = Field(
        default_factory=list, description="Click timestamps, newest first"
    )
    created_at: int = 0
    updated_at: int = 0

    @field_validator("tags", mode="before")
    @classmethod
    def _dedupe_tags(cls, value: list[str] | None) -> list[str]:
        return unique(value or [])

    @field_validator("path_tag_ids")
    @classmethod
    def _path_tags_subset(
        cls, value: list[str] | None, info: ValidationInfo
    ) -> list[str] | None:
        if value is None:
            return None
        tags = set(info.data.get("tags", []))
        return [tag_id for tag_id in unique(value) if tag_id in tags]

    @field_validator("click_history", mode="before")
    @classmethod
    def _history_default(cls, value: list[int] | None) -> list[int]:
        return list(value or [])


class BookmarkCreate(InputModel):
    """Input model for creating a bookmark."""

    url: str = Field(..., min_length=1)
    title: str = Field(default="")
    note: str | None = Field(default=None)
    tags: list[str] = Field(default_factory=list)
    thumbnail: str | None = Field(default=None)
    pinned: bool = Field(default=False)


class BookmarkUpdate(InputModel):
    """Partial patch for a bookmark. Only set fields are applied."""

    url: str | None = Field(default=None, min_length=1)
    title: str | None = Field(default=None)
    note: str | None = Field(default=None)
    tags: list[str] | None = Field(default=None)
    thumbnail: str | None = Field(default=None)
    pinned: bool | None = Field(default=None)


class FilterOptions(InputModel):
    """Criteria for ``filter_bookmarks``; all given criteria must match."""

    query: str | None = Field(default=None)
    tags: list[str] = Field(default_factory=list)
    only_pinned: bool = Field(default=False)
