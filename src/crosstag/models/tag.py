"""
Tag models.

Tags label bookmarks many-to-many. ``usage_count`` and ``click_count`` are
derived aggregates owned by the aggregation engine.
"""

from pydantic import Field

from crosstag.models.base import EntityModel, InputModel


class Tag(EntityModel):
    """A user tag."""

    id: str = Field(..., description="Stable tag id")
    name: str = Field(..., description="Tag name")
    color: str = Field(default="", description="Hex or HSL color string")
    description: str | None = Field(default=None)
    pinned: bool = Field(default=False)
    created_at: int = Field(default=0, description="Epoch milliseconds")
    updated_at: int = Field(default=0, description="Epoch milliseconds")

    # Derived, recomputed from the bookmark collection
    usage_count: int = Field(default=0, ge=0)
    click_count: int = Field(default=0, ge=0)


class TagCreate(InputModel):
    """Input model for creating a tag."""

    name: str = Field(..., min_length=1, max_length=255)
    color: str | None = Field(
        default=None, description="Explicit color; blank picks from the palette"
    )
    description: str | None = Field(default=None)


class TagUpdate(InputModel):
    """Partial patch for a tag. Only set fields are applied."""

    name: str | None = Field(default=None, min_length=1, max_length=255)
    color: str | None = Field(default=None)
    description: str | None = Field(default=None)
    pinned: bool | None = Field(default=None)
