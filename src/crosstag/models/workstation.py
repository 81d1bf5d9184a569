"""
Workstation models.

A workstation is a named group of bookmark ids that can be opened at once.
"""

from pydantic import Field, field_validator

from crosstag.models.base import EntityModel, InputModel
from crosstag.utils.helpers import unique


class Workstation(EntityModel):
    """A named group of bookmarks."""

    id: str
    name: str
    description: str | None = None
    color: str = ""
    bookmarks: list[str] = Field(default_factory=list)
    pinned: bool = False
    click_count: int = Field(default=0, ge=0, description="Times opened")
    created_at: int = 0
    updated_at: int = 0

    @field_validator("bookmarks", mode="before")
    @classmethod
    def _dedupe_bookmarks(cls, value: list[str] | None) -> list[str]:
        return unique(value or [])


class WorkstationCreate(InputModel):
    """Input model for creating a workstation."""

    name: str = Field(..., min_length=1, max_length=255)
    description: str | None = Field(default=None)
    color: str | None = Field(default=None)
    pinned: bool = Field(default=False)


class WorkstationUpdate(InputModel):
    """Partial patch for a workstation. Only set fields are applied."""

    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = Field(default=None)
    color: str | None = Field(default=None)
    pinned: bool | None = Field(default=None)
