"""
Ranked-list request/response schemas.
"""
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.services.ranking_math import SectionEnum


class RankedItem(BaseModel):
    """
    One entry of a ranked list.

    unique_id is the drag/reorder key, assigned when the item is added.
    catalog_id points at the movie/person in the external catalog and is
    unique within a list.
    """

    unique_id: str
    catalog_id: int | str
    unranked: bool = True
    title: str
    image_path: str | None = None
    media_type: str = "MOVIE"
    attributes: dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(from_attributes=True)


class RankedItemView(RankedItem):
    """RankedItem plus its derived rank and display section."""

    rank: int | None
    section: SectionEnum


class ListSnapshotResponse(BaseModel):
    """Response envelope for GET /lists/{list_id}."""

    list_id: str
    items: list[RankedItemView]
    ranked_count: int
    unranked_count: int


class ListSummary(BaseModel):
    """Single entry of GET /lists."""

    list_id: str
    label: str
    item_count: int


class AddItemRequest(BaseModel):
    """Payload for POST /lists/{list_id}/items — an already-resolved catalog entry."""

    catalog_id: int | str
    title: str
    image_path: str | None = None
    media_type: str = "MOVIE"
    attributes: dict[str, Any] = Field(default_factory=dict)
    section: SectionEnum | None = None

    @field_validator("title")
    @classmethod
    def validate_title(cls, value: str) -> str:
        title = " ".join(value.strip().split())
        if not title:
            raise ValueError("title cannot be empty")
        return title


class DragStartRequest(BaseModel):
    item_id: str


class DragOverRequest(BaseModel):
    dragged_id: str
    target_id: str | None = None
    timestamp_ms: float | None = Field(default=None, ge=0)


class DragEndRequest(BaseModel):
    dragged_id: str
    target_id: str | None = None


class DragOutcome(str, Enum):
    """What a drag event did to the list."""

    IGNORED = "IGNORED"
    UNCHANGED = "UNCHANGED"
    RECLASSIFIED = "RECLASSIFIED"
    REJECTED = "REJECTED"
    REORDERED = "REORDERED"
    CANCELLED = "CANCELLED"


class DragResultResponse(BaseModel):
    outcome: DragOutcome
    snapshot: ListSnapshotResponse
