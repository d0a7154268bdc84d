"""
Thumbs rating request/response schemas.
"""
from datetime import datetime

from pydantic import BaseModel, ConfigDict

from app.db.models import ThumbRatingEnum


class RateRequest(BaseModel):
    """Payload for PUT /ratings/{catalog_id}. Sending the current rating clears it."""

    rating: ThumbRatingEnum


class RatingResponse(BaseModel):
    catalog_id: str
    rating: ThumbRatingEnum | None
    updated_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class ActivityTitle(BaseModel):
    title: str
    min: int


class RatingSummaryResponse(BaseModel):
    """Response for GET /ratings/summary."""

    total: int
    counts: dict[str, int]
    current_title: ActivityTitle
    next_title: ActivityTitle | None
    progress: float
    needed: int
