"""
Ratings API — /ratings
──────────────────────
Endpoints:
  GET  /ratings                 — Every rated title, newest first
  GET  /ratings/summary         — Counts per rating + activity title
  PUT  /ratings/{catalog_id}    — Rate a title (same rating again clears it)
"""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.schemas.ratings import RateRequest, RatingResponse, RatingSummaryResponse
from app.services.rating_service import (
    InvalidRatingError,
    list_ratings,
    rate_title,
    rating_summary,
)

router = APIRouter()


def _error(code: str, message: str) -> dict:
    """Standard error envelope."""
    return {"error": {"code": code, "message": message}}


@router.get("", response_model=list[RatingResponse])
def get_ratings(db: Session = Depends(get_db)) -> list:
    return list_ratings(db)


@router.get("/summary", response_model=RatingSummaryResponse)
def get_rating_summary(db: Session = Depends(get_db)) -> dict:
    return rating_summary(db)


@router.put("/{catalog_id}", response_model=RatingResponse)
def put_rating(
    catalog_id: str,
    payload: RateRequest,
    db: Session = Depends(get_db),
) -> dict:
    """Toggle-style rating: resubmitting the current rating removes it."""
    try:
        return rate_title(db, catalog_id, payload.rating)
    except InvalidRatingError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=_error("INVALID_RATING", str(exc)),
        ) from exc
