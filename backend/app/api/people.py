"""
People API — /people
────────────────────
Endpoints:
  POST /people/stats   — Career statistics from a person's credits
"""
from fastapi import APIRouter

from app.schemas.people import CareerStatsRequest, CareerStatsResponse
from app.services.filmography_service import compute_career_stats

router = APIRouter()


@router.post("/stats", response_model=CareerStatsResponse)
def career_stats(payload: CareerStatsRequest) -> dict:
    """Credits come from the catalog; this endpoint only aggregates them."""
    return compute_career_stats(payload.movie_credits, payload.tv_credits)
