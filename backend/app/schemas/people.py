"""
Filmography request/response schemas.
"""
from typing import Literal

from pydantic import BaseModel, Field

RoleName = Literal["Actor", "Director", "Producer"]


class Credit(BaseModel):
    """One credit as returned by the catalog collaborator."""

    id: int
    title: str | None = None
    name: str | None = None
    vote_average: float = 0.0
    release_date: str | None = None
    revenue: int | None = None
    genre_ids: list[int] = Field(default_factory=list)
    roles: list[RoleName] | None = None


class CareerStatsRequest(BaseModel):
    """Payload for POST /people/stats."""

    movie_credits: list[Credit]
    tv_credits: list[Credit] = Field(default_factory=list)


class GenreShare(BaseModel):
    id: int
    name: str
    count: int
    percentage: int


class BoxOfficeBreakdown(BaseModel):
    actor: str
    director: str
    producer: str
    has_director: bool
    has_producer: bool


class CareerStatsResponse(BaseModel):
    avg_rating: float | None
    total_films: int
    total_series: int
    highest_rated: Credit | None
    start_year: int | None
    years_active: str | None
    total_box_office: str
    box_office_breakdown: BoxOfficeBreakdown
    most_favoured_role: RoleName
    genres: list[GenreShare]
    top_genre: str | None
