"""
SQLAlchemy ORM models.

Lists are stored document-style: one row per list id holding the whole
ordered sequence as JSON. Writes replace the document (last write wins),
so there is no per-item row to keep consistent with its neighbours.
"""
import uuid
from datetime import datetime, timezone
from enum import Enum as PyEnum

from sqlalchemy import JSON, Column, DateTime, String, Uuid
from sqlalchemy import Enum as SAEnum
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase


# ── Base ──────────────────────────────────────────────────────────────────────

class Base(DeclarativeBase):
    pass


# ── Enums ─────────────────────────────────────────────────────────────────────

class ThumbRatingEnum(str, PyEnum):
    DOUBLE_UP = "double_up"
    UP = "up"
    DOWN = "down"


# JSONB on Postgres, plain JSON elsewhere (SQLite in tests / local dev)
JSONDocument = JSON().with_variant(JSONB(), "postgresql")


# ── Timestamp helper ──────────────────────────────────────────────────────────

def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ── Models ────────────────────────────────────────────────────────────────────

class RankedListDocument(Base):
    """
    Persisted snapshot of one ranked list.

    items (JSON) is the ordered sequence exactly as the editor publishes it:
        [
          {"unique_id": "...", "catalog_id": 693134, "unranked": false,
           "title": "Dune: Part Two", "image_path": "/abc.jpg",
           "media_type": "MOVIE", "attributes": {...}},
          ...
        ]
    Position in the array is the rank for entries with unranked = false.
    """
    __tablename__ = "ranked_lists"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    list_id = Column(String(64), unique=True, nullable=False, index=True)
    items = Column(JSONDocument, nullable=False, default=list)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        default=_utcnow,
        onupdate=_utcnow,
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<RankedListDocument list_id={self.list_id!r} items={len(self.items or [])}>"


class MovieRating(Base):
    """Thumbs rating for a catalog title. Absence of a row means "not rated"."""
    __tablename__ = "movie_ratings"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    catalog_id = Column(String(64), unique=True, nullable=False, index=True)
    rating = Column(
        SAEnum(
            ThumbRatingEnum,
            name="thumb_rating",
            values_callable=lambda enum: [member.value for member in enum],
        ),
        nullable=False,
    )
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        default=_utcnow,
        onupdate=_utcnow,
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<MovieRating catalog_id={self.catalog_id!r} rating={self.rating}>"
