"""
Thumbs rating business logic — rate, toggle off, summarise.

A title has at most one rating: double_up (love), up (like) or down
(dislike). Submitting the rating a title already has removes it.
"""
import logging
from typing import Any

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.db.models import MovieRating, ThumbRatingEnum

logger = logging.getLogger(__name__)

# (threshold, title), ordered by threshold
TITLE_LEVELS: list[tuple[int, str]] = [
    (0, "Ticket Holder"),
    (10, "Popcorn Regular"),
    (50, "Screen Enthusiast"),
    (100, "Cinema Scholar"),
    (200, "Film Connoisseur"),
    (500, "Silver Screen Sage"),
    (1000, "Cinema Immortal"),
]


class InvalidRatingError(Exception):
    """Raised when a rating request names an unknown value or an empty title id."""


def resolve_toggle(
    current: ThumbRatingEnum | None,
    requested: ThumbRatingEnum,
) -> ThumbRatingEnum | None:
    """Return the rating a title ends up with. Same rating twice clears it."""
    return None if current == requested else requested


def get_user_title(count: int) -> dict[str, Any]:
    """
    Map a number of rated titles to an activity title level.

    Returns the current and next level plus percentage progress towards the
    next one (100 at the top level) and how many ratings are still needed.
    """
    current_index = 0
    for index, (threshold, _title) in enumerate(TITLE_LEVELS):
        if count >= threshold:
            current_index = index
        else:
            break

    current_min, current_title = TITLE_LEVELS[current_index]
    if current_index + 1 < len(TITLE_LEVELS):
        next_min, next_title = TITLE_LEVELS[current_index + 1]
        progress = (count - current_min) / (next_min - current_min) * 100
        progress = min(100.0, max(0.0, progress))
        needed = next_min - count
        next_level = {"title": next_title, "min": next_min}
    else:
        progress, needed, next_level = 100.0, 0, None

    return {
        "current_title": {"title": current_title, "min": current_min},
        "next_title": next_level,
        "progress": progress,
        "needed": needed,
    }


def _coerce_rating(value: Any) -> ThumbRatingEnum:
    try:
        return ThumbRatingEnum(value)
    except ValueError as exc:
        raise InvalidRatingError(f"Unknown rating {value!r}") from exc


def list_ratings(db: Session) -> list[MovieRating]:
    return db.query(MovieRating).order_by(MovieRating.updated_at.desc()).all()


def rate_title(db: Session, catalog_id: str, requested: Any) -> dict:
    """
    Apply a thumbs rating to *catalog_id* with toggle semantics.

    Returns a dict matching RatingResponse; rating is None when the call
    cleared an existing rating.
    """
    catalog_id = str(catalog_id).strip()
    if not catalog_id:
        raise InvalidRatingError("catalog_id cannot be empty")
    requested = _coerce_rating(requested)

    row = db.query(MovieRating).filter(MovieRating.catalog_id == catalog_id).first()
    current = row.rating if row is not None else None
    resolved = resolve_toggle(current, requested)

    if resolved is None:
        if row is not None:
            db.delete(row)
            db.commit()
        logger.info("cleared rating for %s", catalog_id)
        return {"catalog_id": catalog_id, "rating": None, "updated_at": None}

    if row is None:
        row = MovieRating(catalog_id=catalog_id, rating=resolved)
        db.add(row)
    else:
        row.rating = resolved
    db.commit()
    db.refresh(row)
    logger.info("rated %s as %s", catalog_id, resolved.value)
    return {"catalog_id": catalog_id, "rating": row.rating, "updated_at": row.updated_at}


def rating_summary(db: Session) -> dict:
    """Counts per rating value plus the activity title for the total."""
    rows = (
        db.query(MovieRating.rating, func.count(MovieRating.id))
        .group_by(MovieRating.rating)
        .all()
    )
    counts = {member.value: 0 for member in ThumbRatingEnum}
    for rating, count in rows:
        key = rating.value if hasattr(rating, "value") else str(rating)
        counts[key] = count

    total = sum(counts.values())
    return {"total": total, "counts": counts, **get_user_title(total)}
