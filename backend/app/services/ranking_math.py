"""
Ranking Math Service
────────────────────
Pure-Python helpers for the ranked-list model.

A list is one ordered sequence. Items flagged ``unranked`` sit in the
Unranked Collection; every other item is ranked, and its rank is
1 + the number of ranked items before it. Sub-bands are a pure function
of the 0-based position among ranked items:

  0-9    → Top 10
  10-19  → Honorable Mentions
  20+    → Ranks 21+

Nothing in here touches state. The editor and the API both lean on it.
"""
from enum import Enum
from typing import Any, Sequence, TypeVar

T = TypeVar("T")

TOP_TEN_SIZE = 10
HONORABLE_MENTIONS_END = 20


class SectionEnum(str, Enum):
    """Display sections of a ranked list."""

    TOP_10 = "TOP_10"
    HONORABLE_MENTIONS = "HONORABLE_MENTIONS"
    RANKS_21_PLUS = "RANKS_21_PLUS"
    UNRANKED = "UNRANKED"


# Sequence index each ranked section starts at when used as a drop target.
SECTION_START_INDEX: dict[SectionEnum, int] = {
    SectionEnum.TOP_10: 0,
    SectionEnum.HONORABLE_MENTIONS: TOP_TEN_SIZE,
    SectionEnum.RANKS_21_PLUS: HONORABLE_MENTIONS_END,
}


def section_for_position(position: int) -> SectionEnum:
    """
    Map a 0-based position among ranked items to its sub-band.

    Raises:
        ValueError: If position is negative.
    """
    if position < 0:
        raise ValueError(f"position must be >= 0, got {position}")
    if position < TOP_TEN_SIZE:
        return SectionEnum.TOP_10
    if position < HONORABLE_MENTIONS_END:
        return SectionEnum.HONORABLE_MENTIONS
    return SectionEnum.RANKS_21_PLUS


def array_move(items: Sequence[T], old_index: int, new_index: int) -> list[T]:
    """
    Return a new list with the element at old_index moved to new_index.

    The element is removed first and then inserted, so it always ends up
    at new_index in the result (moving down accounts for the removal
    shift). new_index is clamped to the bounds of the sequence.
    """
    result = list(items)
    if not result:
        return result
    if not 0 <= old_index < len(result):
        raise IndexError(f"old_index {old_index} out of range")

    new_index = max(0, min(new_index, len(result) - 1))
    element = result.pop(old_index)
    result.insert(new_index, element)
    return result


def _is_unranked(item: Any) -> bool:
    return bool(item.get("unranked")) if isinstance(item, dict) else bool(item.unranked)


def assign_ranks(items: Sequence[Any]) -> list[tuple[Any, int | None, SectionEnum]]:
    """
    Walk the sequence once and pair every item with (rank, section).

    Unranked items get rank None and SectionEnum.UNRANKED. Works on ORM
    objects, pydantic models, and plain dicts alike.
    """
    out: list[tuple[Any, int | None, SectionEnum]] = []
    ranked_seen = 0
    for item in items:
        if _is_unranked(item):
            out.append((item, None, SectionEnum.UNRANKED))
            continue
        out.append((item, ranked_seen + 1, section_for_position(ranked_seen)))
        ranked_seen += 1
    return out


def rank_of(items: Sequence[Any], index: int) -> int | None:
    """Rank of the item at *index*, or None if it is unranked."""
    if _is_unranked(items[index]):
        return None
    return 1 + sum(1 for item in items[:index] if not _is_unranked(item))
