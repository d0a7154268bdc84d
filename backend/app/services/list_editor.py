"""
Ranked list editor — drag-and-drop reordering and section reclassification.

The editor owns one list's ordered sequence of RankedItem objects and turns
drag lifecycle events (start / over / end / cancel) into new snapshots.

Two copies of the sequence are kept:
  • working   — updated eagerly so later events in the same gesture see
                fresh data.
  • published — what listeners (renderer, persistence) have been handed.

Move-over reclassifications are published on the next "frame" through a
single-slot scheduler: a newer move-over cancels the pending publish, so a
burst of events yields one snapshot. Drag end, add, remove and undo publish
immediately.

Flicker suppression: after the dragged item flips between ranked and
unranked, a section lock is recorded. For lock_window_ms after that, a
flip in the opposite direction is rejected. Layout shift right after a
section change would otherwise bounce the item straight back.
"""
import asyncio
import logging
import time
from collections import deque
from typing import Any, Callable, Iterable, NamedTuple

from app.schemas.lists import DragOutcome, RankedItem
from app.services.ranking_math import SECTION_START_INDEX, SectionEnum, array_move

logger = logging.getLogger(__name__)

DEFAULT_LOCK_WINDOW_MS = 300.0
# Removed items kept for undo; older removals fall off.
UNDO_HISTORY_LIMIT = 20

# ── Named drop zones ──────────────────────────────────────────────────────────

EMPTY_TOP_10_ZONE = "empty-top-10"
TOP_10_ZONE = "top-10-zone"
HONORABLE_MENTIONS_ZONE = "honorable-mentions-zone"
RANKS_21_PLUS_ZONE = "ranks-21-plus-zone"
UNRANKED_ZONE = "unranked-zone"

# zone id -> (sequence index or None for "end of sequence", target unranked flag)
DROP_ZONES: dict[str, tuple[int | None, bool]] = {
    EMPTY_TOP_10_ZONE: (SECTION_START_INDEX[SectionEnum.TOP_10], False),
    TOP_10_ZONE: (SECTION_START_INDEX[SectionEnum.TOP_10], False),
    HONORABLE_MENTIONS_ZONE: (SECTION_START_INDEX[SectionEnum.HONORABLE_MENTIONS], False),
    RANKS_21_PLUS_ZONE: (SECTION_START_INDEX[SectionEnum.RANKS_21_PLUS], False),
    UNRANKED_ZONE: (None, True),
}


class DuplicateListItemError(Exception):
    """Raised when a catalog entry (or unique id) is already in the list."""


class ListItemNotFoundError(Exception):
    """Raised when a unique id does not name an item of the list."""


class NothingToUndoError(Exception):
    """Raised when undo is requested with no removed item on the stack."""


# ── Frame schedulers ──────────────────────────────────────────────────────────


class _PendingCall:
    """Cancellable handle for ManualFrameScheduler."""

    def __init__(self, callback: Callable[[], None]) -> None:
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualFrameScheduler:
    """
    Scheduler whose frames are advanced by hand via run_pending().

    Used by tests and by callers that drive their own render loop.
    """

    def __init__(self) -> None:
        self._queue: list[_PendingCall] = []

    def schedule(self, callback: Callable[[], None]) -> _PendingCall:
        call = _PendingCall(callback)
        self._queue.append(call)
        return call

    @property
    def has_pending(self) -> bool:
        return any(not call.cancelled for call in self._queue)

    def run_pending(self) -> int:
        """Run every non-cancelled callback queued so far. Returns how many ran."""
        queue, self._queue = self._queue, []
        ran = 0
        for call in queue:
            if not call.cancelled:
                call.callback()
                ran += 1
        return ran


class _DoneCall:
    def cancel(self) -> None:
        pass


class LoopFrameScheduler:
    """
    Runs callbacks on the next iteration of the running asyncio loop.

    Outside a running loop there is no later batch to defer to, so the
    callback runs immediately.
    """

    def schedule(self, callback: Callable[[], None]) -> Any:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            callback()
            return _DoneCall()
        return loop.call_soon(callback)


# ── Gesture state ─────────────────────────────────────────────────────────────


class SectionLock(NamedTuple):
    time_ms: float
    target_unranked: bool


class DragGesture:
    """State held for the duration of one drag gesture."""

    __slots__ = ("dragged_id", "dragged_unranked", "section_lock")

    def __init__(self, dragged_id: str, dragged_unranked: bool) -> None:
        self.dragged_id = dragged_id
        self.dragged_unranked = dragged_unranked
        self.section_lock: SectionLock | None = None

    def __repr__(self) -> str:
        return (
            f"<DragGesture dragged_id={self.dragged_id!r} "
            f"unranked={self.dragged_unranked} lock={self.section_lock}>"
        )


def _monotonic_ms() -> float:
    return time.monotonic() * 1000.0


# ── Editor ────────────────────────────────────────────────────────────────────

SnapshotListener = Callable[[str, tuple[RankedItem, ...]], None]


class RankedListEditor:
    """Drag-and-drop editor for a single ranked list."""

    def __init__(
        self,
        list_id: str,
        items: Iterable[RankedItem] = (),
        *,
        lock_window_ms: float = DEFAULT_LOCK_WINDOW_MS,
        scheduler: Any | None = None,
        clock: Callable[[], float] | None = None,
        undo_limit: int = UNDO_HISTORY_LIMIT,
    ) -> None:
        items = list(items)
        seen: set[str] = set()
        for item in items:
            if item.unique_id in seen:
                raise DuplicateListItemError(
                    f"unique_id {item.unique_id} appears twice in list {list_id}"
                )
            seen.add(item.unique_id)

        self.list_id = list_id
        self.lock_window_ms = lock_window_ms
        self._scheduler = scheduler or LoopFrameScheduler()
        self._clock = clock or _monotonic_ms
        self._working: list[RankedItem] = items
        self._published: tuple[RankedItem, ...] = tuple(items)
        self._gesture: DragGesture | None = None
        self._pending: Any | None = None
        self._removed: deque[RankedItem] = deque(maxlen=undo_limit)
        self._listeners: list[SnapshotListener] = []

    # ── Read side ────────────────────────────────────────────────────────────

    @property
    def snapshot(self) -> tuple[RankedItem, ...]:
        """Last published snapshot."""
        return self._published

    @property
    def working_snapshot(self) -> tuple[RankedItem, ...]:
        """Candidate snapshot, including not-yet-published move-over changes."""
        return tuple(self._working)

    @property
    def gesture(self) -> DragGesture | None:
        return self._gesture

    @property
    def can_undo(self) -> bool:
        return bool(self._removed)

    def subscribe(self, listener: SnapshotListener) -> None:
        """Register a callable receiving (list_id, snapshot) on every publish."""
        self._listeners.append(listener)

    def index_of(self, unique_id: str) -> int | None:
        for index, item in enumerate(self._working):
            if item.unique_id == unique_id:
                return index
        return None

    def _resolve_target(self, target_id: str | None) -> tuple[int, bool] | None:
        """
        Resolve a drop target to (sequence index, target unranked flag).

        Named zones win over items; anything else is inert space (None).
        """
        if target_id is None:
            return None
        zone = DROP_ZONES.get(target_id)
        if zone is not None:
            index, unranked = zone
            if index is None:
                index = len(self._working) - 1
            return index, unranked
        target_index = self.index_of(target_id)
        if target_index is None:
            return None
        return target_index, self._working[target_index].unranked

    def _move(self, from_index: int, to_index: int, unranked: bool) -> int:
        """Array-move within the working copy and apply the flag. Returns the new index."""
        to_index = max(0, min(to_index, len(self._working) - 1))
        self._working = array_move(self._working, from_index, to_index)
        item = self._working[to_index]
        if item.unranked != unranked:
            # Copy so the published snapshot keeps its own version of the item.
            self._working[to_index] = item.model_copy(update={"unranked": unranked})
        return to_index

    # ── Publication ──────────────────────────────────────────────────────────

    def _cancel_pending(self) -> None:
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None

    def _schedule_publish(self) -> None:
        self._cancel_pending()
        self._pending = self._scheduler.schedule(self._publish)

    def _publish(self) -> None:
        self._pending = None
        candidate = tuple(self._working)
        if candidate == self._published:
            return
        self._published = candidate
        for listener in self._listeners:
            listener(self.list_id, candidate)

    def publish_now(self) -> None:
        """Publish the working copy immediately, superseding any pending publish."""
        self._cancel_pending()
        self._publish()

    # ── Drag lifecycle ───────────────────────────────────────────────────────

    def on_drag_start(self, item_id: str) -> DragOutcome:
        """Prime gesture state for *item_id*. Unknown ids leave no gesture."""
        index = self.index_of(item_id)
        if index is None:
            self._gesture = None
            return DragOutcome.IGNORED
        self._gesture = DragGesture(item_id, self._working[index].unranked)
        return DragOutcome.UNCHANGED

    def on_drag_over(
        self,
        dragged_id: str,
        target_id: str | None,
        *,
        timestamp_ms: float | None = None,
    ) -> DragOutcome:
        """
        Handle the pointer moving over *target_id* during a drag.

        Only ranked/unranked reclassification mutates the list here; plain
        reordering within a section is committed on drag end.
        """
        gesture = self._gesture
        if gesture is None or gesture.dragged_id != dragged_id:
            return DragOutcome.IGNORED
        if dragged_id == target_id:
            return DragOutcome.IGNORED

        resolved = self._resolve_target(target_id)
        if resolved is None:
            return DragOutcome.IGNORED
        target_index, target_unranked = resolved

        if target_unranked == gesture.dragged_unranked:
            return DragOutcome.UNCHANGED

        now = self._clock() if timestamp_ms is None else timestamp_ms
        lock = gesture.section_lock
        if (
            lock is not None
            and now - lock.time_ms < self.lock_window_ms
            and target_unranked != lock.target_unranked
        ):
            logger.debug(
                "list=%s rejected flip of %s to unranked=%s (%.0fms after lock)",
                self.list_id, dragged_id, target_unranked, now - lock.time_ms,
            )
            return DragOutcome.REJECTED

        dragged_index = self.index_of(dragged_id)
        if dragged_index is None:
            self._gesture = None
            return DragOutcome.IGNORED

        self._move(dragged_index, target_index, target_unranked)
        gesture.dragged_unranked = target_unranked
        gesture.section_lock = SectionLock(now, target_unranked)
        logger.debug(
            "list=%s reclassified %s to unranked=%s", self.list_id, dragged_id, target_unranked
        )
        self._schedule_publish()
        return DragOutcome.RECLASSIFIED

    def on_drag_end(self, dragged_id: str, target_id: str | None) -> DragOutcome:
        """Commit the final drop. Gesture state is always cleared."""
        self._gesture = None

        if target_id is None or dragged_id == target_id:
            return DragOutcome.IGNORED
        dragged_index = self.index_of(dragged_id)
        if dragged_index is None:
            return DragOutcome.IGNORED
        resolved = self._resolve_target(target_id)
        if resolved is None:
            return DragOutcome.IGNORED

        target_index, target_unranked = resolved
        self._move(dragged_index, target_index, target_unranked)
        self.publish_now()
        return DragOutcome.REORDERED

    def on_drag_cancel(self) -> DragOutcome:
        """Abandon the gesture. Same as a drag end with no valid target."""
        self._gesture = None
        return DragOutcome.CANCELLED

    # ── Add / remove / undo ──────────────────────────────────────────────────

    def add_item(self, item: RankedItem, section: SectionEnum | None = None) -> RankedItem:
        """
        Insert a freshly created item.

        Without a ranked section the item is appended as unranked; a ranked
        section inserts it ranked at that section's start index.
        """
        for existing in self._working:
            if existing.catalog_id == item.catalog_id:
                raise DuplicateListItemError(
                    f"catalog item {item.catalog_id} is already in list {self.list_id}"
                )
            if existing.unique_id == item.unique_id:
                raise DuplicateListItemError(f"unique_id {item.unique_id} already in use")

        if section is None or section == SectionEnum.UNRANKED:
            item = item if item.unranked else item.model_copy(update={"unranked": True})
            self._working.append(item)
        else:
            item = item if not item.unranked else item.model_copy(update={"unranked": False})
            index = min(SECTION_START_INDEX[section], len(self._working))
            self._working.insert(index, item)

        self.publish_now()
        return item

    def remove_item(self, unique_id: str) -> RankedItem:
        index = self.index_of(unique_id)
        if index is None:
            raise ListItemNotFoundError(f"item {unique_id} not found in list {self.list_id}")
        if self._gesture is not None and self._gesture.dragged_id == unique_id:
            self._gesture = None

        item = self._working.pop(index)
        self._removed.append(item)
        self.publish_now()
        return item

    def undo_remove(self) -> RankedItem:
        """Re-append the most recently removed item (same object) at the end."""
        if not self._removed:
            raise NothingToUndoError(f"nothing to undo in list {self.list_id}")
        item = self._removed[-1]
        if any(existing.catalog_id == item.catalog_id for existing in self._working):
            raise DuplicateListItemError(
                f"catalog item {item.catalog_id} was re-added to list {self.list_id}"
            )
        self._removed.pop()
        self._working.append(item)
        self.publish_now()
        return item
