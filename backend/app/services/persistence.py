"""
List persistence — the document store behind the editors.

Editors never wait on storage. Every published snapshot is handed to a
DebouncedPersister, which keeps only the newest snapshot per list and
writes it once the list has been quiet for the debounce delay.
"""
import asyncio
import logging
from typing import Any, Callable, Sequence

from sqlalchemy.orm import Session

from app.db.models import RankedListDocument
from app.db.session import SessionLocal
from app.schemas.lists import RankedItem

logger = logging.getLogger(__name__)

SaveFn = Callable[[str, list[dict[str, Any]]], None]


# ── Repository ───────────────────────────────────────────────────────────────


def load_list_items(db: Session, list_id: str) -> list[RankedItem]:
    """Return the stored sequence for *list_id* (empty if never saved)."""
    doc = db.query(RankedListDocument).filter(RankedListDocument.list_id == list_id).first()
    if doc is None:
        return []
    return [RankedItem.model_validate(raw) for raw in doc.items or []]


def save_list_items(db: Session, list_id: str, items: list[dict[str, Any]]) -> RankedListDocument:
    """Replace the stored document for *list_id*. Last write wins."""
    doc = db.query(RankedListDocument).filter(RankedListDocument.list_id == list_id).first()
    if doc is None:
        doc = RankedListDocument(list_id=list_id, items=items)
        db.add(doc)
    else:
        doc.items = items
    db.commit()
    db.refresh(doc)
    return doc


def load_with_new_session(list_id: str) -> list[RankedItem]:
    with SessionLocal() as db:
        return load_list_items(db, list_id)


def save_with_new_session(list_id: str, items: list[dict[str, Any]]) -> None:
    with SessionLocal() as db:
        save_list_items(db, list_id, items)


# ── Debounced writer ─────────────────────────────────────────────────────────


class DebouncedPersister:
    """
    Debounced, fire-and-forget snapshot writer.

    Instances are callable with (list_id, snapshot) so they can be
    subscribed to an editor directly. Writes run in the loop's default
    executor, one at a time per list; a save failure is logged and
    never reaches the editor.
    """

    def __init__(self, save: SaveFn = save_with_new_session, delay_seconds: float = 1.0) -> None:
        self._save = save
        self._delay = delay_seconds
        self._pending: dict[str, list[dict[str, Any]]] = {}
        self._timers: dict[str, asyncio.TimerHandle] = {}
        self._writes: dict[str, asyncio.Future] = {}

    def __call__(self, list_id: str, snapshot: Sequence[RankedItem]) -> None:
        self.schedule(list_id, snapshot)

    @property
    def pending_list_ids(self) -> list[str]:
        return list(self._pending)

    def schedule(self, list_id: str, snapshot: Sequence[RankedItem]) -> None:
        self._pending[list_id] = [item.model_dump(mode="json") for item in snapshot]

        timer = self._timers.pop(list_id, None)
        if timer is not None:
            timer.cancel()

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            items = self._pending.pop(list_id)
            self._write(list_id, items)
            return
        self._timers[list_id] = loop.call_later(self._delay, self._start_write, list_id)

    def _start_write(self, list_id: str) -> None:
        loop = asyncio.get_running_loop()
        self._timers.pop(list_id, None)

        in_flight = self._writes.get(list_id)
        if in_flight is not None and not in_flight.done():
            # older snapshot still being written; try again after it lands
            self._timers[list_id] = loop.call_later(self._delay, self._start_write, list_id)
            return

        items = self._pending.pop(list_id, None)
        if items is None:
            return
        self._writes[list_id] = loop.run_in_executor(None, self._write, list_id, items)

    def _write(self, list_id: str, items: list[dict[str, Any]]) -> None:
        try:
            self._save(list_id, items)
        except Exception:
            logger.exception("failed to persist list %s (%d items)", list_id, len(items))
            return
        logger.debug("persisted list %s (%d items)", list_id, len(items))

    async def flush(self) -> int:
        """
        Write every pending snapshot now and wait for in-flight writes.

        Returns the number of lists written by this call.
        """
        for timer in self._timers.values():
            timer.cancel()
        self._timers.clear()

        in_flight = [future for future in self._writes.values() if not future.done()]
        if in_flight:
            await asyncio.gather(*in_flight)

        loop = asyncio.get_running_loop()
        pending, self._pending = self._pending, {}
        await asyncio.gather(*(
            loop.run_in_executor(None, self._write, list_id, items)
            for list_id, items in pending.items()
        ))
        return len(pending)
