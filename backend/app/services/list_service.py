"""
Ranked list business logic — one editor per genre list.

The registry creates editors lazily (loading the stored snapshot on first
access), wires each editor's publications into the persister, and wraps
add/remove/undo with catalog-side concerns such as minting unique ids.
"""
import logging
from typing import Callable, Iterable
from uuid import uuid4

from fastapi.concurrency import run_in_threadpool

from app.core.genres import LIST_LABELS, lists_for_genres
from app.schemas.lists import AddItemRequest, RankedItem
from app.services.list_editor import (
    DEFAULT_LOCK_WINDOW_MS,
    DuplicateListItemError,
    ListItemNotFoundError,
    NothingToUndoError,
    RankedListEditor,
)
from app.services.persistence import DebouncedPersister, load_with_new_session
from app.services.ranking_math import SectionEnum, assign_ranks

logger = logging.getLogger(__name__)

__all__ = [
    "DuplicateListItemError",
    "ListItemNotFoundError",
    "ListNotFoundError",
    "ListRegistry",
    "NothingToUndoError",
    "build_snapshot_response",
]


class ListNotFoundError(Exception):
    """Raised when a list id is not one of the known genre lists."""


LoadFn = Callable[[str], list[RankedItem]]


class ListRegistry:
    """Owns the RankedListEditor of every known list."""

    def __init__(
        self,
        *,
        load: LoadFn = load_with_new_session,
        persister: DebouncedPersister | None = None,
        lock_window_ms: float = DEFAULT_LOCK_WINDOW_MS,
        scheduler_factory: Callable[[], object] | None = None,
        clock: Callable[[], float] | None = None,
    ) -> None:
        self._load = load
        self._persister = persister
        self._lock_window_ms = lock_window_ms
        self._scheduler_factory = scheduler_factory
        self._clock = clock
        self._editors: dict[str, RankedListEditor] = {}

    @property
    def persister(self) -> DebouncedPersister | None:
        return self._persister

    def get_editor(self, list_id: str) -> RankedListEditor:
        """Return the editor for *list_id*, loading it synchronously on first access."""
        self._check_known(list_id)
        editor = self._editors.get(list_id)
        if editor is None:
            editor = self._install_editor(list_id, self._load(list_id))
        return editor

    async def load_editor(self, list_id: str) -> RankedListEditor:
        """
        Return the editor for *list_id*, loading it in the threadpool on first access.

        Request handlers call this before touching an editor so the storage
        read never blocks the event loop. The editor itself is built on the
        loop, and a concurrent load of the same list keeps the first editor.
        """
        self._check_known(list_id)
        editor = self._editors.get(list_id)
        if editor is not None:
            return editor

        items = await run_in_threadpool(self._load, list_id)
        editor = self._editors.get(list_id)
        if editor is None:
            editor = self._install_editor(list_id, items)
        return editor

    async def load_editors(self, list_ids: Iterable[str]) -> list[RankedListEditor]:
        return [await self.load_editor(list_id) for list_id in list_ids]

    def _check_known(self, list_id: str) -> None:
        if list_id not in LIST_LABELS:
            raise ListNotFoundError(f"List {list_id} not found")

    def _install_editor(self, list_id: str, items: list[RankedItem]) -> RankedListEditor:
        editor = RankedListEditor(
            list_id,
            items,
            lock_window_ms=self._lock_window_ms,
            scheduler=self._scheduler_factory() if self._scheduler_factory else None,
            clock=self._clock,
        )
        if self._persister is not None:
            editor.subscribe(self._persister)
        self._editors[list_id] = editor
        return editor

    def list_summaries(self) -> list[dict]:
        """Every known list with its label and current item count."""
        return [
            {
                "list_id": list_id,
                "label": label,
                "item_count": len(self.get_editor(list_id).snapshot),
            }
            for list_id, label in LIST_LABELS.items()
        ]

    def add_item(self, list_id: str, payload: AddItemRequest) -> RankedItem:
        """Mint a unique id for a resolved catalog entry and add it to the list."""
        editor = self.get_editor(list_id)
        item = RankedItem(
            unique_id=str(uuid4()),
            catalog_id=payload.catalog_id,
            unranked=True,
            title=payload.title,
            image_path=payload.image_path,
            media_type=payload.media_type,
            attributes=payload.attributes,
        )
        added = editor.add_item(item, payload.section)
        logger.info(
            "added %s to list %s (%s)",
            payload.catalog_id, list_id, (payload.section or SectionEnum.UNRANKED).value,
        )
        return added

    def add_to_genre_lists(self, payload: AddItemRequest, genre_names: list[str]) -> list[str]:
        """
        Add a movie to every genre list its TMDB genres route to.

        Lists already holding the movie are skipped. Returns the list ids
        the movie was added to.
        """
        added_to: list[str] = []
        for list_id in lists_for_genres(genre_names):
            try:
                self.add_item(list_id, payload)
            except DuplicateListItemError:
                continue
            added_to.append(list_id)
        return added_to

    def remove_item(self, list_id: str, unique_id: str) -> RankedItem:
        item = self.get_editor(list_id).remove_item(unique_id)
        logger.info("removed %s from list %s", item.catalog_id, list_id)
        return item

    def undo_remove(self, list_id: str) -> RankedItem:
        item = self.get_editor(list_id).undo_remove()
        logger.info("restored %s to list %s", item.catalog_id, list_id)
        return item


def build_snapshot_response(list_id: str, snapshot: tuple[RankedItem, ...] | list[RankedItem]) -> dict:
    """Build a dict matching ListSnapshotResponse, with rank and section per item."""
    items = []
    ranked_count = 0
    for item, rank, section in assign_ranks(snapshot):
        if rank is not None:
            ranked_count += 1
        items.append({**item.model_dump(), "rank": rank, "section": section})
    return {
        "list_id": list_id,
        "items": items,
        "ranked_count": ranked_count,
        "unranked_count": len(items) - ranked_count,
    }
