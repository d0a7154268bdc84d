"""
Lists API — /lists
──────────────────
Endpoints:
  GET    /lists                               — Every genre list with its item count
  POST   /lists/genres/items                  — Add a movie to all lists its genres route to
  GET    /lists/{list_id}                     — Published snapshot with rank + section per item
  POST   /lists/{list_id}/items               — Add a catalog entry (201)
  DELETE /lists/{list_id}/items/{unique_id}   — Remove an item (204)
  POST   /lists/{list_id}/undo                — Re-append the last removed item
  POST   /lists/{list_id}/drag/start|over|end|cancel — Drag lifecycle events

The handlers are async so that move-over publishes and debounced writes are
scheduled on the server's event loop. Stored lists are loaded through
ListRegistry.load_editor, which reads storage in the threadpool.
"""
from fastapi import APIRouter, Depends, HTTPException, status

from app.core.genres import LIST_LABELS, lists_for_genres
from app.deps.lists import get_list_registry
from app.schemas.lists import (
    AddItemRequest,
    DragEndRequest,
    DragOverRequest,
    DragResultResponse,
    DragStartRequest,
    ListSnapshotResponse,
    ListSummary,
    RankedItem,
)
from app.services.list_editor import RankedListEditor
from app.services.list_service import (
    DuplicateListItemError,
    ListItemNotFoundError,
    ListNotFoundError,
    ListRegistry,
    NothingToUndoError,
    build_snapshot_response,
)

router = APIRouter()


def _error(code: str, message: str) -> dict:
    """Standard error envelope."""
    return {"error": {"code": code, "message": message}}


async def _editor_or_404(registry: ListRegistry, list_id: str) -> RankedListEditor:
    try:
        return await registry.load_editor(list_id)
    except ListNotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=_error("LIST_NOT_FOUND", str(exc)),
        ) from exc


def _drag_result(editor: RankedListEditor, outcome) -> dict:
    return {
        "outcome": outcome,
        "snapshot": build_snapshot_response(editor.list_id, editor.working_snapshot),
    }


# ── Routes ────────────────────────────────────────────────────────────────────


@router.get("", response_model=list[ListSummary])
async def get_lists(registry: ListRegistry = Depends(get_list_registry)) -> list[dict]:
    await registry.load_editors(LIST_LABELS)
    return registry.list_summaries()


@router.post("/genres/items", response_model=dict[str, list[str]])
async def add_to_genre_lists(
    payload: AddItemRequest,
    registry: ListRegistry = Depends(get_list_registry),
) -> dict:
    """Route a movie onto its genre lists using attributes.genres (TMDB names)."""
    genres = payload.attributes.get("genres") or []
    if isinstance(genres, str):
        genres = [genres]
    genre_names = [str(g) for g in genres]
    await registry.load_editors(lists_for_genres(genre_names))
    return {"list_ids": registry.add_to_genre_lists(payload, genre_names)}


@router.get("/{list_id}", response_model=ListSnapshotResponse)
async def get_list(
    list_id: str,
    registry: ListRegistry = Depends(get_list_registry),
) -> dict:
    editor = await _editor_or_404(registry, list_id)
    return build_snapshot_response(list_id, editor.snapshot)


@router.post(
    "/{list_id}/items",
    response_model=RankedItem,
    status_code=status.HTTP_201_CREATED,
)
async def add_item(
    list_id: str,
    payload: AddItemRequest,
    registry: ListRegistry = Depends(get_list_registry),
) -> RankedItem:
    """Add an already-resolved catalog entry. Unranked unless a ranked section is given."""
    try:
        await registry.load_editor(list_id)
        return registry.add_item(list_id, payload)
    except ListNotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=_error("LIST_NOT_FOUND", str(exc)),
        ) from exc
    except DuplicateListItemError as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=_error("DUPLICATE_LIST_ITEM", str(exc)),
        ) from exc


@router.delete("/{list_id}/items/{unique_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_item(
    list_id: str,
    unique_id: str,
    registry: ListRegistry = Depends(get_list_registry),
) -> None:
    try:
        await registry.load_editor(list_id)
        registry.remove_item(list_id, unique_id)
    except ListNotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=_error("LIST_NOT_FOUND", str(exc)),
        ) from exc
    except ListItemNotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=_error("LIST_ITEM_NOT_FOUND", str(exc)),
        ) from exc


@router.post("/{list_id}/undo", response_model=RankedItem)
async def undo_remove(
    list_id: str,
    registry: ListRegistry = Depends(get_list_registry),
) -> RankedItem:
    """Undo the last removal. The item goes to the end of the list, not its old slot."""
    try:
        await registry.load_editor(list_id)
        return registry.undo_remove(list_id)
    except ListNotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=_error("LIST_NOT_FOUND", str(exc)),
        ) from exc
    except NothingToUndoError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=_error("NOTHING_TO_UNDO", str(exc)),
        ) from exc
    except DuplicateListItemError as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=_error("DUPLICATE_LIST_ITEM", str(exc)),
        ) from exc


# ── Drag lifecycle ────────────────────────────────────────────────────────────


@router.post("/{list_id}/drag/start", response_model=DragResultResponse)
async def drag_start(
    list_id: str,
    payload: DragStartRequest,
    registry: ListRegistry = Depends(get_list_registry),
) -> dict:
    editor = await _editor_or_404(registry, list_id)
    return _drag_result(editor, editor.on_drag_start(payload.item_id))


@router.post("/{list_id}/drag/over", response_model=DragResultResponse)
async def drag_over(
    list_id: str,
    payload: DragOverRequest,
    registry: ListRegistry = Depends(get_list_registry),
) -> dict:
    """
    Move-over event. The response carries the working snapshot; the
    published snapshot catches up on the next loop iteration.
    """
    editor = await _editor_or_404(registry, list_id)
    outcome = editor.on_drag_over(
        payload.dragged_id,
        payload.target_id,
        timestamp_ms=payload.timestamp_ms,
    )
    return _drag_result(editor, outcome)


@router.post("/{list_id}/drag/end", response_model=DragResultResponse)
async def drag_end(
    list_id: str,
    payload: DragEndRequest,
    registry: ListRegistry = Depends(get_list_registry),
) -> dict:
    editor = await _editor_or_404(registry, list_id)
    return _drag_result(editor, editor.on_drag_end(payload.dragged_id, payload.target_id))


@router.post("/{list_id}/drag/cancel", response_model=DragResultResponse)
async def drag_cancel(
    list_id: str,
    registry: ListRegistry = Depends(get_list_registry),
) -> dict:
    editor = await _editor_or_404(registry, list_id)
    return _drag_result(editor, editor.on_drag_cancel())
