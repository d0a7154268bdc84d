"""
List registry dependency — shared across the /lists endpoints.

Usage in any route:
    from app.deps.lists import get_list_registry
    from app.services.list_service import ListRegistry

    @router.get("/lists/{list_id}")
    async def show(list_id: str, registry: ListRegistry = Depends(get_list_registry)):
        ...

Tests swap the registry through app.dependency_overrides.
"""
from functools import lru_cache

from app.core.config import settings
from app.services.list_service import ListRegistry
from app.services.persistence import DebouncedPersister


@lru_cache(maxsize=1)
def get_list_registry() -> ListRegistry:
    """Process-wide registry; editors live for the lifetime of the worker."""
    return ListRegistry(
        persister=DebouncedPersister(delay_seconds=settings.PERSIST_DEBOUNCE_SECONDS),
        lock_window_ms=settings.SECTION_LOCK_WINDOW_MS,
    )
