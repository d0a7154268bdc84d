"""
CineRank API — FastAPI application entry point.

Routers are registered here. Each service lives in app/api/.
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.core.config import settings
from app.api import lists, people, ratings
from app.db.models import Base
from app.db.session import engine
from app.deps.lists import get_list_registry

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


# ── Lifecycle ─────────────────────────────────────────────────────────────────
@asynccontextmanager
async def lifespan(app: FastAPI):
    # Local dev runs without migrations; deployments use `alembic upgrade head`.
    if settings.is_dev:
        Base.metadata.create_all(bind=engine)
    yield
    # Write any debounced list snapshots before the worker exits.
    persister = get_list_registry().persister
    if persister is not None:
        written = await persister.flush()
        logger.info("flushed %d pending list(s) on shutdown", written)


app = FastAPI(
    title="CineRank API",
    description="Backend for the CineRank ranked lists, ratings and watchlist.",
    version="0.1.0",
    docs_url="/docs" if settings.ENABLE_DOCS else None,
    redoc_url="/redoc" if settings.ENABLE_DOCS else None,
    lifespan=lifespan,
)

# ── CORS ──────────────────────────────────────────────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ── Routers ───────────────────────────────────────────────────────────────────
app.include_router(lists.router,   prefix="/lists",   tags=["lists"])
app.include_router(ratings.router, prefix="/ratings", tags=["ratings"])
app.include_router(people.router,  prefix="/people",  tags=["people"])


# ── Health check ──────────────────────────────────────────────────────────────
@app.get("/health", tags=["system"])
def health_check() -> dict:
    """Liveness probe. Returns 200 when the server is up."""
    return {"status": "ok", "version": "0.1.0", "env": settings.APP_ENV}
