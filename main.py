# main.py
"""
Application entrypoint. Builds the state store and includes routers.
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from mplus.api.routers import drafts, sessions, signups
from mplus.config.settings import settings
from mplus.repositories.state_repos import build_store

logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    store = build_store(settings)
    await store.startup()
    app.state.store = store
    logger.info("Using %s storage", settings.STORAGE_BACKEND)
    try:
        yield
    finally:
        await store.shutdown()


app = FastAPI(title="Mythic+ Organizer", lifespan=lifespan)

app.include_router(sessions.router, prefix="/api/v1/guilds", tags=["sessions"])
app.include_router(signups.router, prefix="/api/v1", tags=["signups"])
app.include_router(drafts.router, prefix="/api/v1/guilds", tags=["drafts"])


@app.get("/")
async def index():
    """Health / basic info endpoint."""
    return {"status": "ok", "service": "mplus-organizer", "env": settings.ENV}
