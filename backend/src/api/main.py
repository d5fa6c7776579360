"""FastAPI application main entry point."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

load_dotenv()

from .middleware import register_error_handlers
from .routes import ai, auth, records, system
from ..services.config import get_config
from ..services.records import get_record_store

logger = logging.getLogger(__name__)

system.install_memory_handler()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan handler to run startup and shutdown tasks."""
    config = get_config()
    logger.info("Starting TestGem API with %s record backend", config.record_backend)
    store = None
    try:
        store = get_record_store()
    except Exception as exc:
        logger.exception("Record backend initialization failed: %s", exc)
    if not config.gemini_api_key:
        logger.warning("GEMINI_API_KEY is not set; AI generation and edits will fail")
    yield
    if store is not None:
        store.close()
        logger.info("Record backend closed")


app = FastAPI(
    title="TestGem API",
    description="Generate, store and AI-edit tests, notes and workspaces",
    version="0.1.0",
    lifespan=lifespan,
)

config = get_config()

app.add_middleware(
    CORSMiddleware,
    allow_origins=list(config.cors_origins),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)

# Fixed paths must be registered before the /api/{kind} routes.
app.include_router(auth.router, tags=["auth"])
app.include_router(system.router, tags=["system"])
app.include_router(ai.router, tags=["ai"])
app.include_router(records.router, tags=["records"])


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}


@app.get("/")
async def root():
    """API health check endpoint."""
    return {"status": "ok", "service": "TestGem API"}


__all__ = ["app"]
