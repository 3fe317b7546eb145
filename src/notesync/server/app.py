"""FastAPI application for the notesync reference server.

This module creates and configures the FastAPI application with:
- REST API for notes (in-memory storage)
- Health endpoint used by clients as connectivity probe

Usage:
    uvicorn notesync.server.app:app --host 0.0.0.0 --port 8000
"""

from __future__ import annotations

import logging
import os
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI

from notesync import __version__
from notesync.server.api.router import router as api_router
from notesync.server.repository import NoteRepository

# Configuration from environment variables with defaults
LATENCY = float(os.environ.get("NOTESYNC_SERVER_LATENCY", "0"))
LOG_PATH = Path(os.environ["NOTESYNC_LOG_PATH"]) if os.environ.get("NOTESYNC_LOG_PATH") else None

logger = logging.getLogger(__name__)


def create_app(repository: NoteRepository | None = None, latency: float = 0.0) -> FastAPI:
    """Create FastAPI application with a custom repository.

    This is primarily used for testing with isolated storage.

    Args:
        repository: Note storage (a fresh empty one by default).
        latency: Seconds added to every note request, to mimic a slow network.

    Returns:
        Configured FastAPI application.
    """
    repository = repository if repository is not None else NoteRepository()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Application lifespan handler for startup/shutdown."""
        # Startup
        logger.info("=" * 60)
        logger.info("Notesync Server Starting")
        logger.info("=" * 60)
        logger.info("  Notes:    %d (in memory)", len(repository))
        logger.info("  Latency:  %.2fs", latency)
        logger.info("  Logs:     %s", LOG_PATH.absolute() if LOG_PATH else "stdout")
        logger.info("=" * 60)

        yield

        # Shutdown
        logger.info("Notesync Server shutting down")

    application = FastAPI(
        title="Notesync Server",
        description="Reference notes service for offline-first sync",
        version=__version__,
        lifespan=lifespan,
    )

    application.state.repository = repository
    application.state.latency = latency

    application.include_router(api_router)

    return application


def app_factory() -> FastAPI:
    """Factory function for uvicorn --factory mode."""
    return create_app(latency=LATENCY)


# Default application instance for uvicorn
app = create_app(latency=LATENCY)
