"""FastAPI dependencies for API routes."""

from __future__ import annotations

import time

from fastapi import Request

from notesync.server.repository import NoteRepository


def get_repository(request: Request) -> NoteRepository:
    """Get note repository from app state."""
    repository: NoteRepository = request.app.state.repository
    return repository


def simulate_latency(request: Request) -> None:
    """Delay the request by the configured latency (0 by default)."""
    latency: float = request.app.state.latency
    if latency > 0:
        time.sleep(latency)
