"""Health check API route."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from notesync.server.api.deps import get_repository
from notesync.server.repository import NoteRepository
from notesync.server.schemas import HealthResponse

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
def health_check(repository: NoteRepository = Depends(get_repository)) -> HealthResponse:
    """Check server health."""
    return HealthResponse(status="ok", notes=len(repository))
