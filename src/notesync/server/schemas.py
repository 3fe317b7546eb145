"""Pydantic schemas for API request/response models."""

from __future__ import annotations

from pydantic import BaseModel

from notesync.core.types import Record

# === Note schemas ===


class NoteCreateRequest(BaseModel):
    """Request body for note creation."""

    id: str | None = None
    title: str = ""
    content: str = ""


class NoteUpdateRequest(BaseModel):
    """Request body for note update (omitted fields are kept)."""

    title: str | None = None
    content: str | None = None


class NoteResponse(BaseModel):
    """Note data in responses."""

    id: str
    title: str
    content: str
    created_at: str
    updated_at: str


# === Health schema ===


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    notes: int


# === Converters ===


def note_to_response(note: Record) -> NoteResponse:
    """Convert Record to response model."""
    if note.created_at is None or note.updated_at is None:
        raise ValueError(f"Note {note.id} has no timestamps")
    return NoteResponse(
        id=note.id,
        title=note.title,
        content=note.content,
        created_at=note.created_at.isoformat(),
        updated_at=note.updated_at.isoformat(),
    )
