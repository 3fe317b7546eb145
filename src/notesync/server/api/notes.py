"""Note management API routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Response, status

from notesync.server.api.deps import get_repository, simulate_latency
from notesync.server.repository import NoteRepository
from notesync.server.schemas import (
    NoteCreateRequest,
    NoteResponse,
    NoteUpdateRequest,
    note_to_response,
)

router = APIRouter(
    prefix="/api/notes",
    tags=["notes"],
    dependencies=[Depends(simulate_latency)],
)


@router.get("", response_model=list[NoteResponse])
def list_notes(repository: NoteRepository = Depends(get_repository)) -> list[NoteResponse]:
    """List all notes."""
    return [note_to_response(note) for note in repository.list_notes()]


@router.post("", response_model=NoteResponse, status_code=status.HTTP_201_CREATED)
def create_note(
    request: NoteCreateRequest,
    repository: NoteRepository = Depends(get_repository),
) -> NoteResponse:
    """Create a note, keeping the client-supplied id."""
    note = repository.create(
        title=request.title,
        content=request.content,
        note_id=request.id,
    )
    return note_to_response(note)


@router.get("/{note_id}", response_model=NoteResponse)
def get_note(
    note_id: str,
    repository: NoteRepository = Depends(get_repository),
) -> NoteResponse:
    """Get a single note."""
    note = repository.get(note_id)
    if note is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Note not found: {note_id}",
        )
    return note_to_response(note)


@router.put("/{note_id}", response_model=NoteResponse)
def update_note(
    note_id: str,
    request: NoteUpdateRequest,
    repository: NoteRepository = Depends(get_repository),
) -> NoteResponse:
    """Update the title and/or content of a note."""
    try:
        note = repository.update(note_id, title=request.title, content=request.content)
    except KeyError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Note not found: {note_id}",
        ) from e
    return note_to_response(note)


@router.delete("/{note_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_note(
    note_id: str,
    repository: NoteRepository = Depends(get_repository),
) -> Response:
    """Delete a note. Deleting an unknown note succeeds."""
    repository.delete(note_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
