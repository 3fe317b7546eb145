"""In-memory note storage for the reference server.

This module provides:
- NoteRepository: Thread-safe dictionary of notes keyed by id

The server is the authority on timestamps: every create and update
stamps updated_at with the server clock, which is what clients compare
during last-writer-wins merges.
"""

from __future__ import annotations

import itertools
import logging
import threading
from dataclasses import replace

from notesync.core.types import Record, utcnow

logger = logging.getLogger(__name__)


class NoteRepository:
    """Notes held in memory for the lifetime of the server process."""

    def __init__(self, notes: list[Record] | None = None) -> None:
        """Initialize the repository.

        Args:
            notes: Optional initial notes, kept as given (timestamps included).
        """
        self._lock = threading.Lock()
        self._notes: dict[str, Record] = {}
        self._next_id = itertools.count(1)
        for note in notes or []:
            self._notes[note.id] = replace(note, synced=True)

    def __len__(self) -> int:
        with self._lock:
            return len(self._notes)

    def list_notes(self) -> list[Record]:
        """Get all notes in insertion order."""
        with self._lock:
            return [replace(note) for note in self._notes.values()]

    def get(self, note_id: str) -> Record | None:
        """Get a note by id."""
        with self._lock:
            note = self._notes.get(note_id)
            return replace(note) if note is not None else None

    def create(self, title: str, content: str, note_id: str | None = None) -> Record:
        """Create a note.

        The client-supplied id is kept; a sequence number is assigned when
        none is given. Creating an id that already exists replaces that
        note, so a client retrying a create after a lost response does not
        end up with duplicates.
        """
        now = utcnow()
        with self._lock:
            if note_id is None:
                note_id = str(next(self._next_id))
                while note_id in self._notes:
                    note_id = str(next(self._next_id))
            note = Record(
                id=note_id,
                title=title,
                content=content,
                created_at=now,
                updated_at=now,
                synced=True,
            )
            self._notes[note_id] = note
        logger.info("Created note %s", note_id)
        return replace(note)

    def update(self, note_id: str, title: str | None = None, content: str | None = None) -> Record:
        """Merge the given fields into a note and stamp updated_at.

        Raises:
            KeyError: If the note does not exist.
        """
        with self._lock:
            existing = self._notes.get(note_id)
            if existing is None:
                raise KeyError(note_id)
            note = replace(
                existing,
                title=existing.title if title is None else title,
                content=existing.content if content is None else content,
                updated_at=utcnow(),
            )
            self._notes[note_id] = note
        logger.info("Updated note %s", note_id)
        return replace(note)

    def delete(self, note_id: str) -> Record | None:
        """Delete a note.

        Returns:
            The deleted note, or None if it did not exist.
        """
        with self._lock:
            note = self._notes.pop(note_id, None)
        if note is not None:
            logger.info("Deleted note %s", note_id)
        return note
