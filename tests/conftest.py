"""Shared fixtures for notesync tests.

Provides a temporary local database with the store/queue/events wired
around it, and FakeRemote: an in-memory stand-in for the notes server
that stamps timestamps like the real one and can be told to fail.
"""

from __future__ import annotations

import asyncio
from collections.abc import Generator
from dataclasses import replace
from pathlib import Path

import pytest

from notesync.client.events import SyncEvents
from notesync.client.state import LocalDatabase
from notesync.client.store import RecordStore
from notesync.client.sync.queue import MutationQueue
from notesync.core.errors import NotFoundError, RemoteError
from notesync.core.types import Record, SyncStatus, utcnow


class FakeRemote:
    """In-memory notes service implementing the RemoteClient protocol.

    Attributes:
        notes: Server-side notes by id.
        calls: (method, record_id) for every call, in order.
        fail_on: (method, record_id) pairs that raise RemoteError.
        fail_list: Make list_notes raise RemoteError.
        gate: If set, list_notes waits on it (to hold a pass mid-flight).
    """

    def __init__(self) -> None:
        self.notes: dict[str, Record] = {}
        self.calls: list[tuple[str, str]] = []
        self.fail_on: set[tuple[str, str]] = set()
        self.fail_list = False
        self.gate: asyncio.Event | None = None
        self.online = True

    def seed(self, title: str, content: str = "", note_id: str = "remote-1") -> Record:
        """Put a note on the server as if another client created it."""
        now = utcnow()
        note = Record(id=note_id, title=title, content=content, created_at=now, updated_at=now, synced=True)
        self.notes[note_id] = note
        return note

    def _check(self, method: str, record_id: str) -> None:
        self.calls.append((method, record_id))
        if (method, record_id) in self.fail_on:
            raise RemoteError(f"{method} {record_id} failed", 500)

    async def health_check(self) -> bool:
        return self.online

    async def list_notes(self) -> list[Record]:
        self.calls.append(("list", ""))
        if self.gate is not None:
            await self.gate.wait()
        if self.fail_list:
            raise RemoteError("list failed", 503)
        return [replace(note) for note in self.notes.values()]

    async def create_note(self, record: Record) -> Record:
        self._check("create", record.id)
        now = utcnow()
        note = Record(
            id=record.id,
            title=record.title,
            content=record.content,
            created_at=now,
            updated_at=now,
            synced=True,
        )
        self.notes[record.id] = note
        return replace(note)

    async def update_note(self, record_id: str, record: Record) -> Record:
        self._check("update", record_id)
        existing = self.notes.get(record_id)
        if existing is None:
            raise NotFoundError(f"Note not found: {record_id}", 404)
        note = replace(existing, title=record.title, content=record.content, updated_at=utcnow())
        self.notes[record_id] = note
        return replace(note)

    async def delete_note(self, record_id: str) -> bool:
        self._check("delete", record_id)
        self.notes.pop(record_id, None)
        return True


@pytest.fixture
def db(tmp_path: Path) -> Generator[LocalDatabase, None, None]:
    """Create a temporary local database."""
    database = LocalDatabase(tmp_path / "notes.db")
    yield database
    database.close()


@pytest.fixture
def events() -> SyncEvents:
    """Create an event hub."""
    return SyncEvents()


@pytest.fixture
def queue(db: LocalDatabase, events: SyncEvents) -> MutationQueue:
    """Create a mutation queue publishing to the event hub."""
    return MutationQueue(db, events)


@pytest.fixture
def store(db: LocalDatabase, queue: MutationQueue) -> RecordStore:
    """Create a record store feeding the queue."""
    return RecordStore(db, queue)


@pytest.fixture
def remote() -> FakeRemote:
    """Create an in-memory remote service."""
    return FakeRemote()


@pytest.fixture
def status_log(events: SyncEvents) -> list[tuple[str, SyncStatus]]:
    """Collect every status event published on the hub."""
    log: list[tuple[str, SyncStatus]] = []
    events.subscribe_sync_status("all", lambda scope, status: log.append((scope, status)))
    return log
