"""Tests for FastAPI server endpoints."""

from __future__ import annotations

from datetime import UTC, datetime

import pytest
from fastapi.testclient import TestClient

from notesync.core.types import Record, parse_timestamp
from notesync.server.app import create_app
from notesync.server.repository import NoteRepository
from notesync.server.schemas import note_to_response


@pytest.fixture
def repository() -> NoteRepository:
    """Create an empty repository."""
    return NoteRepository()


@pytest.fixture
def client(repository: NoteRepository) -> TestClient:
    """Create a test client with the app."""
    return TestClient(create_app(repository))


class TestHealthEndpoint:
    """Tests for /health."""

    def test_health(self, client: TestClient, repository: NoteRepository) -> None:
        """Health should report ok and the note count."""
        repository.create("A", "")

        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "ok", "notes": 1}


class TestNotesEndpoints:
    """Tests for /api/notes."""

    def test_list_empty(self, client: TestClient) -> None:
        """A new server has no notes."""
        response = client.get("/api/notes")
        assert response.status_code == 200
        assert response.json() == []

    def test_create_keeps_client_id(self, client: TestClient) -> None:
        """The client-supplied id is kept and timestamps are stamped."""
        response = client.post("/api/notes", json={"id": "abc", "title": "T", "content": "C"})

        assert response.status_code == 201
        data = response.json()
        assert data["id"] == "abc"
        assert data["title"] == "T"
        assert data["content"] == "C"
        assert data["created_at"] == data["updated_at"]
        assert parse_timestamp(data["updated_at"]).tzinfo is not None

    def test_create_assigns_id(self, client: TestClient) -> None:
        """Without an id the server assigns sequence numbers."""
        first = client.post("/api/notes", json={"title": "A"}).json()
        second = client.post("/api/notes", json={"title": "B"}).json()

        assert first["id"] == "1"
        assert second["id"] == "2"

    def test_create_same_id_replaces(self, client: TestClient) -> None:
        """Retrying a create does not duplicate the note."""
        client.post("/api/notes", json={"id": "abc", "title": "first"})
        client.post("/api/notes", json={"id": "abc", "title": "retry"})

        notes = client.get("/api/notes").json()
        assert [n["title"] for n in notes] == ["retry"]

    def test_get_note(self, client: TestClient) -> None:
        """Single notes can be fetched by id."""
        client.post("/api/notes", json={"id": "abc", "title": "T"})

        assert client.get("/api/notes/abc").json()["title"] == "T"
        assert client.get("/api/notes/nope").status_code == 404

    def test_update_merges_fields(self, client: TestClient) -> None:
        """Update changes only provided fields and bumps updated_at."""
        created = client.post("/api/notes", json={"id": "abc", "title": "T", "content": "C"}).json()

        response = client.put("/api/notes/abc", json={"title": "T2"})

        assert response.status_code == 200
        data = response.json()
        assert data["title"] == "T2"
        assert data["content"] == "C"
        assert data["created_at"] == created["created_at"]
        assert parse_timestamp(data["updated_at"]) >= parse_timestamp(created["updated_at"])

    def test_update_unknown(self, client: TestClient) -> None:
        """Updating a missing note is a 404 with a detail message."""
        response = client.put("/api/notes/ghost", json={"title": "x"})

        assert response.status_code == 404
        assert "ghost" in response.json()["detail"]

    def test_delete(self, client: TestClient) -> None:
        """Delete removes the note."""
        client.post("/api/notes", json={"id": "abc", "title": "T"})

        response = client.delete("/api/notes/abc")

        assert response.status_code == 204
        assert client.get("/api/notes").json() == []

    def test_delete_unknown(self, client: TestClient) -> None:
        """Deleting a missing note succeeds."""
        assert client.delete("/api/notes/ghost").status_code == 204


class TestNoteRepository:
    """Tests for the in-memory repository."""

    def test_initial_notes_kept_as_given(self) -> None:
        """Seeded notes keep their timestamps."""
        when = datetime(2025, 1, 1, tzinfo=UTC)
        repository = NoteRepository([Record(id="x", title="seed", created_at=when, updated_at=when)])

        note = repository.get("x")

        assert note is not None
        assert note.updated_at == when
        assert note.synced is True

    def test_returns_copies(self) -> None:
        """Callers cannot mutate stored notes."""
        repository = NoteRepository()
        note = repository.create("A", "")
        note.title = "mutated"

        stored = repository.get(note.id)
        assert stored is not None and stored.title == "A"

    def test_sequence_skips_taken_ids(self) -> None:
        """Assigned ids never collide with client ids."""
        repository = NoteRepository()
        repository.create("client", "", note_id="1")

        assert repository.create("server", "").id == "2"

    def test_update_unknown(self) -> None:
        """Updating a missing note raises KeyError."""
        with pytest.raises(KeyError):
            NoteRepository().update("ghost", title="x")

    def test_delete_returns_note(self) -> None:
        """Delete returns the removed note, or None."""
        repository = NoteRepository()
        note = repository.create("A", "")

        assert repository.delete(note.id) == note
        assert repository.delete(note.id) is None
        assert len(repository) == 0


class TestLatency:
    """Tests for simulated latency."""

    def test_latency_applied(self, repository: NoteRepository) -> None:
        """Note requests are delayed by the configured latency."""
        import time

        client = TestClient(create_app(repository, latency=0.05))

        start = time.monotonic()
        client.get("/api/notes")

        assert time.monotonic() - start >= 0.05


class TestConverters:
    """Tests for schema converters."""

    def test_note_without_timestamps_rejected(self) -> None:
        """A note missing its timestamps cannot be serialized."""
        with pytest.raises(ValueError):
            note_to_response(Record(id="n1", title="x"))
