"""Tests for the notes HTTP client."""

from __future__ import annotations

import json
from datetime import UTC, datetime

import httpx
import pytest

from notesync.client.api import NotesClient
from notesync.core.config import ServerConfig
from notesync.core.errors import NotFoundError, RemoteError
from notesync.core.types import Record


def make_config(server_url: str = "http://test") -> ServerConfig:
    """Create a ServerConfig for testing."""
    return ServerConfig(server_url=server_url, timeout=5.0)


def note_json(note_id: str = "n1", title: str = "T", updated_at: str = "2025-01-02T15:30:00+00:00") -> dict:
    """Build a note as serialized by the server."""
    return {
        "id": note_id,
        "title": title,
        "content": "body",
        "created_at": "2025-01-01T10:00:00+00:00",
        "updated_at": updated_at,
    }


class TestHealthCheck:
    """Tests for NotesClient.health_check."""

    @pytest.mark.asyncio
    async def test_healthy(self, httpx_mock) -> None:  # type: ignore[no-untyped-def]
        """Should return True when server is healthy."""
        httpx_mock.add_response(url="http://test/health", json={"status": "ok", "notes": 0})

        async with NotesClient(make_config()) as client:
            assert await client.health_check() is True

    @pytest.mark.asyncio
    async def test_server_error(self, httpx_mock) -> None:  # type: ignore[no-untyped-def]
        """Should return False on a 5xx answer."""
        httpx_mock.add_response(url="http://test/health", status_code=500)

        async with NotesClient(make_config()) as client:
            assert await client.health_check() is False

    @pytest.mark.asyncio
    async def test_unreachable(self, httpx_mock) -> None:  # type: ignore[no-untyped-def]
        """Should return False, not raise, when the connection fails."""
        httpx_mock.add_exception(httpx.ConnectError("Connection refused"))

        async with NotesClient(make_config()) as client:
            assert await client.health_check() is False


class TestNoteOperations:
    """Tests for note CRUD calls."""

    @pytest.mark.asyncio
    async def test_list_notes(self, httpx_mock) -> None:  # type: ignore[no-untyped-def]
        """Should parse every note and mark it synced."""
        httpx_mock.add_response(
            url="http://test/api/notes",
            method="GET",
            json=[note_json("a"), note_json("b", title="B")],
        )

        async with NotesClient(make_config()) as client:
            notes = await client.list_notes()

        assert [n.id for n in notes] == ["a", "b"]
        assert notes[1].title == "B"
        assert notes[0].updated_at == datetime(2025, 1, 2, 15, 30, tzinfo=UTC)
        assert all(n.synced for n in notes)

    @pytest.mark.asyncio
    async def test_list_notes_rejects_non_list(self, httpx_mock) -> None:  # type: ignore[no-untyped-def]
        """A non-list body is a protocol error."""
        httpx_mock.add_response(url="http://test/api/notes", json={"notes": []})

        async with NotesClient(make_config()) as client:
            with pytest.raises(RemoteError):
                await client.list_notes()

    @pytest.mark.asyncio
    async def test_list_notes_requires_updated_at(self, httpx_mock) -> None:  # type: ignore[no-untyped-def]
        """Notes without updated_at cannot take part in the merge."""
        body = note_json()
        del body["updated_at"]
        httpx_mock.add_response(url="http://test/api/notes", json=[body])

        async with NotesClient(make_config()) as client:
            with pytest.raises(RemoteError):
                await client.list_notes()

    @pytest.mark.asyncio
    async def test_list_notes_html_body(self, httpx_mock) -> None:  # type: ignore[no-untyped-def]
        """A 200 answered with an HTML page is a RemoteError."""
        httpx_mock.add_response(url="http://test/api/notes", text="<html>portal</html>")

        async with NotesClient(make_config()) as client:
            with pytest.raises(RemoteError, match="Invalid JSON"):
                await client.list_notes()

    @pytest.mark.asyncio
    async def test_create_note_html_body(self, httpx_mock) -> None:  # type: ignore[no-untyped-def]
        """A non-JSON create response is a RemoteError."""
        httpx_mock.add_response(
            url="http://test/api/notes",
            method="POST",
            status_code=201,
            text="<html>portal</html>",
        )

        async with NotesClient(make_config()) as client:
            with pytest.raises(RemoteError, match="Invalid JSON"):
                await client.create_note(Record(id="n1", title="Hello"))

    @pytest.mark.asyncio
    async def test_update_note_html_body(self, httpx_mock) -> None:  # type: ignore[no-untyped-def]
        """A non-JSON update response is a RemoteError."""
        httpx_mock.add_response(
            url="http://test/api/notes/n1",
            method="PUT",
            text="<html>portal</html>",
        )

        async with NotesClient(make_config()) as client:
            with pytest.raises(RemoteError, match="Invalid JSON"):
                await client.update_note("n1", Record(id="n1", title="New"))

    @pytest.mark.asyncio
    async def test_create_note(self, httpx_mock) -> None:  # type: ignore[no-untyped-def]
        """Should POST the client id, title and content."""
        httpx_mock.add_response(
            url="http://test/api/notes",
            method="POST",
            status_code=201,
            json=note_json("n1", title="Hello"),
        )

        async with NotesClient(make_config()) as client:
            created = await client.create_note(Record(id="n1", title="Hello", content="body"))

        request = httpx_mock.get_request()
        assert json.loads(request.content) == {"id": "n1", "title": "Hello", "content": "body"}
        assert created.id == "n1"
        assert created.synced is True

    @pytest.mark.asyncio
    async def test_update_note(self, httpx_mock) -> None:  # type: ignore[no-untyped-def]
        """Should PUT title and content to the note URL."""
        httpx_mock.add_response(
            url="http://test/api/notes/n1",
            method="PUT",
            json=note_json("n1", title="New"),
        )

        async with NotesClient(make_config()) as client:
            updated = await client.update_note("n1", Record(id="n1", title="New", content="body"))

        request = httpx_mock.get_request()
        assert json.loads(request.content) == {"title": "New", "content": "body"}
        assert updated.title == "New"

    @pytest.mark.asyncio
    async def test_update_missing_note(self, httpx_mock) -> None:  # type: ignore[no-untyped-def]
        """A 404 on update raises NotFoundError with the server detail."""
        httpx_mock.add_response(
            url="http://test/api/notes/ghost",
            method="PUT",
            status_code=404,
            json={"detail": "Note not found: ghost"},
        )

        async with NotesClient(make_config()) as client:
            with pytest.raises(NotFoundError) as exc_info:
                await client.update_note("ghost", Record(id="ghost"))

        assert exc_info.value.status_code == 404
        assert "ghost" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_delete_note(self, httpx_mock) -> None:  # type: ignore[no-untyped-def]
        """A 204 delete succeeds."""
        httpx_mock.add_response(url="http://test/api/notes/n1", method="DELETE", status_code=204)

        async with NotesClient(make_config()) as client:
            assert await client.delete_note("n1") is True

    @pytest.mark.asyncio
    async def test_delete_missing_note(self, httpx_mock) -> None:  # type: ignore[no-untyped-def]
        """Deleting a note the server does not know is not an error."""
        httpx_mock.add_response(
            url="http://test/api/notes/ghost",
            method="DELETE",
            status_code=404,
            json={"detail": "Note not found"},
        )

        async with NotesClient(make_config()) as client:
            assert await client.delete_note("ghost") is True

    @pytest.mark.asyncio
    async def test_server_error(self, httpx_mock) -> None:  # type: ignore[no-untyped-def]
        """Other error statuses raise RemoteError with the status code."""
        httpx_mock.add_response(url="http://test/api/notes", status_code=503, text="busy")

        async with NotesClient(make_config()) as client:
            with pytest.raises(RemoteError) as exc_info:
                await client.list_notes()

        assert exc_info.value.status_code == 503
        assert not isinstance(exc_info.value, NotFoundError)

    @pytest.mark.asyncio
    async def test_transport_error(self, httpx_mock) -> None:  # type: ignore[no-untyped-def]
        """Connection failures are wrapped in RemoteError."""
        httpx_mock.add_exception(httpx.ConnectError("Connection refused"))

        async with NotesClient(make_config()) as client:
            with pytest.raises(RemoteError):
                await client.list_notes()
