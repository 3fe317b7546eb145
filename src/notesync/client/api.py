"""HTTP client for the notes server API.

This module provides:
- RemoteClient: Protocol the sync orchestrator drives
- NotesClient: httpx implementation against the notes REST API

Endpoints:
    GET    /health
    GET    /api/notes
    POST   /api/notes
    PUT    /api/notes/{id}
    DELETE /api/notes/{id}
"""

from __future__ import annotations

import logging
from typing import Any, Protocol

import httpx

from notesync.core.config import ServerConfig
from notesync.core.errors import NotFoundError, RemoteError
from notesync.core.types import Record

logger = logging.getLogger(__name__)


class RemoteClient(Protocol):
    """Contract of the remote notes service.

    Any method may raise RemoteError; the orchestrator treats every
    failure the same way.
    """

    async def health_check(self) -> bool:
        """Connectivity probe; never raises."""
        ...

    async def list_notes(self) -> list[Record]:
        """List every note held by the server."""
        ...

    async def create_note(self, record: Record) -> Record:
        """Create a note, returning it with server-assigned fields."""
        ...

    async def update_note(self, record_id: str, record: Record) -> Record:
        """Update a note; raises NotFoundError if it does not exist."""
        ...

    async def delete_note(self, record_id: str) -> Record | bool:
        """Delete a note; deleting a missing note is not an error."""
        ...


def _json(response: httpx.Response) -> Any:
    """Decode a JSON response body.

    Raises:
        RemoteError: If the body is not JSON (a captive-portal page, say).
    """
    try:
        return response.json()
    except ValueError as e:
        raise RemoteError(
            f"Invalid JSON from {response.request.url}", response.status_code
        ) from e


def _parse_record(data: Any) -> Record:
    """Parse a note from a response body.

    Raises:
        RemoteError: If the payload is not a valid note.
    """
    try:
        record = Record.from_dict(data)
    except (KeyError, TypeError, ValueError) as e:
        raise RemoteError(f"Invalid note payload: {e}") from e
    if record.updated_at is None:
        raise RemoteError(f"Note {record.id} has no updated_at")
    record.synced = True
    return record


class NotesClient:
    """Async HTTP client for the notes server."""

    def __init__(
        self,
        config: ServerConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the notes client.

        Args:
            config: Server configuration (URL and timeout).
            transport: Optional httpx transport (e.g. ASGITransport in tests).
        """
        self._config = config
        self._client = httpx.AsyncClient(
            base_url=config.server_url,
            timeout=config.timeout,
            transport=transport,
        )

    @property
    def server_url(self) -> str:
        """Base URL of the server."""
        return self._config.server_url

    async def aclose(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()

    async def __aenter__(self) -> NotesClient:
        """Context manager entry."""
        return self

    async def __aexit__(self, *args: object) -> None:
        """Context manager exit."""
        await self.aclose()

    def _handle_response(self, response: httpx.Response) -> httpx.Response:
        """Handle API response and raise appropriate exceptions."""
        if response.status_code < 400:
            return response

        try:
            detail = response.json().get("detail", response.reason_phrase)
        except (ValueError, AttributeError):
            detail = response.reason_phrase or "Unknown error"

        if response.status_code == 404:
            raise NotFoundError(str(detail), 404)
        raise RemoteError(str(detail), response.status_code)

    async def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        """Send a request, mapping transport failures to RemoteError."""
        try:
            response = await self._client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            raise RemoteError(f"{method} {url} failed: {e}") from e
        return self._handle_response(response)

    # === Health check ===

    async def health_check(self) -> bool:
        """Check if the server is reachable and healthy.

        Returns:
            True if server is healthy. Never raises.
        """
        try:
            response = await self._client.get("/health")
            return response.status_code == 200
        except httpx.HTTPError as e:
            logger.debug("Health check failed: %s", e)
            return False

    # === Note operations ===

    async def list_notes(self) -> list[Record]:
        """List all notes on the server."""
        response = await self._request("GET", "/api/notes")
        body = _json(response)
        if not isinstance(body, list):
            raise RemoteError("Expected a list of notes")
        return [_parse_record(item) for item in body]

    async def create_note(self, record: Record) -> Record:
        """Create a note on the server, keeping the client id."""
        response = await self._request(
            "POST",
            "/api/notes",
            json={
                "id": record.id,
                "title": record.title,
                "content": record.content,
            },
        )
        return _parse_record(_json(response))

    async def update_note(self, record_id: str, record: Record) -> Record:
        """Update a note on the server.

        Raises:
            NotFoundError: If the note does not exist on the server.
        """
        response = await self._request(
            "PUT",
            f"/api/notes/{record_id}",
            json={"title": record.title, "content": record.content},
        )
        return _parse_record(_json(response))

    async def delete_note(self, record_id: str) -> bool:
        """Delete a note on the server.

        A note that is already gone counts as deleted.

        Returns:
            True once the note no longer exists on the server.
        """
        try:
            await self._request("DELETE", f"/api/notes/{record_id}")
        except NotFoundError:
            logger.debug("Note %s already deleted on server", record_id)
        return True
