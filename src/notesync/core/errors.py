"""Exception hierarchy shared by the notesync client.

- StorageError: local database read/write failed (propagated to callers)
- RemoteError: a remote service call failed (contained by the orchestrator)
- NotFoundError: the remote record targeted by an update does not exist
- SyncError: the orchestrator could not process a queue entry
"""

from __future__ import annotations


class NotesyncError(Exception):
    """Base exception for notesync errors."""


class StorageError(NotesyncError):
    """Local storage operation failed."""


class RemoteError(NotesyncError):
    """Remote service call failed."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class NotFoundError(RemoteError):
    """Remote record not found."""


class SyncError(NotesyncError):
    """Sync pass could not process a mutation."""
