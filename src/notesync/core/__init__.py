"""Core module - Shared record types, configuration and errors."""

from notesync.core.config import ServerConfig, SyncSettings
from notesync.core.errors import (
    NotesyncError,
    NotFoundError,
    RemoteError,
    StorageError,
    SyncError,
)
from notesync.core.types import (
    ALL,
    GLOBAL,
    Operation,
    Record,
    SyncStatus,
    new_record_id,
    parse_timestamp,
    utcnow,
)

__all__ = [
    # Config
    "ServerConfig",
    "SyncSettings",
    # Errors
    "NotesyncError",
    "NotFoundError",
    "RemoteError",
    "StorageError",
    "SyncError",
    # Types
    "ALL",
    "GLOBAL",
    "Operation",
    "Record",
    "SyncStatus",
    "new_record_id",
    "parse_timestamp",
    "utcnow",
]
