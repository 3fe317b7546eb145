"""Shared types for notesync.

This module defines the note record and the enums used by both the
client engine and the reference server.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any

# Status scopes that are not record ids
GLOBAL = "global"
ALL = "all"


def utcnow() -> datetime:
    """Return the current time as an aware UTC datetime."""
    return datetime.now(UTC)


def new_record_id() -> str:
    """Generate a client-side record identifier."""
    return str(uuid.uuid4())


def parse_timestamp(value: str | datetime) -> datetime:
    """Parse an ISO-8601 timestamp, assuming UTC when naive."""
    if isinstance(value, datetime):
        parsed = value
    else:
        parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


class Operation(str, Enum):
    """Kind of a pending local mutation.

    Values are the wire names stored in the mutation queue.
    """

    CREATE = "CREATE_NOTE"
    UPDATE = "UPDATE_NOTE"
    DELETE = "DELETE_NOTE"


class SyncStatus(str, Enum):
    """Sync status of a record or of a whole pass.

    Idle is the absence of a status. DONE and ERROR are transient:
    consumers clear them after a short fixed delay.
    """

    IN_PROGRESS = "in-progress"
    DONE = "done"
    ERROR = "error"


@dataclass
class Record:
    """A text note.

    Attributes:
        id: Opaque unique identifier (client-generated uuid4 by default).
        title: Note title.
        content: Note body.
        created_at: When the note was first saved.
        updated_at: Last modification time (drives last-writer-wins).
        synced: False while at least one local mutation is outstanding.
    """

    id: str = field(default_factory=new_record_id)
    title: str = ""
    content: str = ""
    created_at: datetime | None = None
    updated_at: datetime | None = None
    synced: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Record:
        """Create from a JSON-compatible dictionary."""
        created_at = data.get("created_at")
        updated_at = data.get("updated_at")
        return cls(
            id=str(data["id"]),
            title=data.get("title", ""),
            content=data.get("content", ""),
            created_at=parse_timestamp(created_at) if created_at else None,
            updated_at=parse_timestamp(updated_at) if updated_at else None,
            synced=bool(data.get("synced", False)),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-compatible dictionary."""
        return {
            "id": self.id,
            "title": self.title,
            "content": self.content,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
            "synced": self.synced,
        }
