"""Shared types and dataclasses for sync operations.

This module provides:
- QueueEntry: A pending mutation in the durable queue
- OrchestratorState: Connectivity/sync state of the orchestrator
- SyncResult: Summary of one sync pass
- OrchestratorStats: Counters kept by the orchestrator
"""

from __future__ import annotations

import json
import sqlite3
from dataclasses import dataclass, field
from datetime import datetime
from enum import IntEnum, auto
from typing import Any

from notesync.core.types import Operation, Record, parse_timestamp


@dataclass(frozen=True)
class QueueEntry:
    """A mutation waiting to be confirmed by the remote service.

    Attributes:
        queue_id: Strictly increasing local sequence number (FIFO key).
        operation: CREATE, UPDATE or DELETE.
        record_id: Id of the affected record.
        payload: Full record for CREATE/UPDATE, {"id": ...} for DELETE.
        enqueued_at: When the mutation was recorded.
    """

    queue_id: int
    operation: Operation
    record_id: str
    payload: dict[str, Any]
    enqueued_at: datetime

    @classmethod
    def from_row(cls, row: sqlite3.Row) -> QueueEntry:
        """Create QueueEntry from database row."""
        return cls(
            queue_id=row["queue_id"],
            operation=Operation(row["operation"]),
            record_id=row["record_id"],
            payload=json.loads(row["payload"]),
            enqueued_at=parse_timestamp(row["enqueued_at"]),
        )

    @property
    def record(self) -> Record:
        """The payload as a Record (CREATE/UPDATE entries only)."""
        if self.operation == Operation.DELETE:
            raise ValueError("DELETE entries carry no record")
        return Record.from_dict(self.payload)

    def __repr__(self) -> str:
        """Human-readable representation."""
        return f"QueueEntry(#{self.queue_id}, {self.operation.name}, id={self.record_id!r})"


class OrchestratorState(IntEnum):
    """State of the sync orchestrator."""

    OFFLINE = auto()
    ONLINE_IDLE = auto()
    SYNCING = auto()


@dataclass
class SyncResult:
    """Result of one sync pass.

    Failures are reported here and through status events, never raised.
    """

    pushed: list[str] = field(default_factory=list)
    pulled: list[str] = field(default_factory=list)
    failed: str | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        """True if the pass ended with "global: done"."""
        return self.error is None


@dataclass
class OrchestratorStats:
    """Statistics for the orchestrator."""

    passes_started: int = 0
    passes_completed: int = 0
    passes_failed: int = 0
    passes_skipped: int = 0
    mutations_pushed: int = 0
    records_pulled: int = 0
