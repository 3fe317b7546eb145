"""Durable mutation queue.

This module provides:
- MutationQueue: Append-only FIFO log of local mutations awaiting the server

Entries are appended by the record store (inside the same transaction
as the record write) and consumed by the sync orchestrator. The queue
is append/clear only: no entry is ever modified in place, and entries
for the same record keep their enqueue order so that replaying them
never resurrects stale state.

Persistence (SQLite):
    Entries live in the mutation_queue table of the local database and
    survive restarts. Queue ids come from an AUTOINCREMENT column, so
    they are strictly increasing even across clears.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import TYPE_CHECKING, Any

from notesync.client.sync.types import QueueEntry
from notesync.core.errors import StorageError
from notesync.core.types import Operation, utcnow

if TYPE_CHECKING:
    import sqlite3

    from notesync.client.events import SyncEvents
    from notesync.client.state import LocalDatabase

logger = logging.getLogger(__name__)


class MutationQueue:
    """FIFO queue of pending create/update/delete operations.

    Usage:
        queue = MutationQueue(db, events)
        await queue.enqueue(Operation.DELETE, {"id": "abc"})
        for entry in await queue.list_entries():
            ...
        await queue.clear(through=entry.queue_id)
    """

    def __init__(self, db: LocalDatabase, events: SyncEvents | None = None) -> None:
        """Initialize the queue.

        Args:
            db: Local database holding the mutation_queue table.
            events: Optional event hub notified after every change.
        """
        self._db = db
        self._events = events

    @staticmethod
    def insert(
        conn: sqlite3.Connection,
        operation: Operation,
        payload: dict[str, Any],
    ) -> int:
        """Append an entry using an open transaction.

        Used by the record store so a record write and its queue entry
        commit together. The caller is responsible for notify().

        Returns:
            The new queue id.
        """
        cursor = conn.execute(
            """
            INSERT INTO mutation_queue (operation, record_id, payload, enqueued_at)
            VALUES (?, ?, ?, ?)
            """,
            (
                operation.value,
                str(payload["id"]),
                json.dumps(payload),
                utcnow().isoformat(),
            ),
        )
        queue_id = cursor.lastrowid
        if queue_id is None:
            raise StorageError(f"No queue id assigned for {payload['id']}")
        logger.debug("Queued %s for %s (#%d)", operation.name, payload["id"], queue_id)
        return queue_id

    def notify(self) -> None:
        """Publish a queue-change event."""
        if self._events is not None:
            self._events.notify_queue_change()

    async def enqueue(self, operation: Operation, payload: dict[str, Any]) -> int:
        """Append a mutation and publish a queue-change event.

        Args:
            operation: Kind of mutation.
            payload: Record dict (CREATE/UPDATE) or {"id": ...} (DELETE).

        Returns:
            The new queue id.

        Raises:
            StorageError: If the write fails.
        """
        queue_id = await asyncio.to_thread(self._enqueue, operation, payload)
        self.notify()
        return queue_id

    def _enqueue(self, operation: Operation, payload: dict[str, Any]) -> int:
        with self._db.transaction() as conn:
            return self.insert(conn, operation, payload)

    async def list_entries(self) -> list[QueueEntry]:
        """Get all pending entries, oldest first."""
        rows = await asyncio.to_thread(
            self._db.query,
            "SELECT * FROM mutation_queue ORDER BY queue_id",
        )
        return [QueueEntry.from_row(row) for row in rows]

    async def count(self) -> int:
        """Get number of pending entries."""
        rows = await asyncio.to_thread(
            self._db.query,
            "SELECT COUNT(*) AS n FROM mutation_queue",
        )
        return int(rows[0]["n"])

    async def clear(self, through: int | None = None) -> int:
        """Remove entries and publish a queue-change event.

        Args:
            through: If given, only entries with queue_id <= through are
                removed (the snapshot of a drained pass). Otherwise the
                whole queue is cleared (operator action) and the dropped
                changes are given up: their records are flagged synced.

        Returns:
            Number of entries removed.
        """
        removed = await asyncio.to_thread(self._clear, through)
        if through is None:
            logger.info("Cleared %d entries from mutation queue", removed)
        else:
            logger.debug("Cleared %d entries up to #%d", removed, through)
        self.notify()
        return removed

    def _clear(self, through: int | None) -> int:
        with self._db.transaction() as conn:
            if through is None:
                conn.execute(
                    """
                    UPDATE records SET synced = 1
                    WHERE id IN (SELECT record_id FROM mutation_queue)
                    """
                )
                cursor = conn.execute("DELETE FROM mutation_queue")
            else:
                cursor = conn.execute(
                    "DELETE FROM mutation_queue WHERE queue_id <= ?",
                    (through,),
                )
            return cursor.rowcount
