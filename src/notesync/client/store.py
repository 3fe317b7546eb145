"""Local record store.

This module provides:
- RecordStore: durable note storage that records every local edit in
  the mutation queue

Every local write (save/delete) and its queue entry are committed in a
single SQLite transaction, so a reader never observes one without the
other. Records pulled from the server go through apply_remote(), the
only write path that does not enqueue.
"""

from __future__ import annotations

import asyncio
import logging
import sqlite3
from collections.abc import Iterable
from dataclasses import replace
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from notesync.client.sync.queue import MutationQueue
from notesync.core.errors import StorageError
from notesync.core.types import Operation, Record, new_record_id, parse_timestamp, utcnow

if TYPE_CHECKING:
    from notesync.client.state import LocalDatabase

logger = logging.getLogger(__name__)


def _iso(value: datetime) -> str:
    """Serialize a timestamp so that stored values sort chronologically."""
    return value.astimezone(UTC).isoformat(timespec="microseconds")


def _from_row(row: sqlite3.Row) -> Record:
    return Record(
        id=row["id"],
        title=row["title"],
        content=row["content"],
        created_at=parse_timestamp(row["created_at"]) if row["created_at"] else None,
        updated_at=parse_timestamp(row["updated_at"]),
        synced=bool(row["synced"]),
    )


class RecordStore:
    """Notes persisted locally, indexed by id and by updated_at.

    Usage:
        store = RecordStore(db, queue)
        note = await store.save(Record(title="A", content="x"))
        await store.delete(note.id)

    Storage failures raise StorageError to the caller.
    """

    def __init__(self, db: LocalDatabase, queue: MutationQueue) -> None:
        self._db = db
        self._queue = queue

    @property
    def queue(self) -> MutationQueue:
        """The mutation queue fed by this store."""
        return self._queue

    # === Reads ===

    async def get_all(self) -> list[Record]:
        """Get all records, most recently modified first."""
        rows = await asyncio.to_thread(
            self._db.query,
            "SELECT * FROM records ORDER BY updated_at DESC",
        )
        return [_from_row(row) for row in rows]

    async def get(self, record_id: str) -> Record | None:
        """Get a record by id."""
        rows = await asyncio.to_thread(
            self._db.query,
            "SELECT * FROM records WHERE id = ?",
            (record_id,),
        )
        return _from_row(rows[0]) if rows else None

    # === Local writes ===

    async def save(self, record: Record) -> Record:
        """Persist a local edit.

        A record is new when its id is empty or not stored yet; an empty
        id gets a fresh one. updated_at is set to now. A new record is
        always unsynced; an existing one stays synced only if it was
        synced before and the caller did not mark it dirty
        (record.synced=False). Unsynced results are queued as CREATE or
        UPDATE with the full saved record.

        Returns:
            The record as persisted.
        """
        saved, queued = await asyncio.to_thread(self._save, record)
        if queued:
            self._queue.notify()
        return saved

    def _save(self, record: Record) -> tuple[Record, bool]:
        now = utcnow()
        with self._db.transaction() as conn:
            previous = self._fetch(conn, record.id) if record.id else None
            is_new = previous is None

            if is_new:
                synced = False
            else:
                synced = previous.synced is not False and record.synced is not False

            created_at = record.created_at or (previous.created_at if previous else None) or now
            saved = replace(
                record,
                id=record.id or new_record_id(),
                created_at=created_at,
                updated_at=now,
                synced=synced,
            )
            self._write(conn, saved)

            if not saved.synced:
                operation = Operation.CREATE if is_new else Operation.UPDATE
                MutationQueue.insert(conn, operation, saved.to_dict())

        logger.debug("Saved %s (new=%s, synced=%s)", saved.id, is_new, saved.synced)
        return saved, not saved.synced

    async def delete(self, record_id: str) -> None:
        """Remove a record and queue its deletion.

        The DELETE entry is queued even if the record is not stored
        locally, so the server copy still gets removed.
        """
        await asyncio.to_thread(self._delete, record_id)
        self._queue.notify()

    def _delete(self, record_id: str) -> None:
        with self._db.transaction() as conn:
            cursor = conn.execute("DELETE FROM records WHERE id = ?", (record_id,))
            if cursor.rowcount == 0:
                logger.debug("Deleting %s which is not stored locally", record_id)
            MutationQueue.insert(conn, Operation.DELETE, {"id": record_id})

    # === Sync writes (never enqueue) ===

    async def apply_remote(self, record: Record) -> bool:
        """Persist a record pulled from the server as synced.

        Timestamps are kept as sent by the server. The write is skipped
        when the stored copy is at least as new, or when the record still
        has queued mutations: local work written while the pass was
        running is never overwritten.

        Returns:
            True if the record was written.
        """
        return await asyncio.to_thread(self._apply_remote, record)

    def _apply_remote(self, record: Record) -> bool:
        remote_updated_at = record.updated_at
        if remote_updated_at is None:
            raise ValueError(f"Remote record {record.id} has no updated_at")
        with self._db.transaction() as conn:
            pending = conn.execute(
                "SELECT 1 FROM mutation_queue WHERE record_id = ? LIMIT 1",
                (record.id,),
            ).fetchone()
            if pending is not None:
                logger.debug("Not applying remote %s: local mutations pending", record.id)
                return False

            current = self._fetch(conn, record.id)
            if current is not None and current.updated_at is not None and current.updated_at >= remote_updated_at:
                logger.debug("Not applying remote %s: local copy is as recent", record.id)
                return False

            self._write(conn, replace(record, synced=True))
        return True

    async def mark_synced(self, record_ids: Iterable[str]) -> int:
        """Flag records as synced after their mutations were confirmed.

        Records that were queued again in the meantime stay unsynced.

        Returns:
            Number of records updated.
        """
        ids = list(dict.fromkeys(record_ids))
        if not ids:
            return 0
        return await asyncio.to_thread(self._mark_synced, ids)

    def _mark_synced(self, ids: list[str]) -> int:
        placeholders = ", ".join("?" for _ in ids)
        with self._db.transaction() as conn:
            cursor = conn.execute(
                f"""
                UPDATE records SET synced = 1
                WHERE id IN ({placeholders})
                  AND id NOT IN (SELECT record_id FROM mutation_queue)
                """,
                tuple(ids),
            )
            return cursor.rowcount

    # === Helpers ===

    @staticmethod
    def _fetch(conn: sqlite3.Connection, record_id: str) -> Record | None:
        row = conn.execute("SELECT * FROM records WHERE id = ?", (record_id,)).fetchone()
        return _from_row(row) if row else None

    @staticmethod
    def _write(conn: sqlite3.Connection, record: Record) -> None:
        if record.updated_at is None:
            raise StorageError(f"Cannot store {record.id} without updated_at")
        conn.execute(
            """
            INSERT OR REPLACE INTO records (id, title, content, created_at, updated_at, synced)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            (
                record.id,
                record.title,
                record.content,
                _iso(record.created_at) if record.created_at else None,
                _iso(record.updated_at),
                int(record.synced),
            ),
        )
