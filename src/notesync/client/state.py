"""Local database for the sync client.

This module provides:
- LocalDatabase: SQLite file holding the durable client state

Architecture:
    Two durable collections live in one SQLite file so that a record
    write and its queue entry can share a transaction:

    - records: notes keyed by id, indexed by updated_at
    - mutation_queue: pending operations keyed by an autoincrement
      sequence number (strictly increasing, never reused)

    A small key-value table keeps bookkeeping such as the timestamp of
    the last successful sync pass.
"""

from __future__ import annotations

import logging
import sqlite3
import threading
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any

from notesync.core.errors import StorageError
from notesync.core.types import parse_timestamp

if TYPE_CHECKING:
    from collections.abc import Iterator

logger = logging.getLogger(__name__)


class LocalDatabase:
    """SQLite-based durable state for the sync client.

    All access goes through a single connection guarded by a re-entrant
    lock, so each operation is atomic with respect to other readers in
    the same process.
    """

    def __init__(self, db_path: Path) -> None:
        """Open (or create) the local database.

        Args:
            db_path: Path to SQLite database file.

        Raises:
            StorageError: If the database cannot be opened.
        """
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)

        # Lock for thread-safe database access
        self._lock = threading.RLock()

        try:
            self._conn = sqlite3.connect(
                str(self._db_path),
                check_same_thread=False,
                isolation_level=None,  # Autocommit mode, transactions are explicit
            )
            self._conn.row_factory = sqlite3.Row

            # Enable WAL mode for better concurrency
            self._conn.execute("PRAGMA journal_mode=WAL")
            self._create_tables()
        except sqlite3.Error as e:
            raise StorageError(f"Cannot open local database {self._db_path}: {e}") from e

        logger.debug("Opened local database at %s", self._db_path)

    @property
    def path(self) -> Path:
        """Path of the database file."""
        return self._db_path

    def _create_tables(self) -> None:
        """Create database tables if they don't exist."""
        self._conn.executescript("""
            CREATE TABLE IF NOT EXISTS records (
                id TEXT PRIMARY KEY,
                title TEXT NOT NULL,
                content TEXT NOT NULL,
                created_at TEXT,
                updated_at TEXT NOT NULL,
                synced INTEGER NOT NULL DEFAULT 0
            );

            CREATE INDEX IF NOT EXISTS idx_records_updated_at
                ON records (updated_at);

            -- AUTOINCREMENT guarantees queue ids are never reused after a clear
            CREATE TABLE IF NOT EXISTS mutation_queue (
                queue_id INTEGER PRIMARY KEY AUTOINCREMENT,
                operation TEXT NOT NULL,
                record_id TEXT NOT NULL,
                payload TEXT NOT NULL,
                enqueued_at TEXT NOT NULL
            );

            CREATE INDEX IF NOT EXISTS idx_mutation_queue_record
                ON mutation_queue (record_id);

            -- Key-value sync state
            CREATE TABLE IF NOT EXISTS sync_state (
                key TEXT PRIMARY KEY,
                value TEXT
            );
        """)

    def close(self) -> None:
        """Close the database connection."""
        with self._lock:
            self._conn.close()

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        """Run a block of statements as one atomic write.

        Yields:
            The underlying connection, to be used only inside the block.

        Raises:
            StorageError: If any statement (or the commit) fails. The
                transaction is rolled back.
        """
        with self._lock:
            try:
                self._conn.execute("BEGIN IMMEDIATE")
            except sqlite3.Error as e:
                raise StorageError(f"Cannot start transaction: {e}") from e

            try:
                yield self._conn
            except sqlite3.Error as e:
                self._conn.execute("ROLLBACK")
                raise StorageError(f"Local write failed: {e}") from e
            except BaseException:
                self._conn.execute("ROLLBACK")
                raise

            try:
                self._conn.execute("COMMIT")
            except sqlite3.Error as e:
                self._conn.execute("ROLLBACK")
                raise StorageError(f"Commit failed: {e}") from e

    def query(self, sql: str, params: tuple[Any, ...] = ()) -> list[sqlite3.Row]:
        """Run a read-only statement and fetch all rows.

        Raises:
            StorageError: If the read fails.
        """
        with self._lock:
            try:
                cursor = self._conn.execute(sql, params)
                return cursor.fetchall()
            except sqlite3.Error as e:
                raise StorageError(f"Local read failed: {e}") from e

    # === Sync state ===

    def get_state(self, key: str) -> str | None:
        """Get a sync state value."""
        rows = self.query("SELECT value FROM sync_state WHERE key = ?", (key,))
        return rows[0]["value"] if rows else None

    def set_state(self, key: str, value: str) -> None:
        """Set a sync state value."""
        with self.transaction() as conn:
            conn.execute(
                "INSERT OR REPLACE INTO sync_state (key, value) VALUES (?, ?)",
                (key, value),
            )

    def get_last_sync_at(self) -> datetime | None:
        """Get timestamp of last successful sync pass."""
        value = self.get_state("last_sync_at")
        return parse_timestamp(value) if value else None

    def set_last_sync_at(self, timestamp: datetime) -> None:
        """Set timestamp of last successful sync pass."""
        self.set_state("last_sync_at", timestamp.isoformat())
