"""Sync orchestrator for offline-first note synchronization.

This module provides:
- SyncOrchestrator: Connectivity-aware driver of sync passes

The orchestrator is the "brain" of the sync engine:
1. Tracks connectivity (online/offline signals)
2. Drains the mutation queue against the remote service, in FIFO order
3. Pulls the server state and merges it (last-writer-wins)
4. Publishes per-record and global status events throughout

State machine:
    | Signal / call   | From          | To                               |
    |-----------------|---------------|----------------------------------|
    | online          | Offline       | Syncing -> Online-Idle           |
    | online          | Syncing       | (pass already running, dropped)  |
    | offline         | any           | Offline (running pass finishes)  |
    | sync_data()     | Online-Idle   | Syncing -> Online-Idle           |
    | sync_data()     | Offline       | no-op                            |
    | sync_data()     | Syncing       | no-op (not queued)               |

Drain policy:
    The first failing entry stops the drain and leaves the whole queue
    in place; later entries may depend on the failed one, so they are
    retried in order on the next pass.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import contextmanager
from typing import TYPE_CHECKING

from notesync.client.sync.conflict import changed_records, resolve_conflicts
from notesync.client.sync.types import (
    OrchestratorState,
    OrchestratorStats,
    QueueEntry,
    SyncResult,
)
from notesync.core.errors import SyncError
from notesync.core.types import GLOBAL, Operation, SyncStatus, utcnow

if TYPE_CHECKING:
    from collections.abc import Iterator

    from notesync.client.api import RemoteClient
    from notesync.client.events import SyncEvents
    from notesync.client.state import LocalDatabase
    from notesync.client.store import RecordStore

logger = logging.getLogger(__name__)


class SyncOrchestrator:
    """Drives sync passes between the local store and the remote service.

    At most one pass runs at a time. Failures inside a pass are logged and
    reported as "global: error"; they never reach the caller.

    Usage:
        orchestrator = SyncOrchestrator(store, remote, events, db=db)
        await orchestrator.start(initially_online=await remote.health_check())

        # Wire connectivity signals
        monitor.set_callbacks(
            on_online=orchestrator.handle_online,
            on_offline=orchestrator.handle_offline,
        )

        # Explicit sync request (e.g. after a local save)
        await orchestrator.sync_data()
    """

    def __init__(
        self,
        store: RecordStore,
        remote: RemoteClient,
        events: SyncEvents,
        db: LocalDatabase | None = None,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            store: Local record store (its queue is drained).
            remote: Remote service client.
            events: Event hub receiving status notifications.
            db: Optional local database to record the last sync time.
        """
        self._store = store
        self._queue = store.queue
        self._remote = remote
        self._events = events
        self._db = db

        self._online = False
        self._in_progress = False
        self._stats = OrchestratorStats()

    @property
    def state(self) -> OrchestratorState:
        """Get current orchestrator state.

        Offline takes precedence: a pass that outlives a lost connection
        still reports OFFLINE.
        """
        if not self._online:
            return OrchestratorState.OFFLINE
        if self._in_progress:
            return OrchestratorState.SYNCING
        return OrchestratorState.ONLINE_IDLE

    @property
    def is_online(self) -> bool:
        """Whether the last connectivity signal was online."""
        return self._online

    @property
    def in_progress(self) -> bool:
        """Whether a sync pass is running."""
        return self._in_progress

    @property
    def stats(self) -> OrchestratorStats:
        """Get orchestrator statistics."""
        return self._stats

    # === Connectivity ===

    async def start(self, initially_online: bool) -> SyncResult | None:
        """Apply the connectivity state queried at startup.

        Runs a first pass if online.
        """
        self._online = initially_online
        logger.info("Orchestrator started (%s)", "online" if initially_online else "offline")
        if initially_online:
            return await self.sync_data()
        return None

    async def handle_online(self) -> SyncResult | None:
        """Connectivity restored: run a pass unless one is in flight."""
        if not self._online:
            logger.info("Connection restored")
        self._online = True
        return await self.sync_data()

    def handle_offline(self) -> None:
        """Connectivity lost: refuse new passes until online again."""
        if self._online:
            logger.info("Connection lost%s", ", letting running pass finish" if self._in_progress else "")
        self._online = False

    # === Sync pass ===

    @contextmanager
    def _pass_guard(self) -> Iterator[None]:
        """Hold the single-pass guard for the lifetime of one pass."""
        self._in_progress = True
        try:
            yield
        finally:
            self._in_progress = False

    async def sync_data(self) -> SyncResult | None:
        """Run one sync pass if online and idle.

        Returns:
            The pass result, or None if the request was dropped.
        """
        # Checked and set before the first await: no second pass can start
        if not self._online:
            logger.debug("Sync requested while offline, skipped")
            self._stats.passes_skipped += 1
            return None
        if self._in_progress:
            logger.debug("Sync already in progress, request dropped")
            self._stats.passes_skipped += 1
            return None

        with self._pass_guard():
            return await self._run_pass()

    async def _run_pass(self) -> SyncResult:
        """Drain, pull and merge, reporting status events."""
        result = SyncResult()
        self._stats.passes_started += 1
        self._events.notify_sync_status(GLOBAL, SyncStatus.IN_PROGRESS)

        try:
            # Entries enqueued after this snapshot belong to the next pass
            entries = await self._queue.list_entries()
            if entries:
                logger.info("Pushing %d queued mutation(s)", len(entries))
                await self._drain(entries, result)
                await self._queue.clear(through=entries[-1].queue_id)
                await self._store.mark_synced(
                    entry.record_id for entry in entries if entry.operation != Operation.DELETE
                )

            await self._pull(result)

            if self._db is not None:
                await asyncio.to_thread(self._db.set_last_sync_at, utcnow())
        except Exception as e:
            result.error = str(e) or type(e).__name__
            self._stats.passes_failed += 1
            logger.exception("Sync pass failed")
            self._events.notify_sync_status(GLOBAL, SyncStatus.ERROR)
            return result

        self._stats.passes_completed += 1
        logger.info(
            "Sync pass complete: %d pushed, %d pulled",
            len(result.pushed),
            len(result.pulled),
        )
        self._events.notify_sync_status(GLOBAL, SyncStatus.DONE)
        return result

    async def _drain(self, entries: list[QueueEntry], result: SyncResult) -> None:
        """Apply queued mutations in order, stopping at the first failure.

        Raises:
            Exception: Whatever the failing remote call raised.
        """
        for entry in entries:
            self._events.notify_sync_status(entry.record_id, SyncStatus.IN_PROGRESS)
            try:
                await self._dispatch(entry)
            except Exception:
                result.failed = entry.record_id
                logger.warning("Failed to push %r, stopping drain", entry)
                self._events.notify_sync_status(entry.record_id, SyncStatus.ERROR)
                raise

            result.pushed.append(entry.record_id)
            self._stats.mutations_pushed += 1
            self._events.notify_sync_status(entry.record_id, SyncStatus.DONE)

    async def _dispatch(self, entry: QueueEntry) -> None:
        """Send one mutation to the remote service."""
        logger.debug("Pushing %r", entry)
        if entry.operation == Operation.CREATE:
            await self._remote.create_note(entry.record)
        elif entry.operation == Operation.UPDATE:
            await self._remote.update_note(entry.record_id, entry.record)
        elif entry.operation == Operation.DELETE:
            await self._remote.delete_note(entry.record_id)
        else:
            raise SyncError(f"Unknown operation: {entry.operation}")

    async def _pull(self, result: SyncResult) -> None:
        """Fetch server state and merge it into the local store."""
        remote_records = await self._remote.list_notes()
        local_records = await self._store.get_all()
        merged = resolve_conflicts(local_records, remote_records)

        for record in changed_records(merged, local_records):
            if await self._store.apply_remote(record):
                result.pulled.append(record.id)
                self._stats.records_pulled += 1
