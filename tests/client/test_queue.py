"""Tests for the durable mutation queue."""

from __future__ import annotations

from pathlib import Path

import pytest

from notesync.client.events import SyncEvents
from notesync.client.state import LocalDatabase
from notesync.client.store import RecordStore
from notesync.client.sync.queue import MutationQueue
from notesync.core.types import Operation, Record


class TestMutationQueue:
    """Tests for MutationQueue."""

    @pytest.mark.asyncio
    async def test_empty(self, queue: MutationQueue) -> None:
        """A new queue should be empty."""
        assert await queue.list_entries() == []
        assert await queue.count() == 0

    @pytest.mark.asyncio
    async def test_fifo_order(self, queue: MutationQueue) -> None:
        """Entries should be listed in enqueue order with increasing ids."""
        await queue.enqueue(Operation.CREATE, {"id": "a", "title": "A"})
        await queue.enqueue(Operation.UPDATE, {"id": "a", "title": "A2"})
        await queue.enqueue(Operation.DELETE, {"id": "a"})

        entries = await queue.list_entries()

        assert [e.operation for e in entries] == [Operation.CREATE, Operation.UPDATE, Operation.DELETE]
        assert [e.record_id for e in entries] == ["a", "a", "a"]
        ids = [e.queue_id for e in entries]
        assert ids == sorted(ids)
        assert len(set(ids)) == 3
        assert entries[1].payload == {"id": "a", "title": "A2"}
        assert entries[0].enqueued_at.tzinfo is not None

    @pytest.mark.asyncio
    async def test_entry_record(self, queue: MutationQueue) -> None:
        """CREATE/UPDATE entries expose their payload as a Record."""
        await queue.enqueue(Operation.CREATE, {"id": "a", "title": "A", "content": "x"})
        await queue.enqueue(Operation.DELETE, {"id": "a"})
        create, delete = await queue.list_entries()

        assert create.record.title == "A"
        with pytest.raises(ValueError):
            _ = delete.record

    @pytest.mark.asyncio
    async def test_clear_all(self, queue: MutationQueue) -> None:
        """clear() without bound should empty the queue."""
        await queue.enqueue(Operation.DELETE, {"id": "a"})
        await queue.enqueue(Operation.DELETE, {"id": "b"})

        assert await queue.clear() == 2
        assert await queue.count() == 0

    @pytest.mark.asyncio
    async def test_clear_all_gives_up_dirty_records(
        self, store: RecordStore, queue: MutationQueue
    ) -> None:
        """Records whose changes were dropped no longer show as unsynced."""
        dropped = await store.save(Record(title="A"))

        assert await queue.clear() == 1

        record = await store.get(dropped.id)
        assert record is not None and record.synced is True

    @pytest.mark.asyncio
    async def test_clear_through_keeps_records_dirty(
        self, store: RecordStore, queue: MutationQueue
    ) -> None:
        """A bounded clear leaves the synced flag to the orchestrator."""
        saved = await store.save(Record(title="A"))
        entry = (await queue.list_entries())[-1]

        await queue.clear(through=entry.queue_id)

        record = await store.get(saved.id)
        assert record is not None and record.synced is False

    @pytest.mark.asyncio
    async def test_clear_through_keeps_later_entries(self, queue: MutationQueue) -> None:
        """clear(through=n) should only remove entries up to n."""
        await queue.enqueue(Operation.DELETE, {"id": "a"})
        first = (await queue.list_entries())[-1]
        await queue.enqueue(Operation.DELETE, {"id": "b"})

        assert await queue.clear(through=first.queue_id) == 1

        remaining = await queue.list_entries()
        assert [e.record_id for e in remaining] == ["b"]

    @pytest.mark.asyncio
    async def test_ids_not_reused_after_clear(self, queue: MutationQueue) -> None:
        """Queue ids should keep increasing after a clear."""
        first_id = await queue.enqueue(Operation.DELETE, {"id": "a"})
        await queue.clear()
        second_id = await queue.enqueue(Operation.DELETE, {"id": "b"})
        assert second_id > first_id

    @pytest.mark.asyncio
    async def test_notifies_queue_change(self, db: LocalDatabase) -> None:
        """Enqueue and clear should publish queue-change."""
        events = SyncEvents()
        notified: list[None] = []
        events.subscribe_queue_change(lambda: notified.append(None))
        queue = MutationQueue(db, events)

        await queue.enqueue(Operation.DELETE, {"id": "a"})
        await queue.clear()

        assert len(notified) == 2

    @pytest.mark.asyncio
    async def test_survives_restart(self, tmp_path: Path) -> None:
        """Pending entries should persist across database reopen."""
        path = tmp_path / "notes.db"
        db = LocalDatabase(path)
        await MutationQueue(db).enqueue(Operation.CREATE, {"id": "a", "title": "A"})
        db.close()

        reopened = LocalDatabase(path)
        try:
            entries = await MutationQueue(reopened).list_entries()
            assert len(entries) == 1
            assert entries[0].operation == Operation.CREATE
            assert entries[0].payload["title"] == "A"
        finally:
            reopened.close()
