"""Sync operations for offline-first notes.

Architecture:
    RecordStore -> MutationQueue -> SyncOrchestrator -> RemoteClient
                                         |
                                  pull + resolve_conflicts

Components:
- **MutationQueue**: Durable FIFO log of local create/update/delete
- **SyncOrchestrator**: Connectivity-aware driver of sync passes
- **resolve_conflicts**: Last-writer-wins merge of local and remote records
"""

from notesync.client.sync.conflict import changed_records, resolve_conflicts
from notesync.client.sync.orchestrator import SyncOrchestrator
from notesync.client.sync.queue import MutationQueue
from notesync.client.sync.types import (
    OrchestratorState,
    OrchestratorStats,
    QueueEntry,
    SyncResult,
)

__all__ = [
    # Conflict resolution
    "changed_records",
    "resolve_conflicts",
    # Queue & orchestrator
    "MutationQueue",
    "SyncOrchestrator",
    # Types
    "OrchestratorState",
    "OrchestratorStats",
    "QueueEntry",
    "SyncResult",
]
