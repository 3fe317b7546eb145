"""Sync engine wiring.

This module provides:
- SyncEngine: Builds and owns the local database, event hub, record
  store, mutation queue, remote client and orchestrator
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from notesync.client.api import NotesClient
from notesync.client.events import SyncEvents
from notesync.client.state import LocalDatabase
from notesync.client.store import RecordStore
from notesync.client.sync.orchestrator import SyncOrchestrator
from notesync.client.sync.queue import MutationQueue

if TYPE_CHECKING:
    import httpx

    from notesync.client.api import RemoteClient
    from notesync.core.config import ServerConfig

logger = logging.getLogger(__name__)


class SyncEngine:
    """All sync components for one local database.

    Usage:
        engine = SyncEngine.open(db_path, ServerConfig("http://localhost:8000"))
        await engine.store.save(Record(title="A", content="x"))
        await engine.orchestrator.start(await engine.remote.health_check())
        await engine.aclose()
    """

    def __init__(self, db: LocalDatabase, remote: RemoteClient) -> None:
        """Wire the components around an open database.

        Args:
            db: Local database.
            remote: Remote service client.
        """
        self.db = db
        self.remote = remote
        self.events = SyncEvents()
        self.queue = MutationQueue(db, self.events)
        self.store = RecordStore(db, self.queue)
        self.orchestrator = SyncOrchestrator(self.store, remote, self.events, db=db)

    @classmethod
    def open(
        cls,
        db_path: Path,
        server_config: ServerConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> SyncEngine:
        """Open the database at db_path and connect to the given server.

        Args:
            db_path: Path to the local SQLite database.
            server_config: Remote server configuration.
            transport: Optional httpx transport for the notes client.
        """
        db = LocalDatabase(db_path)
        remote = NotesClient(server_config, transport=transport)
        logger.debug("Sync engine opened (%s -> %s)", db_path, server_config.server_url)
        return cls(db, remote)

    async def aclose(self) -> None:
        """Close the remote client and the database."""
        aclose = getattr(self.remote, "aclose", None)
        if aclose is not None:
            await aclose()
        self.db.close()
