"""Helpers shared by notesync CLI commands."""

from __future__ import annotations

import asyncio
from collections.abc import Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING

import click

from notesync.client.cli.config import get_db_path
from notesync.client.engine import SyncEngine
from notesync.client.state import LocalDatabase
from notesync.client.store import RecordStore
from notesync.client.sync.queue import MutationQueue
from notesync.core.types import ALL, SyncStatus

if TYPE_CHECKING:
    from notesync.client.sync.types import SyncResult
    from notesync.core.config import ServerConfig


@contextmanager
def open_local_store() -> Iterator[RecordStore]:
    """Open the local record store (no server connection needed)."""
    db = LocalDatabase(get_db_path())
    try:
        yield RecordStore(db, MutationQueue(db))
    finally:
        db.close()


def echo_status(scope: str, status: SyncStatus) -> None:
    """Print a sync status event."""
    color = {
        SyncStatus.IN_PROGRESS: "yellow",
        SyncStatus.DONE: "green",
        SyncStatus.ERROR: "red",
    }[status]
    click.echo(f"  {scope}: " + click.style(status.value, fg=color))


async def _sync_once(server_config: ServerConfig, show_status: bool) -> SyncResult | None:
    engine = SyncEngine.open(get_db_path(), server_config)
    try:
        if show_status:
            engine.events.subscribe_sync_status(ALL, echo_status)
        online = await engine.remote.health_check()
        return await engine.orchestrator.start(initially_online=online)
    finally:
        await engine.aclose()


def run_sync_pass(server_config: ServerConfig, show_status: bool = False) -> SyncResult | None:
    """Run one sync pass if the server is reachable.

    Returns:
        The pass result, or None when the server is unreachable.
    """
    return asyncio.run(_sync_once(server_config, show_status))
