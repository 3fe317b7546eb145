"""Sync commands for notesync CLI.

Commands:
- sync: Run one sync pass against the configured server
- watch: Keep syncing while the process runs, following connectivity
- queue: Show pending mutations
- clear-queue: Drop pending mutations without sending them
"""

from __future__ import annotations

import asyncio
import logging
import sys

import click

from notesync.client.cli.common import open_local_store, run_sync_pass
from notesync.client.cli.config import get_db_path, get_server_config, get_sync_settings
from notesync.core.config import ServerConfig, SyncSettings
from notesync.core.errors import NotesyncError
from notesync.core.log_config import setup_logging
from notesync.core.types import GLOBAL, SyncStatus

logger = logging.getLogger(__name__)


def _require_server() -> ServerConfig:
    server_config = get_server_config()
    if server_config is None:
        click.echo(
            "Error: No server configured. Run 'notesync config set server_url <url>' first.",
            err=True,
        )
        sys.exit(1)
    return server_config


@click.command()
@click.option("--quiet", "-q", is_flag=True, help="Only print the summary.")
def sync(quiet: bool) -> None:
    """Synchronize notes with the server.

    Pushes queued local changes in order, then pulls the server state and
    merges it (the most recently modified copy wins).
    """
    server_config = _require_server()
    click.echo(f"Syncing with {server_config.server_url}")

    try:
        result = run_sync_pass(server_config, show_status=not quiet)
    except NotesyncError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    if result is None:
        click.echo("Error: Server unreachable, local changes stay queued.", err=True)
        sys.exit(1)

    if not result.ok:
        where = f" on note {result.failed}" if result.failed else ""
        click.echo(f"Error: Sync failed{where}: {result.error}", err=True)
        sys.exit(1)

    click.echo(f"Done: {len(result.pushed)} pushed, {len(result.pulled)} pulled")


@click.command()
@click.option(
    "--interval",
    "-i",
    type=float,
    default=None,
    help="Seconds between connectivity checks (default: check_interval setting).",
)
def watch(interval: float | None) -> None:
    """Keep notes in sync until interrupted.

    Probes the server periodically. Each time it becomes reachable, queued
    changes are pushed and the server state is pulled.
    """
    server_config = _require_server()
    settings = get_sync_settings()
    if interval is not None:
        settings.check_interval = interval

    # Keep the handlers installed by --verbose
    if not logging.getLogger("notesync").handlers:
        setup_logging(logging.INFO)
    click.echo(f"Watching {server_config.server_url} (Ctrl+C to stop)")

    try:
        asyncio.run(_watch(server_config, settings))
    except KeyboardInterrupt:
        click.echo("\nStopped.")
    except NotesyncError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


async def _watch(server_config: ServerConfig, settings: SyncSettings) -> None:
    from notesync.client.connectivity import ConnectivityMonitor
    from notesync.client.engine import SyncEngine
    from notesync.client.status import StatusTracker

    engine = SyncEngine.open(get_db_path(), server_config)

    def on_change(scope: str, status: SyncStatus | None) -> None:
        if scope == GLOBAL and status is not None:
            logger.info("Sync %s", status.value)

    tracker = StatusTracker(engine.events, settings, on_change=on_change)
    tracker.attach()

    monitor = ConnectivityMonitor(engine.remote.health_check, settings.check_interval)
    monitor.set_callbacks(
        on_online=engine.orchestrator.handle_online,
        on_offline=engine.orchestrator.handle_offline,
    )

    # Saves made by other notesync commands only land in the queue
    async def poll_queue() -> None:
        while True:
            await asyncio.sleep(settings.check_interval)
            if engine.orchestrator.is_online and await engine.queue.count():
                await engine.orchestrator.sync_data()

    monitor.start()
    poller = asyncio.create_task(poll_queue(), name="QueuePoller")
    try:
        await asyncio.Event().wait()
    finally:
        poller.cancel()
        await asyncio.gather(poller, return_exceptions=True)
        await monitor.stop()
        tracker.detach()
        await engine.aclose()


@click.command()
def queue() -> None:
    """Show local changes waiting to be pushed."""
    try:
        with open_local_store() as store:
            entries = asyncio.run(store.queue.list_entries())
    except NotesyncError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    if not entries:
        click.echo("Queue is empty.")
        return

    for entry in entries:
        when = entry.enqueued_at.astimezone().strftime("%Y-%m-%d %H:%M:%S")
        click.echo(f"#{entry.queue_id:<5} {when}  {entry.operation.value:<12} {entry.record_id}")
    click.echo(f"\n{len(entries)} pending mutation(s)")


@click.command("clear-queue")
@click.option("--yes", "-y", is_flag=True, help="Do not ask for confirmation.")
def clear_queue(yes: bool) -> None:
    """Drop all pending changes without sending them."""
    if not yes and not click.confirm("Pending changes will never reach the server. Continue?"):
        click.echo("Aborted.")
        return

    try:
        with open_local_store() as store:
            removed = asyncio.run(store.queue.clear())
    except NotesyncError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    click.echo(f"Removed {removed} pending mutation(s)")
