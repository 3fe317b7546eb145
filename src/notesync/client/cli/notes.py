"""Note editing commands for notesync CLI.

Commands:
- add: Create a note
- edit: Change the title or content of a note
- delete: Delete a note
- list: List notes, most recently modified first
- show: Print one note

Every write is recorded locally first and queued for the server. With
--sync (the default) a sync pass follows when a server is configured
and reachable; otherwise the change waits in the queue.
"""

from __future__ import annotations

import asyncio
import sys
from dataclasses import replace
from typing import Any

import click

from notesync.client.cli.common import open_local_store, run_sync_pass
from notesync.client.cli.config import get_server_config
from notesync.core.errors import NotesyncError
from notesync.core.types import Record

sync_option = click.option(
    "--sync/--no-sync",
    default=True,
    help="Sync with the server right after the change (default: on).",
)


def _after_write(sync: bool) -> None:
    """Run a sync pass after a local write when possible."""
    server_config = get_server_config()
    if not sync or server_config is None:
        click.echo("Change queued for sync.")
        return

    result = run_sync_pass(server_config)
    if result is None:
        click.echo("Server unreachable, change queued for sync.")
    elif not result.ok:
        click.echo(f"Sync failed ({result.error}), change stays queued.", err=True)
    else:
        click.echo("Synced with server.")


def _format_time(record: Record) -> str:
    if record.updated_at is None:
        return "-"
    return record.updated_at.astimezone().strftime("%Y-%m-%d %H:%M:%S")


@click.command()
@click.option("--title", "-t", prompt=True, help="Note title.")
@click.option("--content", "-c", default="", help="Note content.")
@sync_option
def add(title: str, content: str, sync: bool) -> None:
    """Create a note."""
    try:
        with open_local_store() as store:
            note = asyncio.run(store.save(Record(title=title, content=content)))
    except NotesyncError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    click.echo(f"Saved note {note.id}")
    _after_write(sync)


@click.command()
@click.argument("note_id")
@click.option("--title", "-t", default=None, help="New title.")
@click.option("--content", "-c", default=None, help="New content.")
@sync_option
def edit(note_id: str, title: str | None, content: str | None, sync: bool) -> None:
    """Change the title or content of a note."""
    if title is None and content is None:
        click.echo("Error: Nothing to change (use --title and/or --content).", err=True)
        sys.exit(1)

    async def _edit() -> Record | None:
        note = await store.get(note_id)
        if note is None:
            return None
        changes: dict[str, Any] = {"synced": False}
        if title is not None:
            changes["title"] = title
        if content is not None:
            changes["content"] = content
        return await store.save(replace(note, **changes))

    try:
        with open_local_store() as store:
            note = asyncio.run(_edit())
    except NotesyncError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    if note is None:
        click.echo(f"Error: Note not found: {note_id}", err=True)
        sys.exit(1)

    click.echo(f"Updated note {note.id}")
    _after_write(sync)


@click.command()
@click.argument("note_id")
@click.option("--yes", "-y", is_flag=True, help="Do not ask for confirmation.")
@sync_option
def delete(note_id: str, yes: bool, sync: bool) -> None:
    """Delete a note."""

    async def _delete() -> bool:
        if await store.get(note_id) is None:
            return False
        await store.delete(note_id)
        return True

    if not yes and not click.confirm(f"Are you sure you want to delete note {note_id}?"):
        click.echo("Aborted.")
        return

    try:
        with open_local_store() as store:
            deleted = asyncio.run(_delete())
    except NotesyncError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    if not deleted:
        click.echo(f"Error: Note not found: {note_id}", err=True)
        sys.exit(1)

    click.echo(f"Deleted note {note_id}")
    _after_write(sync)


@click.command("list")
def list_notes() -> None:
    """List notes, most recently modified first."""
    try:
        with open_local_store() as store:
            notes = asyncio.run(store.get_all())
    except NotesyncError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    if not notes:
        click.echo("No notes yet.")
        return

    for note in notes:
        marker = " " if note.synced else "*"
        click.echo(f"{marker} {note.id}  {_format_time(note)}  {note.title}")

    pending = sum(1 for note in notes if not note.synced)
    if pending:
        click.echo(f"\n* {pending} note(s) not synced yet")


@click.command()
@click.argument("note_id")
def show(note_id: str) -> None:
    """Print one note."""
    try:
        with open_local_store() as store:
            note = asyncio.run(store.get(note_id))
    except NotesyncError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    if note is None:
        click.echo(f"Error: Note not found: {note_id}", err=True)
        sys.exit(1)

    click.echo(f"Title:    {note.title}")
    click.echo(f"Id:       {note.id}")
    click.echo(f"Modified: {_format_time(note)}")
    click.echo(f"Synced:   {'yes' if note.synced else 'no'}")
    click.echo("")
    click.echo(note.content)
