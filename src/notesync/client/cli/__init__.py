"""Command-line interface for notesync.

This module provides the main CLI entry point and assembles all commands.

Commands:
- config: Show or change settings
- add / edit / delete: Change notes locally (queued for sync)
- list / show: Read local notes
- queue / clear-queue: Inspect or drop pending mutations
- sync: Run one sync pass
- watch: Keep syncing, following connectivity
- serve: Run the reference notes server
"""

from __future__ import annotations

import logging

import click

from notesync.client.cli.config import (
    get_config_dir,
    get_config_file,
    get_db_path,
    load_config,
    save_config,
)
from notesync.client.cli.configure import config
from notesync.client.cli.notes import add, delete, edit, list_notes, show
from notesync.client.cli.server import serve
from notesync.client.cli.sync import clear_queue, queue, watch
from notesync.client.cli.sync import sync as sync_command
from notesync.core.log_config import setup_logging


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Log engine activity to stdout.")
@click.version_option(package_name="notesync")
def cli(verbose: bool) -> None:
    """Notesync - Offline-first note synchronization."""
    if verbose:
        setup_logging(logging.DEBUG)


# Config commands
cli.add_command(config)

# Note commands
cli.add_command(add)
cli.add_command(edit)
cli.add_command(delete)
cli.add_command(list_notes)
cli.add_command(show)

# Sync commands
cli.add_command(queue)
cli.add_command(clear_queue)
cli.add_command(sync_command)
cli.add_command(watch)

# Server command
cli.add_command(serve)


def main() -> None:
    """Entry point for the CLI."""
    cli()


__all__ = [
    # Main entry points
    "cli",
    "main",
    # Config utilities
    "get_config_dir",
    "get_config_file",
    "get_db_path",
    "load_config",
    "save_config",
]
