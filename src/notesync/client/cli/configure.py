"""Configuration commands for notesync CLI.

Commands:
- config show: Print the effective configuration
- config set: Change one configuration key
"""

from __future__ import annotations

import sys

import click

from notesync.client.cli.config import (
    CONFIG_KEYS,
    get_config_file,
    get_db_path,
    get_server_config,
    get_sync_settings,
    load_config,
    save_config,
)


@click.group()
def config() -> None:
    """Show or change notesync settings."""


@config.command()
def show() -> None:
    """Print the effective configuration."""
    server_config = get_server_config()
    settings = get_sync_settings()

    click.echo(f"Config file:    {get_config_file()}")
    click.echo(f"Database:       {get_db_path()}")
    if server_config is None:
        click.echo("Server:         (not configured)")
    else:
        click.echo(f"Server:         {server_config.server_url}")
        click.echo(f"Timeout:        {server_config.timeout:g}s")
    click.echo(f"Check interval: {settings.check_interval:g}s")


@config.command("set")
@click.argument("key", type=click.Choice(CONFIG_KEYS))
@click.argument("value")
def set_value(key: str, value: str) -> None:
    """Set a configuration KEY to VALUE."""
    stored: str | float = value
    if key in ("timeout", "check_interval"):
        try:
            stored = float(value)
        except ValueError:
            click.echo(f"Error: {key} must be a number of seconds", err=True)
            sys.exit(1)
        if stored <= 0:
            click.echo(f"Error: {key} must be positive", err=True)
            sys.exit(1)
    elif key == "server_url" and not value.startswith(("http://", "https://")):
        click.echo("Error: server_url must start with http:// or https://", err=True)
        sys.exit(1)

    data = load_config()
    data[key] = stored
    save_config(data)
    click.echo(f"{key} = {stored}")
