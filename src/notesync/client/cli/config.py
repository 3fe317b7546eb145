"""Configuration utilities for notesync CLI.

This module provides shared configuration functions used across CLI commands.
The configuration directory defaults to ~/.notesync and can be moved with
the NOTESYNC_HOME environment variable.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

from notesync.core.config import ServerConfig, SyncSettings

# Keys accepted by `notesync config set`
CONFIG_KEYS = ("server_url", "db_path", "timeout", "check_interval")


def get_config_dir() -> Path:
    """Get the configuration directory for notesync.

    Returns:
        Path to $NOTESYNC_HOME or ~/.notesync.
    """
    home = os.environ.get("NOTESYNC_HOME")
    if home:
        return Path(home).expanduser()
    return Path.home() / ".notesync"


def get_config_file() -> Path:
    """Get the path to the config file."""
    return get_config_dir() / "config.json"


def load_config() -> dict[str, Any]:
    """Load configuration from config file."""
    config_file = get_config_file()
    if config_file.exists():
        return dict(json.loads(config_file.read_text()))
    return {}


def save_config(config: dict[str, Any]) -> None:
    """Save configuration to config file."""
    config_file = get_config_file()
    config_file.parent.mkdir(parents=True, exist_ok=True)
    config_file.write_text(json.dumps(config, indent=2))


def get_db_path() -> Path:
    """Get the local database path.

    Returns:
        Configured db_path, or notes.db in the config directory.
    """
    config = load_config()
    if config.get("db_path"):
        return Path(config["db_path"]).expanduser()
    return get_config_dir() / "notes.db"


def get_server_config() -> ServerConfig | None:
    """Get the remote server configuration, if a server is configured."""
    config = load_config()
    if not config.get("server_url"):
        return None
    timeout = float(config.get("timeout") or 30.0)
    return ServerConfig(server_url=config["server_url"], timeout=timeout)


def get_sync_settings() -> SyncSettings:
    """Get sync tuning settings from the config file."""
    return SyncSettings.from_mapping(load_config())
