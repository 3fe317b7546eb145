"""Shared configuration classes for notesync.

This module defines configuration classes used by the client engine,
the CLI and the reference server.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass
class ServerConfig:
    """Configuration for connecting to a notes server.

    Attributes:
        server_url: Base URL of the server (e.g., "http://localhost:8000").
        timeout: Request timeout in seconds. The sync engine imposes no
            timeout of its own, this one is the only bound on a remote call.
    """

    server_url: str
    timeout: float = 30.0

    def __post_init__(self) -> None:
        """Normalize server URL."""
        self.server_url = self.server_url.rstrip("/")

    @property
    def is_secure(self) -> bool:
        """Check if using HTTPS."""
        return self.server_url.startswith("https://")


@dataclass
class SyncSettings:
    """Tuning knobs for the sync engine and its consumers.

    Attributes:
        check_interval: Seconds between connectivity probes.
        done_clear_delay: Seconds a "done" status stays visible.
        error_clear_delay: Seconds an "error" status stays visible.
    """

    check_interval: float = 5.0
    done_clear_delay: float = 1.8
    error_clear_delay: float = 3.0

    @classmethod
    def from_mapping(cls, data: dict[str, Any]) -> SyncSettings:
        """Build settings from a config mapping, ignoring unknown keys."""
        settings = cls()
        for name in ("check_interval", "done_clear_delay", "error_clear_delay"):
            if data.get(name) is not None:
                setattr(settings, name, float(data[name]))
        return settings
