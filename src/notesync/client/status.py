"""Sync status tracking for display layers.

This module provides:
- StatusTracker: Current status per scope, with transient states cleared

"done" and "error" are display states: they are cleared automatically
after a fixed delay (1.8s and 3s by default). "in-progress" stays until
replaced by the outcome.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import TYPE_CHECKING

from notesync.core.config import SyncSettings
from notesync.core.types import ALL, SyncStatus

if TYPE_CHECKING:
    from notesync.client.events import SyncEvents

logger = logging.getLogger(__name__)

ChangeCallback = Callable[[str, "SyncStatus | None"], None]


class StatusTracker:
    """Mirror of sync status per scope ("global" or a record id).

    Must be attached from code running in an asyncio event loop, since
    clearing is scheduled with loop.call_later.

    Usage:
        tracker = StatusTracker(events, on_change=render)
        tracker.attach()
        ...
        tracker.get("global")  # SyncStatus or None (idle)
        tracker.detach()
    """

    def __init__(
        self,
        events: SyncEvents,
        settings: SyncSettings | None = None,
        on_change: ChangeCallback | None = None,
    ) -> None:
        """Initialize the tracker.

        Args:
            events: Event hub to listen on (scope "all").
            settings: Clear delays for transient states.
            on_change: Called with (scope, status) on every change, with
                None when a scope returns to idle.
        """
        self._events = events
        self._settings = settings or SyncSettings()
        self._on_change = on_change
        self._statuses: dict[str, SyncStatus] = {}
        self._timers: dict[str, asyncio.TimerHandle] = {}
        self._unsubscribe: Callable[[], None] | None = None

    def attach(self) -> None:
        """Start listening to status events."""
        if self._unsubscribe is None:
            self._unsubscribe = self._events.subscribe_sync_status(ALL, self._on_status)

    def detach(self) -> None:
        """Stop listening and cancel pending clears."""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        for timer in self._timers.values():
            timer.cancel()
        self._timers.clear()

    def get(self, scope: str) -> SyncStatus | None:
        """Current status of a scope, None when idle."""
        return self._statuses.get(scope)

    def snapshot(self) -> dict[str, SyncStatus]:
        """Copy of all non-idle statuses."""
        return dict(self._statuses)

    def _delay_for(self, status: SyncStatus) -> float | None:
        if status == SyncStatus.DONE:
            return self._settings.done_clear_delay
        if status == SyncStatus.ERROR:
            return self._settings.error_clear_delay
        return None

    def _on_status(self, scope: str, status: SyncStatus) -> None:
        timer = self._timers.pop(scope, None)
        if timer is not None:
            timer.cancel()

        self._statuses[scope] = status
        self._changed(scope, status)

        delay = self._delay_for(status)
        if delay is None:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("No running loop, %s status for %s will not auto-clear", status.value, scope)
            return
        self._timers[scope] = loop.call_later(delay, self._clear, scope, status)

    def _clear(self, scope: str, status: SyncStatus) -> None:
        self._timers.pop(scope, None)
        if self._statuses.get(scope) is status:
            del self._statuses[scope]
            self._changed(scope, None)

    def _changed(self, scope: str, status: SyncStatus | None) -> None:
        if self._on_change is not None:
            self._on_change(scope, status)
