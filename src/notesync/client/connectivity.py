"""Connectivity signal source.

This module provides:
- ConnectivityMonitor: polls a health probe and emits online/offline
  transitions

The first probe establishes the initial state and fires the matching
callback once. Afterwards callbacks fire only on transitions. Callbacks
returning an awaitable (e.g. SyncOrchestrator.handle_online) are run as
background tasks so that a long sync pass never delays the next probe
or an offline signal.
"""

from __future__ import annotations

import asyncio
import contextlib
import inspect
import logging
from collections.abc import Awaitable, Callable
from typing import Any

logger = logging.getLogger(__name__)

# Seconds between connectivity probes
NETWORK_CHECK_INTERVAL = 5.0

Probe = Callable[[], Awaitable[bool]]
Callback = Callable[[], Any]


class ConnectivityMonitor:
    """Periodic connectivity probe with transition callbacks.

    Usage:
        monitor = ConnectivityMonitor(client.health_check)
        monitor.set_callbacks(
            on_online=orchestrator.handle_online,
            on_offline=orchestrator.handle_offline,
        )
        monitor.start()
        ...
        await monitor.stop()
    """

    def __init__(
        self,
        probe: Probe,
        check_interval: float = NETWORK_CHECK_INTERVAL,
    ) -> None:
        """Initialize the monitor.

        Args:
            probe: Async callable returning True when the service is reachable.
            check_interval: Seconds between probes.
        """
        self._probe = probe
        self._check_interval = check_interval
        self._online: bool | None = None
        self._task: asyncio.Task[None] | None = None
        self._pending: set[asyncio.Task[Any]] = set()

        # Callbacks
        self._on_online: Callback | None = None
        self._on_offline: Callback | None = None

    @property
    def online(self) -> bool | None:
        """Last observed state (None before the first probe)."""
        return self._online

    @property
    def running(self) -> bool:
        """Whether the polling task is active."""
        return self._task is not None and not self._task.done()

    def set_callbacks(
        self,
        on_online: Callback | None = None,
        on_offline: Callback | None = None,
    ) -> None:
        """Set transition callbacks.

        Args:
            on_online: Called when the service becomes reachable.
            on_offline: Called when the service becomes unreachable.
        """
        self._on_online = on_online
        self._on_offline = on_offline

    async def check(self) -> bool:
        """Probe once and fire a callback if the state changed.

        A probe that raises counts as offline.

        Returns:
            The observed state.
        """
        try:
            online = bool(await self._probe())
        except Exception as e:
            logger.warning("Connectivity probe failed: %s", e)
            online = False

        previous = self._online
        self._online = online
        if online != previous:
            if previous is None:
                logger.info("Initial connectivity: %s", "online" if online else "offline")
            else:
                logger.info("Connectivity changed: %s", "online" if online else "offline")
            self._fire(self._on_online if online else self._on_offline)
        return online

    def _fire(self, callback: Callback | None) -> None:
        """Invoke a callback, scheduling it if it returns an awaitable."""
        if callback is None:
            return
        try:
            result = callback()
        except Exception:
            logger.exception("Connectivity callback failed")
            return
        if inspect.isawaitable(result):
            task = asyncio.ensure_future(result)
            self._pending.add(task)
            task.add_done_callback(self._on_task_done)

    def _on_task_done(self, task: asyncio.Task[Any]) -> None:
        self._pending.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Connectivity callback task failed: %s", exc, exc_info=exc)

    async def run(self) -> None:
        """Probe forever at the configured interval."""
        while True:
            await self.check()
            await asyncio.sleep(self._check_interval)

    def start(self) -> None:
        """Start polling in a background task of the running loop."""
        if self.running:
            logger.warning("ConnectivityMonitor already running")
            return
        self._task = asyncio.get_running_loop().create_task(
            self.run(),
            name="ConnectivityMonitor",
        )
        logger.debug("ConnectivityMonitor started (interval %.1fs)", self._check_interval)

    async def stop(self) -> None:
        """Stop polling and wait for callback tasks (e.g. a running pass)."""
        if self._task is not None:
            self._task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._task
            self._task = None

        if self._pending:
            await asyncio.gather(*self._pending, return_exceptions=True)
        logger.debug("ConnectivityMonitor stopped")
