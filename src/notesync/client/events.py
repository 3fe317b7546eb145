"""In-process publish/subscribe for sync notifications.

This module provides:
- EventBus: one namespace of topic -> listeners
- SyncEvents: the two namespaces exposed to consumers

Namespaces:
    queue   topic "queue-change", no payload ("re-read the queue")
    status  topics are record ids or "global", wildcard "all";
            listeners receive (scope, status)

Listeners are called synchronously in the publisher's context. A
failing listener is logged and never prevents delivery to the others.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from typing import Any

from notesync.core.types import ALL, SyncStatus

logger = logging.getLogger(__name__)

QUEUE_CHANGE = "queue-change"
SYNC_STATUS = "sync-status"

Listener = Callable[..., Any]
StatusListener = Callable[[str, SyncStatus], Any]


class EventBus:
    """Topic-keyed listener registry.

    Attributes:
        wildcard: Optional topic whose listeners receive every publish.
    """

    def __init__(self, wildcard: str | None = None) -> None:
        self.wildcard = wildcard
        self._lock = threading.Lock()
        # dict used as an ordered set of listeners per topic
        self._listeners: dict[str, dict[Listener, None]] = {}

    def subscribe(self, topic: str, listener: Listener) -> Callable[[], None]:
        """Register a listener for a topic.

        Args:
            topic: Topic key.
            listener: Callable invoked with the published arguments.

        Returns:
            A function removing exactly this registration. Calling it
            more than once is a no-op.
        """
        with self._lock:
            self._listeners.setdefault(topic, {})[listener] = None

        def unsubscribe() -> None:
            with self._lock:
                listeners = self._listeners.get(topic)
                if listeners is not None:
                    listeners.pop(listener, None)
                    if not listeners:
                        del self._listeners[topic]

        return unsubscribe

    def listener_count(self, topic: str) -> int:
        """Number of listeners currently registered on a topic."""
        with self._lock:
            return len(self._listeners.get(topic, {}))

    def publish(self, topic: str, *args: Any) -> None:
        """Deliver a message to every current listener of a topic.

        The listener set is snapshotted before delivery: listeners added
        or removed by a callback take effect on the next publish.
        """
        with self._lock:
            targets = list(self._listeners.get(topic, {}))
            if self.wildcard is not None and topic != self.wildcard:
                targets.extend(self._listeners.get(self.wildcard, {}))

        for listener in targets:
            try:
                listener(*args)
            except Exception:
                logger.exception("Listener %r failed on topic %r", listener, topic)


class SyncEvents:
    """The outward notification surface of the sync engine.

    Usage:
        events = SyncEvents()
        events.subscribe_queue_change(lambda: print("queue changed"))
        events.subscribe_sync_status("global", on_status)
        events.subscribe_sync_status("all", on_any_status)
    """

    def __init__(self) -> None:
        self.queue = EventBus()
        self.status = EventBus(wildcard=ALL)

    def subscribe_queue_change(self, listener: Callable[[], Any]) -> Callable[[], None]:
        """Subscribe to queue-change notifications."""
        return self.queue.subscribe(QUEUE_CHANGE, listener)

    def notify_queue_change(self) -> None:
        """Tell consumers the mutation queue changed."""
        self.queue.publish(QUEUE_CHANGE)

    def subscribe_sync_status(self, scope: str, listener: StatusListener) -> Callable[[], None]:
        """Subscribe to status updates for a record id, "global" or "all"."""
        return self.status.subscribe(scope, listener)

    def notify_sync_status(self, scope: str, status: SyncStatus) -> None:
        """Publish a status for a record id or "global".

        Listeners of the "all" scope receive it as well.
        """
        logger.debug("Sync status %s: %s", scope, status.value)
        self.status.publish(scope, scope, status)
