"""Thread-safe inbox for the scheduler.

Render workers, block handlers, the click reader and the signal listener
push messages via publish() from any thread. The scheduler thread waits
on poll() and dispatches each message to the callbacks subscribed to its
topic. This keeps all schedule and frame state on one thread.

publish() never blocks: a full or closed bus raises ChannelError so the
sender can log it and carry on.
"""

import logging
from queue import Empty, Full, Queue
from typing import Any, Callable, Dict, List, Optional

from core.errors import ChannelError

logger = logging.getLogger(__name__)

# Topics understood by the scheduler
RENDERED = "rendered"
UPDATE = "update"
SIGNAL = "signal"
CLICK = "click"
REFRESH = "refresh"
STOP = "stop"


class EventBus:
    """Multi-producer, single-consumer message bus."""

    def __init__(self, maxsize: int = 0):
        self._queue: Queue = Queue(maxsize=maxsize)
        self._subscribers: Dict[str, List[Callable]] = {}
        self._closed = False

    def publish(self, topic: str, payload: Any = None):
        """Push a message from any thread. Never blocks."""
        if self._closed:
            raise ChannelError(f"bus closed, dropping {topic!r}")
        try:
            self._queue.put_nowait((topic, payload))
        except Full:
            raise ChannelError(f"bus full, dropping {topic!r}") from None

    def subscribe(self, topic: str, callback: Callable):
        """Register a callback for a topic. Called on the polling thread."""
        if topic not in self._subscribers:
            self._subscribers[topic] = []
        self._subscribers[topic].append(callback)

    def unsubscribe(self, topic: str, callback: Callable):
        """Remove a callback."""
        if topic in self._subscribers:
            self._subscribers[topic] = [
                cb for cb in self._subscribers[topic] if cb is not callback
            ]

    def poll(self, timeout: Optional[float] = None, limit: int = 50) -> int:
        """Wait up to timeout for a message, then drain what is queued.

        timeout=None waits indefinitely. Returns the number of messages
        dispatched (0 if the wait timed out).
        """
        try:
            message = self._queue.get(timeout=timeout)
        except Empty:
            return 0

        handled = 0
        while True:
            self._dispatch(*message)
            handled += 1
            if handled >= limit:
                break
            try:
                message = self._queue.get_nowait()
            except Empty:
                break
        return handled

    def close(self):
        """Refuse further messages. Already queued messages can still be polled."""
        self._closed = True

    @property
    def closed(self) -> bool:
        return self._closed

    def _dispatch(self, topic: str, payload: Any):
        callbacks = self._subscribers.get(topic)
        if not callbacks:
            logger.debug("EventBus: no subscriber for %s", topic)
            return
        for cb in callbacks:
            try:
                cb(payload)
            except Exception as exc:
                logger.error("EventBus callback error [%s]: %s", topic, exc)
