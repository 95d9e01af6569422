"""Click event reader.

Reads the bar's click stream from stdin on a background thread and
publishes each event to the scheduler inbox. Malformed lines are logged
and skipped; EOF ends the thread but leaves the bar running.
"""

import logging
import sys
import threading
from typing import Optional

from core.errors import ChannelError
from core.event_bus import CLICK, EventBus
from core.protocol import parse_click_line

logger = logging.getLogger(__name__)


class ClickReader:
    """Background thread turning stdin lines into click messages."""

    def __init__(self, bus: EventBus, stream=None):
        self.bus = bus
        self._stream = stream if stream is not None else sys.stdin
        self._thread: Optional[threading.Thread] = None
        self.events_read = 0

    def start(self):
        """Start the background reader thread."""
        if self._thread and self._thread.is_alive():
            return
        self._thread = threading.Thread(
            target=self.run, daemon=True, name="click-reader"
        )
        self._thread.start()

    def join(self, timeout: Optional[float] = None):
        if self._thread:
            self._thread.join(timeout)

    def run(self):
        """Read until EOF. Runs on the calling thread."""
        for line in self._stream:
            try:
                event = parse_click_line(line)
            except ValueError as exc:
                logger.warning("Skipping click input: %s", exc)
                continue
            if event is None:
                continue

            self.events_read += 1
            try:
                self.bus.publish(CLICK, event)
            except ChannelError as exc:
                logger.warning("Click on block %d dropped: %s", event.block_id, exc)
        logger.info("Click input closed after %d events", self.events_read)
