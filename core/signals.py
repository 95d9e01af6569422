"""OS signal handling.

Signals are blocked on every thread and collected synchronously by a
listener thread with sigwait(), then published to the scheduler inbox.
No Python code runs inside an asynchronous signal handler, so nothing
can deadlock on the inbox lock.

block() must be called before any other thread is started: threads
inherit the signal mask of the thread that creates them.

    SIGRTMIN+n   routed to blocks configured with `signal: n`
    SIGUSR1      re-render every block
    SIGINT/TERM  stop the bar
"""

import logging
import signal
import threading
from typing import Iterable, Optional, Set

from core.errors import ChannelError, ConfigError
from core.event_bus import REFRESH, SIGNAL, STOP, EventBus

logger = logging.getLogger(__name__)

STOP_SIGNALS = (signal.SIGINT, signal.SIGTERM)
REFRESH_SIGNAL = signal.SIGUSR1


def realtime_range():
    """(SIGRTMIN, SIGRTMAX) for this platform."""
    return int(signal.SIGRTMIN), int(signal.SIGRTMAX)


def convert_to_valid_signal(offset) -> int:
    """Map a configured offset to an absolute real-time signal number.

    `signal: 0` is SIGRTMIN, `signal: 1` is SIGRTMIN+1 and so on up to
    SIGRTMAX. Anything outside that range is a ConfigError.
    """
    if isinstance(offset, bool) or not isinstance(offset, int):
        raise ConfigError(f"signal must be an integer, got {offset!r}")
    sigmin, sigmax = realtime_range()
    if offset < 0 or offset > sigmax - sigmin:
        raise ConfigError(
            f"signal offset {offset} out of range 0..{sigmax - sigmin}"
        )
    return sigmin + offset


class SignalListener:
    """Collects signals with sigwait() and forwards them to the bus."""

    def __init__(self, bus: EventBus, block_signals: Iterable[int] = ()):
        self.bus = bus
        self.signals: Set[int] = set(block_signals)
        self.signals.update(STOP_SIGNALS)
        self.signals.add(REFRESH_SIGNAL)
        self._thread: Optional[threading.Thread] = None

    def block(self):
        """Mask the handled signals on the calling thread."""
        signal.pthread_sigmask(signal.SIG_BLOCK, self.signals)

    def start(self):
        """Start the background listener thread."""
        if self._thread and self._thread.is_alive():
            return
        self._thread = threading.Thread(
            target=self._run, daemon=True, name="signal-listener"
        )
        self._thread.start()
        logger.info("Listening for %d signals", len(self.signals))

    def _run(self):
        while True:
            signum = signal.sigwait(self.signals)
            if not self.dispatch(signum):
                return

    def dispatch(self, signum: int) -> bool:
        """Forward one signal. Returns False once a stop signal was seen."""
        if signum in STOP_SIGNALS:
            logger.info("Received %s, stopping", signal.Signals(signum).name)
            topic, payload = STOP, None
        elif signum == REFRESH_SIGNAL:
            logger.debug("Received SIGUSR1, refreshing all blocks")
            topic, payload = REFRESH, None
        else:
            logger.debug("Received signal %d", signum)
            topic, payload = SIGNAL, signum

        try:
            self.bus.publish(topic, payload)
        except ChannelError as exc:
            logger.warning("Signal %d dropped: %s", signum, exc)
        return topic != STOP
