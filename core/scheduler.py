"""Scheduler -- decides when each block renders and emits frames.

One coordinating thread owns the task queue, the event router and the
frame assembler. It sleeps on the EventBus until the next task is due
or a message arrives, whichever comes first:

    rendered  a worker finished; store output, reschedule, mark frame stale
    update    a block asked for an out-of-cycle render (earliest wins)
    signal    route an OS signal to subscribed blocks
    click     route a bar click to the owning block
    refresh   re-render every block now
    stop      leave the loop

Renders run on one short-lived worker thread each, so a slow command
in one block never delays another. A block is never rendered twice
concurrently: a fire that arrives while its render is in flight is
coalesced into a single follow-up render once the current one lands.
"""

import logging
import threading
import time
from collections import Counter
from typing import Callable, Dict, Iterable, List, Optional, Set

from core.block import Block
from core.errors import ChannelError, RenderError
from core.event_bus import CLICK, REFRESH, RENDERED, SIGNAL, STOP, UPDATE, EventBus
from core.event_router import EventRouter
from core.frame import FrameAssembler
from core.task_queue import Task, TaskQueue
from core.update import next_due
from core.widgets import Widget, error_widget

logger = logging.getLogger(__name__)


class Scheduler:
    """Drives block renders and frame emission."""

    def __init__(
        self,
        blocks: Iterable[Block],
        emit: Optional[Callable[[List[Widget]], None]] = None,
        bus: Optional[EventBus] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._blocks: Dict[int, Block] = {}
        for block in blocks:
            if block.id() in self._blocks:
                raise ValueError(f"duplicate block id {block.id()}")
            self._blocks[block.id()] = block

        self.bus = bus if bus is not None else EventBus()
        self.queue = TaskQueue()
        self.router = EventRouter(self._blocks.values())
        self.frames = FrameAssembler(self._blocks.keys(), emit)
        self.render_counts: Counter = Counter()

        self._clock = clock
        self._in_flight: Set[int] = set()
        self._rerun: Set[int] = set()
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

        self.bus.subscribe(RENDERED, self._on_rendered)
        self.bus.subscribe(UPDATE, self._on_update)
        self.bus.subscribe(SIGNAL, self._on_signal)
        self.bus.subscribe(CLICK, self._on_click)
        self.bus.subscribe(REFRESH, self._on_refresh)
        self.bus.subscribe(STOP, self._on_stop)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def blocks(self) -> List[Block]:
        return list(self._blocks.values())

    def in_flight(self) -> Set[int]:
        """Ids of blocks currently rendering."""
        return set(self._in_flight)

    def seed(self):
        """Schedule every block's first render for now."""
        now = self._clock()
        for block_id in self._blocks:
            self.queue.upsert(block_id, now)

    def run(self):
        """Run the loop on the calling thread until stop() is called.

        Exceptions from the emit callback (e.g. a closed stdout) propagate.
        """
        self._stop.clear()
        self.seed()
        logger.info("Scheduler running %d blocks", len(self._blocks))
        while not self._stop.is_set():
            self.step()
        logger.info("Scheduler stopped")

    def start(self):
        """Run the loop on a background thread."""
        if self._thread and self._thread.is_alive():
            return
        self._thread = threading.Thread(target=self.run, daemon=True, name="scheduler")
        self._thread.start()

    def stop(self):
        """Ask the loop to exit. Safe to call from any thread."""
        self._stop.set()
        try:
            self.bus.publish(STOP)
        except ChannelError:
            pass  # loop re-checks the flag on its next wake

    def join(self, timeout: Optional[float] = None):
        if self._thread:
            self._thread.join(timeout)

    def step(self, max_wait: Optional[float] = None):
        """One loop iteration: wait, handle messages, fire due renders, emit."""
        due = self.queue.peek_due()
        wait = None if due is None else max(0.0, due - self._clock())
        if max_wait is not None:
            wait = max_wait if wait is None else min(wait, max_wait)
        if wait is not None:
            # Queue.get overflows on timeouts past the platform limit
            wait = min(wait, threading.TIMEOUT_MAX)

        self.bus.poll(wait)
        if self._stop.is_set():
            return

        for block_id in self.queue.pop_all_due(self._clock()):
            self._start_render(block_id)

        self.frames.flush()

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def _start_render(self, block_id: int):
        if block_id in self._in_flight:
            logger.debug("Block %d still rendering, coalescing", block_id)
            self._rerun.add(block_id)
            return
        block = self._blocks[block_id]
        self._in_flight.add(block_id)
        worker = threading.Thread(
            target=self._render_worker,
            args=(block,),
            daemon=True,
            name=f"render-{block_id}",
        )
        worker.start()

    def _render_worker(self, block: Block):
        """Runs on a worker thread. Only touches the block and the bus."""
        block_id = block.id()
        try:
            output = list(block.render())
        except RenderError as exc:
            logger.warning("Block %d render error: %s", block_id, exc)
            output = [error_widget(block_id, exc.message)]
        except Exception as exc:
            logger.error("Block %d render failed: %r", block_id, exc)
            output = [error_widget(block_id, str(exc) or exc.__class__.__name__)]

        try:
            self.bus.publish(RENDERED, (block_id, output))
        except ChannelError as exc:
            logger.warning("Block %d render result dropped: %s", block_id, exc)

    # ------------------------------------------------------------------
    # Message handlers (scheduler thread)
    # ------------------------------------------------------------------

    def _on_rendered(self, payload):
        block_id, output = payload
        self._in_flight.discard(block_id)
        self.render_counts[block_id] += 1
        now = self._clock()

        if self.frames.update(block_id, output):
            logger.debug("Block %d output changed", block_id)

        block = self._blocks[block_id]
        due = next_due(block.update_interval(), now)
        if due is not None:
            self.queue.upsert(block_id, due)

        if block_id in self._rerun:
            self._rerun.discard(block_id)
            self.queue.upsert(block_id, now)

    def _on_update(self, task: Task):
        if task.block_id not in self._blocks:
            logger.warning("Update request for unknown block %d", task.block_id)
            return
        when = task.update_time if task.update_time is not None else self._clock()
        self.queue.upsert(task.block_id, when)

    def _on_signal(self, signum: int):
        self.router.route_signal(signum)

    def _on_click(self, event):
        self.router.route_click(event)

    def _on_refresh(self, _payload):
        now = self._clock()
        for block_id in self._blocks:
            self.queue.upsert(block_id, now)

    def _on_stop(self, _payload):
        self._stop.set()
