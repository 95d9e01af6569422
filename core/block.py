"""Block abstraction for the status bar.

A Block is one configured unit of bar output. The scheduler calls
render() on a worker thread whenever the block is due and never runs two
renders of the same block at once. signal() and click() run on the
scheduler thread and must return quickly; a block that wants to show new
state after handling one calls request_update() instead of rendering
itself.

Subclasses register themselves by kind name with @register_block and
are constructed as cls(block_id, bus, config).
"""

import logging
from abc import ABC, abstractmethod
from typing import Dict, FrozenSet, Optional

from config import DEFAULT_INTERVAL
from core.errors import ChannelError
from core.event_bus import UPDATE, EventBus
from core.protocol import ClickEvent
from core.task_queue import Task
from core.update import Every, Update, parse_update
from core.widgets import RenderOutput

logger = logging.getLogger(__name__)


class Block(ABC):
    """Base class for all block kinds."""

    kind = "block"

    def __init__(self, block_id: int, bus: Optional[EventBus], config: Dict):
        self.block_id = block_id
        self.bus = bus
        self.config = config
        self.interval: Update = parse_update(
            config.get("interval"), default=Every(DEFAULT_INTERVAL)
        )

    def id(self) -> int:
        return self.block_id

    def update_interval(self) -> Update:
        """Cadence queried after each render. Must be side-effect free."""
        return self.interval

    @property
    def signals(self) -> FrozenSet[int]:
        """Absolute signal numbers this block wants delivered."""
        return frozenset()

    @abstractmethod
    def render(self) -> RenderOutput:
        """Produce this cycle's widgets. Runs on a worker thread.

        Raise RenderError on failure; the scheduler shows it in place of
        the block's output.
        """
        ...

    def signal(self, signum: int):
        """Handle a signal routed to this block. Default: ignore."""

    def click(self, event: ClickEvent):
        """Handle a click on one of this block's widgets. Default: ignore."""

    def request_update(self, when: Optional[float] = None) -> bool:
        """Ask the scheduler for an out-of-cycle render.

        Never blocks. Returns False (and logs) if the request was dropped.
        """
        if self.bus is None:
            logger.debug("Block %d has no bus, update request dropped", self.block_id)
            return False
        try:
            self.bus.publish(UPDATE, Task(self.block_id, when))
        except ChannelError as exc:
            logger.warning("Block %d update request dropped: %s", self.block_id, exc)
            return False
        return True

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} id={self.block_id} {self.interval}>"
