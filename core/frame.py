"""Frame assembly -- the latest output of every block, in config order.

The assembler only stores render results; it never decides when to
emit. The scheduler calls update() as renders complete (in whatever
order they finish) and flush() once per loop iteration.
"""

import logging
from typing import Callable, Dict, Iterable, List, Optional

from core.widgets import RenderOutput, Widget

logger = logging.getLogger(__name__)


class FrameAssembler:
    """Keeps one RenderOutput per block and rebuilds frames on change."""

    def __init__(self, order: Iterable[int], emit: Optional[Callable[[List[Widget]], None]] = None):
        self._order: List[int] = list(order)
        if len(set(self._order)) != len(self._order):
            raise ValueError("duplicate block ids in frame order")
        self._outputs: Dict[int, RenderOutput] = {}
        self._emit = emit
        self._stale = False
        self.frames_emitted = 0

    @property
    def stale(self) -> bool:
        return self._stale

    def update(self, block_id: int, output: RenderOutput) -> bool:
        """Store a block's latest output. Returns True if it changed."""
        if block_id not in self._order:
            logger.warning("Frame: ignoring output for unknown block %d", block_id)
            return False
        output = list(output)
        if self._outputs.get(block_id) == output:
            return False
        self._outputs[block_id] = output
        self._stale = True
        return True

    def output(self, block_id: int) -> Optional[RenderOutput]:
        return self._outputs.get(block_id)

    def frame(self) -> List[Widget]:
        """All widgets in configured block order."""
        widgets: List[Widget] = []
        for block_id in self._order:
            widgets.extend(self._outputs.get(block_id, ()))
        return widgets

    def flush(self, force: bool = False) -> bool:
        """Emit the current frame if anything changed since the last one."""
        if not (self._stale or force):
            return False
        self._stale = False
        if self._emit is not None:
            self._emit(self.frame())
        self.frames_emitted += 1
        return True
