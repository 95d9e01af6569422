"""Time-ordered queue of pending block renders.

Holds at most one task per block. Re-scheduling a block only ever moves
its task earlier: a late request can't undo a sooner periodic schedule.

Backed by a heap with lazy deletion -- superseded entries stay in the
heap until they surface and are discarded by comparing against _due.
"""

import heapq
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Task:
    """A request for block_id to render at or after update_time.

    update_time=None means "as soon as possible" and is resolved against
    the scheduler clock on arrival.
    """

    block_id: int
    update_time: Optional[float] = None


class TaskQueue:
    """Earliest-wins schedule, one entry per block."""

    def __init__(self):
        self._heap: List[Tuple[float, int]] = []
        self._due: Dict[int, float] = {}

    def __len__(self) -> int:
        return len(self._due)

    def __contains__(self, block_id: int) -> bool:
        return block_id in self._due

    def due_time(self, block_id: int) -> Optional[float]:
        """Pending due time for a block, or None."""
        return self._due.get(block_id)

    def upsert(self, block_id: int, due_time: float) -> bool:
        """Schedule block_id at due_time unless it is already due sooner.

        Returns True if the schedule changed.
        """
        current = self._due.get(block_id)
        if current is not None and current <= due_time:
            return False
        if current is not None:
            logger.debug("Block %d moved up from %.3f to %.3f", block_id, current, due_time)
        self._due[block_id] = due_time
        heapq.heappush(self._heap, (due_time, block_id))
        return True

    def discard(self, block_id: int):
        """Drop any pending task for block_id."""
        self._due.pop(block_id, None)

    def peek_due(self) -> Optional[float]:
        """Earliest due time across all pending tasks, None when empty."""
        self._prune()
        if not self._heap:
            return None
        return self._heap[0][0]

    def pop_due(self, now: float) -> Optional[int]:
        """Remove and return the earliest block due at or before now.

        Ties go to the lower block id so output stays deterministic.
        """
        self._prune()
        if not self._heap or self._heap[0][0] > now:
            return None
        _, block_id = heapq.heappop(self._heap)
        del self._due[block_id]
        return block_id

    def pop_all_due(self, now: float) -> List[int]:
        """Remove every task due at or before now, earliest first."""
        ready = []
        while True:
            block_id = self.pop_due(now)
            if block_id is None:
                return ready
            ready.append(block_id)

    def _prune(self):
        """Discard heap entries that were superseded or discarded."""
        heap = self._heap
        while heap:
            due_time, block_id = heap[0]
            if self._due.get(block_id) == due_time:
                return
            heapq.heappop(heap)
