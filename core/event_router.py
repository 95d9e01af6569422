"""Routes OS signals and bar clicks to the blocks that own them.

Delivery is fire-and-forget: a block that raises while handling an
event is logged and skipped, and the remaining subscribers still get it.
"""

import logging
from typing import Dict, Iterable, List

from core.block import Block
from core.errors import ClickError, SignalError
from core.protocol import ClickEvent

logger = logging.getLogger(__name__)


class EventRouter:
    """Maps signal numbers and click events to block handlers."""

    def __init__(self, blocks: Iterable[Block]):
        self._blocks: Dict[int, Block] = {}
        self._by_signal: Dict[int, List[int]] = {}
        for block in blocks:
            self._blocks[block.id()] = block
            for signum in block.signals:
                self._by_signal.setdefault(signum, []).append(block.id())

    def subscribers(self, signum: int) -> List[int]:
        """Block ids registered for a signal number, in config order."""
        return list(self._by_signal.get(signum, ()))

    @property
    def signal_numbers(self) -> List[int]:
        return sorted(self._by_signal)

    def route_signal(self, signum: int) -> List[int]:
        """Deliver a signal to every subscribed block.

        Returns the ids of blocks that handled it without error.
        """
        delivered = []
        targets = self._by_signal.get(signum)
        if not targets:
            logger.debug("Signal %d has no subscribers", signum)
            return delivered
        for block_id in targets:
            block = self._blocks[block_id]
            try:
                block.signal(signum)
            except SignalError as exc:
                logger.warning("Block %d signal %d error: %s", block_id, signum, exc)
                continue
            except Exception as exc:
                logger.error("Block %d signal %d failed: %r", block_id, signum, exc)
                continue
            delivered.append(block_id)
        return delivered

    def route_click(self, event: ClickEvent) -> bool:
        """Deliver a click to the block it was attributed to.

        Returns True if the block handled it without error.
        """
        block = self._blocks.get(event.block_id)
        if block is None:
            logger.warning("Click for unknown block %d ignored", event.block_id)
            return False
        try:
            block.click(event)
        except ClickError as exc:
            logger.warning("Block %d click error: %s", event.block_id, exc)
            return False
        except Exception as exc:
            logger.error("Block %d click failed: %r", event.block_id, exc)
            return False
        return True
