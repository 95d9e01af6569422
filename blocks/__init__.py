"""Block implementations for the status bar.

Importing this package registers all built-in block kinds.
"""

from blocks.custom import Custom
from blocks.clock import Clock
from blocks.rest import REST

__all__ = ["Custom", "Clock", "REST"]
