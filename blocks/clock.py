"""Time block -- displays the current local time.

Doesn't need to run anything external; it formats datetime.now() on
every render. Clicking toggles between `format` and `format_alt`.

Config example:
    blocks:
      - block: time
        format: "%a %d/%m %R"
        format_alt: "%Y-%m-%d %H:%M:%S"
        interval: 5
"""

from datetime import datetime
from typing import Dict

from core.block import Block
from core.registry import register_block
from core.widgets import RenderOutput, Widget

DEFAULT_FORMAT = "%a %d/%m %R"


@register_block("time")
class Clock(Block):
    """Current time and date."""

    def __init__(self, block_id: int, bus, config: Dict):
        config.setdefault("interval", 5)
        super().__init__(block_id, bus, config)
        self.format = config.get("format", DEFAULT_FORMAT)
        self.format_alt = config.get("format_alt")
        self.icon = config.get("icon", "")
        self._alt = False

    def render(self) -> RenderOutput:
        fmt = self.format_alt if self._alt and self.format_alt else self.format
        text = datetime.now().strftime(fmt)
        return [Widget(block_id=self.block_id, text=text, icon=self.icon)]

    def click(self, event):
        if self.format_alt:
            self._alt = not self._alt
            self.request_update()
