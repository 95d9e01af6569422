"""Display widgets produced by block renders."""

from dataclasses import dataclass
from enum import Enum
from typing import List


class State(Enum):
    """Severity of a widget. Maps to a theme color pair in the output."""

    IDLE = "idle"
    INFO = "info"
    GOOD = "good"
    WARNING = "warning"
    CRITICAL = "critical"

    @classmethod
    def parse(cls, value) -> "State":
        """Accept "Warning", "warning", "WARNING" or a State."""
        if isinstance(value, State):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValueError(f"unknown state: {value!r}") from None


@dataclass(frozen=True)
class Widget:
    """One piece of text on the bar.

    block_id and instance identify where a click on this widget goes.
    """

    block_id: int
    text: str = ""
    icon: str = ""
    state: State = State.IDLE
    instance: int = 0

    @property
    def full_text(self) -> str:
        if self.icon and self.text:
            return f"{self.icon} {self.text}"
        return self.icon or self.text


RenderOutput = List[Widget]


def error_widget(block_id: int, message: str) -> Widget:
    """Widget shown in place of a block whose render failed."""
    return Widget(block_id=block_id, text=message, state=State.CRITICAL)
