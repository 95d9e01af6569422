"""i3bar / swaybar JSON protocol.

Output is a header line followed by an infinite JSON array of frames:

    {"version": 1, "click_events": true}
    [
    [{"full_text": "...", "name": "0", "instance": "0"}, ...],
    [{"full_text": "...", "name": "0", "instance": "0"}, ...],

Input (stdin) is the same shape in reverse: "[" then one click event per
line, each after the first prefixed with a comma. "name" carries the
block id and "instance" the widget index inside that block.
"""

import json
import logging
import sys
import threading
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Optional, Tuple

from config import PROTOCOL_VERSION, THEME

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClickEvent:
    """A pointer click on one widget of the bar."""

    block_id: int
    instance: int = 0
    button: int = 1
    x: int = 0
    y: int = 0
    relative_x: int = 0
    relative_y: int = 0
    width: int = 0
    height: int = 0
    modifiers: Tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "ClickEvent":
        """Build from a decoded bar click object.

        Raises ValueError if the event can't be attributed to a block.
        """
        name = data.get("name")
        if name is None:
            raise ValueError("click event has no block name")
        try:
            block_id = int(name)
        except (TypeError, ValueError):
            raise ValueError(f"click event name is not a block id: {name!r}") from None

        def _int(key):
            value = data.get(key, 0)
            try:
                return int(value)
            except (TypeError, ValueError):
                return 0

        return cls(
            block_id=block_id,
            instance=_int("instance"),
            button=_int("button"),
            x=_int("x"),
            y=_int("y"),
            relative_x=_int("relative_x"),
            relative_y=_int("relative_y"),
            width=_int("width"),
            height=_int("height"),
            modifiers=tuple(data.get("modifiers") or ()),
        )


def parse_click_line(line: str) -> Optional[ClickEvent]:
    """Parse one line of the click stream.

    Returns None for the array framing lines ("[", "]", blank).
    Raises ValueError for lines that aren't a valid click object.
    """
    line = line.strip().lstrip(",").strip()
    if not line or line in ("[", "]"):
        return None
    try:
        data = json.loads(line)
    except json.JSONDecodeError as exc:
        raise ValueError(f"malformed click event: {exc}") from exc
    if not isinstance(data, dict):
        raise ValueError(f"click event is not an object: {line!r}")
    return ClickEvent.from_json(data)


def widget_to_json(widget, theme: Optional[Dict] = None) -> Dict[str, Any]:
    """Serialize one widget to an i3bar block object."""
    theme = theme or THEME
    colors = theme.get(widget.state.value, {})
    obj = {
        "full_text": widget.full_text,
        "name": str(widget.block_id),
        "instance": str(widget.instance),
    }
    if colors.get("fg"):
        obj["color"] = colors["fg"]
    if colors.get("bg"):
        obj["background"] = colors["bg"]
    return obj


class ProtocolWriter:
    """Writes the bar header and frames to a stream.

    Each frame is written and flushed with a single write() under a lock
    so concurrent callers can't interleave partial frames.
    """

    def __init__(self, stream=None, theme: Optional[Dict] = None, click_events: bool = True):
        self._stream = stream if stream is not None else sys.stdout
        self._theme = theme or THEME
        self._click_events = click_events
        self._lock = threading.Lock()
        self._started = False

    def start(self):
        """Write the protocol header and open the frame array."""
        header = {"version": PROTOCOL_VERSION, "click_events": self._click_events}
        with self._lock:
            self._stream.write(json.dumps(header) + "\n[\n")
            self._stream.flush()
            self._started = True

    def write_frame(self, widgets: Iterable):
        """Serialize and emit one frame."""
        payload = [widget_to_json(w, self._theme) for w in widgets]
        line = json.dumps(payload, ensure_ascii=False) + ",\n"
        with self._lock:
            if not self._started:
                raise RuntimeError("ProtocolWriter.start() not called")
            self._stream.write(line)
            self._stream.flush()
