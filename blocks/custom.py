"""Custom block -- shows the output of a shell command.

Runs `command` through the shell on every render and displays its
trimmed stdout. With `cycle`, a list of commands is used instead and
each click advances to the next one.

Config example (in blocks.yaml):
    blocks:
      - block: custom
        command: "uptime -p"
        interval: 30            # seconds, "once" or "on_demand"
        signal: 4               # re-render on SIGRTMIN+4
        on_click: "alacritty -e htop"

      - block: custom
        cycle: ["date +%H:%M", "date +%D"]
        interval: 60

With `json: true` the command must print an object:
    {"text": "73%", "icon": "", "state": "Warning"}
"""

import json
import logging
from typing import Dict, FrozenSet, List, Optional

from config import COMMAND_TIMEOUT, DEFAULT_INTERVAL, DEFAULT_SHELL
from core.block import Block
from core.errors import ConfigError, RenderError
from core.protocol import ClickEvent
from core.registry import register_block
from core.signals import convert_to_valid_signal
from core.subprocess_utils import run_shell, spawn_shell
from core.widgets import RenderOutput, State, Widget

logger = logging.getLogger(__name__)


@register_block("custom")
class Custom(Block):
    """Displays shell command output, optionally cycling between commands."""

    def __init__(self, block_id: int, bus, config: Dict):
        config.setdefault("interval", DEFAULT_INTERVAL)
        super().__init__(block_id, bus, config)

        command = config.get("command")
        cycle = config.get("cycle")
        if command is not None and cycle is not None:
            raise ConfigError("custom: `command` and `cycle` are mutually exclusive")

        self.command: Optional[str] = command
        self.cycle: Optional[List[str]] = None
        self._cycle_pos = 0
        if cycle is not None:
            if not isinstance(cycle, list) or not cycle:
                raise ConfigError("custom: `cycle` must be a non-empty list of commands")
            self.cycle = [str(c) for c in cycle]

        self.on_click: Optional[str] = config.get("on_click")
        self.json = bool(config.get("json", False))
        self.hide_when_empty = bool(config.get("hide_when_empty", False))
        self.shell = config.get("shell") or DEFAULT_SHELL
        self._timeout = config.get("timeout", COMMAND_TIMEOUT)

        self._signal: Optional[int] = None
        if config.get("signal") is not None:
            self._signal = convert_to_valid_signal(config["signal"])

    @property
    def signals(self) -> FrozenSet[int]:
        if self._signal is None:
            return frozenset()
        return frozenset((self._signal,))

    def current_command(self) -> str:
        if self.cycle:
            return self.cycle[self._cycle_pos]
        return self.command or ""

    def render(self) -> RenderOutput:
        raw = run_shell(self.shell, self.current_command(), self._timeout)

        icon = ""
        state = State.IDLE
        if self.json:
            text, icon, state = self._parse_json(raw)
        else:
            text = raw

        if not text and self.hide_when_empty:
            return []
        return [Widget(block_id=self.block_id, text=text, icon=icon, state=state)]

    def _parse_json(self, raw: str):
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise RenderError(self.kind, f"Error parsing JSON: {exc}") from exc
        if not isinstance(data, dict) or "text" not in data:
            raise RenderError(self.kind, "Error parsing JSON: missing field `text`")
        try:
            state = State.parse(data.get("state", "idle"))
        except ValueError as exc:
            raise RenderError(self.kind, f"Error parsing JSON: {exc}") from exc
        if not isinstance(data["text"], str):
            raise RenderError(self.kind, "Error parsing JSON: `text` must be a string")
        return data["text"], str(data.get("icon") or ""), state

    def signal(self, signum: int):
        if self._signal is not None and signum == self._signal:
            self.request_update()

    def click(self, event: ClickEvent):
        update = False

        if self.on_click:
            spawn_shell(self.shell, self.on_click)
            update = True

        if self.cycle:
            self._cycle_pos = (self._cycle_pos + 1) % len(self.cycle)
            update = True

        if update:
            self.request_update()
