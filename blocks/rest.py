"""REST block -- shows a value fetched from a JSON HTTP endpoint.

Supports optional nested-key extraction, request headers and a
`state_key` that picks the widget state from the same response.

Config example (in blocks.yaml):
    blocks:
      - block: rest
        url: "https://api.open-meteo.com/v1/forecast?latitude=52.52&longitude=13.41&current_weather=true"
        interval: 600
        extract: "current_weather.temperature"   # optional: dotted path
        format: "{value}°C"
        headers:                                 # optional
          Authorization: "Bearer xxx"
"""

import logging
from typing import Any, Dict

import requests

from core.block import Block
from core.errors import ConfigError, RenderError
from core.registry import register_block
from core.widgets import RenderOutput, State, Widget

logger = logging.getLogger(__name__)


@register_block("rest")
class REST(Block):
    """Fetches JSON from a REST endpoint and formats one value."""

    def __init__(self, block_id: int, bus, config: Dict):
        config.setdefault("interval", 60.0)
        super().__init__(block_id, bus, config)
        self.url = config.get("url", "")
        if not self.url:
            raise ConfigError("rest: `url` is required")
        self.headers = config.get("headers", {})
        self.extract_key = config.get("extract")
        self.format = config.get("format", "{value}")
        self.state_key = config.get("state_key")
        self.icon = config.get("icon", "")
        self._timeout = config.get("timeout", 10)
        self._session = requests.Session()

    def fetch(self) -> Any:
        try:
            resp = self._session.get(self.url, headers=self.headers, timeout=self._timeout)
            resp.raise_for_status()
            return resp.json()
        except requests.RequestException as exc:
            raise RenderError(self.kind, str(exc)) from exc
        except ValueError as exc:
            raise RenderError(self.kind, f"invalid JSON: {exc}") from exc

    def render(self) -> RenderOutput:
        data = self.fetch()
        value = extract(data, self.extract_key) if self.extract_key else data

        state = State.IDLE
        if self.state_key:
            try:
                state = State.parse(extract(data, self.state_key))
            except ValueError:
                logger.debug("REST %d: unknown state at %s", self.block_id, self.state_key)

        try:
            text = self.format.format(value=value)
        except (KeyError, IndexError, ValueError) as exc:
            raise RenderError(self.kind, f"bad format: {exc}") from exc
        return [Widget(block_id=self.block_id, text=text, icon=self.icon, state=state)]


def extract(data: Any, path: str) -> Any:
    """Follow a dotted key path through nested dicts (and list indices)."""
    for key in path.split("."):
        if isinstance(data, dict):
            data = data.get(key)
        elif isinstance(data, list) and key.isdigit() and int(key) < len(data):
            data = data[int(key)]
        else:
            return None
    return data
