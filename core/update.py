"""Update directives -- how often a block wants to re-render.

    Every(5.0)   render again 5 seconds after each render completes
    OnDemand()   render only when a signal, click or request asks for it
    Once()       render once at startup, then stay idle

Config values map to directives via parse_update():
    interval: 30          -> Every(30.0)
    interval: "once"      -> Once()
    interval: "on_demand" -> OnDemand()
"""

import math
from dataclasses import dataclass
from typing import Any, Optional, Union

from core.errors import ConfigError


@dataclass(frozen=True)
class Every:
    """Re-render a fixed number of seconds after each completed render."""

    seconds: float

    def __post_init__(self):
        if not math.isfinite(self.seconds) or self.seconds <= 0:
            raise ValueError(f"interval must be a positive number, got {self.seconds}")


@dataclass(frozen=True)
class OnDemand:
    """Only re-render when explicitly requested."""


@dataclass(frozen=True)
class Once:
    """Render exactly once."""


Update = Union[Every, OnDemand, Once]

_ON_DEMAND_NAMES = ("on_demand", "ondemand", "on-demand", "never")


def parse_update(value: Any, default: Optional[Update] = None) -> Update:
    """Convert a config value into an Update directive.

    Raises ConfigError for anything that is not a positive number or one
    of the recognised keywords.
    """
    if value is None:
        if default is None:
            raise ConfigError("missing update interval")
        return default

    if isinstance(value, (Every, OnDemand, Once)):
        return value

    # bool is an int subclass; `interval: true` is a mistake, not 1 second
    if isinstance(value, bool):
        raise ConfigError(f"invalid interval: {value!r}")

    if isinstance(value, (int, float)):
        # YAML reads .inf and .nan as floats
        if not math.isfinite(value) or value <= 0:
            raise ConfigError(f"interval must be a positive number, got {value}")
        return Every(float(value))

    if isinstance(value, str):
        name = value.strip().lower()
        if name == "once":
            return Once()
        if name in _ON_DEMAND_NAMES:
            return OnDemand()
        try:
            seconds = float(name)
        except ValueError:
            raise ConfigError(f"invalid interval: {value!r}") from None
        return parse_update(seconds)

    raise ConfigError(f"invalid interval: {value!r}")


def next_due(directive: Update, completed_at: float) -> Optional[float]:
    """Return when a block should next render, or None if it should idle."""
    if isinstance(directive, Every):
        return completed_at + directive.seconds
    return None
