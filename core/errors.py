"""Error types for the status bar engine.

Only ConfigError is allowed to end the process (and only from main.py).
Everything else is caught at a component boundary and logged.
"""


class BarError(Exception):
    """Base class for all status bar errors."""


class ConfigError(BarError):
    """Configuration was rejected before a block reached the scheduler."""


class RenderError(BarError):
    """A single render attempt failed."""

    def __init__(self, block: str, message: str):
        super().__init__(f"{block}: {message}")
        self.block = block
        self.message = message


class SignalError(BarError):
    """A block failed while handling a signal."""


class ClickError(BarError):
    """A block failed while handling a click event."""


class ChannelError(BarError):
    """A message could not be delivered to the scheduler inbox."""
