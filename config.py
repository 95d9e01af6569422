"""Status bar - Default configuration

Values here are used when blocks.yaml doesn't override them.

Theme colors are keyed by widget state. Each state has a foreground
("fg") and background ("bg") color; None leaves the bar's own default
in place.
"""

import os

# ---------------------------------------------------------------------------
# Files
# ---------------------------------------------------------------------------
DEFAULT_CONFIG_PATH = "blocks.yaml"

# ---------------------------------------------------------------------------
# Blocks
# ---------------------------------------------------------------------------
DEFAULT_INTERVAL = 10.0                          # seconds, blocks without `interval`
DEFAULT_SHELL = os.environ.get("SHELL", "sh")    # runs `command` / `on_click`
COMMAND_TIMEOUT = 30.0                           # seconds before a command is killed

# ---------------------------------------------------------------------------
# Bar protocol
# ---------------------------------------------------------------------------
PROTOCOL_VERSION = 1

# ---------------------------------------------------------------------------
# Theme -- colors per widget state
# ---------------------------------------------------------------------------
THEME = {
    "idle": {"fg": "#e0e0e0", "bg": None},
    "info": {"fg": "#42a5f5", "bg": None},
    "good": {"fg": "#00c853", "bg": None},
    "warning": {"fg": "#ffd600", "bg": None},
    "critical": {"fg": "#ff1744", "bg": None},
}
