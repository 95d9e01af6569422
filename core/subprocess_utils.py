"""Shell helpers for blocks that run commands."""

import logging
import subprocess
from typing import Optional

logger = logging.getLogger(__name__)


def run_shell(shell: str, command: str, timeout: Optional[float] = None) -> str:
    """Run command through `shell -c` and return its trimmed stdout.

    A command that can't be started or times out returns the error text
    instead, so it shows up on the bar where the output would have been.
    A non-zero exit status is not an error: whatever was printed is used.
    """
    try:
        result = subprocess.run(
            [shell, "-c", command],
            capture_output=True,
            text=True,
            errors="replace",
            timeout=timeout,
            stdin=subprocess.DEVNULL,
        )
    except (OSError, subprocess.SubprocessError) as exc:
        logger.warning("Command %r failed to run: %s", command, exc)
        return str(exc)

    if result.returncode != 0:
        logger.debug("Command %r exited %d", command, result.returncode)
    return result.stdout.strip()


def spawn_shell(shell: str, command: str) -> Optional[subprocess.Popen]:
    """Start command detached from the bar and don't wait for it.

    Returns None if it couldn't be started.
    """
    try:
        return subprocess.Popen(
            [shell, "-c", command],
            stdin=subprocess.DEVNULL,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            start_new_session=True,
        )
    except OSError as exc:
        logger.warning("Could not spawn %r: %s", command, exc)
        return None
