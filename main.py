#!/usr/bin/env python3
"""Status bar -- Entry point.

Generates an i3bar/swaybar status line from the blocks configured in
blocks.yaml. Point the bar at it:

    bar {
        status_command python3 /path/to/main.py --config ~/.config/bar/blocks.yaml
    }

Usage:
    python3 main.py                       # Uses ./blocks.yaml
    python3 main.py --config my.yaml      # Custom config path
    python3 main.py --log-level DEBUG     # Verbose logging (stderr)

Signals:
    SIGRTMIN+n   re-render blocks configured with `signal: n`
    SIGUSR1      re-render every block
    SIGINT/TERM  exit
"""

__version__ = "1.0.0"

import argparse
import logging
import os
import sys

from config import DEFAULT_CONFIG_PATH


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        description="Status line generator for i3bar and swaybar",
    )
    parser.add_argument(
        "--config", default=DEFAULT_CONFIG_PATH,
        help=f"Path to blocks YAML config (default: {DEFAULT_CONFIG_PATH})",
    )
    parser.add_argument(
        "--no-click-events", action="store_true",
        help="Don't ask the bar for click events or read stdin",
    )
    parser.add_argument(
        "--log-level", default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Set the logging verbosity (default: WARNING)",
    )
    parser.add_argument(
        "--version", action="version",
        version=f"Status bar {__version__}",
    )
    return parser.parse_args(argv)


def setup_logging(level_name: str) -> None:
    """Configure root logger with a consistent format. stdout is the bar's."""
    level = getattr(logging, level_name.upper(), logging.WARNING)
    logging.basicConfig(
        level=level,
        format="%(asctime)s  %(levelname)-7s  %(name)s  %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stderr,
    )


def main(argv=None) -> int:
    args = parse_args(argv)
    setup_logging(args.log_level)

    logger = logging.getLogger(__name__)
    logger.info("Status bar v%s starting", __version__)

    # Import blocks to trigger @register_block decorators
    import blocks  # noqa: F401
    from core.errors import ConfigError
    from core.event_bus import EventBus
    from core.input import ClickReader
    from core.loader import build_blocks, build_theme, load_config
    from core.protocol import ProtocolWriter
    from core.scheduler import Scheduler
    from core.signals import SignalListener

    bus = EventBus()
    try:
        config = load_config(args.config)
        theme = build_theme(config)
        block_list = build_blocks(config, bus)
    except ConfigError as exc:
        logger.error("Configuration error: %s", exc)
        return 1

    click_events = not args.no_click_events
    writer = ProtocolWriter(sys.stdout, theme=theme, click_events=click_events)
    scheduler = Scheduler(block_list, emit=writer.write_frame, bus=bus)

    # Mask signals before any thread starts so only the listener sees them
    block_signals = set()
    for block in block_list:
        block_signals.update(block.signals)
    listener = SignalListener(bus, block_signals)
    listener.block()
    listener.start()

    if click_events:
        ClickReader(bus, sys.stdin).start()

    try:
        writer.start()
        scheduler.run()
    except BrokenPipeError:
        logger.info("Bar closed our stdout, exiting")
        # Keep the interpreter from failing again when it flushes stdout at exit
        devnull = os.open(os.devnull, os.O_WRONLY)
        os.dup2(devnull, sys.stdout.fileno())
    finally:
        bus.close()
        logger.info("Shutdown complete")
    return 0


if __name__ == "__main__":
    sys.exit(main())
