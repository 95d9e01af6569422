"""Loads blocks.yaml and builds the ordered list of blocks.

Block ids are assigned in declaration order, starting at 0. That order
is also the order blocks appear on the bar.
"""

import copy
import logging
from typing import Any, Dict, List, Optional

import yaml

from config import THEME
from core.block import Block
from core.errors import ConfigError
from core.event_bus import EventBus
from core.registry import BLOCK_REGISTRY, get_block_class

logger = logging.getLogger(__name__)


def load_config(path: str) -> Dict:
    """Read and sanity-check the YAML config file."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except FileNotFoundError as exc:
        raise ConfigError(f"Config file not found: {path}") from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {path}: {exc}") from exc

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError("Config file must contain a mapping at the top level")

    blocks = data.get("blocks")
    if not isinstance(blocks, list) or not blocks:
        raise ConfigError("'blocks' must be a non-empty list")
    return data


def build_theme(config: Dict) -> Dict[str, Dict[str, Optional[str]]]:
    """Default THEME with the config's per-state overrides applied.

    An override can be a plain color string (foreground only) or a
    mapping with "fg" and/or "bg".
    """
    theme = copy.deepcopy(THEME)
    overrides = config.get("theme") or {}
    if not isinstance(overrides, dict):
        raise ConfigError("'theme' must be a mapping")

    for state, value in overrides.items():
        if state not in theme:
            raise ConfigError(f"Unknown theme state '{state}'")
        if isinstance(value, str):
            theme[state]["fg"] = value
        elif isinstance(value, dict):
            unknown = set(value) - {"fg", "bg"}
            if unknown:
                raise ConfigError(f"Unknown theme keys for '{state}': {sorted(unknown)}")
            theme[state].update(value)
        else:
            raise ConfigError(f"Theme entry '{state}' must be a color or mapping")
    return theme


def build_blocks(config: Dict, bus: Optional[EventBus] = None) -> List[Block]:
    """Instantiate every configured block in order."""
    blocks: List[Block] = []
    for position, entry in enumerate(config.get("blocks", [])):
        blocks.append(_build_block(position, entry, bus))
    logger.info("Loaded %d blocks", len(blocks))
    return blocks


def _build_block(block_id: int, entry: Any, bus: Optional[EventBus]) -> Block:
    if not isinstance(entry, dict):
        raise ConfigError(f"Block #{block_id} must be a mapping")

    options = dict(entry)
    kind = options.pop("block", None)
    if not kind:
        raise ConfigError(f"Block #{block_id} has no 'block' kind")

    cls = get_block_class(kind)
    if cls is None:
        raise ConfigError(
            f"Block #{block_id}: unknown kind '{kind}' "
            f"(known: {', '.join(sorted(BLOCK_REGISTRY))})"
        )

    try:
        block = cls(block_id, bus, options)
    except ConfigError as exc:
        raise ConfigError(f"Block #{block_id} ({kind}): {exc}") from exc
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Block #{block_id} ({kind}): invalid option: {exc}") from exc

    logger.debug("Block #%d: %r", block_id, block)
    return block
