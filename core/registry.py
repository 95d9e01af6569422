"""Block registry for the status bar.

Register block kinds by name. The loader reads the YAML config and
instantiates the right class by looking it up here.

Usage:
    @register_block("custom")
    class Custom(Block):
        ...
"""

import logging

logger = logging.getLogger(__name__)

BLOCK_REGISTRY = {}


def register_block(name):
    """Decorator to register a block class by kind name."""
    def decorator(cls):
        BLOCK_REGISTRY[name] = cls
        cls.kind = name
        logger.debug("Registered block kind: %s -> %s", name, cls.__name__)
        return cls
    return decorator


def get_block_class(name):
    """Return the class registered under name, or None."""
    return BLOCK_REGISTRY.get(name)
