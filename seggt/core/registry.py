"""
Layer registry.

Maps a layer type tag to its constructor. Built-in layers register
themselves when their module is imported; build() imports them
explicitly before the first lookup so the registry content does not
depend on what the caller happened to import.
"""

import importlib
import logging
from collections.abc import Callable

logger = logging.getLogger(__name__)

REGISTRY: dict[str, Callable] = {}

BUILTIN_LAYER_MODULES = ("seggt.core.layers.seggt",)


def register(tag: str):
    """Class decorator registering a layer under the given tag."""

    def deco(cls):
        if tag in REGISTRY and REGISTRY[tag] is not cls:
            raise ValueError(f"Layer type '{tag}' is already registered.")
        REGISTRY[tag] = cls
        return cls

    return deco


def _load_builtin_layers():
    for module_name in BUILTIN_LAYER_MODULES:
        importlib.import_module(module_name)


def available() -> list[str]:
    """Returns the registered layer tags."""
    _load_builtin_layers()
    return sorted(REGISTRY)


def build(tag: str, **kwargs):
    """
    Constructs the layer registered under tag.

    Args:
        tag: Layer type tag, e.g. 'SegGt'.
        **kwargs: Passed to the layer constructor.

    Returns
    -------
        layer: New layer instance.
    """
    _load_builtin_layers()
    if tag not in REGISTRY:
        raise KeyError(f"Unknown layer type '{tag}'. Known types: {', '.join(sorted(REGISTRY))}.")
    logger.debug("Building layer '%s'", tag)
    return REGISTRY[tag](**kwargs)
