"""
Pluggable strategies: layout engines, compositors and stylesheet renderers.
"""

from .base import (
    Compositor,
    ImageReader,
    Layout,
    LayoutEngine,
    LayoutItem,
    StylesheetRenderer,
)
from .naming import name_to_class
from .registry import (
    Custom,
    Named,
    StrategyRef,
    StrategyRegistries,
    StrategyRegistry,
    as_strategy_ref,
    default_registries,
)

__all__ = [
    "Compositor",
    "Custom",
    "ImageReader",
    "Layout",
    "LayoutEngine",
    "LayoutItem",
    "Named",
    "StrategyRef",
    "StrategyRegistries",
    "StrategyRegistry",
    "StylesheetRenderer",
    "as_strategy_ref",
    "default_registries",
    "name_to_class",
]
