"""
spritegen Configuration

Pydantic schemas for sprite options and application settings.
"""

from .schemas import (
    AppSettings,
    CompositorOptions,
    LayoutOptions,
    SpriteConfig,
    StylesheetOptions,
)
from .service import DEFAULT_CONFIG, get_settings, load_config_file, merge_options

__all__ = [
    "AppSettings",
    "CompositorOptions",
    "DEFAULT_CONFIG",
    "LayoutOptions",
    "SpriteConfig",
    "StylesheetOptions",
    "get_settings",
    "load_config_file",
    "merge_options",
]
