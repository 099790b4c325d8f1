"""
JSON "stylesheet": a machine-readable map of sprite names to offsets.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from spritegen.config.schemas import StylesheetOptions

    from ..base import Layout


class JsonStylesheet:
    """Emit ``{"sprite": {...}, "images": {name: {...}}}`` as indented JSON."""

    name = "json"

    def render(self, layout: Layout, options: StylesheetOptions) -> str:
        ratio = options.pixel_ratio
        images = {}
        for item in layout.items:
            name = f"{options.prefix}{options.name_mapping(item.path)}"
            if name in images:
                raise ValueError(
                    f"Duplicate sprite name '{name}' for {item.path} "
                    f"(already used by {images[name]['path']})"
                )
            images[name] = {
                "path": item.path,
                "x": item.x / ratio,
                "y": item.y / ratio,
                "width": item.width / ratio,
                "height": item.height / ratio,
            }
        document = {
            "sprite": {
                "path": options.sprite_path,
                "width": layout.width / ratio,
                "height": layout.height / ratio,
                "pixel_ratio": ratio,
            },
            "images": images,
        }
        return json.dumps(document, indent=2) + "\n"

    def __repr__(self) -> str:
        return "JsonStylesheet()"
