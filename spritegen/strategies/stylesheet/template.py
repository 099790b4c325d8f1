"""
Template-driven stylesheet rendering.

A stylesheet template is a YAML mapping of ``str.format`` templates:

    header: "/* generated */\n"        # optional, rendered once
    sprite: ".{name} {{ ... }}\n"      # required, rendered per image
    separator: "\n"                   # optional, joins sprite blocks
    footer: ""                        # optional, rendered once

Literal braces are doubled, as with any ``str.format`` template.

Placeholders available to ``sprite``:
    name, path, x, y, offset_x, offset_y, width, height,
    total_width, total_height, sprite_path, pixel_ratio

Placeholders available to ``header``/``footer``:
    total_width, total_height, sprite_path, pixel_ratio, prefix, base_class,
    count

Pixel values are divided by ``pixel_ratio`` so that a sprite rendered at
2x density maps to CSS pixels.
"""

from __future__ import annotations

import asyncio
import hashlib
import logging
from collections.abc import Mapping
from pathlib import Path
from typing import TYPE_CHECKING, Any

import yaml

if TYPE_CHECKING:
    from spritegen.config.schemas import StylesheetOptions

    from ..base import Layout

logger = logging.getLogger(__name__)


def format_px(value: float) -> str:
    """Format a pixel value without a trailing '.0' or a negative zero."""
    value = round(value, 4)
    if value == int(value):
        return str(int(value))
    return f"{value:g}"


def sprite_context(item: Any, layout: Layout, options: StylesheetOptions) -> dict[str, Any]:
    """Build the placeholder values for one layout item."""
    ratio = options.pixel_ratio
    return {
        "name": f"{options.prefix}{options.name_mapping(item.path)}",
        "path": item.path,
        "x": format_px(item.x / ratio),
        "y": format_px(item.y / ratio),
        "offset_x": format_px(-item.x / ratio),
        "offset_y": format_px(-item.y / ratio),
        "width": format_px(item.width / ratio),
        "height": format_px(item.height / ratio),
        "total_width": format_px(layout.width / ratio),
        "total_height": format_px(layout.height / ratio),
        "sprite_path": options.sprite_path or "",
        "pixel_ratio": format_px(ratio),
    }


def sheet_context(layout: Layout, options: StylesheetOptions) -> dict[str, Any]:
    """Build the placeholder values for the header and footer."""
    ratio = options.pixel_ratio
    return {
        "total_width": format_px(layout.width / ratio),
        "total_height": format_px(layout.height / ratio),
        "sprite_path": options.sprite_path or "",
        "pixel_ratio": format_px(ratio),
        "prefix": options.prefix,
        "base_class": options.prefix.rstrip("-_") or "sprite",
        "count": len(layout.items),
    }


def _format(section: str, template: str, context: Mapping[str, Any]) -> str:
    try:
        return template.format_map(context)
    except (KeyError, IndexError) as e:
        raise ValueError(f"Unknown placeholder {e} in '{section}' template") from e


class TemplateStylesheet:
    """
    Stylesheet renderer built from ``str.format`` templates.

    Args:
        sprite: Template rendered once per layout item
        header: Template rendered before the items
        footer: Template rendered after the items
        separator: Text placed between item blocks
    """

    def __init__(
        self,
        sprite: str,
        header: str = "",
        footer: str = "",
        separator: str = "",
        name: str = "template",
    ) -> None:
        self.sprite = sprite
        self.header = header
        self.footer = footer
        self.separator = separator
        self.name = name

    @classmethod
    def from_mapping(cls, data: Any, name: str = "template") -> TemplateStylesheet:
        """Build a renderer from a parsed template document."""
        if not isinstance(data, Mapping) or not isinstance(data.get("sprite"), str):
            raise ValueError(
                f"Stylesheet template '{name}' must be a mapping with a 'sprite' string"
            )
        return cls(
            sprite=data["sprite"],
            header=data.get("header") or "",
            footer=data.get("footer") or "",
            separator=data.get("separator") or "",
            name=name,
        )

    def render(self, layout: Layout, options: StylesheetOptions) -> str:
        sheet = sheet_context(layout, options)
        blocks = [
            _format("sprite", self.sprite, {**sheet, **sprite_context(item, layout, options)})
            for item in layout.items
        ]
        return (
            _format("header", self.header, sheet)
            + self.separator.join(blocks)
            + _format("footer", self.footer, sheet)
        )

    def __repr__(self) -> str:
        return f"TemplateStylesheet(name={self.name!r})"


def parse_template(text: str, name: str = "template") -> TemplateStylesheet:
    """Parse a YAML stylesheet template document."""
    return TemplateStylesheet.from_mapping(yaml.safe_load(text), name=name)


class FileTemplateStylesheet:
    """
    Stylesheet renderer backed by a template file.

    The file is read on every render; it is parsed again only when its
    content changed since the last parse. Construction never touches the
    filesystem.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self._template: TemplateStylesheet | None = None
        self._digest: str | None = None

    def _load(self) -> TemplateStylesheet:
        data = self.path.read_bytes()
        digest = hashlib.sha256(data).hexdigest()
        if self._template is None or digest != self._digest:
            self._template = parse_template(data.decode("utf-8"), name=self.path.stem)
            self._digest = digest
            logger.debug(f"Loaded stylesheet template from {self.path}")
        return self._template

    async def load(self) -> TemplateStylesheet:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self._load)

    async def fingerprint(self) -> str:
        """Content digest of the template file, for change detection."""
        loop = asyncio.get_running_loop()
        try:
            data = await loop.run_in_executor(None, self.path.read_bytes)
        except OSError:
            # Rendering reports the missing file
            return f"missing:{self.path}"
        return hashlib.sha256(data).hexdigest()

    async def render(self, layout: Layout, options: StylesheetOptions) -> str:
        template = await self.load()
        return template.render(layout, options)

    def __repr__(self) -> str:
        return f"FileTemplateStylesheet(path='{self.path}')"
