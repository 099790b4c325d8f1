"""
Pillow-backed compositor.

Decodes sources into RGBA images and pastes them onto a transparent
canvas following the layout. Decoding and encoding are CPU bound and run
in the default executor so they do not block the event loop.
"""

from __future__ import annotations

import asyncio
import io
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any

from PIL import Image

if TYPE_CHECKING:
    from spritegen.config.schemas import CompositorOptions
    from spritegen.pipeline.sources import SourceDescriptor

    from ..base import Layout

logger = logging.getLogger(__name__)

DEFAULT_FORMAT = "PNG"


@dataclass(frozen=True)
class DecodedImage:
    """A decoded source image."""

    path: str
    width: int
    height: int
    image: Image.Image = field(repr=False, compare=False)


def _decode(source: SourceDescriptor) -> DecodedImage:
    data = source.data
    if isinstance(data, Image.Image):
        image = data
    else:
        with Image.open(io.BytesIO(data)) as opened:
            opened.load()
            image = opened.copy()
    image = image.convert("RGBA")
    return DecodedImage(path=source.path, width=image.width, height=image.height, image=image)


def _output_format(sprite_path: Path | None) -> str:
    if sprite_path is None:
        return DEFAULT_FORMAT
    extensions = Image.registered_extensions()
    return extensions.get(Path(sprite_path).suffix.lower(), DEFAULT_FORMAT)


def _save_params(fmt: str, options: CompositorOptions) -> dict[str, Any]:
    if fmt == "PNG":
        return {"compress_level": options.compression_level}
    if fmt == "WEBP":
        return {"lossless": True}
    return {}


def _composite(layout: Layout, sprite_path: Path | None, options: CompositorOptions) -> bytes:
    canvas = Image.new("RGBA", (max(layout.width, 1), max(layout.height, 1)), (0, 0, 0, 0))

    for item in layout.items:
        image = getattr(item.image, "image", item.image)
        if not isinstance(image, Image.Image):
            raise TypeError(f"Layout item {item.path!r} does not carry a decoded image")
        if image.size != (item.width, item.height):
            image = image.resize((item.width, item.height), Image.LANCZOS)
        canvas.paste(image, (item.x, item.y), image)

    fmt = _output_format(sprite_path)
    if fmt in ("JPEG", "BMP"):
        canvas = canvas.convert("RGB")

    buffer = io.BytesIO()
    canvas.save(buffer, format=fmt, **_save_params(fmt, options))
    return buffer.getvalue()


class PillowCompositor:
    """
    Compositor producing PNG (or the format implied by the sprite path).

    Options used:
        compression_level: zlib level for PNG output (0-9)

    ``filter`` is accepted for compatibility; Pillow picks PNG row filters
    adaptively and does not expose a per-image choice.
    """

    name = "pillow"

    async def read_image(self, source: SourceDescriptor) -> DecodedImage:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, _decode, source)

    async def render(
        self,
        layout: Layout,
        sprite_path: Path | None,
        options: CompositorOptions,
    ) -> bytes:
        loop = asyncio.get_running_loop()
        data = await loop.run_in_executor(None, _composite, layout, sprite_path, options)
        logger.debug(
            f"Rendered {layout.width}x{layout.height} sprite "
            f"({len(layout.items)} images, {len(data)} bytes)"
        )
        return data

    def __repr__(self) -> str:
        return "PillowCompositor()"
