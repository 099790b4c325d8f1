"""
Strategy contracts for sprite generation.

Three pluggable strategies cooperate through a generated layout:

- LayoutEngine: places decoded images on a canvas
- Compositor: decodes sources and renders the composite image
- StylesheetRenderer: emits text mapping each image to its offset

Any method may be sync or async; the pipeline awaits awaitables.
The Layout types below are what the built-in strategies exchange.
Custom strategies may agree on another shape.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from spritegen.config.schemas import (
        CompositorOptions,
        LayoutOptions,
        StylesheetOptions,
    )
    from spritegen.pipeline.sources import SourceDescriptor


@dataclass(frozen=True)
class LayoutItem:
    """
    Placement of one image within the composite.

    Attributes:
        x: Left offset in pixels
        y: Top offset in pixels
        width: Placed width (after scaling)
        height: Placed height (after scaling)
        image: The decoded image this item places
    """

    x: int
    y: int
    width: int
    height: int
    image: Any = field(repr=False)

    @property
    def path(self) -> str:
        return getattr(self.image, "path", "")


@dataclass(frozen=True)
class Layout:
    """Canvas size plus the placement of every image."""

    width: int
    height: int
    items: tuple[LayoutItem, ...] = ()

    def __len__(self) -> int:
        return len(self.items)

    def to_dict(self) -> dict[str, Any]:
        return {
            "width": self.width,
            "height": self.height,
            "items": [
                {
                    "path": item.path,
                    "x": item.x,
                    "y": item.y,
                    "width": item.width,
                    "height": item.height,
                }
                for item in self.items
            ],
        }


@runtime_checkable
class LayoutEngine(Protocol):
    """
    Places images on a canvas.

    Images only need ``width`` and ``height`` attributes.
    """

    def layout(self, images: Sequence[Any], options: LayoutOptions) -> Layout:
        ...


@runtime_checkable
class Compositor(Protocol):
    """
    Decodes sources and renders the composite image.

    ``read_image`` is optional: without it, source descriptors are handed
    to the layout engine unchanged.
    """

    def render(
        self,
        layout: Layout,
        sprite_path: Path | None,
        options: CompositorOptions,
    ) -> bytes:
        ...


@runtime_checkable
class ImageReader(Protocol):
    """Optional decode capability of a compositor."""

    def read_image(self, source: SourceDescriptor) -> Any:
        ...


@runtime_checkable
class StylesheetRenderer(Protocol):
    """Renders stylesheet text from a layout."""

    def render(self, layout: Layout, options: StylesheetOptions) -> str:
        ...
