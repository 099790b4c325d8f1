"""
Linear layouts: images placed one after another along an axis.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from ..base import Layout, LayoutItem

if TYPE_CHECKING:
    from spritegen.config.schemas import LayoutOptions

logger = logging.getLogger(__name__)


def scaled_size(image: Any, scaling: float) -> tuple[int, int]:
    """Return the placed (width, height) of an image after scaling."""
    try:
        width, height = image.width, image.height
    except AttributeError as e:
        raise TypeError(
            f"Layout input {image!r} has no width/height; "
            f"is the compositor decoding images?"
        ) from e
    return round(width * scaling), round(height * scaling)


class LinearLayout:
    """
    Stack images with ``padding`` pixels between neighbours.

    Args:
        step_x: Advance along x after each image (0 or 1)
        step_y: Advance along y after each image (0 or 1)
    """

    def __init__(self, name: str, step_x: int, step_y: int) -> None:
        self.name = name
        self._step_x = step_x
        self._step_y = step_y

    def layout(self, images: Sequence[Any], options: LayoutOptions) -> Layout:
        padding = options.padding
        x = y = 0
        width = height = 0
        items: list[LayoutItem] = []

        for image in images:
            w, h = scaled_size(image, options.scaling)
            items.append(LayoutItem(x=x, y=y, width=w, height=h, image=image))
            width = max(width, x + w)
            height = max(height, y + h)
            x += (w + padding) * self._step_x
            y += (h + padding) * self._step_y

        logger.debug(f"{self.name} layout: {len(items)} images on {width}x{height}")
        return Layout(width=width, height=height, items=tuple(items))

    def __repr__(self) -> str:
        return f"LinearLayout(name={self.name!r})"


vertical = LinearLayout("vertical", step_x=0, step_y=1)
horizontal = LinearLayout("horizontal", step_x=1, step_y=0)
diagonal = LinearLayout("diagonal", step_x=1, step_y=1)
