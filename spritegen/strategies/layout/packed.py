"""
Packed layout using a growing binary-tree bin packer.

Blocks are sorted by their longest side and inserted into a tree of free
rectangles. When no free rectangle fits, the canvas grows right or down,
whichever keeps it closer to square.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from ..base import Layout, LayoutItem
from .linear import scaled_size

if TYPE_CHECKING:
    from spritegen.config.schemas import LayoutOptions

logger = logging.getLogger(__name__)


@dataclass
class _Node:
    x: int
    y: int
    width: int
    height: int
    used: bool = False
    right: _Node | None = None
    down: _Node | None = None


class _Packer:
    def __init__(self, width: int, height: int) -> None:
        self.root = _Node(0, 0, width, height)

    def find(self, node: _Node | None, width: int, height: int) -> _Node | None:
        if node is None:
            return None
        if node.used:
            return self.find(node.right, width, height) or self.find(node.down, width, height)
        if width <= node.width and height <= node.height:
            return node
        return None

    @staticmethod
    def split(node: _Node, width: int, height: int) -> _Node:
        node.used = True
        node.down = _Node(node.x, node.y + height, node.width, node.height - height)
        node.right = _Node(node.x + width, node.y, node.width - width, height)
        return node

    def fit(self, width: int, height: int) -> _Node:
        node = self.find(self.root, width, height)
        if node is not None:
            return self.split(node, width, height)
        return self.grow(width, height)

    def grow(self, width: int, height: int) -> _Node:
        root = self.root
        can_grow_down = width <= root.width
        can_grow_right = height <= root.height
        should_grow_right = can_grow_right and root.height >= root.width + width
        should_grow_down = can_grow_down and root.width >= root.height + height

        if should_grow_right or (can_grow_right and not should_grow_down):
            self.root = _Node(
                0, 0, root.width + width, root.height,
                used=True,
                down=root,
                right=_Node(root.width, 0, width, root.height),
            )
        elif can_grow_down:
            self.root = _Node(
                0, 0, root.width, root.height + height,
                used=True,
                down=_Node(0, root.height, root.width, height),
                right=root,
            )
        else:
            raise ValueError(f"Cannot fit a {width}x{height} block into the canvas")

        node = self.find(self.root, width, height)
        if node is None:
            raise ValueError(f"Cannot fit a {width}x{height} block into the canvas")
        return self.split(node, width, height)


class PackedLayout:
    """Pack images tightly; ``padding`` is kept between neighbours."""

    name = "packed"

    def layout(self, images: Sequence[Any], options: LayoutOptions) -> Layout:
        if not images:
            return Layout(width=0, height=0)

        padding = options.padding
        sizes = [scaled_size(image, options.scaling) for image in images]
        order = sorted(
            range(len(images)),
            key=lambda i: max(sizes[i]),
            reverse=True,
        )

        first_w, first_h = sizes[order[0]]
        packer = _Packer(first_w + padding, first_h + padding)
        positions: dict[int, tuple[int, int]] = {}
        for index in order:
            w, h = sizes[index]
            node = packer.fit(w + padding, h + padding)
            positions[index] = (node.x, node.y)

        items = tuple(
            LayoutItem(
                x=positions[i][0],
                y=positions[i][1],
                width=sizes[i][0],
                height=sizes[i][1],
                image=image,
            )
            for i, image in enumerate(images)
        )
        width = max(item.x + item.width for item in items)
        height = max(item.y + item.height for item in items)

        logger.debug(f"packed layout: {len(items)} images on {width}x{height}")
        return Layout(width=width, height=height, items=items)

    def __repr__(self) -> str:
        return "PackedLayout()"


packed = PackedLayout()
