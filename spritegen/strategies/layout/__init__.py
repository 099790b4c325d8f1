"""
Built-in layout engines.
"""

from .linear import LinearLayout, diagonal, horizontal, vertical
from .packed import PackedLayout, packed

BUILTIN_LAYOUTS = {
    "vertical": vertical,
    "horizontal": horizontal,
    "diagonal": diagonal,
    "packed": packed,
}

__all__ = [
    "BUILTIN_LAYOUTS",
    "LinearLayout",
    "PackedLayout",
    "vertical",
    "horizontal",
    "diagonal",
    "packed",
]
