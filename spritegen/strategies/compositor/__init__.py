"""
Built-in compositors.
"""

from .pillow import DecodedImage, PillowCompositor

_pillow = PillowCompositor()

BUILTIN_COMPOSITORS = {
    "canvas": _pillow,
    "pillow": _pillow,
}

__all__ = ["BUILTIN_COMPOSITORS", "DecodedImage", "PillowCompositor"]
