"""
Default mapping from source paths to stylesheet identifiers.
"""

from __future__ import annotations

import re
from pathlib import PurePath

_INVALID_CHARS = re.compile(r"[^A-Za-z0-9_-]+")


def name_to_class(path: str) -> str:
    """
    Turn a source path into a class-friendly name.

    The file stem is kept and every run of characters that is not a
    letter, digit, underscore or dash becomes a single dash.

    Example:
        >>> name_to_class("icons/arrow left@2x.png")
        'arrow-left-2x'
    """
    stem = PurePath(path).stem
    name = _INVALID_CHARS.sub("-", stem).strip("-")
    if name and name[0].isdigit():
        name = f"_{name}"
    return name or "sprite"
