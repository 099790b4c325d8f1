"""
Source resolution.

Expands glob patterns into source descriptors carrying the raw file
bytes, and merges them with literal descriptors supplied by the caller.

Usage:
    sources = await resolve_sources([
        "icons/**/*.png",
        SourceDescriptor(path="inline/logo.png", data=logo_bytes),
    ])
"""

from __future__ import annotations

import asyncio
import glob
import logging
import os
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from spritegen.errors import ResolutionError

from .concurrency import MAX_PARALLEL_FILE_READS, bounded_gather

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SourceDescriptor:
    """
    A source image before decoding.

    Attributes:
        path: Identifier of the source, normally its file path
        data: Raw bytes, or any in-memory value the compositor can decode
    """

    path: str
    data: Any

    def __repr__(self) -> str:
        size = len(self.data) if isinstance(self.data, bytes | bytearray) else "?"
        return f"SourceDescriptor(path={self.path!r}, bytes={size})"


def _is_pattern(entry: Any) -> bool:
    return isinstance(entry, str | os.PathLike)


def _as_descriptor(entry: Any) -> SourceDescriptor:
    """Normalize a literal source entry, keeping its data untouched."""
    if isinstance(entry, SourceDescriptor):
        return entry
    if isinstance(entry, Mapping) and "path" in entry and "data" in entry:
        return SourceDescriptor(path=str(entry["path"]), data=entry["data"])
    raise ResolutionError(
        f"Literal source must be a SourceDescriptor or a mapping with "
        f"'path' and 'data', got {type(entry).__name__}"
    )


async def expand_pattern(pattern: str) -> list[str]:
    """Expand one glob pattern to a sorted list of normalized file paths."""
    loop = asyncio.get_running_loop()
    try:
        matches = await loop.run_in_executor(
            None, lambda: glob.glob(pattern, recursive=True)
        )
    except Exception as e:
        raise ResolutionError(f"Failed to expand pattern '{pattern}': {e}") from e
    return sorted(os.path.normpath(m) for m in matches if not os.path.isdir(m))


async def read_source(path: str) -> SourceDescriptor:
    """Read a file into a SourceDescriptor."""
    loop = asyncio.get_running_loop()
    try:
        data = await loop.run_in_executor(None, Path(path).read_bytes)
    except OSError as e:
        raise ResolutionError(f"Failed to read source '{path}': {e}") from e
    return SourceDescriptor(path=path, data=data)


async def resolve_sources(src: Sequence[Any]) -> list[SourceDescriptor]:
    """
    Resolve a source list into unique descriptors.

    String (or path-like) entries are glob patterns; every other entry is
    a literal descriptor passed through as is. Literal entries come first,
    followed by file descriptors whose path is not already present. Paths
    are compared after normalization, so ``icons/a.png`` and ``./icons/a.png``
    are the same source.

    Raises:
        ResolutionError: If any pattern expansion or file read fails.
            No partial list is returned.
    """
    patterns = [os.fspath(entry) for entry in src if _is_pattern(entry)]
    literals = [_as_descriptor(entry) for entry in src if not _is_pattern(entry)]

    expanded = await asyncio.gather(*(expand_pattern(p) for p in patterns))

    seen = {os.path.normpath(descriptor.path) for descriptor in literals}
    paths: list[str] = []
    for matches in expanded:
        for path in matches:
            if path not in seen:
                seen.add(path)
                paths.append(path)

    logger.debug(
        f"Resolved {len(patterns)} pattern(s) to {len(paths)} file(s), "
        f"{len(literals)} literal source(s)"
    )

    files = await bounded_gather(read_source, paths, limit=MAX_PARALLEL_FILE_READS)

    unique_literals: list[SourceDescriptor] = []
    literal_paths: set[str] = set()
    for descriptor in literals:
        key = os.path.normpath(descriptor.path)
        if key in literal_paths:
            continue
        literal_paths.add(key)
        unique_literals.append(descriptor)

    return unique_literals + files
