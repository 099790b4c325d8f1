"""
Pytest configuration and fixtures for spritegen tests.
"""

import io
import sys
from pathlib import Path

import pytest
from PIL import Image

# Add the repository root to path for imports
# This allows `from spritegen.pipeline import ...` to work
repo_root = Path(__file__).parent.parent
if str(repo_root) not in sys.path:
    sys.path.insert(0, str(repo_root))


def png_bytes(size=(16, 16), color=(255, 0, 0, 255)) -> bytes:
    """Encode a solid-color RGBA PNG."""
    buffer = io.BytesIO()
    Image.new("RGBA", size, color).save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def make_png(tmp_path):
    """Write a solid-color PNG under tmp_path and return its path."""

    def _make(name, size=(16, 16), color=(255, 0, 0, 255)) -> Path:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(png_bytes(size, color))
        return path

    return _make


@pytest.fixture
def icon_dir(make_png, tmp_path):
    """Two 16x16 icons: a.png (red) and b.png (blue)."""
    make_png("icons/a.png", color=(255, 0, 0, 255))
    make_png("icons/b.png", color=(0, 0, 255, 255))
    return tmp_path / "icons"


class Box:
    """Minimal sized image stand-in for layout tests."""

    def __init__(self, width, height, path=""):
        self.width = width
        self.height = height
        self.path = path

    def __repr__(self):
        return f"Box({self.width}x{self.height}, {self.path!r})"


@pytest.fixture
def box():
    return Box


@pytest.fixture
def png():
    """Encoder for in-memory PNG sources."""
    return png_bytes
