"""
Error taxonomy for the sprite generation pipeline.

Every stage failure surfaces as a SpriteGenerationError subclass carrying
the name of the stage that failed. Exceptions raised by pluggable
strategies are wrapped in the stage's error class and chained via
``__cause__``; errors already in this hierarchy propagate unchanged.
"""

from __future__ import annotations


class SpriteGenerationError(Exception):
    """Base class for all pipeline failures."""

    default_stage = "pipeline"

    def __init__(self, message: str, stage: str | None = None):
        self.stage = stage or self.default_stage
        self.message = message
        super().__init__(f"[{self.stage}] {message}")


class ResolutionError(SpriteGenerationError):
    """A glob expansion or source file read failed."""

    default_stage = "resolve"


class DecodeError(SpriteGenerationError):
    """The compositor could not decode a source image."""

    default_stage = "decode"


class LayoutError(SpriteGenerationError):
    """The layout engine failed to place the images."""

    default_stage = "layout"


class RenderError(SpriteGenerationError):
    """The compositor or stylesheet renderer failed."""

    default_stage = "render"


class WriteError(SpriteGenerationError):
    """Creating an output directory or writing an artifact failed."""

    default_stage = "write"


class ConfigurationError(SpriteGenerationError):
    """
    A strategy reference could not be turned into a usable implementation,
    or the supplied options are invalid.

    Strategy resolution itself is permissive, so this is raised by the
    stage that first tries to use the strategy.
    """

    default_stage = "configure"
