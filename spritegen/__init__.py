"""
spritegen - sprite sheet and stylesheet generation for front-end asset pipelines.

spritegen combines individually authored images into one composite sprite
plus a stylesheet mapping every image to its offset:

- **Pluggable strategies**: layout engines, compositors and stylesheet
  renderers, chosen by name or passed in directly
- **Bounded I/O**: concurrent source reads and decodes, capped at 80
- **Incremental**: request-time middleware that regenerates only when
  sources or configuration changed

Quick Start:
    >>> from spritegen import generate
    >>>
    >>> result = await generate({
    ...     "src": ["icons/*.png"],
    ...     "spritePath": "dist/sprite.png",
    ...     "stylesheetPath": "dist/sprite.css",
    ...     "stylesheet": "css",
    ... })
"""

__version__ = "0.1.0"
__license__ = "MIT"

from spritegen.config import SpriteConfig, merge_options
from spritegen.errors import (
    ConfigurationError,
    DecodeError,
    LayoutError,
    RenderError,
    ResolutionError,
    SpriteGenerationError,
    WriteError,
)
from spritegen.pipeline import (
    ChangeDetector,
    GenerationResult,
    SourceDescriptor,
    SpriteGenerator,
    generate,
    generate_with_callback,
)
from spritegen.strategies import Custom, Named, StrategyRegistries, default_registries

__all__ = [
    # Version info
    "__version__",
    "__license__",
    # Entry points
    "generate",
    "generate_with_callback",
    "SpriteGenerator",
    "ChangeDetector",
    # Data
    "SpriteConfig",
    "SourceDescriptor",
    "GenerationResult",
    "merge_options",
    # Strategies
    "Named",
    "Custom",
    "StrategyRegistries",
    "default_registries",
    # Errors
    "SpriteGenerationError",
    "ResolutionError",
    "DecodeError",
    "LayoutError",
    "RenderError",
    "WriteError",
    "ConfigurationError",
]
