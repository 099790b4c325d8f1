"""
spritegen Pipeline

Core Components:
- SpriteGenerator: runs resolve -> decode -> layout -> prepare -> render -> write
- resolve_sources: glob expansion and source reading with bounded I/O
- ChangeDetector: fingerprint of configuration + source content
- RegenerationGate: regenerate only when the fingerprint changed
"""

from .cache import (
    ChangeDetector,
    FingerprintStore,
    GateState,
    InMemoryFingerprintStore,
    RegenerationGate,
)
from .concurrency import MAX_PARALLEL_FILE_READS, bounded_gather
from .context import GenerationContext, GenerationResult
from .executor import SpriteGenerator, generate, generate_with_callback
from .sources import SourceDescriptor, resolve_sources

__all__ = [
    "MAX_PARALLEL_FILE_READS",
    "ChangeDetector",
    "FingerprintStore",
    "GateState",
    "GenerationContext",
    "GenerationResult",
    "InMemoryFingerprintStore",
    "RegenerationGate",
    "SourceDescriptor",
    "SpriteGenerator",
    "bounded_gather",
    "generate",
    "generate_with_callback",
    "resolve_sources",
]
