"""
Generation context and result.

The context records per-invocation state for logging: execution id,
start time, stage timings and the number of sources processed. Nothing
in it outlives the invocation.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any
from uuid import UUID, uuid4

if TYPE_CHECKING:
    from spritegen.config.schemas import SpriteConfig


def _utc_now() -> datetime:
    return datetime.now(UTC)


@dataclass
class GenerationContext:
    """Per-invocation bookkeeping passed through the pipeline stages."""

    config: SpriteConfig
    execution_id: UUID = field(default_factory=uuid4)
    started_at: datetime = field(default_factory=_utc_now)
    stage_timings: dict[str, float] = field(default_factory=dict)
    source_count: int = 0

    @property
    def short_id(self) -> str:
        return str(self.execution_id)[:8]

    @property
    def elapsed_ms(self) -> float:
        """Milliseconds since generation started."""
        delta = datetime.now(UTC) - self.started_at
        return delta.total_seconds() * 1000

    def record_timing(self, stage: str, duration_ms: float) -> None:
        """Record stage execution timing."""
        self.stage_timings[stage] = duration_ms

    def to_audit_dict(self) -> dict[str, Any]:
        return {
            "execution_id": str(self.execution_id),
            "started_at": self.started_at.isoformat(),
            "duration_ms": self.elapsed_ms,
            "source_count": self.source_count,
            "stage_timings": dict(self.stage_timings),
            "sprite_path": str(self.config.sprite_path) if self.config.sprite_path else None,
            "stylesheet_path": (
                str(self.config.stylesheet_path) if self.config.stylesheet_path else None
            ),
        }


@dataclass
class GenerationResult:
    """
    Artifacts produced by one generation.

    ``stylesheet`` and ``sprite`` hold whatever the renderers returned,
    whether or not an output path was configured for them.
    """

    stylesheet: str | bytes | None
    sprite: bytes | None
    layout: Any
    context: GenerationContext

    @property
    def execution_id(self) -> UUID:
        return self.context.execution_id

    def to_dict(self) -> dict[str, Any]:
        """Serialize result summary for logging."""
        return {
            **self.context.to_audit_dict(),
            "stylesheet_size": len(self.stylesheet) if self.stylesheet is not None else None,
            "sprite_size": len(self.sprite) if self.sprite is not None else None,
        }
