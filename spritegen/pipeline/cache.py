"""
Change detection for incremental sprite generation.

A fingerprint summarizes the merged configuration, the *content* of
every resolved source and any inputs the strategies read themselves,
such as a stylesheet template file. Regeneration is needed whenever the
current fingerprint differs from the baseline recorded after the last
successful generation:

    detector = ChangeDetector(options)
    fingerprint = await detector.fingerprint()
    if await detector.check(fingerprint):
        await generate(options)
        await detector.commit(fingerprint)

The baseline lives in a FingerprintStore. The in-memory store is process
local; persisting baselines across restarts means supplying another store.
Each detector keys its baseline by a digest of its own configuration, so
unrelated configurations never share a baseline.
"""

from __future__ import annotations

import asyncio
import hashlib
import json
import logging
import os
from collections.abc import Mapping
from enum import Enum
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from cachetools import LRUCache
from pydantic import BaseModel

from spritegen.config.service import merge_options
from spritegen.strategies.registry import Custom, Named, StrategyRegistries, default_registries

from .concurrency import maybe_await
from .sources import SourceDescriptor, resolve_sources

if TYPE_CHECKING:
    from spritegen.config.schemas import SpriteConfig

    from .context import GenerationResult
    from .executor import Options, SpriteGenerator

logger = logging.getLogger(__name__)


# =============================================================================
# Fingerprint Storage
# =============================================================================


@runtime_checkable
class FingerprintStore(Protocol):
    """Protocol for baseline fingerprint storage."""

    async def get(self, key: str) -> str | None:
        """Get the stored fingerprint for ``key``."""
        ...

    async def set(self, key: str, fingerprint: str) -> None:
        """Store ``fingerprint`` as the baseline for ``key``."""
        ...


class InMemoryFingerprintStore:
    """
    Process-local fingerprint store.

    Bounded by an LRU policy so long-running processes that create many
    detectors do not grow without limit.
    """

    def __init__(self, maxsize: int = 256) -> None:
        self._entries: LRUCache[str, str] = LRUCache(maxsize=maxsize)

    async def get(self, key: str) -> str | None:
        return self._entries.get(key)

    async def set(self, key: str, fingerprint: str) -> None:
        self._entries[key] = fingerprint

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


# =============================================================================
# Fingerprints
# =============================================================================


def _identity(value: Any) -> str:
    qualname = getattr(value, "__qualname__", None)
    if qualname is not None:
        return f"{getattr(value, '__module__', '')}.{qualname}"
    cls = type(value)
    return f"{cls.__module__}.{cls.__qualname__}@{id(value):x}"


def describe(value: Any) -> Any:
    """Reduce a configuration value to a JSON-serializable description."""
    if value is None or isinstance(value, str | int | float | bool):
        return value
    if isinstance(value, Named):
        return f"named:{value.name}"
    if isinstance(value, Custom):
        return f"custom:{_identity(value.implementation)}"
    if isinstance(value, SourceDescriptor):
        return f"source:{value.path}"
    if isinstance(value, BaseModel):
        return {name: describe(item) for name, item in value}
    if isinstance(value, Mapping):
        return {str(key): describe(item) for key, item in value.items()}
    if isinstance(value, list | tuple):
        return [describe(item) for item in value]
    if isinstance(value, os.PathLike):
        return os.fspath(value)
    return _identity(value)


def content_digest(data: Any) -> str:
    """Hash source data; in-memory objects without bytes hash by identity."""
    if isinstance(data, bytes | bytearray | memoryview):
        return hashlib.sha256(data).hexdigest()
    to_bytes = getattr(data, "tobytes", None)
    if callable(to_bytes):
        return hashlib.sha256(to_bytes()).hexdigest()
    return _identity(data)


def config_digest(config: SpriteConfig) -> str:
    encoded = json.dumps(describe(config), sort_keys=True, separators=(",", ":"))
    return hashlib.sha256(encoded.encode("utf-8")).hexdigest()


# =============================================================================
# Change Detector
# =============================================================================


class ChangeDetector:
    """
    Decides whether a configured pipeline needs to regenerate.

    ``detect()`` never changes the baseline; only ``register()`` or
    ``commit()`` advance it.

    Strategies that read inputs of their own (a stylesheet template file,
    for instance) expose a ``fingerprint()`` method; its value is mixed
    into the fingerprint so edits to those inputs are detected too.

    Args:
        options: Sprite options, merged over defaults
        store: Baseline storage (a fresh in-memory store by default)
        key: Store key; defaults to a digest of the configuration
        registries: Registries used to resolve the configured strategies
    """

    def __init__(
        self,
        options: Options = None,
        *,
        store: FingerprintStore | None = None,
        key: str | None = None,
        registries: StrategyRegistries | None = None,
    ) -> None:
        self.config = merge_options(options)
        registries = registries or default_registries()
        self.strategies = (
            registries.layouts.resolve(self.config.layout),
            registries.compositors.resolve(self.config.compositor),
            registries.stylesheets.resolve(self.config.stylesheet),
        )
        self.store = store if store is not None else InMemoryFingerprintStore()
        self._config_digest = config_digest(self.config)
        self.key = key or self._config_digest

    async def fingerprint(self) -> str:
        """Fingerprint of the configuration, source content and strategy inputs."""
        sources = await resolve_sources(self.config.src)
        hasher = hashlib.sha256(self._config_digest.encode("ascii"))
        for source in sources:
            hasher.update(b"\0")
            hasher.update(source.path.encode("utf-8"))
            hasher.update(b"\0")
            hasher.update(content_digest(source.data).encode("utf-8"))
        for strategy in self.strategies:
            strategy_fingerprint = getattr(strategy, "fingerprint", None)
            if callable(strategy_fingerprint):
                hasher.update(b"\0")
                hasher.update(str(await maybe_await(strategy_fingerprint())).encode("utf-8"))
        return hasher.hexdigest()

    async def check(self, fingerprint: str) -> bool:
        """True if ``fingerprint`` differs from the stored baseline."""
        baseline = await self.store.get(self.key)
        return baseline != fingerprint

    async def commit(self, fingerprint: str) -> None:
        """Record ``fingerprint`` as the new baseline."""
        await self.store.set(self.key, fingerprint)
        logger.debug(f"Registered sprite fingerprint {fingerprint[:12]}... for key {self.key[:12]}...")

    async def detect(self) -> bool:
        """True if regeneration is required."""
        return await self.check(await self.fingerprint())

    async def register(self, last_result: GenerationResult | None = None) -> None:
        """Record the current inputs as the new baseline."""
        await self.commit(await self.fingerprint())


# =============================================================================
# Regeneration Gate
# =============================================================================


class GateState(str, Enum):
    """Lifecycle of one gated regeneration check."""

    IDLE = "idle"
    CHECKING = "checking"
    UNCHANGED = "unchanged"
    CHANGED = "changed"
    REGENERATING = "regenerating"
    REGISTERING = "registering"


class RegenerationGate:
    """
    Runs a generator only when its inputs changed since the last success.

    The fingerprint taken before generating is the one committed after
    it, so a source edited mid-generation is picked up on the next check.
    Errors return the gate to IDLE and propagate to the caller.

    Checks are serialized: concurrent callers wait for the running check,
    then see its committed baseline and usually find nothing changed.
    """

    def __init__(self, generator: SpriteGenerator, detector: ChangeDetector) -> None:
        self.generator = generator
        self.detector = detector
        self.state = GateState.IDLE
        self.generation_count = 0
        self._lock = asyncio.Lock()

    def _transition(self, state: GateState) -> None:
        logger.debug(f"Sprite gate: {self.state.value} -> {state.value}")
        self.state = state

    async def ensure_fresh(self) -> GenerationResult | None:
        """
        Regenerate if needed.

        Returns:
            The new GenerationResult, or None if nothing changed
        """
        async with self._lock:
            try:
                self._transition(GateState.CHECKING)
                fingerprint = await self.detector.fingerprint()
                if not await self.detector.check(fingerprint):
                    self._transition(GateState.UNCHANGED)
                    return None

                self._transition(GateState.CHANGED)
                self._transition(GateState.REGENERATING)
                result = await self.generator.run()
                self.generation_count += 1

                self._transition(GateState.REGISTERING)
                await self.detector.commit(fingerprint)
                logger.info(
                    f"Sprite regenerated: execution_id={result.context.short_id}..., "
                    f"generations={self.generation_count}"
                )
                return result
            finally:
                self._transition(GateState.IDLE)
