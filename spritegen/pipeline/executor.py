"""
Sprite generation pipeline.

Stages run strictly in order; each consumes the previous stage's output:

    1. configure  merge options over defaults, resolve strategies
    2. resolve    expand globs and read source files
    3. decode     compositor.read_image on each source (bounded)
    4. layout     layout engine places the decoded images
    5. prepare    create output directories (both concurrently)
    6. render     stylesheet and sprite (both concurrently, always both)
    7. write      artifacts with a configured path (both concurrently)

Any stage failure aborts the stages after it. Operations running side by
side within a stage are never cancelled; the stage waits for both to
settle and then raises the first failure.

Usage:
    result = await generate({
        "src": ["icons/*.png"],
        "spritePath": "dist/sprite.png",
        "stylesheetPath": "dist/sprite.styl",
    })
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import AsyncIterator, Callable, Mapping, Sequence
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any

from spritegen.config.schemas import SpriteConfig
from spritegen.config.service import merge_options
from spritegen.errors import (
    ConfigurationError,
    DecodeError,
    LayoutError,
    RenderError,
    ResolutionError,
    SpriteGenerationError,
    WriteError,
)
from spritegen.strategies.registry import StrategyRegistries, default_registries

from .concurrency import MAX_PARALLEL_FILE_READS, bounded_gather, maybe_await, settle_pair
from .context import GenerationContext, GenerationResult
from .sources import SourceDescriptor, resolve_sources

logger = logging.getLogger(__name__)

Options = SpriteConfig | Mapping[str, Any] | None
GenerationCallback = Callable[[BaseException | None, GenerationResult | None], None]


def _capability(
    implementation: Any,
    method: str,
    kind: str,
    stage: str,
    *,
    required: bool = True,
    allow_function: bool = False,
) -> Callable[..., Any] | None:
    """
    Look up a strategy capability at the point of use.

    A bare string means the name matched no registered strategy.
    """
    if isinstance(implementation, str):
        raise ConfigurationError(
            f"{kind} '{implementation}' is not registered and is not a usable implementation",
            stage=stage,
        )
    func = getattr(implementation, method, None)
    if callable(func):
        return func
    if allow_function and callable(implementation):
        return implementation
    if not required:
        return None
    raise ConfigurationError(
        f"{kind} {implementation!r} does not provide '{method}'",
        stage=stage,
    )


async def _invoke(func: Callable[..., Any], *args: Any) -> Any:
    return await maybe_await(func(*args))


async def _ensure_parent(path: Path | None) -> None:
    if path is None:
        return
    loop = asyncio.get_running_loop()
    await loop.run_in_executor(
        None, lambda: Path(path).parent.mkdir(parents=True, exist_ok=True)
    )


async def _write_artifact(path: Path | None, data: str | bytes | None) -> None:
    if path is None:
        return
    if data is None:
        raise ValueError(f"Renderer produced no output for '{path}'")
    payload = data.encode("utf-8") if isinstance(data, str) else bytes(data)
    loop = asyncio.get_running_loop()
    await loop.run_in_executor(None, Path(path).write_bytes, payload)
    logger.debug(f"Wrote {len(payload)} bytes to {path}")


class SpriteGenerator:
    """
    One configured sprite pipeline.

    Strategy references in the configuration are resolved against the
    injected registries when the generator is built; their capabilities
    are checked by the stage that first uses them.

    Args:
        options: User options (merged over defaults) or a SpriteConfig
        registries: Strategy registries; defaults to the built-ins
    """

    def __init__(
        self,
        options: Options = None,
        *,
        registries: StrategyRegistries | None = None,
    ) -> None:
        self.config = merge_options(options)
        self.registries = registries or default_registries()
        self.layout_engine = self.registries.layouts.resolve(self.config.layout)
        self.compositor = self.registries.compositors.resolve(self.config.compositor)
        self.stylesheet_renderer = self.registries.stylesheets.resolve(self.config.stylesheet)

    @asynccontextmanager
    async def _stage(
        self,
        ctx: GenerationContext,
        name: str,
        error_class: type[SpriteGenerationError],
    ) -> AsyncIterator[None]:
        start = time.perf_counter()
        try:
            yield
        except SpriteGenerationError as e:
            logger.error(f"Generation {ctx.short_id}... failed in '{name}': {e}")
            raise
        except Exception as e:
            logger.error(
                f"Generation {ctx.short_id}... failed in '{name}': {e}",
                exc_info=True,
            )
            raise error_class(str(e) or type(e).__name__, stage=name) from e
        finally:
            duration_ms = (time.perf_counter() - start) * 1000
            ctx.record_timing(name, duration_ms)
            logger.debug(f"Stage '{name}': time={duration_ms:.1f}ms")

    async def resolve(self, ctx: GenerationContext) -> list[SourceDescriptor]:
        async with self._stage(ctx, "resolve", ResolutionError):
            sources = await resolve_sources(self.config.src)
        ctx.source_count = len(sources)
        return sources

    async def decode(
        self,
        ctx: GenerationContext,
        sources: Sequence[SourceDescriptor],
    ) -> list[Any]:
        async with self._stage(ctx, "decode", DecodeError):
            read_image = _capability(
                self.compositor, "read_image", "compositor", "decode", required=False
            )
            if read_image is None:
                return list(sources)
            return await bounded_gather(read_image, sources, limit=MAX_PARALLEL_FILE_READS)

    async def compute_layout(self, ctx: GenerationContext, images: Sequence[Any]) -> Any:
        async with self._stage(ctx, "layout", LayoutError):
            engine = _capability(
                self.layout_engine, "layout", "layout", "layout", allow_function=True
            )
            return await _invoke(engine, images, self.config.layout_options)

    async def prepare_destinations(self, ctx: GenerationContext) -> None:
        async with self._stage(ctx, "prepare", WriteError):
            await settle_pair(
                _ensure_parent(self.config.stylesheet_path),
                _ensure_parent(self.config.sprite_path),
            )

    async def render(self, ctx: GenerationContext, layout: Any) -> tuple[Any, Any]:
        async with self._stage(ctx, "render", RenderError):
            render_stylesheet = _capability(
                self.stylesheet_renderer, "render", "stylesheet", "render", allow_function=True
            )
            render_sprite = _capability(self.compositor, "render", "compositor", "render")
            return await settle_pair(
                _invoke(render_stylesheet, layout, self.config.stylesheet_options),
                _invoke(
                    render_sprite,
                    layout,
                    self.config.sprite_path,
                    self.config.compositor_options,
                ),
            )

    async def write(
        self,
        ctx: GenerationContext,
        stylesheet: str | bytes | None,
        sprite: bytes | None,
    ) -> None:
        async with self._stage(ctx, "write", WriteError):
            await settle_pair(
                _write_artifact(self.config.stylesheet_path, stylesheet),
                _write_artifact(self.config.sprite_path, sprite),
            )

    async def run(self) -> GenerationResult:
        """Execute every stage and return the rendered artifacts."""
        ctx = GenerationContext(config=self.config)
        logger.info(
            f"Sprite generation starting: execution_id={ctx.short_id}..., "
            f"layout={self.config.layout}, compositor={self.config.compositor}, "
            f"stylesheet={self.config.stylesheet}"
        )

        sources = await self.resolve(ctx)
        images = await self.decode(ctx, sources)
        layout = await self.compute_layout(ctx, images)
        await self.prepare_destinations(ctx)
        stylesheet, sprite = await self.render(ctx, layout)
        await self.write(ctx, stylesheet, sprite)

        logger.info(
            f"Sprite generation complete: execution_id={ctx.short_id}..., "
            f"sources={ctx.source_count}, duration={ctx.elapsed_ms:.1f}ms"
        )
        return GenerationResult(
            stylesheet=stylesheet,
            sprite=sprite,
            layout=layout,
            context=ctx,
        )

    def __repr__(self) -> str:
        return (
            f"SpriteGenerator(layout={self.config.layout}, "
            f"compositor={self.config.compositor}, stylesheet={self.config.stylesheet})"
        )


async def generate(
    options: Options = None,
    *,
    registries: StrategyRegistries | None = None,
) -> GenerationResult:
    """
    Generate a sprite image and stylesheet.

    Args:
        options: Sprite options; omitted fields take their defaults
        registries: Strategy registries; defaults to the built-ins

    Returns:
        GenerationResult with the rendered stylesheet and sprite

    Raises:
        SpriteGenerationError: Subclass naming the stage that failed
    """
    return await SpriteGenerator(options, registries=registries).run()


def generate_with_callback(
    options: Options,
    callback: GenerationCallback,
    *,
    registries: StrategyRegistries | None = None,
) -> asyncio.Task[GenerationResult]:
    """
    Schedule generate() and report its outcome to ``callback(error, result)``.

    Must be called from a running event loop. The returned task carries
    the same outcome the callback receives.
    """

    def _done(task: asyncio.Task[GenerationResult]) -> None:
        if task.cancelled():
            callback(asyncio.CancelledError(), None)
            return
        error = task.exception()
        callback(error, None if error is not None else task.result())

    task = asyncio.get_running_loop().create_task(generate(options, registries=registries))
    task.add_done_callback(_done)
    return task
