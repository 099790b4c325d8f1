"""
Request-time sprite regeneration for Starlette / FastAPI apps.

The middleware regenerates the sprite before a request is handled, but
only when the sources or configuration changed since the last successful
generation. It never produces a response itself: it always hands the
request on with ``call_next``. Failures are raised into the framework's
error handling (exception handlers, ServerErrorMiddleware) instead of
continuing the request.

Usage:
    app = FastAPI()

    # Function form
    app.middleware("http")(sprite_middleware(options))

    # Class form
    app.add_middleware(SpriteMiddleware, options=options)
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from spritegen.pipeline.cache import (
    ChangeDetector,
    FingerprintStore,
    RegenerationGate,
)
from spritegen.pipeline.executor import Options, SpriteGenerator
from spritegen.strategies.registry import StrategyRegistries

logger = logging.getLogger(__name__)

SpriteHandler = Callable[[Request, RequestResponseEndpoint], Awaitable[Response]]


def build_gate(
    options: Options,
    *,
    registries: StrategyRegistries | None = None,
    store: FingerprintStore | None = None,
) -> RegenerationGate:
    """Build the generator/detector pair for one configured sprite."""
    generator = SpriteGenerator(options, registries=registries)
    detector = ChangeDetector(generator.config, store=store, registries=generator.registries)
    return RegenerationGate(generator, detector)


def sprite_middleware(
    options: Options,
    *,
    registries: StrategyRegistries | None = None,
    store: FingerprintStore | None = None,
) -> SpriteHandler:
    """
    Build an ``http`` middleware function for one sprite configuration.

    Args:
        options: Sprite options, as accepted by generate()
        registries: Strategy registries; defaults to the built-ins
        store: Fingerprint store; defaults to a private in-memory store
    """
    gate = build_gate(options, registries=registries, store=store)

    async def handler(request: Request, call_next: RequestResponseEndpoint) -> Response:
        await gate.ensure_fresh()
        return await call_next(request)

    handler.gate = gate  # type: ignore[attr-defined]
    return handler


class SpriteMiddleware(BaseHTTPMiddleware):
    """
    Class form of sprite_middleware() for ``app.add_middleware``.

    Example:
        app.add_middleware(
            SpriteMiddleware,
            options={"src": ["icons/*.png"], "spritePath": "public/sprite.png"},
        )
    """

    def __init__(
        self,
        app: ASGIApp,
        options: Options = None,
        *,
        registries: StrategyRegistries | None = None,
        store: FingerprintStore | None = None,
    ) -> None:
        super().__init__(app)
        self.gate = build_gate(options, registries=registries, store=store)

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        await self.gate.ensure_fresh()
        return await call_next(request)
