"""
spritegen - development web app

Serves a static directory and regenerates the sprite configured in
``SPRITEGEN_CONFIG_FILE`` whenever a request arrives after its sources
changed.

Run:
    SPRITEGEN_CONFIG_FILE=sprite.yaml uvicorn spritegen.app.main:app --reload
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from spritegen import __version__
from spritegen.config.schemas import AppSettings
from spritegen.config.service import get_settings, load_config_file
from spritegen.errors import SpriteGenerationError

from .middleware import SpriteMiddleware

logger = logging.getLogger(__name__)


async def server_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Report a failed regeneration instead of serving stale assets.

    Middleware errors bypass route-level exception handlers, so this is
    registered for ``Exception`` and runs in Starlette's server error
    middleware.
    """
    if not isinstance(exc, SpriteGenerationError):
        return JSONResponse(status_code=500, content={"error": "internal_error"})

    logger.error(f"Sprite generation failed for {request.url.path}: {exc}")
    return JSONResponse(
        status_code=500,
        content={"error": "sprite_generation_failed", "stage": exc.stage, "detail": str(exc)},
    )


def create_app(
    settings: AppSettings | None = None,
    options: dict[str, Any] | None = None,
) -> FastAPI:
    """
    Build the web app.

    Args:
        settings: Application settings (read from the environment if omitted)
        options: Sprite options; loaded from ``settings.config_file`` if omitted
    """
    settings = settings or get_settings()
    if options is None and settings.config_file is not None:
        options = load_config_file(settings.config_file)

    app = FastAPI(
        title="spritegen",
        description="Sprite sheet generation with request-time regeneration",
        version=__version__,
        debug=settings.debug,
    )

    if options is not None:
        app.add_middleware(SpriteMiddleware, options=options)
        app.add_exception_handler(Exception, server_error_handler)
        logger.info(f"Sprite middleware enabled (config_file={settings.config_file})")
    else:
        logger.warning("No sprite configuration given; serving static files only")

    @app.get("/health", tags=["health"])
    async def health_check() -> dict[str, Any]:
        return {
            "status": "healthy",
            "service": settings.service_name,
            "version": __version__,
            "sprite": options is not None,
        }

    app.mount(
        settings.static_mount,
        StaticFiles(directory=settings.static_dir, check_dir=False),
        name="static",
    )
    return app


def _create_default_app() -> FastAPI:
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    return create_app(settings)


app = _create_default_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "spritegen.app.main:app",
        host="0.0.0.0",
        port=8000,
        reload=get_settings().debug,
    )
