"""
Tests for request-time sprite regeneration.

Uses FastAPI's TestClient to drive the middleware through real requests.
"""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from spritegen.app import SpriteMiddleware, sprite_middleware
from spritegen.app.main import create_app
from spritegen.config.schemas import AppSettings
from spritegen.errors import LayoutError
from spritegen.pipeline import InMemoryFingerprintStore
from spritegen.strategies.compositor.pillow import PillowCompositor


class CountingCompositor(PillowCompositor):
    """Pillow compositor that counts completed renders."""

    def __init__(self):
        self.renders = 0

    async def render(self, layout, sprite_path, options):
        data = await super().render(layout, sprite_path, options)
        self.renders += 1
        return data


def failing_layout(images, options):
    raise RuntimeError("layout exploded")


@pytest.fixture
def sprite_options(icon_dir, tmp_path):
    return {
        "src": [str(icon_dir / "*.png")],
        "spritePath": str(tmp_path / "public" / "sprite.png"),
        "stylesheetPath": str(tmp_path / "public" / "sprite.css"),
        "stylesheet": "css",
    }


def build_app(middleware):
    app = FastAPI()
    app.middleware("http")(middleware)

    @app.get("/")
    async def index():
        return {"ok": True}

    return app


# =============================================================================
# Function form
# =============================================================================


class TestSpriteMiddlewareFunction:
    """sprite_middleware() as an http middleware."""

    def test_generates_before_first_request(self, sprite_options, tmp_path):
        middleware = sprite_middleware(sprite_options)

        with TestClient(build_app(middleware)) as client:
            response = client.get("/")

        assert response.status_code == 200
        assert response.json() == {"ok": True}
        assert (tmp_path / "public" / "sprite.png").exists()
        assert ".a {" in (tmp_path / "public" / "sprite.css").read_text()

    def test_unchanged_sources_generate_once(self, sprite_options):
        compositor = CountingCompositor()
        middleware = sprite_middleware({**sprite_options, "compositor": compositor})

        with TestClient(build_app(middleware)) as client:
            client.get("/")
            client.get("/")

        assert compositor.renders == 1
        assert middleware.gate.generation_count == 1

    def test_changed_sources_regenerate(self, sprite_options, icon_dir, png):
        compositor = CountingCompositor()
        middleware = sprite_middleware({**sprite_options, "compositor": compositor})

        with TestClient(build_app(middleware)) as client:
            client.get("/")
            (icon_dir / "a.png").write_bytes(png((16, 16), (0, 255, 0, 255)))
            client.get("/")
            client.get("/")

        assert compositor.renders == 2

    def test_shared_store_skips_known_inputs(self, sprite_options):
        store = InMemoryFingerprintStore()
        compositor = CountingCompositor()
        options = {**sprite_options, "compositor": compositor}

        with TestClient(build_app(sprite_middleware(options, store=store))) as client:
            client.get("/")

        restarted = sprite_middleware(options, store=store)
        with TestClient(build_app(restarted)) as client:
            client.get("/")

        assert compositor.renders == 1
        assert restarted.gate.generation_count == 0

    def test_failure_raised_into_framework(self, sprite_options):
        middleware = sprite_middleware({**sprite_options, "layout": failing_layout})

        with TestClient(build_app(middleware)) as client:
            with pytest.raises(LayoutError) as exc_info:
                client.get("/")

        assert exc_info.value.stage == "layout"
        assert middleware.gate.generation_count == 0


# =============================================================================
# Class form and the web app
# =============================================================================


class TestSpriteMiddlewareClass:
    """SpriteMiddleware with app.add_middleware."""

    def test_generates_once(self, sprite_options):
        compositor = CountingCompositor()
        app = FastAPI()
        app.add_middleware(SpriteMiddleware, options={**sprite_options, "compositor": compositor})

        @app.get("/")
        async def index():
            return {"ok": True}

        with TestClient(app) as client:
            assert client.get("/").status_code == 200
            assert client.get("/").status_code == 200

        assert compositor.renders == 1


class TestCreateApp:
    """The development web app."""

    def test_health_and_static_files(self, sprite_options, tmp_path):
        settings = AppSettings(static_dir=tmp_path / "public")

        with TestClient(create_app(settings, sprite_options)) as client:
            health = client.get("/health")
            sprite = client.get("/static/sprite.png")
            stylesheet = client.get("/static/sprite.css")

        assert health.json()["status"] == "healthy"
        assert health.json()["sprite"] is True
        assert sprite.status_code == 200
        assert sprite.content.startswith(b"\x89PNG")
        assert "url('sprite.png')" in stylesheet.text

    def test_generation_failure_returns_500(self, sprite_options, tmp_path):
        settings = AppSettings(static_dir=tmp_path)
        app = create_app(settings, {**sprite_options, "layout": failing_layout})

        with TestClient(app, raise_server_exceptions=False) as client:
            response = client.get("/health")

        assert response.status_code == 500
        assert response.json()["error"] == "sprite_generation_failed"
        assert response.json()["stage"] == "layout"
        assert "layout exploded" in response.json()["detail"]

    def test_without_sprite_configuration(self, tmp_path):
        (tmp_path / "hello.txt").write_text("hi")

        with TestClient(create_app(AppSettings(static_dir=tmp_path))) as client:
            assert client.get("/health").json()["sprite"] is False
            assert client.get("/static/hello.txt").text == "hi"

    def test_options_from_config_file(self, icon_dir, tmp_path):
        config_file = tmp_path / "sprite.yaml"
        config_file.write_text(
            f"src:\n  - {icon_dir}/*.png\nspritePath: {tmp_path}/out/sprite.png\n"
        )
        settings = AppSettings(static_dir=tmp_path, config_file=config_file)

        with TestClient(create_app(settings)) as client:
            assert client.get("/health").status_code == 200

        assert (tmp_path / "out" / "sprite.png").exists()
