"""
Tests for change detection and the regeneration gate.
"""

import asyncio
from unittest.mock import call, patch

import pytest

from spritegen.config import merge_options
from spritegen.errors import LayoutError
from spritegen.pipeline import (
    ChangeDetector,
    GateState,
    InMemoryFingerprintStore,
    RegenerationGate,
    SourceDescriptor,
    SpriteGenerator,
)
from spritegen.pipeline.cache import FingerprintStore, config_digest, content_digest, describe
from spritegen.strategies import Custom, Named

# =============================================================================
# Fingerprint helpers
# =============================================================================


class TestDescribe:
    """Configuration descriptions."""

    def test_strategy_references(self):
        assert describe(Named("packed")) == "named:packed"
        assert describe(Custom(len)) == "custom:builtins.len"

    def test_source_descriptor_by_path(self):
        assert describe(SourceDescriptor(path="a.png", data=b"x")) == "source:a.png"

    def test_config_digest_changes_with_options(self):
        first = config_digest(merge_options({"layoutOptions": {"padding": 1}}))
        second = config_digest(merge_options({"layoutOptions": {"padding": 2}}))

        assert first != second
        assert first == config_digest(merge_options({"layoutOptions": {"padding": 1}}))

    def test_content_digest(self):
        assert content_digest(b"abc") == content_digest(bytearray(b"abc"))
        assert content_digest(b"abc") != content_digest(b"abd")


class TestInMemoryFingerprintStore:
    """Baseline storage."""

    def test_satisfies_protocol(self):
        assert isinstance(InMemoryFingerprintStore(), FingerprintStore)

    @pytest.mark.asyncio
    async def test_get_set(self):
        store = InMemoryFingerprintStore()

        assert await store.get("k") is None
        await store.set("k", "fp")
        assert await store.get("k") == "fp"
        assert len(store) == 1

    @pytest.mark.asyncio
    async def test_bounded(self):
        store = InMemoryFingerprintStore(maxsize=2)

        for key in ("a", "b", "c"):
            await store.set(key, key)

        assert len(store) == 2
        assert await store.get("a") is None


# =============================================================================
# Change detector
# =============================================================================


class TestChangeDetector:
    """detect() / register() behavior."""

    @pytest.mark.asyncio
    async def test_first_run_detects_change(self, icon_dir):
        detector = ChangeDetector({"src": [str(icon_dir / "*.png")]})

        assert await detector.detect() is True

    @pytest.mark.asyncio
    async def test_register_then_unchanged(self, icon_dir):
        detector = ChangeDetector({"src": [str(icon_dir / "*.png")]})

        await detector.register()

        assert await detector.detect() is False
        assert await detector.detect() is False

    @pytest.mark.asyncio
    async def test_content_change_detected(self, icon_dir, png):
        detector = ChangeDetector({"src": [str(icon_dir / "*.png")]})
        await detector.register()

        (icon_dir / "a.png").write_bytes(png((16, 16), (0, 255, 0, 255)))

        assert await detector.detect() is True

    @pytest.mark.asyncio
    async def test_new_file_detected(self, icon_dir, make_png):
        detector = ChangeDetector({"src": [str(icon_dir / "*.png")]})
        await detector.register()

        make_png("icons/c.png")

        assert await detector.detect() is True

    @pytest.mark.asyncio
    async def test_removed_file_detected(self, icon_dir):
        detector = ChangeDetector({"src": [str(icon_dir / "*.png")]})
        await detector.register()

        (icon_dir / "b.png").unlink()

        assert await detector.detect() is True

    @pytest.mark.asyncio
    async def test_configuration_change_detected(self, icon_dir):
        store = InMemoryFingerprintStore()
        first = ChangeDetector({"src": [str(icon_dir / "*.png")]}, store=store, key="site")
        await first.register()

        second = ChangeDetector(
            {"src": [str(icon_dir / "*.png")], "layout": "horizontal"},
            store=store,
            key="site",
        )

        assert await second.detect() is True

    @pytest.mark.asyncio
    async def test_detect_does_not_move_baseline(self, icon_dir):
        detector = ChangeDetector({"src": [str(icon_dir / "*.png")]})

        await detector.detect()

        assert await detector.detect() is True

    @pytest.mark.asyncio
    async def test_separate_configurations_do_not_share_baseline(self, icon_dir):
        store = InMemoryFingerprintStore()
        vertical = ChangeDetector({"src": [str(icon_dir / "*.png")]}, store=store)
        horizontal = ChangeDetector(
            {"src": [str(icon_dir / "*.png")], "layout": "horizontal"}, store=store
        )

        await vertical.register()

        assert await vertical.detect() is False
        assert await horizontal.detect() is True

    @pytest.mark.asyncio
    async def test_template_file_change_detected(self, icon_dir, tmp_path):
        template = tmp_path / "names.yaml"
        template.write_text('sprite: "{name}"\n')
        detector = ChangeDetector({"src": [str(icon_dir / "*.png")], "stylesheet": str(template)})
        await detector.register()

        template.write_text('sprite: "{name};"\n')

        assert await detector.detect() is True


# =============================================================================
# Regeneration gate
# =============================================================================


def build(options):
    generator = SpriteGenerator(options)
    return RegenerationGate(generator, ChangeDetector(generator.config))


def failing_layout(images, options):
    raise RuntimeError("layout exploded")


class TestRegenerationGate:
    """ensure_fresh() behavior."""

    @pytest.mark.asyncio
    async def test_generates_once_until_change(self, icon_dir, png):
        gate = build({"src": [str(icon_dir / "*.png")]})

        first = await gate.ensure_fresh()
        second = await gate.ensure_fresh()

        assert first is not None
        assert second is None
        assert gate.generation_count == 1
        assert gate.state is GateState.IDLE

        (icon_dir / "b.png").write_bytes(png((16, 16), (0, 0, 0, 255)))

        assert await gate.ensure_fresh() is not None
        assert gate.generation_count == 2

    @pytest.mark.asyncio
    async def test_failure_keeps_baseline(self, icon_dir):
        gate = build({"src": [str(icon_dir / "*.png")], "layout": failing_layout})

        with pytest.raises(LayoutError):
            await gate.ensure_fresh()

        assert gate.state is GateState.IDLE
        assert gate.generation_count == 0
        assert await gate.detector.detect() is True

    @pytest.mark.asyncio
    async def test_template_edit_regenerates(self, icon_dir, tmp_path):
        template = tmp_path / "names.yaml"
        template.write_text('sprite: "{name} "\n')
        output = tmp_path / "out" / "names.txt"
        gate = build({
            "src": [str(icon_dir / "*.png")],
            "stylesheet": str(template),
            "stylesheetPath": str(output),
        })

        await gate.ensure_fresh()
        assert output.read_text() == "a b "

        template.write_text('sprite: "{name};"\n')

        assert await gate.ensure_fresh() is not None
        assert output.read_text() == "a;b;"
        assert gate.generation_count == 2

    @pytest.mark.asyncio
    async def test_concurrent_checks_generate_once(self, icon_dir):
        gate = build({"src": [str(icon_dir / "*.png")]})

        results = await asyncio.gather(*(gate.ensure_fresh() for _ in range(3)))

        assert gate.generation_count == 1
        assert sum(result is not None for result in results) == 1
        assert gate.state is GateState.IDLE

    @pytest.mark.asyncio
    async def test_state_transitions(self, icon_dir):
        gate = build({"src": [str(icon_dir / "*.png")]})

        with patch.object(gate, "_transition", wraps=gate._transition) as transition:
            await gate.ensure_fresh()
            await gate.ensure_fresh()

        assert transition.call_args_list == [
            call(GateState.CHECKING),
            call(GateState.CHANGED),
            call(GateState.REGENERATING),
            call(GateState.REGISTERING),
            call(GateState.IDLE),
            call(GateState.CHECKING),
            call(GateState.UNCHANGED),
            call(GateState.IDLE),
        ]
