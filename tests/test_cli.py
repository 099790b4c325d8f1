"""
Tests for the spritegen command line.
"""

import pytest
from PIL import Image

from spritegen.cli import build_parser, main, options_from_args


class TestOptionsFromArgs:
    """Flag and config file merging."""

    def test_flags(self):
        args = build_parser().parse_args([
            "icons/*.png",
            "-o", "dist/sprite.png",
            "-s", "dist/sprite.less",
            "-t", "less",
            "-p", "4",
            "--pixel-ratio", "2",
        ])

        options = options_from_args(args)

        assert options == {
            "src": ["icons/*.png"],
            "spritePath": "dist/sprite.png",
            "stylesheetPath": "dist/sprite.less",
            "stylesheet": "less",
            "layoutOptions": {"padding": 4},
            "stylesheetOptions": {"pixelRatio": 2.0},
        }

    def test_flags_override_config_file(self, tmp_path):
        config = tmp_path / "sprite.yaml"
        config.write_text(
            "src: [a/*.png]\n"
            "layout: packed\n"
            "layout_options:\n"
            "  padding: 2\n"
            "  scaling: 0.5\n"
        )
        args = build_parser().parse_args(["--config", str(config), "-p", "8"])

        options = options_from_args(args)

        assert options["src"] == ["a/*.png"]
        assert options["layout"] == "packed"
        assert options["layoutOptions"] == {"padding": 8, "scaling": 0.5}


class TestMain:
    """main() exit codes and outputs."""

    def test_generates_files(self, icon_dir, tmp_path):
        sprite = tmp_path / "dist" / "sprite.png"
        stylesheet = tmp_path / "dist" / "sprite.scss"

        code = main([
            str(icon_dir / "*.png"),
            "-o", str(sprite),
            "-s", str(stylesheet),
            "-t", "scss",
            "-l", "horizontal",
        ])

        assert code == 0
        with Image.open(sprite) as image:
            assert image.size == (32, 16)
        assert "$b: 16px 0px -16px 0px" in stylesheet.read_text()

    def test_generation_error_exit_code(self, icon_dir, capsys):
        code = main([str(icon_dir / "*.png"), "-l", "spiral"])

        assert code == 1
        assert "spiral" in capsys.readouterr().err

    def test_invalid_option_exit_code(self, icon_dir, capsys):
        code = main([str(icon_dir / "*.png"), "--compression-level", "12"])

        assert code == 1
        assert "[configure]" in capsys.readouterr().err

    def test_no_sources(self):
        with pytest.raises(SystemExit) as exc_info:
            main([])

        assert exc_info.value.code == 2
