from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from collections.abc import Sequence
from typing import Any

from pydantic.alias_generators import to_camel

from spritegen.config.service import get_settings, load_config_file
from spritegen.errors import SpriteGenerationError
from spritegen.pipeline.executor import generate

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="spritegen",
        description="Combine images into a sprite and generate a stylesheet for it.",
    )
    parser.add_argument("src", nargs="*", help="Source image glob patterns")
    parser.add_argument("--config", help="YAML/JSON file with sprite options")
    parser.add_argument("-o", "--sprite-path", help="Output path of the sprite image")
    parser.add_argument("-s", "--stylesheet-path", help="Output path of the stylesheet")
    parser.add_argument("-l", "--layout", help="Layout engine (vertical, horizontal, diagonal, packed)")
    parser.add_argument("-c", "--compositor", help="Compositor (canvas, pillow)")
    parser.add_argument(
        "-t", "--stylesheet", help="Stylesheet (stylus, less, sass, scss, css, prefixed-css, json) or template file"
    )
    parser.add_argument("-p", "--padding", type=int, help="Padding between images in pixels")
    parser.add_argument("--scaling", type=float, help="Scale factor for every image")
    parser.add_argument("--compression-level", type=int, help="PNG compression level (0-9)")
    parser.add_argument("--prefix", help="Prefix for sprite names in the stylesheet")
    parser.add_argument("--sprite-url", help="Sprite URL written into the stylesheet")
    parser.add_argument("--pixel-ratio", type=float, help="Device pixel ratio of the sprite")
    parser.add_argument("--log-level", help="Logging level (default from SPRITEGEN_LOG_LEVEL)")
    return parser


def _camel_keys(options: dict[str, Any]) -> dict[str, Any]:
    """Rename snake_case keys so file options and flags use one spelling."""
    renamed = {}
    for key, value in options.items():
        if isinstance(value, dict):
            value = _camel_keys(value)
        renamed[to_camel(key) if "_" in key else key] = value
    return renamed


def options_from_args(args: argparse.Namespace) -> dict[str, Any]:
    """Overlay command line flags on the options from ``--config``."""
    options = _camel_keys(load_config_file(args.config)) if args.config else {}

    if args.src:
        options["src"] = list(args.src)
    for flag, key in (
        ("sprite_path", "spritePath"),
        ("stylesheet_path", "stylesheetPath"),
        ("layout", "layout"),
        ("compositor", "compositor"),
        ("stylesheet", "stylesheet"),
    ):
        value = getattr(args, flag)
        if value is not None:
            options[key] = value

    nested = (
        ("layoutOptions", {"padding": args.padding, "scaling": args.scaling}),
        ("compositorOptions", {"compressionLevel": args.compression_level}),
        (
            "stylesheetOptions",
            {"prefix": args.prefix, "spritePath": args.sprite_url, "pixelRatio": args.pixel_ratio},
        ),
    )
    for key, values in nested:
        given = {name: value for name, value in values.items() if value is not None}
        if given:
            options[key] = {**options.get(key, {}), **given}

    return options


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    logging.basicConfig(
        level=(args.log_level or get_settings().log_level).upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        options = options_from_args(args)
        if not options.get("src"):
            parser.error("no source patterns given (pass them as arguments or in --config)")
        if not options.get("spritePath") and not options.get("stylesheetPath"):
            logger.warning("Neither a sprite path nor a stylesheet path is set; nothing will be written")
        result = asyncio.run(generate(options))
    except SpriteGenerationError as e:
        print(f"spritegen: {e}", file=sys.stderr)
        return 1

    logger.info(
        f"Generated sprite from {result.context.source_count} source(s) "
        f"in {result.context.elapsed_ms:.1f}ms"
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
