"""
Configuration Schemas for spritegen.

Pydantic models for the sprite configuration and application settings.

Every field accepts its snake_case name or the camelCase alias used by
existing sprite configuration files (``spritePath``, ``layoutOptions``,
``compressionLevel`` ...). Models are frozen: a configuration is an
immutable value, and merging user options over the defaults always builds
a new one.
"""

from __future__ import annotations

import posixpath
from collections.abc import Callable
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from spritegen.strategies.naming import name_to_class
from spritegen.strategies.registry import Named, as_strategy_ref

_OPTIONS_CONFIG = ConfigDict(
    alias_generator=to_camel,
    populate_by_name=True,
    frozen=True,
    extra="allow",
)


class LayoutOptions(BaseModel):
    """
    Options passed to the layout engine.

    Extra keys are kept for custom layout engines.
    """

    model_config = _OPTIONS_CONFIG

    padding: int = Field(0, ge=0, description="Pixels between neighbouring images")
    scaling: float = Field(1, gt=0, description="Scale factor applied to every image")


class CompositorOptions(BaseModel):
    """Options passed to the compositor's render step."""

    model_config = _OPTIONS_CONFIG

    compression_level: int = Field(6, ge=0, le=9, description="zlib level for PNG output")
    filter: str = Field("all", description="PNG row filter hint")


class StylesheetOptions(BaseModel):
    """Options passed to the stylesheet renderer."""

    model_config = ConfigDict(**_OPTIONS_CONFIG, arbitrary_types_allowed=True)

    sprite_path: str | None = Field(None, description="URL of the sprite as seen from the stylesheet")
    prefix: str = Field("", description="Prefix prepended to every sprite name")
    name_mapping: Callable[[str], str] = Field(
        name_to_class, description="Maps a source path to a sprite name"
    )
    pixel_ratio: float = Field(1, gt=0, description="Device pixel ratio of the sprite")


class SpriteConfig(BaseModel):
    """
    Full configuration of one sprite generation.

    ``layout``, ``compositor`` and ``stylesheet`` hold strategy references:
    a ``Named`` built from a string, or a ``Custom`` wrapping any other
    value supplied by the caller.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        arbitrary_types_allowed=True,
    )

    src: list[Any] = Field(default_factory=list, description="Glob patterns or literal sources")
    sprite_path: Path | None = None
    stylesheet_path: Path | None = None
    layout: Any = Named("vertical")
    compositor: Any = Named("canvas")
    stylesheet: Any = Named("stylus")
    layout_options: LayoutOptions = Field(default_factory=LayoutOptions)
    compositor_options: CompositorOptions = Field(default_factory=CompositorOptions)
    stylesheet_options: StylesheetOptions = Field(default_factory=StylesheetOptions)

    @field_validator("src", mode="before")
    @classmethod
    def _coerce_src(cls, value: Any) -> Any:
        if isinstance(value, str | Path):
            return [value]
        return value

    @field_validator("layout", "compositor", "stylesheet", mode="before")
    @classmethod
    def _coerce_strategy(cls, value: Any) -> Any:
        return as_strategy_ref(value)

    def with_derived_sprite_url(self) -> SpriteConfig:
        """
        Fill ``stylesheet_options.sprite_path`` when it was not given.

        The sprite URL is the sprite path relative to the stylesheet's
        directory, or the sprite path itself when there is no stylesheet.
        """
        if self.stylesheet_options.sprite_path is not None or self.sprite_path is None:
            return self

        sprite = Path(self.sprite_path).as_posix()
        if self.stylesheet_path is not None:
            base = Path(self.stylesheet_path).parent.as_posix() or "."
            sprite = posixpath.relpath(sprite, base)

        options = self.stylesheet_options.model_copy(update={"sprite_path": sprite})
        return self.model_copy(update={"stylesheet_options": options})


class AppSettings(BaseModel):
    """
    Application settings for the command line and the web app.

    Populated from ``SPRITEGEN_*`` environment variables by
    ``spritegen.config.service.get_settings``.
    """

    service_name: str = "spritegen"
    environment: str = "development"
    debug: bool = False
    log_level: str = "INFO"

    # Web app
    config_file: Path | None = Field(None, description="YAML/JSON sprite configuration")
    static_dir: Path = Field(Path("public"), description="Directory served by the web app")
    static_mount: str = "/static"
