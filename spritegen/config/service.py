"""
Configuration access for spritegen.

- merge_options(): user options over the immutable defaults
- load_config_file(): sprite configuration from a YAML or JSON file
- get_settings(): application settings from the environment
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from spritegen.errors import ConfigurationError

from .schemas import AppSettings, SpriteConfig

logger = logging.getLogger(__name__)

DEFAULT_CONFIG = SpriteConfig()


def merge_options(user_options: SpriteConfig | Mapping[str, Any] | None = None) -> SpriteConfig:
    """
    Merge user options over the defaults.

    Top-level fields replace their defaults; the three nested option maps
    (layout, compositor, stylesheet) are merged key by key, so a partial
    ``layoutOptions`` keeps every default it does not mention. The result
    is a new value; ``DEFAULT_CONFIG`` is never modified.

    Raises:
        ConfigurationError: If an option has an invalid value
    """
    if user_options is None:
        return DEFAULT_CONFIG.with_derived_sprite_url()
    if isinstance(user_options, SpriteConfig):
        return user_options.with_derived_sprite_url()

    try:
        config = SpriteConfig.model_validate(dict(user_options))
    except ValidationError as e:
        raise ConfigurationError(f"Invalid sprite options: {e}") from e
    return config.with_derived_sprite_url()


def load_config_file(path: str | Path) -> dict[str, Any]:
    """
    Load raw sprite options from a YAML or JSON file.

    Relative ``src`` patterns and output paths are kept as written, so
    they resolve against the current working directory.

    Raises:
        ConfigurationError: If the file is unreadable or not a mapping
    """
    path = Path(path)
    try:
        with path.open(encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        logger.error(f"Failed to load config file {path}: {e}")
        raise ConfigurationError(f"Cannot load config file '{path}': {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file '{path}' must contain a mapping")
    logger.debug(f"Loaded sprite config from {path}: {sorted(data)}")
    return data


@lru_cache()
def get_settings() -> AppSettings:
    """
    Get application settings from environment.

    Uses lru_cache for singleton pattern.
    """
    config_file = os.getenv("SPRITEGEN_CONFIG_FILE")
    return AppSettings(
        service_name=os.getenv("SPRITEGEN_SERVICE_NAME", "spritegen"),
        environment=os.getenv("SPRITEGEN_ENVIRONMENT", "development"),
        debug=os.getenv("SPRITEGEN_DEBUG", "false").lower() == "true",
        log_level=os.getenv("SPRITEGEN_LOG_LEVEL", "INFO").upper(),
        config_file=Path(config_file) if config_file else None,
        static_dir=Path(os.getenv("SPRITEGEN_STATIC_DIR", "public")),
        static_mount=os.getenv("SPRITEGEN_STATIC_MOUNT", "/static"),
    )
