"""Configuration module for ShapeRelay."""

from shaperelay.config.schema import Config
from shaperelay.config.loader import (
    ConfigError,
    load_config,
    validate_required,
    get_config_path,
)

__all__ = ["Config", "ConfigError", "load_config", "validate_required", "get_config_path"]
