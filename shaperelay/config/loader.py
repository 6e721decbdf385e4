"""Configuration loading utilities."""

import json
import re
from pathlib import Path
from typing import Any

from loguru import logger
from pydantic import ValidationError

from shaperelay.config.schema import Config


class ConfigError(Exception):
    """Raised when configuration is missing or invalid."""


def get_config_path() -> Path:
    """Get the default configuration file path."""
    return Path.home() / ".shaperelay" / "config.json"


def camel_to_snake(name: str) -> str:
    return re.sub(r"(?<!^)(?=[A-Z])", "_", name).lower()


def convert_keys(data: Any) -> Any:
    """Convert camelCase keys to snake_case recursively."""
    if isinstance(data, dict):
        return {camel_to_snake(k): convert_keys(v) for k, v in data.items()}
    if isinstance(data, list):
        return [convert_keys(item) for item in data]
    return data


def load_config(config_path: Path | None = None) -> Config:
    """
    Load configuration from a JSON file and the environment.

    Values in the file take precedence; ``SHAPERELAY_*`` environment
    variables fill anything the file leaves unset.

    Args:
        config_path: Optional path to the config file. Uses the default if
            not provided.

    Returns:
        Loaded configuration object.

    Raises:
        ConfigError: If the file cannot be parsed or fails validation.
    """
    path = config_path or get_config_path()
    data: dict[str, Any] = {}

    if path.exists():
        try:
            data = convert_keys(json.loads(path.read_text(encoding="utf-8")))
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigError(f"Failed to load config from {path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"Config file {path} must contain a JSON object")
        logger.debug(f"Loaded config from {path}")

    try:
        return Config(**data)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e


def validate_required(config: Config) -> Config:
    """
    Ensure every setting needed to start the relay is present.

    Raises:
        ConfigError: Naming the missing settings.
    """
    missing = config.missing_settings()
    if missing:
        raise ConfigError(f"Missing required settings: {', '.join(missing)}")
    return config
