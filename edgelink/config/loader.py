"""Configuration loading utilities."""

import json
from pathlib import Path
from typing import Any

from edgelink.config.schema import Settings
from edgelink.utils.exceptions import ConfigurationError


def get_config_path() -> Path:
    """Get the default configuration file path."""
    return Path.home() / ".edgelink" / "config.json"


def load_config(config_path: Path | None = None) -> Settings:
    """
    Load configuration from file or fall back to environment and defaults.

    Args:
        config_path: Optional path to config file. Uses default if not provided.

    Returns:
        Loaded settings object.
    """
    path = config_path or get_config_path()

    if path.exists():
        try:
            with open(path) as f:
                data = json.load(f)
            # Init kwargs win over EDGELINK_* variables; env fills what the file omits
            return Settings(**convert_keys(data))
        except (json.JSONDecodeError, ValueError, TypeError) as e:
            raise ConfigurationError(
                f"Failed to load config from {path}: {e}. "
                "Fix the file or remove it to fall back to environment settings.",
                setting=str(path),
            ) from e

    return Settings()


def save_config(settings: Settings, config_path: Path | None = None) -> Path:
    """
    Save configuration to file. The bearer token is never persisted.

    Args:
        settings: Settings to save.
        config_path: Optional path to save to. Uses default if not provided.
    """
    path = config_path or get_config_path()
    path.parent.mkdir(parents=True, exist_ok=True)

    data = convert_to_camel(settings.model_dump(exclude={"token"}))
    path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")
    return path


def convert_keys(data: Any) -> Any:
    """Convert camelCase keys to snake_case for Pydantic."""
    if isinstance(data, dict):
        return {camel_to_snake(k): convert_keys(v) for k, v in data.items()}
    if isinstance(data, list):
        return [convert_keys(item) for item in data]
    return data


def convert_to_camel(data: Any) -> Any:
    """Convert snake_case keys to camelCase."""
    if isinstance(data, dict):
        return {snake_to_camel(k): convert_to_camel(v) for k, v in data.items()}
    if isinstance(data, list):
        return [convert_to_camel(item) for item in data]
    return data


def camel_to_snake(name: str) -> str:
    """Convert camelCase to snake_case."""
    result = []
    for i, char in enumerate(name):
        if char.isupper() and i > 0:
            result.append("_")
        result.append(char.lower())
    return "".join(result)


def snake_to_camel(name: str) -> str:
    """Convert snake_case to camelCase."""
    components = name.split("_")
    return components[0] + "".join(x.title() for x in components[1:])
