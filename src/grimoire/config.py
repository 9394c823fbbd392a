"""grimoire configuration and storage locations."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from grimoire.errors import ConfigError
from grimoire.models.profile import ProfileGlobalConfig

CONFIG_FILE_NAME = "profile-config.json"


def get_grimoire_dir() -> Path:
    """Get the grimoire home directory.

    Returns:
        Path from GRIMOIRE_HOME, or ~/.grimoire/
    """
    override = os.environ.get("GRIMOIRE_HOME")
    grimoire_dir = Path(override).expanduser() if override else Path.home() / ".grimoire"
    grimoire_dir.mkdir(parents=True, exist_ok=True)
    return grimoire_dir


def get_config_file() -> Path:
    """Get path to config file.

    Returns:
        Path to ~/.grimoire/profile-config.json
    """
    return get_grimoire_dir() / CONFIG_FILE_NAME


def load_config() -> dict[str, Any]:
    """Load configuration from file.

    Returns:
        Dictionary of configuration values, or empty dict if file doesn't exist.

    Raises:
        ConfigError: If the file is not a JSON object.
    """
    config_file = get_config_file()
    if not config_file.exists():
        return {}

    try:
        with config_file.open("r") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigError(f"Failed to read {config_file}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Config file {config_file} must contain a JSON object")
    return data


def save_config(config: dict[str, Any]) -> None:
    """Save configuration to file.

    Args:
        config: Dictionary of configuration values to save.
    """
    config_file = get_config_file()
    with config_file.open("w") as f:
        json.dump(config, f, indent=2)


def get_config_value(key: str, default: Any = None) -> Any:
    """Get a single configuration value."""
    return load_config().get(key, default)


def set_config_value(key: str, value: Any) -> None:
    """Set a single configuration value.

    Values "true" and "false" are stored as booleans; values that look like
    JSON arrays or objects are stored parsed.
    """
    if isinstance(value, str):
        stripped = value.strip()
        if stripped.lower() in ("true", "false"):
            value = stripped.lower() == "true"
        elif stripped[:1] in ("[", "{"):
            try:
                value = json.loads(stripped)
            except json.JSONDecodeError as e:
                raise ConfigError(f"Invalid JSON value for {key}: {e}") from e
    config = load_config()
    config[key] = value
    save_config(config)


def load_profile_config() -> ProfileGlobalConfig:
    """Load the profile-related settings from the config file."""
    try:
        return ProfileGlobalConfig.model_validate(load_config())
    except ValidationError as e:
        raise ConfigError(f"Invalid profile settings in {get_config_file()}: {e}") from e
