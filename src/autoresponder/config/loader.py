from copy import deepcopy
from pathlib import Path
from typing import Any, Dict

import yaml

DEFAULT_CONFIG_PATH = Path("autoresponder.config.yaml")

BASE_DEFAULTS: Dict[str, Dict[str, Any]] = {
    "storage": {
        "sqlite_path": "autoresponder.db",
    },
    "engine": {
        "log_capacity": 500,
        "default_enabled": True,
    },
    "logging": {
        "level": "INFO",
    },
}


def _merge_defaults(config: Dict[str, Any]) -> Dict[str, Any]:
    """Fill missing sections and keys from the built-in defaults."""
    merged = deepcopy(config)
    for section, defaults in BASE_DEFAULTS.items():
        user_section = merged.get(section)
        if user_section is None:
            user_section = {}
        if not isinstance(user_section, dict):
            raise ValueError(f"Config section '{section}' must be a dictionary")
        merged[section] = {**defaults, **user_section}
    return merged


def _validate(config: Dict[str, Any]) -> None:
    capacity = config["engine"]["log_capacity"]
    if isinstance(capacity, bool) or not isinstance(capacity, int) or capacity < 1:
        raise ValueError("Config 'engine.log_capacity' must be a positive integer")
    if not isinstance(config["engine"]["default_enabled"], bool):
        raise ValueError("Config 'engine.default_enabled' must be true or false")
    if not config["storage"]["sqlite_path"]:
        raise ValueError("Config 'storage.sqlite_path' must not be empty")


def load_config(path: Path | None = None) -> Dict[str, Any]:
    """
    Load runtime configuration from YAML file.

    Args:
        path: Optional path to the config file. Defaults to autoresponder.config.yaml

    Returns:
        Dictionary with storage, engine and logging sections, defaults applied

    Raises:
        FileNotFoundError: If the config file doesn't exist
        ValueError: If config structure is invalid
    """
    cfg_path = path or DEFAULT_CONFIG_PATH
    if not cfg_path.exists():
        raise FileNotFoundError(f"Config file not found: {cfg_path}")
    with cfg_path.open("r", encoding="utf-8") as f:
        config = yaml.safe_load(f) or {}

    if not isinstance(config, dict):
        raise ValueError("Config must be a dictionary")

    merged = _merge_defaults(config)
    _validate(merged)
    return merged


def resolve_config(path: Path | None = None) -> Dict[str, Any]:
    """Load configuration, falling back to built-in defaults when the file is absent."""
    try:
        return load_config(path)
    except FileNotFoundError:
        return deepcopy(BASE_DEFAULTS)
