"""
Configuration management for the mind map editor.

Handles persistent configuration:
- storage backend selection ("file" or "memory") and data directory
- the tool selected when the editor opens
- log level

Config is stored in config.json next to the executable/project root.
Environment variables (optionally loaded from .env by the app) take priority
over the file.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

from mindmap.paths import get_config_path

DEFAULTS: Dict[str, Any] = {
    "storage_backend": "file",
    "data_dir": None,
    "default_tool": "one-way",
    "log_level": "INFO",
}

ENV_VARS = {
    "storage_backend": "MINDMAP_STORAGE_BACKEND",
    "data_dir": "MINDMAP_DATA_DIR",
    "default_tool": "MINDMAP_DEFAULT_TOOL",
    "log_level": "MINDMAP_LOG_LEVEL",
}

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def load_config(config_path: Optional[Path] = None) -> dict:
    """Load configuration from config.json. Missing or unreadable files give {}."""
    config_path = config_path or get_config_path()
    if config_path.exists():
        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
                return data if isinstance(data, dict) else {}
        except (json.JSONDecodeError, IOError):
            return {}
    return {}


def save_config(config: dict, config_path: Optional[Path] = None) -> None:
    """Save configuration to config.json."""
    config_path = config_path or get_config_path()
    with open(config_path, 'w', encoding='utf-8') as f:
        json.dump(config, f, indent=2)


def get_setting(key: str, config: Optional[dict] = None) -> Any:
    """
    Resolve one setting.

    Priority:
    1. Environment variable (see ENV_VARS)
    2. config.json
    3. DEFAULTS
    """
    env_name = ENV_VARS.get(key)
    if env_name:
        env_value = os.environ.get(env_name)
        if env_value:
            return env_value
    if config is None:
        config = load_config()
    return config.get(key, DEFAULTS.get(key))


def get_settings(config_path: Optional[Path] = None) -> Dict[str, Any]:
    """All known settings resolved in priority order."""
    config = load_config(config_path)
    return {key: get_setting(key, config) for key in DEFAULTS}


def set_setting(key: str, value: Any, config_path: Optional[Path] = None) -> None:
    config = load_config(config_path)
    config[key] = value
    save_config(config, config_path)


def configure_logging(level: Optional[str] = None) -> None:
    """Set up root logging once for the app process."""
    level_name = (level or get_setting("log_level") or "INFO").upper()
    logging.basicConfig(level=getattr(logging, level_name, logging.INFO), format=LOG_FORMAT)
