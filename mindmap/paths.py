"""
Path utilities for the mind map editor.

Handles path resolution for both development mode and frozen (PyInstaller) executables.
- In development: paths are relative to the project root
- When frozen: paths are relative to the executable location

Saved maps (db/) and config.json live NEXT TO the executable, not bundled inside.
"""

import sys
from pathlib import Path
from typing import Optional, Union

SNAPSHOT_FILENAME = "mindmap.json"
THEME_FILENAME = "theme.json"


def get_app_dir() -> Path:
    """
    Get the application directory.

    - In development: the project root (parent of mindmap/)
    - When frozen: the directory containing the executable
    """
    if getattr(sys, 'frozen', False):
        return Path(sys.executable).parent
    return Path(__file__).parent.parent


def get_db_dir(data_dir: Optional[Union[str, Path]] = None) -> Path:
    """Directory holding saved maps. A relative `data_dir` is taken from the app dir."""
    if data_dir is None:
        return get_app_dir() / "db"
    path = Path(data_dir)
    return path if path.is_absolute() else get_app_dir() / path


def get_config_path() -> Path:
    return get_app_dir() / "config.json"


def get_snapshot_path(data_dir: Optional[Union[str, Path]] = None) -> Path:
    return get_db_dir(data_dir) / SNAPSHOT_FILENAME


def get_theme_path(data_dir: Optional[Union[str, Path]] = None) -> Path:
    return get_db_dir(data_dir) / THEME_FILENAME


def ensure_db_dir(data_dir: Optional[Union[str, Path]] = None) -> Path:
    """
    Ensure the db directory exists, creating it if necessary.
    Returns the path to the db directory.
    """
    db_dir = get_db_dir(data_dir)
    db_dir.mkdir(parents=True, exist_ok=True)
    return db_dir
