"""
File-based Storage Backend.

Implements the StorageBackend protocol with plain JSON files:
- {data_dir}/mindmap.json: the graph snapshot
- {data_dir}/theme.json: {"theme": "light" | "dark"}

This is the default storage mechanism.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

from mindmap.errors import FormatError
from mindmap.paths import SNAPSHOT_FILENAME, THEME_FILENAME

logger = logging.getLogger(__name__)

THEMES = ("light", "dark")


class FileBackend:
    """Local JSON file storage for a single mind map."""

    def __init__(self, data_dir: Union[str, Path]):
        self.data_dir = Path(data_dir)
        self.snapshot_path = self.data_dir / SNAPSHOT_FILENAME
        self.theme_path = self.data_dir / THEME_FILENAME

        self.data_dir.mkdir(parents=True, exist_ok=True)

    @property
    def backend_type(self) -> str:
        return "file"

    def load_snapshot(self) -> Optional[Dict[str, Any]]:
        if not self.snapshot_path.exists():
            return None
        try:
            with open(self.snapshot_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            logger.warning(f"Saved map {self.snapshot_path} is not valid JSON: {e}")
            raise FormatError(f"invalid JSON: {e}", str(self.snapshot_path)) from e
        if not isinstance(data, dict):
            raise FormatError("snapshot must be an object", str(self.snapshot_path))
        return data

    def save_snapshot(self, snapshot: Dict[str, Any]) -> None:
        # Write to a sibling file first so a crash mid-write keeps the old map
        tmp_path = self.snapshot_path.with_suffix(".json.tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(snapshot, f, indent=2, ensure_ascii=False)
        tmp_path.replace(self.snapshot_path)

    def load_theme(self) -> str:
        if not self.theme_path.exists():
            return "light"
        try:
            with open(self.theme_path, "r", encoding="utf-8") as f:
                theme = json.load(f).get("theme")
        except (json.JSONDecodeError, UnicodeDecodeError, AttributeError, IOError) as e:
            logger.warning(f"Failed to read theme from {self.theme_path}: {e}")
            return "light"
        return theme if theme in THEMES else "light"

    def save_theme(self, theme: str) -> None:
        if theme not in THEMES:
            raise ValueError(f"Unknown theme: {theme}")
        with open(self.theme_path, "w", encoding="utf-8") as f:
            json.dump({"theme": theme}, f, indent=2)
