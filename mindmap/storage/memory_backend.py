"""In-memory storage backend, used by tests and throwaway sessions."""

import copy
from typing import Any, Dict, Optional

from mindmap.storage.file_backend import THEMES


class MemoryBackend:
    def __init__(self, snapshot: Optional[Dict[str, Any]] = None, theme: str = "light"):
        self._snapshot = copy.deepcopy(snapshot)
        self._theme = theme
        self.save_count = 0

    @property
    def backend_type(self) -> str:
        return "memory"

    def load_snapshot(self) -> Optional[Dict[str, Any]]:
        return copy.deepcopy(self._snapshot)

    def save_snapshot(self, snapshot: Dict[str, Any]) -> None:
        self._snapshot = copy.deepcopy(snapshot)
        self.save_count += 1

    def load_theme(self) -> str:
        return self._theme

    def save_theme(self, theme: str) -> None:
        if theme not in THEMES:
            raise ValueError(f"Unknown theme: {theme}")
        self._theme = theme
