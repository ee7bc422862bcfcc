"""
StorageBackend Protocol Definition.

This module defines the interface every storage backend implements.
FileBackend (local JSON files) and MemoryBackend (tests, throwaway sessions)
both conform to this protocol.
"""

from typing import Any, Dict, Optional, Protocol, runtime_checkable


@runtime_checkable
class StorageBackend(Protocol):
    """
    Persistence for one mind map.

    Backends store raw snapshot dicts; parsing and validation belong to
    mindmap.serialization.
    """

    @property
    def backend_type(self) -> str:
        """Return the backend type identifier ('file' or 'memory')."""
        ...

    def load_snapshot(self) -> Optional[Dict[str, Any]]:
        """
        Load the saved snapshot.

        Returns:
            The raw snapshot dict, or None if nothing has been saved yet.

        Raises:
            FormatError: stored data exists but is not a JSON object.
        """
        ...

    def save_snapshot(self, snapshot: Dict[str, Any]) -> None:
        """Persist a snapshot, replacing the previous one."""
        ...

    def load_theme(self) -> str:
        """Return 'light' or 'dark'."""
        ...

    def save_theme(self, theme: str) -> None:
        ...
