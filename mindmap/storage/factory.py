"""
Backend Factory.

Creates the storage backend named by the editor configuration.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

from mindmap.paths import get_db_dir
from mindmap.storage.file_backend import FileBackend
from mindmap.storage.memory_backend import MemoryBackend
from mindmap.storage.protocol import StorageBackend

logger = logging.getLogger(__name__)

DEFAULT_BACKEND = "file"


def get_backend_type(settings: Optional[Dict[str, Any]] = None) -> str:
    settings = settings or {}
    return settings.get("storage_backend") or DEFAULT_BACKEND


def create_backend(
    settings: Optional[Dict[str, Any]] = None,
    data_dir: Optional[Union[str, Path]] = None,
    force_backend: Optional[str] = None,
) -> StorageBackend:
    """
    Create a storage backend instance.

    Args:
        settings: Resolved settings (see mindmap.config.get_settings)
        data_dir: Override for the data directory
        force_backend: Override the configured backend type

    Returns:
        StorageBackend instance (FileBackend or MemoryBackend)
    """
    settings = settings or {}
    backend_type = force_backend or get_backend_type(settings)

    if backend_type == "memory":
        return MemoryBackend()
    if backend_type != "file":
        logger.warning(f"Unknown storage backend '{backend_type}', falling back to file storage")
    return FileBackend(get_db_dir(data_dir or settings.get("data_dir")))
