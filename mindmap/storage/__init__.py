"""
Storage backend abstraction for the mind map editor.

Supports:
- FileBackend: local JSON files (default)
- MemoryBackend: in-process storage for tests
"""

from mindmap.storage.protocol import StorageBackend
from mindmap.storage.file_backend import FileBackend
from mindmap.storage.memory_backend import MemoryBackend
from mindmap.storage.factory import create_backend, get_backend_type

__all__ = [
    'StorageBackend',
    'FileBackend',
    'MemoryBackend',
    'create_backend',
    'get_backend_type',
]
