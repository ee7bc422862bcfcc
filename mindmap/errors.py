"""
Exceptions raised by the mind map core.

Preconditions that are simply unmet (deleting root, removing a waypoint that
has no clean in/out pair) are not errors: those operations return empty
Effects instead of raising.
"""

from typing import Iterable


class MindMapError(Exception):
    """Base class for every error raised by the mind map core."""


class InvalidReference(MindMapError):
    """An operation referenced node ids that are missing (or already taken)."""

    def __init__(self, message: str, ids: Iterable[str] = ()):
        self.ids = tuple(ids)
        super().__init__(message)


class FormatError(MindMapError, ValueError):
    """A snapshot payload could not be parsed or failed validation."""

    def __init__(self, message: str, path: str = ""):
        self.path = path
        if path:
            message = f"{path}: {message}"
        super().__init__(message)
