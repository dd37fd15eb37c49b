"""Typed failures raised by the explorer core.

Adapters raise plain ``OSError`` (or ``AccessDenied``); the tree and the model
cache wrap those into ``EnumerationError`` / ``ReadError`` so callers can show
a retry affordance without inspecting platform errors.
"""

from __future__ import annotations


class ExplorerError(Exception):
    """Base class for explorer-core failures."""

    def __init__(self, message: str, *, key: str | None = None) -> None:
        super().__init__(message)
        self.key = key


class EnumerationError(ExplorerError):
    """A directory could not be enumerated; its node stays unloaded."""


class ReadError(ExplorerError):
    """File content could not be loaded; no document model was created."""


class SaveError(ExplorerError):
    """Document content could not be written back to the store."""


class StaleReferenceError(ExplorerError):
    """Target node or view was closed/detached before the operation ran."""


class AccessDenied(PermissionError):
    """Store refused access to a directory or file key."""


__all__ = [
    "ExplorerError",
    "EnumerationError",
    "ReadError",
    "SaveError",
    "StaleReferenceError",
    "AccessDenied",
]
