"""lazyexplorer: lazily loaded directory tree with preview documents.

The core is host-agnostic: open a store through a ``HandleAdapter``, drive an
``ExplorerApp`` with clicks and refreshes, and read open documents back from
its ``WorkspaceSession``. ``main`` runs the terminal front end.
"""

from __future__ import annotations

from .errors import EnumerationError, ExplorerError, ReadError, SaveError, StaleReferenceError
from .file_tree_model import LocalHandleAdapter, MemoryHandleAdapter, VirtualDirectoryTree
from .runtime import ExplorerApp, RefreshLoop
from .workspace import WorkspaceSession


def main(argv: list[str] | None = None) -> None:
    from .cli import main as _main

    _main(argv)


__all__ = [
    "EnumerationError",
    "ExplorerApp",
    "ExplorerError",
    "LocalHandleAdapter",
    "MemoryHandleAdapter",
    "ReadError",
    "RefreshLoop",
    "SaveError",
    "StaleReferenceError",
    "VirtualDirectoryTree",
    "WorkspaceSession",
    "main",
]
