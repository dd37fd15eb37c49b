"""Domain model for lazily loaded file/directory trees.

This package contains non-UI tree primitives:
- file/directory node datatypes with ordered children
- store adapters (local filesystem, in-memory)
- the virtual tree with lazy expansion and snapshot refresh
"""

from __future__ import annotations

from .handles import HandleAdapter, LocalHandleAdapter, MemoryHandleAdapter
from .tree import VirtualDirectoryTree
from .types import DIRECTORY, FILE, DirectoryChild, DirectoryNode, FileNode, Node, NodeKind

__all__ = [
    "DIRECTORY",
    "FILE",
    "DirectoryChild",
    "DirectoryNode",
    "FileNode",
    "Node",
    "NodeKind",
    "HandleAdapter",
    "LocalHandleAdapter",
    "MemoryHandleAdapter",
    "VirtualDirectoryTree",
]
