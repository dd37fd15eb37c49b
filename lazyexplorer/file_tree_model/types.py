"""Domain datatypes for lazily loaded file/directory trees."""

from __future__ import annotations

from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Literal

NodeKind = Literal["file", "directory"]

FILE: NodeKind = "file"
DIRECTORY: NodeKind = "directory"


@dataclass(frozen=True)
class DirectoryChild:
    """One child reported by a store enumeration, in store order."""

    name: str
    kind: NodeKind
    key: str


@dataclass
class FileNode:
    """Leaf entry; ``key`` addresses the file in the external store."""

    name: str
    key: str
    kind: NodeKind = field(default=FILE, init=False)

    def copy(self) -> FileNode:
        return FileNode(name=self.name, key=self.key)


@dataclass
class DirectoryNode:
    """Directory entry whose children are fetched on first expansion.

    ``children`` is only meaningful while ``loaded`` is true; an unloaded node
    always carries an empty mapping.
    """

    name: str
    key: str
    children: OrderedDict[str, Node] = field(default_factory=OrderedDict)
    loaded: bool = False
    kind: NodeKind = field(default=DIRECTORY, init=False)

    def copy(self) -> DirectoryNode:
        """Deep-copy this subtree, keeping loaded flags and child order."""
        clone = DirectoryNode(name=self.name, key=self.key, loaded=self.loaded)
        if self.loaded:
            for name, child in self.children.items():
                clone.children[name] = child.copy()
        return clone


Node = FileNode | DirectoryNode


def node_from_child(child: DirectoryChild) -> Node:
    """Build an unloaded node for one enumeration row."""
    if child.kind == DIRECTORY:
        return DirectoryNode(name=child.name, key=child.key)
    return FileNode(name=child.name, key=child.key)


__all__ = [
    "NodeKind",
    "FILE",
    "DIRECTORY",
    "DirectoryChild",
    "FileNode",
    "DirectoryNode",
    "Node",
    "node_from_child",
]
