"""Live visual tree mirrored from directory snapshots.

Visual nodes carry the UI state the host attaches to rows (expanded marker,
selection). They are created once and patched in place by the reconciler, so
a node's ``node_id`` is stable for as long as the entry survives refreshes.
"""

from __future__ import annotations

import itertools
from collections import OrderedDict
from collections.abc import Iterator
from dataclasses import dataclass, field

from ..file_tree_model.types import DIRECTORY, DirectoryNode, Node, NodeKind

_NODE_IDS = itertools.count(1)


@dataclass(eq=False)
class VisualNode:
    """One attachable row of the explorer tree."""

    name: str
    key: str
    path: str
    kind: NodeKind
    expanded: bool = False
    selected: bool = False
    children: OrderedDict[str, VisualNode] = field(default_factory=OrderedDict)
    parent: VisualNode | None = field(default=None, repr=False)
    attached: bool = True
    node_id: int = field(default_factory=lambda: next(_NODE_IDS))

    @property
    def is_dir(self) -> bool:
        return self.kind == DIRECTORY

    def walk(self) -> Iterator[VisualNode]:
        yield self
        for child in self.children.values():
            yield from child.walk()

    def visible_rows(self, depth: int = 0) -> Iterator[tuple[int, VisualNode]]:
        """Yield ``(depth, node)`` for rows shown under the expansion state."""
        yield depth, self
        if self.is_dir and self.expanded:
            for child in self.children.values():
                yield from child.visible_rows(depth + 1)


def child_path(parent_path: str, name: str) -> str:
    return f"{parent_path}/{name}" if parent_path else name


def build_visual_node(node: Node, parent_path: str, expanded: set[str]) -> VisualNode:
    """Create a fresh visual subtree for ``node``.

    Children are materialized for every loaded directory so re-expanding a
    collapsed directory does not rebuild rows.
    """
    path = child_path(parent_path, node.name)
    visual = VisualNode(
        name=node.name,
        key=node.key,
        path=path,
        kind=node.kind,
        expanded=isinstance(node, DirectoryNode) and node.key in expanded,
    )
    if isinstance(node, DirectoryNode) and node.loaded:
        for name, child in node.children.items():
            child_visual = build_visual_node(child, path, expanded)
            child_visual.parent = visual
            visual.children[name] = child_visual
    return visual


class VisualTree:
    """Container owning the root visual node and counting structural edits."""

    def __init__(self) -> None:
        self.root: VisualNode | None = None
        self.attach_count = 0
        self.detach_count = 0
        self._by_key: dict[str, VisualNode] = {}

    def mount(self, node: DirectoryNode, expanded: set[str]) -> VisualNode:
        """Replace the whole tree with a fresh build of ``node``."""
        if self.root is not None:
            self._forget(self.root)
        self.root = build_visual_node(node, "", expanded)
        self._index(self.root)
        return self.root

    def attach(self, parent: VisualNode, child: VisualNode) -> None:
        child.parent = parent
        child.attached = True
        parent.children[child.name] = child
        self._index(child)
        self.attach_count += 1

    def detach(self, child: VisualNode) -> None:
        parent = child.parent
        if parent is not None and parent.children.get(child.name) is child:
            del parent.children[child.name]
        child.parent = None
        self._forget(child)
        self.detach_count += 1

    def replace(self, old: VisualNode, new: VisualNode) -> None:
        """Swap ``old`` for ``new`` at the same position among its siblings."""
        parent = old.parent
        if parent is None:
            self._forget(old)
            self.root = new
            self._index(new)
            self.detach_count += 1
            self.attach_count += 1
            return
        names = list(parent.children)
        self.detach(old)
        self.attach(parent, new)
        reorder_children(parent, [new.name if name == old.name else name for name in names])

    def find(self, key: str) -> VisualNode | None:
        return self._by_key.get(key)

    def _index(self, node: VisualNode) -> None:
        for visual in node.walk():
            visual.attached = True
            self._by_key[visual.key] = visual

    def _forget(self, node: VisualNode) -> None:
        for visual in node.walk():
            visual.attached = False
            if self._by_key.get(visual.key) is visual:
                del self._by_key[visual.key]


def reorder_children(parent: VisualNode, order: list[str]) -> None:
    """Move existing children into ``order`` without re-creating them."""
    for name in order:
        if name in parent.children:
            parent.children.move_to_end(name)


__all__ = [
    "VisualNode",
    "VisualTree",
    "build_visual_node",
    "child_path",
    "reorder_children",
]
