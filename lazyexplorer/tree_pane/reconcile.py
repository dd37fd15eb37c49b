"""Minimal patching of a live visual tree from snapshot A to snapshot B.

Children are matched by name under the same parent. Removed names are
detached, added names attached, and common names recursed into, so unchanged
subtrees keep their visual identity (selection, focus, scroll anchors).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from ..file_tree_model.types import DirectoryNode, Node
from .visual import VisualNode, VisualTree, build_visual_node, reorder_children

logger = logging.getLogger(__name__)


@dataclass
class ReconcileResult:
    """Keys touched by one reconcile pass."""

    attached: list[str] = field(default_factory=list)
    detached: list[str] = field(default_factory=list)
    replaced: list[str] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.attached or self.detached or self.replaced)


class TreeReconciler:
    """Replay snapshot diffs onto a ``VisualTree``."""

    def __init__(self, visual_tree: VisualTree, expanded: set[str]) -> None:
        self.visual_tree = visual_tree
        self.expanded = expanded

    def reconcile(self, old: DirectoryNode, new: DirectoryNode) -> ReconcileResult:
        result = ReconcileResult()
        root = self.visual_tree.root
        if root is None:
            self.visual_tree.mount(new, self.expanded)
            result.attached.append(new.key)
            return result
        self._update(old, new, root, result)
        if result.changed:
            logger.debug(
                "reconciled %s: +%d -%d ~%d",
                new.key,
                len(result.attached),
                len(result.detached),
                len(result.replaced),
            )
        return result

    def _update(self, old: Node, new: Node, visual: VisualNode, result: ReconcileResult) -> None:
        if not visual.attached:
            logger.debug("skipping reconcile of detached row %s", visual.key)
            return

        if old.kind != new.kind or old.name != new.name:
            parent_path = visual.path.rpartition("/")[0]
            fresh = build_visual_node(new, parent_path, self.expanded)
            self.visual_tree.replace(visual, fresh)
            result.replaced.append(new.key)
            return

        if not isinstance(old, DirectoryNode) or not isinstance(new, DirectoryNode):
            return

        visual.expanded = new.key in self.expanded
        if not (old.loaded and new.loaded):
            if new.loaded and not visual.children:
                for name, child in new.children.items():
                    self._attach(visual, child, result)
            return

        old_names = set(old.children)
        new_names = set(new.children)

        for name in old.children:
            if name in new_names:
                continue
            child_visual = visual.children.get(name)
            if child_visual is not None:
                self.visual_tree.detach(child_visual)
                result.detached.append(old.children[name].key)

        for name, child in new.children.items():
            if name not in old_names:
                self._attach(visual, child, result)

        for name, child in new.children.items():
            if name not in old_names:
                continue
            child_visual = visual.children.get(name)
            if child_visual is None:
                self._attach(visual, child, result)
                continue
            self._update(old.children[name], child, child_visual, result)

        reorder_children(visual, list(new.children))

    def _attach(self, parent: VisualNode, node: Node, result: ReconcileResult) -> None:
        fresh = build_visual_node(node, parent.path, self.expanded)
        self.visual_tree.attach(parent, fresh)
        result.attached.append(node.key)


__all__ = ["ReconcileResult", "TreeReconciler"]
