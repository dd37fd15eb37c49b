"""Lazily populated mirror of one subtree of an external store.

Directory children are fetched on first expansion only. Refreshes re-walk the
store but re-enumerate just the directories currently in the expansion set;
everything else is carried over from the previous tree.
"""

from __future__ import annotations

import asyncio
import logging
from collections import OrderedDict

from ..errors import EnumerationError
from .handles import HandleAdapter
from .types import DirectoryNode, Node, node_from_child

logger = logging.getLogger(__name__)


class VirtualDirectoryTree:
    """In-memory directory tree backed by a ``HandleAdapter``.

    ``expanded`` is shared with the workspace session so expansion state
    outlives any single snapshot.
    """

    def __init__(self, adapter: HandleAdapter | None, expanded: set[str]) -> None:
        self.adapter = adapter
        self.expanded = expanded
        self.root: DirectoryNode | None = None
        self._inflight: dict[str, asyncio.Future[None]] = {}

    async def _enumerate(self, key: str) -> OrderedDict[str, Node]:
        try:
            rows = await self.adapter.enumerate(key)
        except Exception as exc:
            raise EnumerationError(f"cannot enumerate {key}: {exc}", key=key) from exc
        children: OrderedDict[str, Node] = OrderedDict()
        for row in rows:
            children[row.name] = node_from_child(row)
        return children

    async def open(self, adapter: HandleAdapter | None = None) -> DirectoryNode:
        """Create and eagerly load the root node.

        On failure the previous root, adapter and expansion set are kept.
        """
        adapter = adapter or self.adapter
        if adapter is None:
            raise EnumerationError("no store to open")
        try:
            rows = await adapter.enumerate(adapter.root_key)
        except Exception as exc:
            raise EnumerationError(
                f"cannot open {adapter.root_key}: {exc}", key=adapter.root_key
            ) from exc

        root = DirectoryNode(name=adapter.root_name, key=adapter.root_key, loaded=True)
        for row in rows:
            root.children[row.name] = node_from_child(row)

        self.adapter = adapter
        self.root = root
        self._inflight.clear()
        self.expanded.clear()
        self.expanded.add(root.key)
        logger.debug("opened %s with %d entries", root.key, len(root.children))
        return root

    async def expand(self, node: DirectoryNode) -> DirectoryNode:
        """Load ``node`` once and add it to the expansion set.

        Concurrent expands of the same node await a single enumeration.
        """
        if node.loaded:
            self.expanded.add(node.key)
            return node

        pending = self._inflight.get(node.key)
        if pending is not None:
            await asyncio.shield(pending)
            self.expanded.add(node.key)
            return node

        future: asyncio.Future[None] = asyncio.get_running_loop().create_future()
        self._inflight[node.key] = future
        try:
            children = await self._enumerate(node.key)
        except BaseException as exc:
            if isinstance(exc, asyncio.CancelledError):
                exc = EnumerationError(f"enumeration of {node.key} was cancelled", key=node.key)
            future.set_exception(exc)
            # Consume the exception for waiters that never show up.
            future.exception()
            raise
        finally:
            if self._inflight.get(node.key) is future:
                del self._inflight[node.key]

        if not node.loaded:
            node.children = children
            node.loaded = True
        future.set_result(None)
        self.expanded.add(node.key)
        return node

    def collapse(self, node: DirectoryNode) -> None:
        """Forget expansion state; loaded children stay cached."""
        self.expanded.discard(node.key)

    async def refresh_snapshot(self, root: DirectoryNode | None = None) -> DirectoryNode:
        """Build a fresh tree, re-enumerating expanded directories only.

        Loaded directories outside the expansion set are copied as-is. A
        directory whose enumeration fails keeps its previous children.
        """
        previous = root if root is not None else self.root
        if previous is None:
            raise EnumerationError("tree is not open")

        async def walk(old: DirectoryNode) -> DirectoryNode:
            if old.key not in self.expanded:
                return old.copy()

            try:
                fresh = await self._enumerate(old.key)
            except EnumerationError as exc:
                logger.warning("keeping previous children of %s: %s", old.key, exc)
                return old.copy()

            snapshot = DirectoryNode(name=old.name, key=old.key, loaded=True)
            for name, child in fresh.items():
                prior = old.children.get(name) if old.loaded else None
                if isinstance(child, DirectoryNode) and isinstance(prior, DirectoryNode):
                    snapshot.children[name] = await walk(prior)
                elif isinstance(child, DirectoryNode) and child.key in self.expanded:
                    snapshot.children[name] = await walk(child)
                else:
                    snapshot.children[name] = child
            return snapshot

        snapshot = await walk(previous)
        _adopt_late_loads(previous, snapshot)
        return snapshot

    def replace_root(self, root: DirectoryNode) -> None:
        self.root = root

    def find(self, key: str) -> Node | None:
        """Return the node for ``key`` in the current tree, if loaded."""
        if self.root is None:
            return None
        if self.root.key == key:
            return self.root
        pending = [self.root]
        while pending:
            directory = pending.pop()
            if not directory.loaded:
                continue
            for child in directory.children.values():
                if child.key == key:
                    return child
                if isinstance(child, DirectoryNode):
                    pending.append(child)
        return None


def _adopt_late_loads(old: DirectoryNode, new: DirectoryNode) -> None:
    """Carry over directories expanded while the refresh walk was suspended.

    The walk copies a directory before its concurrent ``expand`` finishes, so
    the snapshot would otherwise hold an unloaded node for a loaded one.
    """
    if not (old.loaded and new.loaded):
        return
    for name, new_child in new.children.items():
        old_child = old.children.get(name)
        if not isinstance(new_child, DirectoryNode) or not isinstance(old_child, DirectoryNode):
            continue
        if old_child.loaded and not new_child.loaded:
            adopted = old_child.copy()
            new_child.children = adopted.children
            new_child.loaded = True
        else:
            _adopt_late_loads(old_child, new_child)


__all__ = ["VirtualDirectoryTree"]
