"""Explorer application wiring.

Connects the virtual tree, the visual tree, click routing, and the workspace
session. Hosts drive it with ``click``/``toggle``/``refresh`` and subscribe to
``EntryActivated`` events.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Coroutine, Iterable
from typing import Any

from ..errors import EnumerationError, ExplorerError
from ..file_tree_model.handles import HandleAdapter
from ..file_tree_model.tree import VirtualDirectoryTree
from ..file_tree_model.types import DirectoryNode
from ..timers import AsyncioScheduler, Scheduler
from ..tree_pane.clicks import CLICK_DELAY_SECONDS, ClickRouter, EntryActivated
from ..tree_pane.reconcile import ReconcileResult, TreeReconciler
from ..tree_pane.rendering import DEFAULT_THEME, TreeTheme, render_tree
from ..tree_pane.visual import VisualNode, VisualTree, build_visual_node
from ..workspace.session import WorkspaceSession

logger = logging.getLogger(__name__)


class ExplorerApp:
    """Tree browsing plus preview/commit document opening for one workspace.

    When ``open_documents`` is true, activation events are also forwarded to
    the session, which opens preview or permanent views.
    """

    def __init__(
        self,
        session: WorkspaceSession | None = None,
        *,
        scheduler: Scheduler | None = None,
        click_delay: float = CLICK_DELAY_SECONDS,
        open_documents: bool = True,
    ) -> None:
        self.session = session if session is not None else WorkspaceSession()
        self.tree = VirtualDirectoryTree(self.session.adapter, self.session.expanded)
        self.visual = VisualTree()
        self.reconciler = TreeReconciler(self.visual, self.session.expanded)
        self.clicks = ClickRouter(
            self.visual,
            scheduler=scheduler if scheduler is not None else AsyncioScheduler(),
            on_activate=self._on_activate,
            on_directory_click=self._on_directory_click,
            delay=click_delay,
        )
        self.open_documents = open_documents
        self.last_error: ExplorerError | None = None
        self._listeners: list[Callable[[EntryActivated], None]] = []
        self._tasks: set[asyncio.Task[Any]] = set()
        self._refreshing = False

    @property
    def root(self) -> DirectoryNode | None:
        return self.tree.root

    def subscribe(self, listener: Callable[[EntryActivated], None]) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def open(self, adapter: HandleAdapter, expanded: Iterable[str] = ()) -> DirectoryNode:
        """Open ``adapter``'s root and restore any previously expanded keys.

        A failed open raises ``EnumerationError`` and leaves the current tree
        and workspace untouched.
        """
        root = await self.tree.open(adapter)
        previous = self.session.adapter
        if previous is not None and previous is not adapter and self.session.open_views:
            logger.info("closing %d views of %s", len(self.session.open_views), previous.root_key)
            self.session.close_all()
        self.session.adapter = adapter
        self.visual.mount(root, self.session.expanded)
        self.clicks.prune()
        for key in sorted(expanded, key=lambda item: item.count("/")):
            try:
                await self.expand(key)
            except EnumerationError as exc:
                logger.warning("cannot restore expanded %s: %s", key, exc)
        return root

    async def expand(self, key: str) -> bool:
        node = self.tree.find(key)
        if not isinstance(node, DirectoryNode):
            return False
        await self.tree.expand(node)

        current = self.tree.find(key)
        if current is None:
            logger.debug("expanded %s was removed meanwhile", key)
            return False
        if current is not node and isinstance(current, DirectoryNode) and not current.loaded:
            # A refresh swapped the tree during the enumeration.
            adopted = node.copy()
            current.children = adopted.children
            current.loaded = True
        if isinstance(current, DirectoryNode):
            self._show_children(current)
        return True

    def _show_children(self, node: DirectoryNode) -> None:
        visual = self.visual.find(node.key)
        if visual is None:
            return
        visual.expanded = True
        if visual.children or not node.loaded:
            return
        for child in node.children.values():
            self.visual.attach(visual, build_visual_node(child, visual.path, self.session.expanded))

    def collapse(self, key: str) -> bool:
        node = self.tree.find(key)
        if not isinstance(node, DirectoryNode):
            return False
        self.tree.collapse(node)
        visual = self.visual.find(key)
        if visual is not None:
            visual.expanded = False
        return True

    async def toggle(self, key: str) -> bool:
        if key in self.session.expanded:
            return self.collapse(key)
        return await self.expand(key)

    def click(self, key: str) -> bool:
        handled = self.clicks.click(key)
        self.session.selected_key = self.clicks.selected_key
        return handled

    async def refresh(self) -> ReconcileResult | None:
        """Re-walk expanded directories and patch the visual tree.

        Returns ``None`` when nothing is open, when another refresh is still
        running, or when the root was replaced while this one was walking.
        """
        old = self.tree.root
        if old is None:
            return None
        if self._refreshing:
            logger.debug("refresh already running; skipped")
            return None
        self._refreshing = True
        try:
            new = await self.tree.refresh_snapshot(old)
            if self.tree.root is not old:
                logger.debug("tree reopened during refresh; discarding snapshot")
                return None
            result = self.reconciler.reconcile(old, new)
            self.tree.replace_root(new)
            self.clicks.prune()
            return result
        finally:
            self._refreshing = False

    def render(self, theme: TreeTheme = DEFAULT_THEME) -> list[str]:
        open_keys = frozenset(view.document_key for view in self.session.open_views)
        return render_tree(
            self.visual.root,
            theme,
            open_keys=open_keys,
            preview_key=self.session.preview.key,
        )

    def _on_directory_click(self, visual: VisualNode) -> None:
        self._spawn(self.toggle(visual.key))

    def _on_activate(self, event: EntryActivated) -> None:
        for listener in list(self._listeners):
            listener(event)
        if self.open_documents:
            title = event.path.rsplit("/", 1)[-1]
            self._spawn(self.session.open_document(event.file_key, event.intent, title=title))

    def _spawn(self, coro: Coroutine[Any, Any, Any]) -> asyncio.Task[Any]:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._task_done)
        return task

    def _task_done(self, task: asyncio.Task[Any]) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if isinstance(exc, ExplorerError):
            logger.warning("%s", exc)
            self.last_error = exc
        elif exc is not None:
            logger.error("background task failed", exc_info=exc)

    async def drain(self) -> None:
        """Wait until click-triggered expands and opens have finished."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)


__all__ = ["ExplorerApp"]
