"""Workspace session: the one context object shared by explorer components.

Holds what would otherwise be ambient globals (current view, menu focus,
current preview) together with the expansion set and the document cache, so
several independent workspaces can coexist in one process.
"""

from __future__ import annotations

import itertools
import logging
from collections.abc import Callable

from ..errors import SaveError, StaleReferenceError
from ..file_tree_model.handles import HandleAdapter
from .documents import (
    PERMANENT,
    PREVIEW_VIEW,
    DocumentModel,
    DocumentView,
    InMemoryModelProvider,
    InMemoryViewProvider,
    ModelProvider,
    ViewKind,
    ViewProvider,
)
from .model_cache import EditorModelCache
from .preview_slot import PreviewSlot

logger = logging.getLogger(__name__)


class WorkspaceSession:
    def __init__(
        self,
        adapter: HandleAdapter | None = None,
        *,
        models: ModelProvider | None = None,
        views: ViewProvider | None = None,
    ) -> None:
        self.adapter = adapter
        self.expanded: set[str] = set()
        self.selected_key: str | None = None
        self.models = models if models is not None else InMemoryModelProvider()
        self.views = views if views is not None else InMemoryViewProvider()
        self.cache = EditorModelCache(self.models)
        self.preview = PreviewSlot(
            self.views,
            close_view=self.close_view,
            find_permanent=self.find_permanent,
        )
        self.current_view: DocumentView | None = None
        self.menu_focus: DocumentView | None = None
        self._open: list[DocumentView] = []
        self._refcounts: dict[str, int] = {}
        self._unsubscribe: dict[int, Callable[[], None]] = {}
        self._untitled: set[str] = set()
        self._untitled_ids = itertools.count(1)

    @property
    def open_views(self) -> list[DocumentView]:
        return list(self._open)

    def views_for(self, key: str) -> list[DocumentView]:
        return [view for view in self._open if view.document_key == key]

    def find_permanent(self, key: str) -> DocumentView | None:
        for view in self._open:
            if view.document_key == key and view.kind == PERMANENT:
                return view
        return None

    def refcount(self, key: str) -> int:
        return self._refcounts.get(key, 0)

    def _create_view(self, kind: ViewKind, key: str, model: DocumentModel, title: str) -> DocumentView:
        view = self.views.create_view(kind, key, model, title)
        self._open.append(view)
        self._refcounts[key] = self._refcounts.get(key, 0) + 1
        if kind == PREVIEW_VIEW:
            self._unsubscribe[view.view_id] = model.on_change(lambda _model: self._on_preview_edit(view))
        return view

    def _on_preview_edit(self, view: DocumentView) -> None:
        if self.preview.view is view:
            logger.debug("promoting edited preview %s", view.document_key)
            self.preview.promote()
        unsubscribe = self._unsubscribe.pop(view.view_id, None)
        if unsubscribe is not None:
            unsubscribe()

    def activate(self, view: DocumentView) -> None:
        self.views.activate_view(view)
        self.current_view = view

    async def open_document(self, key: str, intent: str, *, title: str = "") -> DocumentView:
        """Open ``key`` as a preview (``intent="preview"``) or permanent view.

        The model is loaded before any view changes, so a ``ReadError`` leaves
        the workspace exactly as it was.
        """
        if self.adapter is None:
            raise StaleReferenceError("no store attached to this workspace", key=key)
        adapter = self.adapter
        model = await self.cache.get_or_create(key, lambda: adapter.read_file(key))

        def make_view(kind: ViewKind) -> DocumentView:
            return self._create_view(kind, key, model, title)

        if intent == "preview":
            view = self.preview.request_preview(key, make_view)
        else:
            view = self.preview.commit_open(key, make_view)
        self.current_view = view
        return view

    def new_document(self, name: str = "untitled.txt") -> DocumentView:
        key = f"untitled-{next(self._untitled_ids)}/{name}"
        self._untitled.add(key)
        model = self.cache.register(key, "")
        view = self._create_view(PERMANENT, key, model, name)
        self.activate(view)
        return view

    async def save(self, view: DocumentView | None = None) -> None:
        target = view or self.current_view
        if target is None:
            raise SaveError("no document to save")
        key = target.document_key
        if key in self._untitled or self.adapter is None:
            raise SaveError(f"{target.title or key} has no backing file", key=key)
        try:
            await self.adapter.write_file(key, target.model.text.encode("utf-8"))
        except Exception as exc:
            raise SaveError(f"cannot save {key}: {exc}", key=key) from exc
        target.model.mark_saved()
        logger.info("saved %s", key)

    async def save_as(self, view: DocumentView | None, key: str) -> DocumentView:
        """Write ``view``'s text to ``key`` and rebind its document there.

        Every open view of the old key moves with the shared model. A held
        preview is promoted first. Fails with ``SaveError`` when ``key`` is
        already open under another document.
        """
        target = view or self.current_view
        if target is None or target.closed:
            raise SaveError("no document to save", key=key)
        if self.adapter is None:
            raise SaveError(f"no store to save {key} into", key=key)
        old_key = target.document_key
        if key != old_key and self.views_for(key):
            raise SaveError(f"{key} is open in another view", key=key)
        try:
            await self.adapter.write_file(key, target.model.text.encode("utf-8"))
        except Exception as exc:
            raise SaveError(f"cannot save {key}: {exc}", key=key) from exc

        if key != old_key:
            moved = self.views_for(old_key)
            if self.preview.view in moved:
                self.preview.promote()
            self.cache.rename(old_key, key)
            title = key.rsplit("/", 1)[-1]
            for moved_view in moved:
                moved_view.document_key = key
                moved_view.title = title
            self._refcounts[key] = self._refcounts.pop(old_key, len(moved))
            self._untitled.discard(old_key)
            logger.info("saved %s as %s", old_key, key)
        else:
            logger.info("saved %s", key)
        target.model.mark_saved()
        return target

    def close_view(self, view: DocumentView) -> None:
        """Close ``view``; the model is released with the last view of its key."""
        if view.closed or view not in self._open:
            logger.debug("close ignored for stale view %s", view.document_key)
            return
        self.preview.discard(view)
        try:
            self.views.close_view(view)
        except StaleReferenceError as exc:
            logger.debug("%s", exc)
        self._open.remove(view)
        unsubscribe = self._unsubscribe.pop(view.view_id, None)
        if unsubscribe is not None:
            unsubscribe()

        key = view.document_key
        remaining = self._refcounts.get(key, 0) - 1
        if remaining <= 0:
            self._refcounts.pop(key, None)
            self.cache.release(key)
            self._untitled.discard(key)
        else:
            self._refcounts[key] = remaining

        if self.menu_focus is view:
            self.menu_focus = None
        if self.current_view is view:
            self.current_view = self._open[-1] if self._open else None

    def close_current(self) -> None:
        if self.current_view is not None:
            self.close_view(self.current_view)

    def close_all(self) -> None:
        for view in list(self._open):
            self.close_view(view)


__all__ = ["WorkspaceSession"]
