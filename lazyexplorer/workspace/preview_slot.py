"""At-most-one preview document policy.

A preview view is transient: the next preview request replaces it, and an
edit or a commit-intent open turns it into a regular view.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from ..errors import StaleReferenceError
from .documents import PERMANENT, PREVIEW_VIEW, DocumentView, ViewKind, ViewProvider

logger = logging.getLogger(__name__)

MakeView = Callable[[ViewKind], DocumentView]


class PreviewSlot:
    """Holds zero or one ``(document_key, view)`` preview pair.

    ``close_view`` must close the view and release its model; the workspace
    session passes its own close routine so reference counts stay correct.
    ``find_permanent`` returns an open non-preview view for a key, if any.
    """

    def __init__(
        self,
        views: ViewProvider,
        *,
        close_view: Callable[[DocumentView], None],
        find_permanent: Callable[[str], DocumentView | None],
    ) -> None:
        self._views = views
        self._close_view = close_view
        self._find_permanent = find_permanent
        self._key: str | None = None
        self._view: DocumentView | None = None

    @property
    def key(self) -> str | None:
        return self._key

    @property
    def view(self) -> DocumentView | None:
        return self._view

    def __bool__(self) -> bool:
        return self._view is not None

    def _take(self) -> DocumentView | None:
        view = self._view
        self._key = None
        self._view = None
        if view is not None and view.closed:
            logger.debug("preview view for %s was already closed", view.document_key)
            return None
        return view

    def _close_held(self) -> None:
        view = self._take()
        if view is not None:
            self._close_view(view)

    def request_preview(self, key: str, make_view: MakeView) -> DocumentView:
        held = self._view
        if held is not None and self._key == key and not held.closed:
            self._views.activate_view(held)
            return held

        self._close_held()
        view = make_view(PREVIEW_VIEW)
        self._key = key
        self._view = view
        self._views.activate_view(view)
        return view

    def promote(self) -> DocumentView | None:
        """Make the held preview permanent and hand it to the workspace."""
        view = self._take()
        if view is None:
            return None
        try:
            self._views.mark_permanent(view)
        except StaleReferenceError as exc:
            logger.debug("promotion skipped: %s", exc)
            return None
        return view

    def commit_open(self, key: str, make_view: MakeView) -> DocumentView:
        existing = self._find_permanent(key)
        if existing is not None:
            self._views.activate_view(existing)
            return existing

        if self._key == key:
            promoted = self.promote()
            if promoted is not None:
                self._views.activate_view(promoted)
                return promoted

        self._close_held()
        view = make_view(PERMANENT)
        self._views.activate_view(view)
        return view

    def discard(self, view: DocumentView) -> None:
        """Forget ``view`` if held; used when it is closed from elsewhere."""
        if self._view is view:
            self._key = None
            self._view = None


__all__ = ["MakeView", "PreviewSlot"]
