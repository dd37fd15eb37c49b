"""Document models, document views, and their provider interfaces.

The editing surface itself is external. Hosts plug in through
``ModelProvider`` / ``ViewProvider``; the in-memory providers here back the
terminal CLI and the test suite.
"""

from __future__ import annotations

import itertools
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Literal, Protocol

from ..errors import StaleReferenceError

ViewKind = Literal["permanent", "preview"]

PERMANENT: ViewKind = "permanent"
PREVIEW_VIEW: ViewKind = "preview"


class DocumentModel:
    """Shared text buffer for one document key."""

    def __init__(self, key: str, text: str = "") -> None:
        self.key = key
        self.text = text
        self.version = 0
        self.saved_version = 0
        self.disposed = False
        self._listeners: list[Callable[[DocumentModel], None]] = []

    @property
    def is_dirty(self) -> bool:
        return self.version != self.saved_version

    def on_change(self, listener: Callable[[DocumentModel], None]) -> Callable[[], None]:
        """Subscribe to content edits; returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def apply_edit(self, text: str) -> None:
        if self.disposed:
            raise StaleReferenceError(f"model disposed: {self.key}", key=self.key)
        self.text = text
        self.version += 1
        for listener in list(self._listeners):
            listener(self)

    def mark_saved(self) -> None:
        self.saved_version = self.version

    def dispose(self) -> None:
        self.disposed = True
        self._listeners.clear()

    def __repr__(self) -> str:
        return f"DocumentModel(key={self.key!r}, version={self.version}, disposed={self.disposed})"


_VIEW_IDS = itertools.count(1)


@dataclass(eq=False)
class DocumentView:
    """One open tab/editor over a document model."""

    kind: ViewKind
    document_key: str
    model: DocumentModel
    title: str = ""
    closed: bool = False
    view_id: int = field(default_factory=lambda: next(_VIEW_IDS))

    @property
    def is_preview(self) -> bool:
        return self.kind == PREVIEW_VIEW


class ModelProvider(Protocol):
    def create_model(self, key: str, text: str) -> DocumentModel: ...

    def get_model(self, key: str) -> DocumentModel | None: ...

    def dispose_model(self, model: DocumentModel) -> None: ...

    def rename_model(self, model: DocumentModel, new_key: str) -> None: ...


class ViewProvider(Protocol):
    def create_view(self, kind: ViewKind, key: str, model: DocumentModel, title: str = "") -> DocumentView: ...

    def close_view(self, view: DocumentView) -> None: ...

    def mark_permanent(self, view: DocumentView) -> None: ...

    def activate_view(self, view: DocumentView) -> None: ...


class InMemoryModelProvider:
    def __init__(self) -> None:
        self.models: dict[str, DocumentModel] = {}

    def create_model(self, key: str, text: str) -> DocumentModel:
        model = DocumentModel(key, text)
        self.models[key] = model
        return model

    def get_model(self, key: str) -> DocumentModel | None:
        model = self.models.get(key)
        if model is not None and model.disposed:
            return None
        return model

    def dispose_model(self, model: DocumentModel) -> None:
        model.dispose()
        if self.models.get(model.key) is model:
            del self.models[model.key]

    def rename_model(self, model: DocumentModel, new_key: str) -> None:
        if self.models.get(model.key) is model:
            del self.models[model.key]
        model.key = new_key
        self.models[new_key] = model


class InMemoryViewProvider:
    """Headless dock: ordered open views, one active view, and an op log.

    ``log`` records ``(operation, document_key)`` pairs so hosts and tests can
    check the order in which views were created, closed, and promoted.
    """

    def __init__(self) -> None:
        self.views: list[DocumentView] = []
        self.active: DocumentView | None = None
        self.log: list[tuple[str, str]] = []

    def _require_open(self, view: DocumentView) -> None:
        if view.closed:
            raise StaleReferenceError(f"view closed: {view.document_key}", key=view.document_key)

    def create_view(self, kind: ViewKind, key: str, model: DocumentModel, title: str = "") -> DocumentView:
        view = DocumentView(kind=kind, document_key=key, model=model, title=title or key.rsplit("/", 1)[-1])
        self.views.append(view)
        self.log.append((f"create:{kind}", key))
        return view

    def close_view(self, view: DocumentView) -> None:
        self._require_open(view)
        view.closed = True
        self.views.remove(view)
        self.log.append(("close", view.document_key))
        if self.active is view:
            self.active = self.views[-1] if self.views else None

    def mark_permanent(self, view: DocumentView) -> None:
        self._require_open(view)
        view.kind = PERMANENT
        self.log.append(("promote", view.document_key))

    def activate_view(self, view: DocumentView) -> None:
        self._require_open(view)
        self.active = view


__all__ = [
    "ViewKind",
    "PERMANENT",
    "PREVIEW_VIEW",
    "DocumentModel",
    "DocumentView",
    "ModelProvider",
    "ViewProvider",
    "InMemoryModelProvider",
    "InMemoryViewProvider",
]
