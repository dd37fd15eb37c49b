"""Document workspace: model cache, preview slot, and session context."""

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
from .model_cache import EditorModelCache, decode_text
from .preview_slot import PreviewSlot
from .session import WorkspaceSession

__all__ = [
    "PERMANENT",
    "PREVIEW_VIEW",
    "DocumentModel",
    "DocumentView",
    "InMemoryModelProvider",
    "InMemoryViewProvider",
    "ModelProvider",
    "ViewKind",
    "ViewProvider",
    "EditorModelCache",
    "decode_text",
    "PreviewSlot",
    "WorkspaceSession",
]
