"""One shared document model per key.

Reopening a document returns the live model, unsaved edits included, instead
of reading the store again. Reference counting of views lives with the caller.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable

from ..errors import ReadError
from .documents import DocumentModel, ModelProvider

logger = logging.getLogger(__name__)

ContentLoader = Callable[[], Awaitable[bytes | str]]


def decode_text(data: bytes | str) -> str:
    """Decode file bytes with a tolerant encoding fallback order."""
    if isinstance(data, str):
        return data
    for encoding in ("utf-8", "utf-8-sig", "latin-1"):
        try:
            return data.decode(encoding)
        except UnicodeDecodeError:
            continue
    return data.decode("utf-8", errors="replace")


def _fail(future: asyncio.Future[DocumentModel], key: str, exc: BaseException) -> None:
    """Settle a shared load so every joined caller wakes up."""
    if future.done():
        return
    if isinstance(exc, asyncio.CancelledError):
        exc = ReadError(f"load of {key} was cancelled", key=key)
    future.set_exception(exc)
    # Consume the exception for waiters that never show up.
    future.exception()


class EditorModelCache:
    def __init__(self, provider: ModelProvider) -> None:
        self.provider = provider
        self._models: dict[str, DocumentModel] = {}
        self._loading: dict[str, asyncio.Future[DocumentModel]] = {}

    def __contains__(self, key: object) -> bool:
        return key in self._models

    def __len__(self) -> int:
        return len(self._models)

    def keys(self) -> list[str]:
        return list(self._models)

    def get(self, key: str) -> DocumentModel | None:
        return self._models.get(key)

    def register(self, key: str, text: str = "") -> DocumentModel:
        """Create a model without a loader (new, unsaved documents)."""
        existing = self._models.get(key)
        if existing is not None:
            return existing
        model = self.provider.create_model(key, text)
        self._models[key] = model
        return model

    async def get_or_create(self, key: str, initial_content_loader: ContentLoader) -> DocumentModel:
        """Return the model for ``key``, loading content only on first use.

        Concurrent callers for the same key share one load. A failed load
        raises ``ReadError`` and registers nothing.
        """
        model = self._models.get(key)
        if model is not None:
            return model

        adopted = self.provider.get_model(key)
        if adopted is not None:
            self._models[key] = adopted
            return adopted

        pending = self._loading.get(key)
        if pending is not None:
            return await asyncio.shield(pending)

        future: asyncio.Future[DocumentModel] = asyncio.get_running_loop().create_future()
        self._loading[key] = future
        try:
            try:
                data = await initial_content_loader()
            except Exception as exc:
                raise ReadError(f"cannot read {key}: {exc}", key=key) from exc
            model = self._models.get(key)
            if model is None:
                model = self.provider.create_model(key, decode_text(data))
                self._models[key] = model
        except BaseException as exc:
            if isinstance(exc, ReadError):
                logger.warning("%s", exc)
            _fail(future, key, exc)
            raise
        finally:
            if self._loading.get(key) is future:
                del self._loading[key]

        future.set_result(model)
        return model

    def rename(self, old_key: str, new_key: str) -> DocumentModel:
        """Move the model for ``old_key`` to ``new_key`` (save-as)."""
        model = self._models.pop(old_key, None)
        if model is None:
            raise KeyError(old_key)
        self.provider.rename_model(model, new_key)
        self._models[new_key] = model
        return model

    def release(self, key: str) -> None:
        """Dispose the model for ``key`` and drop the cache entry."""
        model = self._models.pop(key, None)
        if model is None:
            return
        self.provider.dispose_model(model)
        logger.debug("released model %s", key)


__all__ = ["ContentLoader", "EditorModelCache", "decode_text"]
