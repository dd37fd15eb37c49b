"""Store adapters: directory enumeration plus file read/write capabilities.

The tree and the document cache only talk to a ``HandleAdapter``. Two hosts
are provided: the local filesystem and an in-memory store.
"""

from __future__ import annotations

import asyncio
import logging
import os
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Protocol, Union

from ..errors import AccessDenied
from .types import DIRECTORY, FILE, DirectoryChild

logger = logging.getLogger(__name__)


class HandleAdapter(Protocol):
    """Capability over one external store rooted at ``root_key``."""

    root_name: str
    root_key: str

    async def enumerate(self, directory_key: str) -> Sequence[DirectoryChild]: ...

    async def read_file(self, file_key: str) -> bytes: ...

    async def write_file(self, file_key: str, data: bytes) -> None: ...


class LocalHandleAdapter:
    """Local filesystem store; keys are absolute paths.

    Children are reported directories first, then files, each group ordered by
    case-folded name. Blocking calls run in a worker thread so the event loop
    keeps processing clicks and timers while a directory is scanned.
    """

    def __init__(self, root: Path, *, show_hidden: bool = False) -> None:
        resolved = root.resolve()
        self.root_path = resolved
        self.root_name = resolved.name or str(resolved)
        self.root_key = str(resolved)
        self.show_hidden = show_hidden

    def _scan(self, directory: Path) -> list[DirectoryChild]:
        children: list[DirectoryChild] = []
        try:
            with os.scandir(directory) as entries:
                for child in entries:
                    name = child.name
                    if not self.show_hidden and name.startswith("."):
                        continue
                    try:
                        is_dir = child.is_dir(follow_symlinks=False)
                    except OSError:
                        is_dir = False
                    children.append(
                        DirectoryChild(
                            name=name,
                            kind=DIRECTORY if is_dir else FILE,
                            key=str(Path(child.path)),
                        )
                    )
        except PermissionError as exc:
            raise AccessDenied(f"permission denied: {directory}") from exc

        children.sort(key=lambda item: (item.kind != DIRECTORY, item.name.casefold()))
        logger.debug("scanned %s: %d entries", directory, len(children))
        return children

    async def enumerate(self, directory_key: str) -> list[DirectoryChild]:
        return await asyncio.to_thread(self._scan, Path(directory_key))

    async def read_file(self, file_key: str) -> bytes:
        try:
            return await asyncio.to_thread(Path(file_key).read_bytes)
        except PermissionError as exc:
            raise AccessDenied(f"permission denied: {file_key}") from exc

    async def write_file(self, file_key: str, data: bytes) -> None:
        await asyncio.to_thread(Path(file_key).write_bytes, data)


StoreTree = Mapping[str, Union["StoreTree", bytes, str]]


class MemoryHandleAdapter:
    """In-memory store built from nested mappings.

    Mappings are directories, ``bytes``/``str`` values are files. Keys are
    ``/``-joined names starting with ``root_name``. Enumeration reports entries
    in insertion order.
    """

    def __init__(self, root_name: str, contents: StoreTree | None = None) -> None:
        self.root_name = root_name
        self.root_key = root_name
        self._root: dict[str, object] = {}
        self._denied: set[str] = set()
        if contents:
            self._load(self._root, contents)

    def _load(self, target: dict[str, object], contents: StoreTree) -> None:
        for name, value in contents.items():
            if isinstance(value, Mapping):
                child: dict[str, object] = {}
                self._load(child, value)
                target[name] = child
            elif isinstance(value, str):
                target[name] = value.encode("utf-8")
            else:
                target[name] = bytes(value)

    def _split(self, key: str) -> list[str]:
        parts = key.split("/")
        if not parts or parts[0] != self.root_name:
            raise FileNotFoundError(key)
        return parts[1:]

    def _lookup(self, key: str) -> object:
        current: object = self._root
        for part in self._split(key):
            if not isinstance(current, dict) or part not in current:
                raise FileNotFoundError(key)
            current = current[part]
        return current

    def _parent(self, key: str) -> tuple[dict[str, object], str]:
        parent_key, _sep, name = key.rpartition("/")
        if not parent_key:
            raise FileNotFoundError(key)
        parent = self._lookup(parent_key)
        if not isinstance(parent, dict):
            raise NotADirectoryError(parent_key)
        return parent, name

    def _check_access(self, key: str) -> None:
        if key in self._denied:
            raise AccessDenied(f"permission denied: {key}")

    async def enumerate(self, directory_key: str) -> list[DirectoryChild]:
        await asyncio.sleep(0)
        self._check_access(directory_key)
        node = self._lookup(directory_key)
        if not isinstance(node, dict):
            raise NotADirectoryError(directory_key)
        return [
            DirectoryChild(
                name=name,
                kind=DIRECTORY if isinstance(value, dict) else FILE,
                key=f"{directory_key}/{name}",
            )
            for name, value in node.items()
        ]

    async def read_file(self, file_key: str) -> bytes:
        await asyncio.sleep(0)
        self._check_access(file_key)
        node = self._lookup(file_key)
        if isinstance(node, dict):
            raise IsADirectoryError(file_key)
        return bytes(node)

    async def write_file(self, file_key: str, data: bytes) -> None:
        await asyncio.sleep(0)
        self._check_access(file_key)
        self.put_file(file_key, data)

    # Store mutation helpers used by embedding hosts and tests.

    def put_file(self, key: str, data: bytes | str) -> None:
        parent, name = self._parent(key)
        parent[name] = data.encode("utf-8") if isinstance(data, str) else bytes(data)

    def put_directory(self, key: str, contents: StoreTree | None = None) -> None:
        parent, name = self._parent(key)
        child: dict[str, object] = {}
        if contents:
            self._load(child, contents)
        parent[name] = child

    def remove(self, key: str) -> None:
        parent, name = self._parent(key)
        if name not in parent:
            raise FileNotFoundError(key)
        del parent[name]

    def deny(self, key: str, denied: bool = True) -> None:
        if denied:
            self._denied.add(key)
        else:
            self._denied.discard(key)


__all__ = [
    "HandleAdapter",
    "LocalHandleAdapter",
    "MemoryHandleAdapter",
    "StoreTree",
]
