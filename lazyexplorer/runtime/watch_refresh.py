"""Poll-based tree refresh loop.

Each cycle waits ``interval`` seconds, then awaits one refresh. The next wait
starts only after that refresh (including reconciliation) has completed, so
cycles never overlap on the same root.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any

from ..errors import ExplorerError

logger = logging.getLogger(__name__)

REFRESH_SECONDS = 5.0


class RefreshLoop:
    def __init__(
        self,
        refresh: Callable[[], Awaitable[Any]],
        *,
        interval: float = REFRESH_SECONDS,
        on_result: Callable[[Any], None] | None = None,
    ) -> None:
        self._refresh = refresh
        self.interval = interval
        self._on_result = on_result
        self._stop = asyncio.Event()
        self._task: asyncio.Task[None] | None = None
        self.cycles = 0

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._stop.clear()
        self._task = asyncio.get_running_loop().create_task(self._run())

    async def _run(self) -> None:
        while not self._stop.is_set():
            try:
                await asyncio.wait_for(self._stop.wait(), timeout=self.interval)
                return
            except asyncio.TimeoutError:
                pass
            try:
                result = await self._refresh()
            except ExplorerError as exc:
                logger.warning("refresh failed: %s", exc)
                continue
            self.cycles += 1
            if self._on_result is not None:
                self._on_result(result)

    async def stop(self) -> None:
        """Stop re-arming; an in-flight refresh is allowed to finish."""
        self._stop.set()
        task = self._task
        self._task = None
        if task is not None:
            await task


__all__ = ["REFRESH_SECONDS", "RefreshLoop"]
