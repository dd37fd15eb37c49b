"""Serialized periodic refresh loop."""

from __future__ import annotations

import asyncio
import unittest

from lazyexplorer.errors import EnumerationError
from lazyexplorer.runtime.watch_refresh import RefreshLoop


class RefreshLoopTests(unittest.IsolatedAsyncioTestCase):
    async def test_cycles_never_overlap(self) -> None:
        active = 0
        peak = 0
        calls = 0

        async def refresh() -> int:
            nonlocal active, peak, calls
            active += 1
            peak = max(peak, active)
            calls += 1
            await asyncio.sleep(0.02)
            active -= 1
            return calls

        loop = RefreshLoop(refresh, interval=0.001)
        loop.start()
        await asyncio.sleep(0.1)
        await loop.stop()

        self.assertGreaterEqual(calls, 2)
        self.assertEqual(peak, 1)
        self.assertEqual(active, 0)
        self.assertFalse(loop.running)

    async def test_results_passed_to_callback(self) -> None:
        results: list[str] = []

        async def refresh() -> str:
            return "ok"

        loop = RefreshLoop(refresh, interval=0.001, on_result=results.append)
        loop.start()
        while not results:
            await asyncio.sleep(0.005)
        await loop.stop()

        self.assertEqual(set(results), {"ok"})
        self.assertEqual(loop.cycles, len(results))

    async def test_failed_cycle_keeps_loop_running(self) -> None:
        attempts = 0

        async def refresh() -> None:
            nonlocal attempts
            attempts += 1
            if attempts == 1:
                raise EnumerationError("gone", key="root")

        loop = RefreshLoop(refresh, interval=0.001)
        with self.assertLogs("lazyexplorer.runtime.watch_refresh", level="WARNING"):
            loop.start()
            while attempts < 2:
                await asyncio.sleep(0.005)
        await loop.stop()

        self.assertGreaterEqual(loop.cycles, 1)

    async def test_stop_before_first_interval_skips_refresh(self) -> None:
        calls = 0

        async def refresh() -> None:
            nonlocal calls
            calls += 1

        loop = RefreshLoop(refresh, interval=10.0)
        loop.start()
        self.assertTrue(loop.running)
        await loop.stop()

        self.assertEqual(calls, 0)

    async def test_start_twice_runs_one_task(self) -> None:
        async def refresh() -> None:
            return None

        loop = RefreshLoop(refresh, interval=10.0)
        loop.start()
        task = loop._task
        loop.start()

        self.assertIs(loop._task, task)
        await loop.stop()


if __name__ == "__main__":
    unittest.main()
