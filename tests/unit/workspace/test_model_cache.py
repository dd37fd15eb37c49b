"""Shared document models keyed by document key."""

from __future__ import annotations

import asyncio
import unittest

from lazyexplorer.errors import ReadError
from lazyexplorer.workspace.documents import InMemoryModelProvider
from lazyexplorer.workspace.model_cache import EditorModelCache, decode_text


class CountingLoader:
    def __init__(self, data: bytes | str = b"hello") -> None:
        self.data = data
        self.calls = 0

    async def __call__(self) -> bytes | str:
        self.calls += 1
        await asyncio.sleep(0)
        return self.data


class EditorModelCacheTests(unittest.IsolatedAsyncioTestCase):
    def setUp(self) -> None:
        self.provider = InMemoryModelProvider()
        self.cache = EditorModelCache(self.provider)

    async def test_same_key_returns_same_model(self) -> None:
        loader = CountingLoader()

        first = await self.cache.get_or_create("root/a.txt", loader)
        second = await self.cache.get_or_create("root/a.txt", loader)

        self.assertIs(first, second)
        self.assertEqual(loader.calls, 1)
        self.assertEqual(first.text, "hello")

    async def test_unsaved_edits_survive_reopen(self) -> None:
        model = await self.cache.get_or_create("root/a.txt", CountingLoader())
        model.apply_edit("changed")

        again = await self.cache.get_or_create("root/a.txt", CountingLoader(b"disk"))

        self.assertEqual(again.text, "changed")
        self.assertTrue(again.is_dirty)

    async def test_concurrent_loads_share_one_read(self) -> None:
        loader = CountingLoader()

        first, second = await asyncio.gather(
            self.cache.get_or_create("root/a.txt", loader),
            self.cache.get_or_create("root/a.txt", loader),
        )

        self.assertIs(first, second)
        self.assertEqual(loader.calls, 1)

    async def test_failed_load_registers_nothing(self) -> None:
        async def broken() -> bytes:
            raise OSError("gone")

        with self.assertRaises(ReadError) as ctx:
            await self.cache.get_or_create("root/a.txt", broken)

        self.assertEqual(ctx.exception.key, "root/a.txt")
        self.assertNotIn("root/a.txt", self.cache)
        self.assertEqual(self.provider.models, {})

        model = await self.cache.get_or_create("root/a.txt", CountingLoader())
        self.assertEqual(model.text, "hello")

    async def test_provider_failure_wakes_joined_callers(self) -> None:
        class FailingProvider(InMemoryModelProvider):
            def create_model(self, key: str, text: str):
                raise ValueError("no room")

        cache = EditorModelCache(FailingProvider())

        async def slow() -> bytes:
            await asyncio.sleep(0.01)
            return b"data"

        first = asyncio.create_task(cache.get_or_create("root/a.txt", slow))
        await asyncio.sleep(0)
        second = asyncio.create_task(cache.get_or_create("root/a.txt", slow))

        results = await asyncio.wait_for(asyncio.gather(first, second, return_exceptions=True), timeout=1.0)

        self.assertIsInstance(results[0], ValueError)
        self.assertIsInstance(results[1], ValueError)
        self.assertNotIn("root/a.txt", cache)

    async def test_cancelled_load_wakes_joined_callers(self) -> None:
        gate = asyncio.Event()

        async def blocked() -> bytes:
            await gate.wait()
            return b"data"

        first = asyncio.create_task(self.cache.get_or_create("root/a.txt", blocked))
        await asyncio.sleep(0)
        second = asyncio.create_task(self.cache.get_or_create("root/a.txt", blocked))
        await asyncio.sleep(0)

        first.cancel()
        with self.assertRaises(ReadError):
            await asyncio.wait_for(second, timeout=1.0)
        self.assertTrue(first.cancelled())

        model = await self.cache.get_or_create("root/a.txt", CountingLoader())
        self.assertEqual(model.text, "hello")

    async def test_adopts_model_already_known_to_provider(self) -> None:
        existing = self.provider.create_model("root/a.txt", "from host")
        loader = CountingLoader()

        model = await self.cache.get_or_create("root/a.txt", loader)

        self.assertIs(model, existing)
        self.assertEqual(loader.calls, 0)

    async def test_release_disposes_model(self) -> None:
        model = await self.cache.get_or_create("root/a.txt", CountingLoader())

        self.cache.release("root/a.txt")

        self.assertTrue(model.disposed)
        self.assertNotIn("root/a.txt", self.cache)
        self.assertEqual(len(self.cache), 0)
        self.cache.release("root/a.txt")

    def test_register_creates_empty_model_once(self) -> None:
        model = self.cache.register("untitled-1/notes.txt")

        self.assertIs(self.cache.register("untitled-1/notes.txt", "ignored"), model)
        self.assertEqual(model.text, "")
        self.assertEqual(self.cache.keys(), ["untitled-1/notes.txt"])


class DecodeTextTests(unittest.TestCase):
    def test_utf8(self) -> None:
        self.assertEqual(decode_text("é".encode("utf-8")), "é")

    def test_latin1_fallback(self) -> None:
        self.assertEqual(decode_text(b"caf\xe9"), "café")

    def test_str_passthrough(self) -> None:
        self.assertEqual(decode_text("plain"), "plain")


if __name__ == "__main__":
    unittest.main()
