"""End-to-end browsing flow: expand, preview by single click, commit by double click."""

from __future__ import annotations

import unittest

from lazyexplorer.file_tree_model.handles import MemoryHandleAdapter
from lazyexplorer.runtime.app import ExplorerApp
from lazyexplorer.timers import ManualScheduler
from lazyexplorer.tree_pane.rendering import PLAIN_THEME
from lazyexplorer.workspace.session import WorkspaceSession


class PreviewThenCommitScenarioTests(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self) -> None:
        self.adapter = MemoryHandleAdapter(
            "root",
            {"src": {"index.ts": "export const x = 1;\n"}, "README.md": "# demo\n"},
        )
        self.session = WorkspaceSession()
        self.scheduler = ManualScheduler()
        self.app = ExplorerApp(self.session, scheduler=self.scheduler)
        await self.app.open(self.adapter)

    async def test_preview_replaced_by_committed_document(self) -> None:
        views = self.session.views
        self.assertEqual(list(self.app.root.children), ["src", "README.md"])

        await self.app.expand("root/src")
        self.assertEqual(list(self.app.root.children["src"].children), ["index.ts"])

        self.app.click("root/src/index.ts")
        self.scheduler.advance(0.3)
        await self.app.drain()

        previews = [view for view in self.session.open_views if view.is_preview]
        self.assertEqual([view.document_key for view in previews], ["root/src/index.ts"])
        preview = previews[0]

        self.app.click("root/README.md")
        self.app.click("root/README.md")
        await self.app.drain()

        self.assertTrue(preview.closed)
        self.assertTrue(preview.model.disposed)
        self.assertFalse(self.session.preview)
        [readme] = self.session.open_views
        self.assertEqual(readme.document_key, "root/README.md")
        self.assertFalse(readme.is_preview)
        self.assertIs(views.active, readme)
        self.assertEqual(
            views.log,
            [
                ("create:preview", "root/src/index.ts"),
                ("close", "root/src/index.ts"),
                ("create:permanent", "root/README.md"),
            ],
        )
        self.assertEqual(
            self.app.render(PLAIN_THEME),
            ["▾ root/", "  ▾ src/", "      index.ts", ">     README.md ●"],
        )

    async def test_refresh_during_preview_keeps_document(self) -> None:
        await self.app.expand("root/src")
        self.app.click("root/src/index.ts")
        self.scheduler.advance(0.25)
        await self.app.drain()

        self.adapter.put_file("root/src/extra.ts", "")
        result = await self.app.refresh()

        self.assertEqual(result.attached, ["root/src/extra.ts"])
        self.assertEqual(self.session.preview.key, "root/src/index.ts")
        self.assertTrue(self.app.visual.find("root/src/index.ts").selected)

    async def test_removed_entry_cancels_pending_preview(self) -> None:
        self.app.click("root/README.md")
        self.adapter.remove("root/README.md")
        await self.app.refresh()

        self.scheduler.advance(0.25)
        await self.app.drain()

        self.assertEqual(self.session.open_views, [])
        self.assertIsNone(self.app.clicks.selected)

    async def test_file_replaced_by_directory_cancels_pending_preview(self) -> None:
        self.app.click("root/README.md")
        self.adapter.remove("root/README.md")
        self.adapter.put_directory("root/README.md", {"inner.txt": ""})
        result = await self.app.refresh()

        self.scheduler.advance(0.3)
        await self.app.drain()

        self.assertEqual(result.replaced, ["root/README.md"])
        self.assertEqual(self.session.open_views, [])
        self.assertIsNone(self.app.last_error)


if __name__ == "__main__":
    unittest.main()
