"""Single vs. double click disambiguation and selection tracking."""

from __future__ import annotations

import unittest

from lazyexplorer.file_tree_model.types import DirectoryNode, FileNode
from lazyexplorer.timers import ManualScheduler
from lazyexplorer.tree_pane.clicks import COMMIT, PREVIEW, ClickDisambiguator, ClickRouter, EntryActivated
from lazyexplorer.tree_pane.visual import VisualTree, build_visual_node


class ClickDisambiguatorTests(unittest.TestCase):
    def setUp(self) -> None:
        self.scheduler = ManualScheduler()
        self.intents: list[str] = []
        self.machine = ClickDisambiguator(
            "root/a.ts",
            scheduler=self.scheduler,
            on_intent=self.intents.append,
            delay=0.25,
        )

    def test_single_click_previews_after_delay(self) -> None:
        self.machine.click()
        self.assertEqual(self.machine.state, "pending_single")

        self.scheduler.advance(0.24)
        self.assertEqual(self.intents, [])

        self.scheduler.advance(0.01)
        self.assertEqual(self.intents, [PREVIEW])
        self.assertEqual(self.machine.state, "idle")

    def test_double_click_commits_without_preview(self) -> None:
        self.machine.click()
        self.scheduler.advance(0.1)
        self.machine.click()

        self.assertEqual(self.intents, [COMMIT])
        self.assertEqual(self.scheduler.pending(), 0)

        self.scheduler.advance(1.0)
        self.assertEqual(self.intents, [COMMIT])

    def test_three_clicks_commit_then_arm_again(self) -> None:
        self.machine.click()
        self.machine.click()
        self.machine.click()
        self.scheduler.advance(0.25)

        self.assertEqual(self.intents, [COMMIT, PREVIEW])

    def test_reset_cancels_pending_preview(self) -> None:
        self.machine.click()
        self.machine.reset()
        self.scheduler.advance(1.0)

        self.assertEqual(self.intents, [])
        self.assertEqual(self.machine.state, "idle")


class ClickRouterTests(unittest.TestCase):
    def setUp(self) -> None:
        root = DirectoryNode(name="root", key="root", loaded=True)
        root.children["src"] = DirectoryNode(name="src", key="root/src")
        root.children["a.ts"] = FileNode(name="a.ts", key="root/a.ts")
        root.children["b.ts"] = FileNode(name="b.ts", key="root/b.ts")
        self.visual = VisualTree()
        self.visual.mount(root, {"root"})
        self.scheduler = ManualScheduler()
        self.events: list[EntryActivated] = []
        self.directory_clicks: list[str] = []
        self.router = ClickRouter(
            self.visual,
            scheduler=self.scheduler,
            on_activate=self.events.append,
            on_directory_click=lambda node: self.directory_clicks.append(node.key),
        )

    def test_click_selects_row_immediately(self) -> None:
        self.assertTrue(self.router.click("root/a.ts"))

        self.assertEqual(self.router.selected_key, "root/a.ts")
        self.assertTrue(self.visual.find("root/a.ts").selected)
        self.assertEqual(self.events, [])

    def test_selection_moves_between_rows(self) -> None:
        self.router.click("root/a.ts")
        self.router.click("root/b.ts")

        self.assertFalse(self.visual.find("root/a.ts").selected)
        self.assertTrue(self.visual.find("root/b.ts").selected)

    def test_single_click_emits_preview_event(self) -> None:
        self.router.click("root/a.ts")
        self.scheduler.advance(0.25)

        self.assertEqual(self.events, [EntryActivated("root/a.ts", "root/a.ts", PREVIEW)])

    def test_double_click_emits_single_commit(self) -> None:
        self.router.click("root/a.ts")
        self.router.click("root/a.ts")
        self.scheduler.advance(1.0)

        self.assertEqual([event.intent for event in self.events], [COMMIT])

    def test_rows_disambiguate_independently(self) -> None:
        self.router.click("root/a.ts")
        self.router.click("root/b.ts")
        self.scheduler.advance(0.25)

        self.assertEqual(
            [(event.file_key, event.intent) for event in self.events],
            [("root/a.ts", PREVIEW), ("root/b.ts", PREVIEW)],
        )

    def test_directory_click_bypasses_disambiguation(self) -> None:
        self.router.click("root/src")

        self.assertEqual(self.directory_clicks, ["root/src"])
        self.assertEqual(self.scheduler.pending(), 0)
        self.assertEqual(self.router.selected_key, "root/src")

    def test_unknown_key_is_ignored(self) -> None:
        self.assertFalse(self.router.click("root/missing.ts"))
        self.assertIsNone(self.router.selected)

    def test_pending_preview_dropped_when_row_removed(self) -> None:
        self.router.click("root/a.ts")
        self.visual.detach(self.visual.find("root/a.ts"))

        self.scheduler.advance(0.25)

        self.assertEqual(self.events, [])

    def test_pending_preview_dropped_when_file_becomes_directory(self) -> None:
        self.router.click("root/a.ts")
        old = self.visual.find("root/a.ts")
        self.visual.replace(old, build_visual_node(DirectoryNode(name="a.ts", key="root/a.ts"), "root", set()))

        self.scheduler.advance(0.25)

        self.assertEqual(self.events, [])

    def test_prune_resets_machine_of_row_that_became_directory(self) -> None:
        self.router.click("root/a.ts")
        old = self.visual.find("root/a.ts")
        self.visual.replace(old, build_visual_node(DirectoryNode(name="a.ts", key="root/a.ts"), "root", set()))

        self.router.prune()

        self.assertEqual(self.scheduler.pending(), 0)
        self.assertEqual(self.events, [])

    def test_second_click_on_replaced_file_row_does_not_commit(self) -> None:
        self.router.click("root/a.ts")
        old = self.visual.find("root/a.ts")
        self.visual.replace(old, build_visual_node(FileNode(name="a.ts", key="root/a.ts"), "root", set()))

        self.router.click("root/a.ts")
        self.scheduler.advance(0.25)

        self.assertEqual([event.intent for event in self.events], [PREVIEW])

    def test_prune_forgets_removed_rows(self) -> None:
        self.router.click("root/a.ts")
        self.visual.detach(self.visual.find("root/a.ts"))

        self.router.prune()
        self.scheduler.advance(0.25)

        self.assertIsNone(self.router.selected)
        self.assertEqual(self.scheduler.pending(), 0)
        self.assertEqual(self.events, [])


if __name__ == "__main__":
    unittest.main()
