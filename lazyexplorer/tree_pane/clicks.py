"""Click interpretation for tree rows: preview vs. commit intent.

A single click on a file arms a short timer; if the timer fires the entry is
opened as a preview, if a second click lands first the entry is committed.
Selection changes synchronously on every click, independent of the decision.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Literal

from ..timers import Scheduler, TimerHandle
from .visual import VisualNode, VisualTree

logger = logging.getLogger(__name__)

Intent = Literal["preview", "commit"]
ClickState = Literal["idle", "pending_single"]

PREVIEW: Intent = "preview"
COMMIT: Intent = "commit"
CLICK_DELAY_SECONDS = 0.25


@dataclass(frozen=True)
class EntryActivated:
    """A file row was actuated with the given intent."""

    path: str
    file_key: str
    intent: Intent


class ClickDisambiguator:
    """Two-state machine for one file entry."""

    def __init__(
        self,
        key: str,
        *,
        scheduler: Scheduler,
        on_intent: Callable[[Intent], None],
        delay: float = CLICK_DELAY_SECONDS,
    ) -> None:
        self.key = key
        self.state: ClickState = "idle"
        self.node_id: int | None = None
        self._scheduler = scheduler
        self._on_intent = on_intent
        self._delay = delay
        self._timer: TimerHandle | None = None

    def click(self, node_id: int | None = None) -> None:
        if self.state == "pending_single" and node_id is not None and node_id != self.node_id:
            # The row was replaced since the first click; start over.
            self.reset()
        if self.state == "pending_single":
            self._cancel_timer()
            self.state = "idle"
            self._on_intent(COMMIT)
            return
        self.state = "pending_single"
        self.node_id = node_id
        self._timer = self._scheduler.call_later(self._delay, self._timeout)

    def _timeout(self) -> None:
        if self.state != "pending_single":
            return
        self._timer = None
        self.state = "idle"
        self._on_intent(PREVIEW)

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def reset(self) -> None:
        self._cancel_timer()
        self.state = "idle"
        self.node_id = None


class ClickRouter:
    """Route row clicks to per-entry disambiguators and track the selection.

    Directory rows do not disambiguate; they are handed to
    ``on_directory_click`` (expand/collapse) right away.
    """

    def __init__(
        self,
        visual_tree: VisualTree,
        *,
        scheduler: Scheduler,
        on_activate: Callable[[EntryActivated], None],
        on_directory_click: Callable[[VisualNode], None] | None = None,
        delay: float = CLICK_DELAY_SECONDS,
    ) -> None:
        self.visual_tree = visual_tree
        self.scheduler = scheduler
        self.delay = delay
        self._on_activate = on_activate
        self._on_directory_click = on_directory_click
        self._machines: dict[str, ClickDisambiguator] = {}
        self.selected: VisualNode | None = None

    @property
    def selected_key(self) -> str | None:
        return self.selected.key if self.selected is not None else None

    def machine_for(self, key: str) -> ClickDisambiguator:
        machine = self._machines.get(key)
        if machine is None:
            machine = ClickDisambiguator(
                key,
                scheduler=self.scheduler,
                on_intent=lambda intent: self._emit(key, intent),
                delay=self.delay,
            )
            self._machines[key] = machine
        return machine

    def select(self, visual: VisualNode) -> None:
        if self.selected is not None and self.selected is not visual:
            self.selected.selected = False
        visual.selected = True
        self.selected = visual

    def click(self, key: str) -> bool:
        """Handle a click on the row for ``key``; return ``False`` if unknown."""
        visual = self.visual_tree.find(key)
        if visual is None:
            return False
        self.select(visual)
        if visual.is_dir:
            if self._on_directory_click is not None:
                self._on_directory_click(visual)
            return True
        self.machine_for(key).click(visual.node_id)
        return True

    def _emit(self, key: str, intent: Intent) -> None:
        machine = self._machines.get(key)
        visual = self.visual_tree.find(key)
        if visual is None or not visual.attached:
            logger.debug("dropping %s intent for removed entry %s", intent, key)
            return
        if visual.is_dir or machine is None or machine.node_id != visual.node_id:
            logger.debug("dropping %s intent for replaced entry %s", intent, key)
            return
        self._on_activate(EntryActivated(path=visual.path, file_key=visual.key, intent=intent))

    def prune(self) -> None:
        """Drop state machines whose rows left the visual tree or changed kind."""
        for key, machine in list(self._machines.items()):
            visual = self.visual_tree.find(key)
            if visual is None or visual.is_dir:
                self._machines.pop(key).reset()
            elif machine.node_id is not None and machine.node_id != visual.node_id:
                machine.reset()
        if self.selected is not None and not self.selected.attached:
            self.selected = None


__all__ = [
    "Intent",
    "ClickState",
    "PREVIEW",
    "COMMIT",
    "CLICK_DELAY_SECONDS",
    "EntryActivated",
    "ClickDisambiguator",
    "ClickRouter",
]
