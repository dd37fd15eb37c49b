"""Tree-pane UI state: visual rows, reconciliation, and click handling."""

from .clicks import (
    CLICK_DELAY_SECONDS,
    COMMIT,
    PREVIEW,
    ClickDisambiguator,
    ClickRouter,
    EntryActivated,
    Intent,
)
from .reconcile import ReconcileResult, TreeReconciler
from .rendering import DEFAULT_THEME, PLAIN_THEME, TreeTheme, format_row, render_tree
from .visual import VisualNode, VisualTree, build_visual_node

__all__ = [
    "CLICK_DELAY_SECONDS",
    "COMMIT",
    "PREVIEW",
    "ClickDisambiguator",
    "ClickRouter",
    "EntryActivated",
    "Intent",
    "ReconcileResult",
    "TreeReconciler",
    "DEFAULT_THEME",
    "PLAIN_THEME",
    "TreeTheme",
    "format_row",
    "render_tree",
    "VisualNode",
    "VisualTree",
    "build_visual_node",
]
