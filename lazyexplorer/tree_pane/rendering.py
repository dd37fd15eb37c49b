"""Text rendering of the visual tree for terminal hosts."""

from __future__ import annotations

from dataclasses import dataclass

from .visual import VisualNode


@dataclass(frozen=True)
class TreeTheme:
    """ANSI palette for tree rows."""

    name: str
    reset: str
    tree_marker: str
    tree_dir: str
    tree_file: str
    tree_open: str


DEFAULT_THEME = TreeTheme(
    name="default",
    reset="\033[0m",
    tree_marker="\033[38;5;44m",
    tree_dir="\033[1;34m",
    tree_file="\033[38;5;252m",
    tree_open="\033[38;5;214m",
)

PLAIN_THEME = TreeTheme(
    name="plain",
    reset="",
    tree_marker="",
    tree_dir="",
    tree_file="",
    tree_open="",
)


def selected_with_ansi(text: str, theme: TreeTheme) -> str:
    """Apply selection styling without discarding existing ANSI colors."""
    if not text:
        return text
    if not theme.reset:
        return f"> {text}"
    # Keep reverse video active even when the text contains internal resets.
    return "\033[7m" + text.replace("\033[0m", "\033[0;7m") + "\033[0m"


def format_row(
    node: VisualNode,
    depth: int,
    theme: TreeTheme = DEFAULT_THEME,
    open_keys: frozenset[str] = frozenset(),
    preview_key: str | None = None,
) -> str:
    """Render one row: indent, expand marker, name, open-document badge."""
    indent = "  " * depth
    reset = theme.reset
    if node.is_dir:
        marker = "▾ " if node.expanded else "▸ "
        row = f"{indent}{theme.tree_marker}{marker}{reset}{theme.tree_dir}{node.name}/{reset}"
    else:
        badge = ""
        if node.key == preview_key:
            badge = f" {theme.tree_open}(preview){reset}"
        elif node.key in open_keys:
            badge = f" {theme.tree_open}●{reset}"
        row = f"{indent}  {theme.tree_file}{node.name}{reset}{badge}"
    return selected_with_ansi(row, theme) if node.selected else row


def render_tree(
    root: VisualNode | None,
    theme: TreeTheme = DEFAULT_THEME,
    open_keys: frozenset[str] = frozenset(),
    preview_key: str | None = None,
) -> list[str]:
    if root is None:
        return []
    return [
        format_row(node, depth, theme, open_keys=open_keys, preview_key=preview_key)
        for depth, node in root.visible_rows()
    ]


__all__ = [
    "TreeTheme",
    "DEFAULT_THEME",
    "PLAIN_THEME",
    "selected_with_ansi",
    "format_row",
    "render_tree",
]
