"""Command-line front door for lazyexplorer.

Opens a local directory as a lazily loaded tree, optionally expands paths and
opens one file through the same click path the interactive tree uses, then
prints the tree (and the opened document). ``--watch`` keeps refreshing.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from .errors import ExplorerError
from .file_tree_model.handles import LocalHandleAdapter
from .highlight import colorize_document
from .runtime.app import ExplorerApp
from .runtime.config import (
    ExplorerSettings,
    load_expanded_paths,
    load_settings,
    save_expanded_paths,
    save_show_hidden,
)
from .runtime.watch_refresh import RefreshLoop
from .tree_pane.reconcile import ReconcileResult
from .tree_pane.rendering import DEFAULT_THEME, PLAIN_THEME


def _positive_float(value: str) -> float:
    """argparse type for positive float values."""
    try:
        parsed = float(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid number: {value!r}") from exc
    if parsed <= 0:
        raise argparse.ArgumentTypeError("value must be > 0")
    return parsed


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Browse a directory tree lazily and open files as preview or permanent documents."
    )
    parser.add_argument("path", nargs="?", default=None, help="Directory to open. Defaults to current directory.")
    parser.add_argument(
        "-e",
        "--expand",
        action="append",
        default=[],
        metavar="DIR",
        help="Expand DIR (relative to the root). May be repeated.",
    )
    parser.add_argument("-o", "--open", dest="open_path", metavar="FILE", help="Open FILE after loading the tree.")
    parser.add_argument(
        "--commit",
        action="store_true",
        help="Open FILE as a permanent document (double click) instead of a preview.",
    )
    parser.add_argument("--watch", action="store_true", help="Keep refreshing and reprint the tree on change.")
    parser.add_argument("--interval", type=_positive_float, default=None, help="Refresh interval in seconds.")
    parser.add_argument("--show-hidden", action="store_true", default=None, help="Include dot files.")
    parser.add_argument("--remember", action="store_true", help="Restore and persist expanded directories.")
    parser.add_argument("--style", default=None, help="Pygments style name for opened documents.")
    parser.add_argument("--no-color", action="store_true", help="Disable color output.")
    parser.add_argument("-v", "--verbose", action="count", default=0, help="Log more (repeat for debug).")
    return parser


def _configure_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity > 1:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s", stream=sys.stderr)


def _resolve_under(root: Path, raw: str) -> Path:
    candidate = Path(raw)
    target = (candidate if candidate.is_absolute() else root / candidate).resolve()
    if not target.is_relative_to(root):
        raise SystemExit(f"Path is outside {root}: {raw}")
    return target


async def _reveal(app: ExplorerApp, root: Path, target: Path) -> None:
    """Expand every ancestor of ``target`` below ``root``."""
    current = root
    for part in target.relative_to(root).parts[:-1]:
        current = current / part
        await app.expand(str(current))


async def _open_file(app: ExplorerApp, key: str, commit: bool, delay: float) -> None:
    if not app.click(key):
        raise SystemExit(f"Not in tree: {key}")
    if commit:
        app.click(key)
    else:
        await asyncio.sleep(delay + 0.05)
    await app.drain()
    if app.last_error is not None:
        raise app.last_error


def _print_tree(app: ExplorerApp, no_color: bool) -> None:
    theme = PLAIN_THEME if no_color else DEFAULT_THEME
    sys.stdout.write("\n".join(app.render(theme)) + "\n")
    sys.stdout.flush()


def _remember(args: argparse.Namespace, root_key: str, app: ExplorerApp) -> None:
    save_expanded_paths(root_key, app.session.expanded)
    if args.show_hidden is not None:
        save_show_hidden(args.show_hidden)


async def run(args: argparse.Namespace, settings: ExplorerSettings) -> None:
    root = Path(args.path or Path.cwd()).resolve()
    if not root.is_dir():
        raise SystemExit(f"Not a directory: {root}")

    show_hidden = settings.show_hidden if args.show_hidden is None else args.show_hidden
    adapter = LocalHandleAdapter(root, show_hidden=show_hidden)
    app = ExplorerApp(click_delay=settings.click_delay_seconds)

    restored = load_expanded_paths(adapter.root_key) if args.remember else []
    await app.open(adapter, restored)
    for raw in args.expand:
        target = _resolve_under(root, raw)
        await _reveal(app, root, target)
        await app.expand(str(target))

    if args.open_path:
        target = _resolve_under(root, args.open_path)
        await _reveal(app, root, target)
        await _open_file(app, str(target), args.commit, settings.click_delay_seconds)

    _print_tree(app, args.no_color)

    view = app.session.current_view
    if view is not None:
        style = args.style or settings.style
        label = "preview" if view.is_preview else "open"
        sys.stdout.write(f"\n── {view.title} ({label}) ──\n")
        sys.stdout.write(colorize_document(view.model.text, view.title, style, args.no_color))
        sys.stdout.flush()

    if args.watch:
        def on_result(result: ReconcileResult | None) -> None:
            if result is not None and result.changed:
                _print_tree(app, args.no_color)

        loop = RefreshLoop(app.refresh, interval=args.interval or settings.refresh_seconds, on_result=on_result)
        loop.start()
        try:
            await asyncio.Event().wait()
        finally:
            await loop.stop()
            if args.remember:
                _remember(args, adapter.root_key, app)
    elif args.remember:
        _remember(args, adapter.root_key, app)


def main(argv: list[str] | None = None) -> None:
    """Parse CLI arguments and run the explorer."""
    args = build_parser().parse_args(argv)
    _configure_logging(args.verbose)
    settings = load_settings()
    try:
        asyncio.run(run(args, settings))
    except ExplorerError as exc:
        raise SystemExit(str(exc)) from exc
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
