"""Persistent JSON config helpers.

Stores timing preferences, hidden-file visibility, the syntax style, and the
expanded directories per opened root. All access is defensive: malformed or
missing config falls back safely.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path

from platformdirs import user_config_dir

from ..tree_pane.clicks import CLICK_DELAY_SECONDS
from .watch_refresh import REFRESH_SECONDS

APP_NAME = "lazyexplorer"
CONFIG_FILENAME = "config.json"
CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME
DEFAULT_STYLE = "monokai"


@dataclass(frozen=True)
class ExplorerSettings:
    click_delay_seconds: float = CLICK_DELAY_SECONDS
    refresh_seconds: float = REFRESH_SECONDS
    show_hidden: bool = False
    style: str = DEFAULT_STYLE


def load_config() -> dict[str, object]:
    """Load the persisted JSON config object.

    Returns an empty dict when the file is missing, unreadable, malformed, or
    does not decode to a top-level JSON object.
    """
    try:
        data = json.loads(CONFIG_PATH.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return {}
    return data if isinstance(data, dict) else {}


def save_config(data: dict[str, object]) -> None:
    """Persist config data as pretty-printed JSON.

    Filesystem errors are ignored to keep runtime behavior non-fatal when the
    config cannot be written.
    """
    try:
        CONFIG_PATH.parent.mkdir(parents=True, exist_ok=True)
        CONFIG_PATH.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
    except OSError:
        pass


def _positive_number(value: object, default: float) -> float:
    """Accept positive ints/floats; booleans and anything else fall back."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return default
    if value <= 0:
        return default
    return float(value)


def load_settings() -> ExplorerSettings:
    data = load_config()
    click_delay_ms = _positive_number(data.get("click_delay_ms"), CLICK_DELAY_SECONDS * 1000.0)
    show_hidden = data.get("show_hidden")
    style = data.get("style")
    return ExplorerSettings(
        click_delay_seconds=click_delay_ms / 1000.0,
        refresh_seconds=_positive_number(data.get("refresh_seconds"), REFRESH_SECONDS),
        show_hidden=show_hidden if isinstance(show_hidden, bool) else False,
        style=style.strip() if isinstance(style, str) and style.strip() else DEFAULT_STYLE,
    )


def save_show_hidden(show_hidden: bool) -> None:
    config = load_config()
    config["show_hidden"] = bool(show_hidden)
    save_config(config)


def load_expanded_paths(root_key: str) -> list[str]:
    """Return persisted expanded keys for ``root_key``; invalid items dropped."""
    value = load_config().get("expanded_paths")
    if not isinstance(value, dict):
        return []
    raw = value.get(root_key)
    if not isinstance(raw, list):
        return []
    return [item for item in raw if isinstance(item, str) and item]


def save_expanded_paths(root_key: str, expanded: set[str]) -> None:
    config = load_config()
    value = config.get("expanded_paths")
    by_root = dict(value) if isinstance(value, dict) else {}
    by_root[root_key] = sorted(key for key in expanded if key != root_key)
    config["expanded_paths"] = by_root
    save_config(config)


__all__ = [
    "APP_NAME",
    "CONFIG_PATH",
    "DEFAULT_STYLE",
    "ExplorerSettings",
    "load_config",
    "save_config",
    "load_settings",
    "save_show_hidden",
    "load_expanded_paths",
    "save_expanded_paths",
]
