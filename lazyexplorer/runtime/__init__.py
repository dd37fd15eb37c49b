"""Runtime wiring: application object, refresh loop, and persisted settings."""

from .app import ExplorerApp
from .watch_refresh import REFRESH_SECONDS, RefreshLoop

__all__ = ["ExplorerApp", "REFRESH_SECONDS", "RefreshLoop"]
