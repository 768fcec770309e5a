"""File watcher for real-time graph updates."""

from .debouncer import ChangeDebouncer
from .file_watcher import GraphEventHandler, ProjectWatcher

__all__ = [
    "ChangeDebouncer",
    "GraphEventHandler",
    "ProjectWatcher",
]
