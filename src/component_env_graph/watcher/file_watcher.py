"""Background file system watcher that keeps a graph current."""

import logging
import os
import threading
from typing import Callable, List, Optional

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from .debouncer import ChangeDebouncer
from ..graph import ComponentEnvGraph

logger = logging.getLogger(__name__)


class GraphEventHandler(FileSystemEventHandler):
    """
    Forward file system events to a debouncer.

    Both ends of a move are reported so the old path gets evicted and the
    new one registered.
    """

    def __init__(self, watcher: "ProjectWatcher"):
        super().__init__()
        self.watcher = watcher

    def on_any_event(self, event: FileSystemEvent) -> None:
        if event.event_type in ("opened", "closed", "closed_no_write"):
            return

        paths = [event.src_path]
        dest_path = getattr(event, "dest_path", None)
        if dest_path:
            paths.append(dest_path)

        if event.is_directory:
            if event.event_type in ("deleted", "moved"):
                self.watcher.request_full_scan()
            return

        for path in paths:
            self.watcher.notify(os.fsdecode(path))


class ProjectWatcher:
    """
    Watch a project and rebuild its graph on change.

    PATTERN: Run in background, debounce rapid changes
    CRITICAL: Builds on the same graph never overlap
    """

    def __init__(
        self,
        graph: ComponentEnvGraph,
        debounce_seconds: float = 0.3,
        on_rebuild: Optional[Callable[[List[str]], None]] = None,
    ):
        """
        Initialize watcher.

        Args:
            graph: Graph to keep current
            debounce_seconds: Debounce window
            on_rebuild: Optional callback with the paths of each completed rebuild
                (empty list after a full scan)
        """
        self.graph = graph
        self.root_path = graph.root_dir
        self.debounce_seconds = debounce_seconds
        self.on_rebuild = on_rebuild

        self._observer = None
        self._running = False
        self._build_lock = threading.Lock()
        self._rebuilds = 0
        self._failures = 0
        self._debouncer = ChangeDebouncer(
            debounce_seconds=debounce_seconds,
            callback=self._on_changes,
        )

    @property
    def is_running(self) -> bool:
        """Check if watcher is running."""
        return self._running

    def start(self) -> bool:
        """
        Start watching for file changes.

        Returns:
            True if started successfully
        """
        if self._running:
            logger.warning("Watcher already running")
            return True

        try:
            self._observer = Observer()
            self._observer.schedule(GraphEventHandler(self), self.root_path, recursive=True)
            self._observer.start()
        except OSError as e:
            logger.error(f"Failed to start watcher: {e}")
            self._observer = None
            return False

        self._running = True
        logger.info(f"Started watching: {self.root_path}")
        return True

    def stop(self) -> None:
        """Stop watching and drop pending changes."""
        if not self._running:
            return

        self._running = False
        self._debouncer.cancel()

        if self._observer:
            self._observer.stop()
            self._observer.join(timeout=5)
            self._observer = None

        logger.info("Stopped watching")

    def notify(self, file_path: str) -> None:
        """Queue a changed file if the graph tracks its kind of path."""
        if self.graph.is_tracked(file_path):
            self._debouncer.add_change(file_path)

    def request_full_scan(self) -> None:
        """Queue a full rescan, e.g. after a directory was removed or moved."""
        self._debouncer.request_full_scan()

    def _on_changes(self, changed_files: Optional[List[str]]) -> None:
        """Rebuild the graph from a debounced batch (None means full scan)."""
        paths = changed_files or []
        logger.debug(f"Rebuilding for {len(paths) or 'all'} changed files")

        with self._build_lock:
            try:
                self.graph.build(changed_files or None)
            except Exception as e:
                self._failures += 1
                logger.error(f"Error rebuilding graph: {e}")
                return
            self._rebuilds += 1

        if self.on_rebuild:
            try:
                self.on_rebuild(paths)
            except Exception as e:
                logger.error(f"Error in rebuild callback: {e}")

    def get_status(self) -> dict:
        """Get watcher status."""
        return {
            "running": self._running,
            "root_path": self.root_path,
            "debounce_seconds": self.debounce_seconds,
            "pending_changes": self._debouncer.get_pending_count(),
            "full_scan_pending": self._debouncer.full_scan_pending,
            "rebuilds": self._rebuilds,
            "failures": self._failures,
        }
