"""Batching of file change notifications into builds."""

import logging
import threading
from typing import Callable, Dict, List, Optional

logger = logging.getLogger(__name__)

# Receives the changed paths, or None when a full scan was requested
BatchCallback = Callable[[Optional[List[str]]], None]


class ChangeDebouncer:
    """
    Collect change notifications until the window has been quiet.

    PATTERN: Every notification restarts the window
    CRITICAL: A path appears at most once per batch, in arrival order
    GOTCHA: A full scan request swallows the paths queued with it
    """

    def __init__(
        self,
        debounce_seconds: float = 0.3,
        callback: Optional[BatchCallback] = None,
    ):
        """
        Initialize debouncer.

        Args:
            debounce_seconds: Quiet period before a batch is delivered
            callback: Receives each batch
        """
        self.debounce_seconds = debounce_seconds
        self.callback = callback

        # dict keeps insertion order and drops duplicates
        self._pending: Dict[str, None] = {}
        self._full_scan = False
        self._timer: Optional[threading.Timer] = None
        self._lock = threading.Lock()

    def add_change(self, file_path: str) -> None:
        """
        Queue a changed path.

        Args:
            file_path: Absolute path that changed
        """
        with self._lock:
            self._pending[file_path] = None
            self._restart_timer()

    def request_full_scan(self) -> None:
        """Make the next batch a full scan."""
        with self._lock:
            self._full_scan = True
            self._restart_timer()

    def _restart_timer(self) -> None:
        # Caller holds the lock
        if self._timer:
            self._timer.cancel()
        self._timer = threading.Timer(self.debounce_seconds, self._flush)
        self._timer.daemon = True
        self._timer.start()

    def _flush(self) -> None:
        """Deliver the pending batch."""
        with self._lock:
            files = list(self._pending)
            full_scan = self._full_scan
            self._pending.clear()
            self._full_scan = False
            self._timer = None

        if not (files or full_scan) or not self.callback:
            return

        # Runs outside the lock so notifications keep queuing during a build
        try:
            self.callback(None if full_scan else files)
        except Exception as e:
            logger.error(f"Error in debounce callback: {e}")

    def flush_now(self) -> None:
        """Deliver the pending batch without waiting for the window."""
        with self._lock:
            if self._timer:
                self._timer.cancel()
                self._timer = None
        self._flush()

    def cancel(self) -> None:
        """Drop the pending batch."""
        with self._lock:
            if self._timer:
                self._timer.cancel()
                self._timer = None
            self._pending.clear()
            self._full_scan = False

    def get_pending_count(self) -> int:
        """Get number of queued paths."""
        with self._lock:
            return len(self._pending)

    @property
    def full_scan_pending(self) -> bool:
        """Whether the next batch is a full scan."""
        with self._lock:
            return self._full_scan
