"""Update notification for graph consumers."""

import logging
from typing import Callable, List

logger = logging.getLogger(__name__)

Listener = Callable[[], None]


class UpdateNotifier:
    """
    Observer list fired after each successful build.

    CRITICAL: A failing listener must not affect the engine or other listeners
    """

    def __init__(self):
        """Initialize with no listeners."""
        self._listeners: List[Listener] = []

    def subscribe(self, listener: Listener) -> None:
        """Register a zero-argument callback."""
        self._listeners.append(listener)

    def unsubscribe(self, listener: Listener) -> bool:
        """
        Remove a previously registered callback.

        Returns:
            True if the listener was registered
        """
        try:
            self._listeners.remove(listener)
        except ValueError:
            return False
        return True

    def fire(self) -> None:
        """Invoke every listener once, isolating failures."""
        for listener in list(self._listeners):
            try:
                listener()
            except Exception:
                logger.exception(f"Error in update listener {listener!r}")

    def __len__(self) -> int:
        return len(self._listeners)
