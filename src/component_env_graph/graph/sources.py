"""Parse set: the source text of every tracked file."""

import logging
from typing import Dict, List, Optional

from ..models import SourceFile

logger = logging.getLogger(__name__)


class SourceRegistry:
    """
    In-memory set of registered source files.

    A path is either registered with its current text or absent; there is no
    partially loaded state.
    """

    def __init__(self):
        """Initialize empty registry."""
        self._sources: Dict[str, SourceFile] = {}

    def __contains__(self, path: str) -> bool:
        return path in self._sources

    def __len__(self) -> int:
        return len(self._sources)

    def get(self, path: str) -> Optional[SourceFile]:
        """Get the registered source for a path."""
        return self._sources.get(path)

    def paths(self) -> List[str]:
        """Get all registered paths."""
        return list(self._sources.keys())

    def add(self, path: str) -> SourceFile:
        """
        Register a file by reading it from disk.

        Raises:
            OSError: If the file cannot be read
        """
        source = SourceFile(path=path, text=self._read(path))
        self._sources[path] = source
        return source

    def refresh(self, path: str) -> SourceFile:
        """
        Re-read a registered file in place.

        Raises:
            OSError: If the file cannot be read
        """
        return self.add(path)

    def remove(self, path: str) -> bool:
        """Drop a path. Returns True if it was registered."""
        return self._sources.pop(path, None) is not None

    @staticmethod
    def _read(path: str) -> str:
        with open(path, "r", encoding="utf-8", errors="ignore") as f:
            return f.read()
