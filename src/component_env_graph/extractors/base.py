"""Base parser interface."""

import logging
from abc import ABC, abstractmethod
from typing import List

from ..models import ParseResult

logger = logging.getLogger(__name__)


class SourceParser(ABC):
    """
    Abstract parser/resolver collaborator.

    Reports whether a file declares the client directive and which project
    files it statically imports or re-exports. Any implementation, including
    a test double returning canned results, can back the graph.
    """

    def __init__(self):
        """Initialize parser."""
        self.logger = logger
        self._errors: List[str] = []

    @abstractmethod
    def parse(self, path: str, text: str) -> ParseResult:
        """
        Extract the directive flag and resolved imports of one file.

        Args:
            path: Absolute file path
            text: File content

        Returns:
            ParseResult for the file

        Raises:
            SourceParseError: If the file is not syntactically valid
        """
        pass

    def get_errors(self) -> List[str]:
        """Get parse errors recorded since the last clear."""
        return self._errors.copy()

    def clear_errors(self) -> None:
        """Clear recorded parse errors."""
        self._errors.clear()

    def _add_error(self, error: str) -> None:
        """Record an error message."""
        self._errors.append(error)
        self.logger.warning(error)
