"""Glob-based exclusion of files from the graph."""

import logging
import os
import re
from typing import Iterable, List, Optional, Pattern

from .constants import DEFAULT_EXCLUDE

logger = logging.getLogger(__name__)

# Name that cannot occur in a real path, used to probe whole-directory patterns
_PROBE = "\x00"


def to_posix(path: str) -> str:
    """Normalize a path and convert its separators to forward slashes."""
    normalized = os.path.normpath(path)
    if os.sep != "/":
        normalized = normalized.replace(os.sep, "/")
    return normalized


def translate_glob(pattern: str) -> str:
    """
    Translate a glob pattern into an anchored regular expression.

    `**/` matches zero or more directories, a trailing `**` matches everything
    below, `*` and `?` never cross a `/`. Wildcards match dotfiles too.

    Args:
        pattern: POSIX glob pattern

    Returns:
        Regular expression source
    """
    parts: List[str] = []
    i, n = 0, len(pattern)

    while i < n:
        c = pattern[i]

        if c == "*":
            j = i
            while j < n and pattern[j] == "*":
                j += 1
            at_segment_start = i == 0 or pattern[i - 1] == "/"

            if j - i >= 2 and at_segment_start:
                if j < n and pattern[j] == "/":
                    parts.append("(?:[^/]*/)*")
                    i = j + 1
                    continue
                if j == n:
                    parts.append(".*")
                    i = j
                    continue

            parts.append("[^/]*")
            i = j
            continue

        if c == "?":
            parts.append("[^/]")
        elif c == "[":
            end = pattern.find("]", i + 2 if pattern[i + 1 : i + 2] in ("!", "]") else i + 1)
            if end == -1:
                parts.append(re.escape(c))
            else:
                body = pattern[i + 1 : end]
                if body.startswith("!"):
                    body = "^" + body[1:]
                body = body.replace("\\", "\\\\")
                parts.append(f"[{body}]")
                i = end + 1
                continue
        else:
            parts.append(re.escape(c))
        i += 1

    return "(?s:" + "".join(parts) + r")\Z"


class ExclusionMatcher:
    """
    Decide whether a path is excluded from the graph.

    PATTERN: Compile patterns once, match POSIX-normalized absolute paths
    CRITICAL: Matching is case-sensitive, relative patterns are anchored at the root
    """

    def __init__(
        self,
        root_dir: str,
        extra_patterns: Optional[Iterable[str]] = None,
        include_defaults: bool = True,
    ):
        """
        Initialize matcher.

        Args:
            root_dir: Absolute project root
            extra_patterns: User patterns appended to the defaults
            include_defaults: Whether to start from DEFAULT_EXCLUDE
        """
        self.root_dir = to_posix(root_dir).rstrip("/")
        self.patterns: List[str] = list(DEFAULT_EXCLUDE) if include_defaults else []
        if extra_patterns:
            self.patterns.extend(extra_patterns)

        self._compiled: List[Pattern[str]] = [self._compile(p) for p in self.patterns]
        logger.debug(f"Compiled {len(self._compiled)} exclusion patterns for {self.root_dir}")

    def _compile(self, pattern: str) -> Pattern[str]:
        """Anchor a pattern at the project root unless it is absolute or starts with `**/`."""
        posix_pattern = pattern.replace("\\", "/") if os.sep != "/" else pattern
        if posix_pattern.startswith("./"):
            posix_pattern = posix_pattern[2:]

        # `**/` already spans any leading directories, including those above the root
        if posix_pattern.startswith(("/", "**/")) or os.path.isabs(pattern):
            return re.compile(translate_glob(posix_pattern))

        return re.compile(re.escape(self.root_dir + "/") + translate_glob(posix_pattern))

    def is_excluded(self, path: str) -> bool:
        """
        Check if a path matches any exclusion pattern.

        Args:
            path: Absolute file path

        Returns:
            True if the path must never become a graph node
        """
        candidate = to_posix(path)
        return any(regex.match(candidate) for regex in self._compiled)

    def prunes_directory(self, dir_path: str) -> bool:
        """
        Check if every path below a directory is excluded.

        Lets a scan skip trees such as node_modules without walking them.
        """
        base = to_posix(dir_path).rstrip("/")
        return self.is_excluded(f"{base}/{_PROBE}") and self.is_excluded(
            f"{base}/{_PROBE}/{_PROBE}"
        )

    def __call__(self, path: str) -> bool:
        return self.is_excluded(path)
