"""Resolution of import specifiers to absolute file paths."""

import logging
import os
from typing import List, Optional, Tuple

from .tsconfig import TsConfig
from ..constants import ASSET_EXTENSIONS

logger = logging.getLogger(__name__)

# Specifier extensions TypeScript maps back to their source counterparts
_SOURCE_EXTENSION_MAP = {
    ".js": (".ts", ".tsx"),
    ".jsx": (".tsx",),
    ".mjs": (".mts",),
    ".cjs": (".cts",),
}


class ModuleResolver:
    """
    Resolve import specifiers the way the TypeScript compiler does.

    PATTERN: Relative first, then tsconfig paths aliases, then baseUrl
    CRITICAL: Only specifiers that land on an existing file resolve
    GOTCHA: Package imports stay unresolved; they are outside the graph
    """

    def __init__(self, tsconfig: Optional[TsConfig] = None):
        """
        Initialize resolver.

        Args:
            tsconfig: Loaded module-resolution settings (None for relative-only)
        """
        self.tsconfig = tsconfig
        self.extensions: Tuple[str, ...] = (".ts", ".tsx", ".d.ts")
        if tsconfig and tsconfig.allow_js:
            self.extensions = self.extensions + (".js", ".jsx")

    @staticmethod
    def is_relative(specifier: str) -> bool:
        """Check if a specifier is relative to the importing file."""
        return specifier in (".", "..") or specifier.startswith(("./", "../"))

    def is_local(self, specifier: str) -> bool:
        """
        Check if a specifier is expected to point into the project.

        Relative, absolute and path-aliased specifiers are local; bare
        package names are not.
        """
        if self.is_relative(specifier) or os.path.isabs(specifier):
            return True
        return self._match_alias(specifier) is not None

    @staticmethod
    def may_resolve_to_source(specifier: str) -> bool:
        """Check that a specifier does not name a stylesheet, image or other asset."""
        last_segment = specifier.rstrip("/").rsplit("/", 1)[-1]
        ext = os.path.splitext(last_segment.split("?", 1)[0])[1].lower()
        return ext not in ASSET_EXTENSIONS

    def resolve(self, specifier: str, importer: str) -> Optional[str]:
        """
        Resolve a specifier written in `importer`.

        Args:
            specifier: Module specifier as written in the source
            importer: Absolute path of the importing file

        Returns:
            Absolute path of the target file, or None
        """
        if self.is_relative(specifier):
            base = os.path.join(os.path.dirname(importer), specifier)
            return self._resolve_candidates(base)

        if os.path.isabs(specifier):
            return self._resolve_candidates(specifier)

        if self.tsconfig is None:
            return None

        alias = self._match_alias(specifier)
        if alias is not None:
            pattern, captured = alias
            for target in self.tsconfig.paths[pattern]:
                substituted = target.replace("*", captured, 1)
                resolved = self._resolve_candidates(
                    os.path.join(self.tsconfig.paths_base, substituted)
                )
                if resolved:
                    return resolved

        if self.tsconfig.base_url:
            return self._resolve_candidates(os.path.join(self.tsconfig.base_url, specifier))

        return None

    def _match_alias(self, specifier: str) -> Optional[Tuple[str, str]]:
        """
        Find the paths pattern matching a specifier.

        Exact patterns win, then the wildcard pattern with the longest prefix.

        Returns:
            (pattern, text captured by the wildcard) or None
        """
        if not self.tsconfig or not self.tsconfig.paths:
            return None

        best: Optional[Tuple[str, str]] = None
        best_prefix_len = -1

        for pattern in self.tsconfig.paths:
            if "*" not in pattern:
                if pattern == specifier:
                    return pattern, ""
                continue
            prefix, _, suffix = pattern.partition("*")
            if (
                specifier.startswith(prefix)
                and specifier.endswith(suffix)
                and len(specifier) >= len(prefix) + len(suffix)
                and len(prefix) > best_prefix_len
            ):
                captured = specifier[len(prefix) : len(specifier) - len(suffix)]
                best = (pattern, captured)
                best_prefix_len = len(prefix)

        return best

    def _resolve_candidates(self, base: str) -> Optional[str]:
        """Try file and directory-index candidates for a base path."""
        base = os.path.normpath(base)
        for candidate in self._candidates(base):
            if os.path.isfile(candidate):
                return candidate
        return None

    def _candidates(self, base: str) -> List[str]:
        """List candidate file paths in TypeScript lookup order."""
        candidates: List[str] = []
        root, ext = os.path.splitext(base)

        if ext in self.extensions or base.endswith(".d.ts"):
            candidates.append(base)
        if ext in _SOURCE_EXTENSION_MAP:
            candidates.extend(root + mapped for mapped in _SOURCE_EXTENSION_MAP[ext])

        candidates.extend(base + extension for extension in self.extensions)
        candidates.extend(os.path.join(base, "index" + extension) for extension in self.extensions)
        return candidates
