"""Synchronization of the parse set with the file system."""

import logging
import os
from typing import Iterator, Optional, Sequence, Tuple

from .sources import SourceRegistry
from .store import GraphNodeStore
from ..exclusion import ExclusionMatcher
from ..models import ReconcileResult

logger = logging.getLogger(__name__)


class FileSetReconciler:
    """
    Keep the tracked file set consistent with the disk.

    PATTERN: Full scan or incremental refresh, then one deletion pass
    CRITICAL: Excluded paths never stay registered or become nodes
    GOTCHA: Files may vanish between a change notification and processing
    """

    def __init__(
        self,
        root_dir: str,
        sources: SourceRegistry,
        store: GraphNodeStore,
        exclusion: ExclusionMatcher,
        extensions: Sequence[str],
    ):
        """
        Initialize reconciler.

        Args:
            root_dir: Absolute project root
            sources: Parse set to synchronize
            store: Node store to evict from
            exclusion: Exclusion predicate
            extensions: Source file extensions in scope
        """
        self.root_dir = root_dir
        self.sources = sources
        self.store = store
        self.exclusion = exclusion
        self.extensions: Tuple[str, ...] = tuple(extensions)

    def in_scope(self, path: str) -> bool:
        """Check if a path has a source extension."""
        return path.endswith(self.extensions)

    def reconcile(self, changed_files: Optional[Sequence[str]] = None) -> ReconcileResult:
        """
        Update the parse set and compute the affected paths.

        Args:
            changed_files: Changed absolute paths (None or empty for a full scan)

        Returns:
            ReconcileResult with the affected set
        """
        result = ReconcileResult(full_scan=not changed_files)

        if changed_files:
            self._refresh_changed_files(changed_files, result)
        else:
            self._add_all_source_files(result)

        self._remove_deleted_files(result)

        if result.full_scan:
            # Nodes without a source are included so they get dropped
            result.affected.update(self.sources.paths())
            result.affected.update(self.store.paths())

        logger.debug(
            f"Reconciled: {len(result.affected)} affected, "
            f"{len(result.registered)} registered, {len(result.evicted)} evicted"
        )
        return result

    def discover(self) -> Iterator[str]:
        """
        Walk the project root and yield every in-scope, non-excluded file.

        Excluded directory trees are pruned without being walked.
        """
        for dirpath, dirnames, filenames in os.walk(self.root_dir):
            dirnames[:] = sorted(
                d for d in dirnames if not self.exclusion.prunes_directory(os.path.join(dirpath, d))
            )
            for name in sorted(filenames):
                path = os.path.join(dirpath, name)
                if self.in_scope(path) and not self.exclusion.is_excluded(path):
                    yield path

    def _add_all_source_files(self, result: ReconcileResult) -> None:
        """Register or refresh every discovered file, evict the rest."""
        discovered = list(self.discover())
        discovered_set = set(discovered)

        for stale in self.sources.paths():
            if stale not in discovered_set:
                self._evict(stale, result)

        for path in discovered:
            try:
                if path in self.sources:
                    self.sources.refresh(path)
                else:
                    self.sources.add(path)
                    result.registered.add(path)
            except OSError as e:
                logger.warning(f"Failed to read {path}: {e}")
                self.sources.remove(path)

    def _refresh_changed_files(self, changed_files: Sequence[str], result: ReconcileResult) -> None:
        """Apply an explicit list of changed paths."""
        for changed in changed_files:
            if self.exclusion.is_excluded(changed) or not self.in_scope(changed):
                self._evict(changed, result)
                continue

            if changed in self.sources:
                try:
                    self.sources.refresh(changed)
                except OSError as e:
                    logger.debug(f"Dropping {changed}, refresh failed: {e}")
                    self.sources.remove(changed)
            else:
                try:
                    self.sources.add(changed)
                    result.registered.add(changed)
                except OSError as e:
                    # Deleted before we got to it, etc.
                    logger.debug(f"Skipping {changed}: {e}")

            result.affected.add(changed)

    def _remove_deleted_files(self, result: ReconcileResult) -> None:
        """Evict every tracked file that no longer exists on disk."""
        for path in self.sources.paths():
            if not os.path.exists(path):
                self._evict(path, result)

    def _evict(self, path: str, result: ReconcileResult) -> None:
        """Drop a path from the parse set and the node store."""
        removed_source = self.sources.remove(path)
        removed_node = self.store.delete(path)
        result.registered.discard(path)
        if removed_source or removed_node:
            result.evicted.add(path)
            logger.debug(f"Evicted {path}")
