"""Dependency graph engine for component environment classification."""

import logging
import os
import time
from types import MappingProxyType
from typing import Any, Dict, Iterable, Mapping, Optional, Sequence

from .classifier import compute_component_types, summarize
from .notifier import Listener, UpdateNotifier
from .reconciler import FileSetReconciler
from .sources import SourceRegistry
from .store import GraphNodeStore
from ..constants import DEFAULT_EXTENSIONS, DEFAULT_TSCONFIG, JS_EXTENSIONS
from ..exceptions import ConfigurationError
from ..exclusion import ExclusionMatcher
from ..extractors import ModuleResolver, SourceParser, TreeSitterSourceParser, TsConfig, load_tsconfig
from ..models import ComponentType, FileNode

logger = logging.getLogger(__name__)


class ComponentEnvGraph:
    """
    Builds and manages the dependency graph of a React Server Components project.

    UI tooling reads `nodes` to learn whether each file runs on the client,
    the server, or both.

    PATTERN: Reconcile files, re-extract affected nodes, reclassify everything
    CRITICAL: One build at a time per instance; callers serialize builds
    """

    def __init__(
        self,
        root_dir: str,
        tsconfig_file_path: Optional[str] = None,
        exclude: Optional[Iterable[str]] = None,
        parser: Optional[SourceParser] = None,
        extensions: Optional[Sequence[str]] = None,
    ):
        """
        Initialize graph.

        Args:
            root_dir: Project root directory
            tsconfig_file_path: Module-resolution config (default <root>/tsconfig.json)
            exclude: Patterns appended to the default exclusions
            parser: Parser/resolver collaborator (default Tree-sitter with tsconfig resolution)
            extensions: Source extensions in scope (default .ts/.tsx, plus .js/.jsx under allowJs)

        Raises:
            ConfigurationError: If the root or the module-resolution config is invalid
        """
        self.root_dir = os.path.abspath(root_dir)
        if not os.path.isdir(self.root_dir):
            raise ConfigurationError(f"Project root is not a directory: {self.root_dir}")

        self.tsconfig: Optional[TsConfig] = None
        if parser is None or tsconfig_file_path:
            self.tsconfig = load_tsconfig(
                tsconfig_file_path or os.path.join(self.root_dir, DEFAULT_TSCONFIG)
            )
        if parser is None:
            parser = TreeSitterSourceParser(ModuleResolver(self.tsconfig))
        self.parser = parser

        if extensions is None:
            extensions = DEFAULT_EXTENSIONS
            if self.tsconfig and self.tsconfig.allow_js:
                extensions = extensions + JS_EXTENSIONS
        self.extensions = tuple(extensions)

        self.exclusion = ExclusionMatcher(self.root_dir, exclude)

        self._sources = SourceRegistry()
        self._store = GraphNodeStore()
        self._reconciler = FileSetReconciler(
            root_dir=self.root_dir,
            sources=self._sources,
            store=self._store,
            exclusion=self.exclusion,
            extensions=self.extensions,
        )
        self._notifier = UpdateNotifier()
        self._nodes: Mapping[str, FileNode] = MappingProxyType({})
        self._build_count = 0
        self._last_build_seconds = 0.0

    @property
    def nodes(self) -> Mapping[str, FileNode]:
        """Read-only nodes as of the last successful build."""
        return self._nodes

    def subscribe(self, listener: Listener) -> None:
        """
        Register a listener for graph update events.

        Args:
            listener: Zero-argument callback invoked after each build
        """
        self._notifier.subscribe(listener)

    def unsubscribe(self, listener: Listener) -> bool:
        """Remove a graph update listener."""
        return self._notifier.unsubscribe(listener)

    def build(self, changed_files: Optional[Sequence[str]] = None) -> None:
        """
        Rebuild the graph.

        With changed_files, only those paths (and importers waiting on newly
        created files) are re-parsed. Otherwise a full scan is performed.

        Args:
            changed_files: Changed absolute file paths (omit for a full scan)
        """
        started = time.perf_counter()

        result = self._reconciler.reconcile(changed_files)
        affected = set(result.affected)

        if not result.full_scan and result.registered:
            # Importers written before their target can resolve it now
            waiting = self._store.pending_importers() - affected
            if waiting:
                logger.debug(f"Re-parsing {len(waiting)} importers with unresolved specifiers")
                affected |= waiting

        stats = self._store.apply_affected(affected, self._sources, self.parser)
        self.classify_component_types()
        self._nodes = MappingProxyType(self._store.snapshot())

        if logger.isEnabledFor(logging.DEBUG):
            for file_path, node in self._nodes.items():
                logger.debug(
                    f"node after classify {file_path}: is_client={node.is_client}, type={node.type}"
                )

        self._build_count += 1
        self._last_build_seconds = time.perf_counter() - started
        logger.info(
            f"Built graph ({'full' if result.full_scan else 'incremental'}): "
            f"{len(self._nodes)} nodes, {stats['updated']} updated, {stats['removed']} removed "
            f"in {self._last_build_seconds:.3f}s"
        )

        self._notifier.fire()

    def classify_component_types(self) -> None:
        """
        Classify all nodes as client, server or universal.

        - client: Entry point or dependency of a file with a "use client" directive
        - server: Not reachable from any client entry
        - universal: Imported from both client and server components
        """
        types = compute_component_types(self._store.view())
        self._store.apply_types(types)

    def get_component_type(self, file_path: str) -> Optional[ComponentType]:
        """Get the classification of a file, if it is a node."""
        node = self._nodes.get(file_path)
        return node.type if node else None

    def is_tracked(self, file_path: str) -> bool:
        """Check if a path is in scope and not excluded."""
        return self._reconciler.in_scope(file_path) and not self.exclusion.is_excluded(file_path)

    def get_statistics(self) -> Dict[str, Any]:
        """
        Get graph statistics.

        Returns:
            Dict with node counts per type, tracked sources and build info
        """
        return {
            "root_dir": self.root_dir,
            "tsconfig": self.tsconfig.config_path if self.tsconfig else None,
            "total_nodes": len(self._nodes),
            "tracked_sources": len(self._sources),
            "by_type": summarize(self._nodes),
            "builds": self._build_count,
            "last_build_seconds": self._last_build_seconds,
            "listeners": len(self._notifier),
        }
