"""Ownership of graph nodes."""

import logging
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Set, Tuple

from .sources import SourceRegistry
from ..exceptions import SourceParseError
from ..extractors.base import SourceParser
from ..models import ComponentType, FileNode

logger = logging.getLogger(__name__)


class GraphNodeStore:
    """
    Mapping from absolute file path to FileNode.

    PATTERN: Single owner, single writer
    CRITICAL: Nodes are immutable; updates replace them
    """

    def __init__(self):
        """Initialize empty store."""
        self._nodes: Dict[str, FileNode] = {}
        # Paths whose last parse left local specifiers unresolved
        self._unresolved: Dict[str, Tuple[str, ...]] = {}

    def __contains__(self, path: str) -> bool:
        return path in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)

    def get(self, path: str) -> Optional[FileNode]:
        """Get the node for a path."""
        return self._nodes.get(path)

    def paths(self) -> List[str]:
        """Get all node paths."""
        return list(self._nodes.keys())

    def set(self, node: FileNode) -> None:
        """Create or overwrite a node."""
        self._nodes[node.file_path] = node

    def delete(self, path: str) -> bool:
        """Delete a node. Returns True if it existed."""
        self._unresolved.pop(path, None)
        return self._nodes.pop(path, None) is not None

    def apply_affected(
        self,
        affected: Iterable[str],
        sources: SourceRegistry,
        parser: SourceParser,
    ) -> Dict[str, int]:
        """
        Recompute the node of every affected path.

        Paths with a registered source are parsed and written; paths without
        one, or whose source fails to parse, lose their node.

        Args:
            affected: Paths to recompute
            sources: Parse set
            parser: Directive and import extractor

        Returns:
            Counts of updated and removed nodes
        """
        stats = {"updated": 0, "removed": 0}

        for file_path in sorted(affected):
            source = sources.get(file_path)
            if source is None:
                if self.delete(file_path):
                    stats["removed"] += 1
                continue

            try:
                parsed = parser.parse(file_path, source.text)
            except SourceParseError as e:
                logger.warning(f"Leaving {file_path} out of the graph: {e}")
                if self.delete(file_path):
                    stats["removed"] += 1
                continue

            node = FileNode(
                file_path=file_path,
                is_client=parsed.has_client_directive,
                imports=parsed.resolved_import_targets,
            )
            self.set(node)
            if parsed.unresolved_local_specifiers:
                self._unresolved[file_path] = parsed.unresolved_local_specifiers
            else:
                self._unresolved.pop(file_path, None)
            stats["updated"] += 1

            logger.debug(
                f"node (updated) {file_path}: is_client={node.is_client}, imports={list(node.imports)}"
            )

        return stats

    def pending_importers(self) -> Set[str]:
        """Get paths that import local specifiers which did not resolve."""
        return set(self._unresolved.keys())

    def apply_types(self, types: Mapping[str, ComponentType]) -> None:
        """Attach classifications to nodes."""
        for file_path, component_type in types.items():
            node = self._nodes.get(file_path)
            if node is not None and node.type != component_type:
                self._nodes[file_path] = node.with_type(component_type)

    def view(self) -> Mapping[str, FileNode]:
        """Get a live read-only view of the nodes."""
        return MappingProxyType(self._nodes)

    def snapshot(self) -> Dict[str, FileNode]:
        """Get a copy of the current nodes."""
        return dict(self._nodes)
