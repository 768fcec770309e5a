"""Component environment graph.

Classifies every source file of a React Server Components project as
client, server or universal by propagating the "use client" directive
through the static import graph:
- Full-project scans and incremental updates from changed paths
- Tree-sitter directive and import extraction with tsconfig resolution
- Glob-based exclusion of tests, stories, mocks and build output
- Background file watching
"""

from .config import GraphConfig, load_config
from .constants import DEFAULT_EXCLUDE
from .exceptions import ComponentEnvGraphError, ConfigurationError, SourceParseError
from .exclusion import ExclusionMatcher
from .extractors import ModuleResolver, SourceParser, TreeSitterSourceParser, load_tsconfig
from .graph import ComponentEnvGraph, compute_component_types, summarize
from .models import ComponentType, FileNode, ParseResult

__version__ = "0.1.0"

__all__ = [
    # Main classes
    "ComponentEnvGraph",
    "ExclusionMatcher",
    # Models
    "ComponentType",
    "FileNode",
    "ParseResult",
    # Collaborators
    "SourceParser",
    "TreeSitterSourceParser",
    "ModuleResolver",
    "load_tsconfig",
    # Classification
    "compute_component_types",
    "summarize",
    # Configuration
    "GraphConfig",
    "load_config",
    "DEFAULT_EXCLUDE",
    # Errors
    "ComponentEnvGraphError",
    "ConfigurationError",
    "SourceParseError",
]
