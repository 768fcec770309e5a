"""Graph data models."""

from .graph_models import (
    ComponentType,
    FileNode,
    ParseResult,
    SourceFile,
    ReconcileResult,
)

__all__ = [
    "ComponentType",
    "FileNode",
    "ParseResult",
    "SourceFile",
    "ReconcileResult",
]
