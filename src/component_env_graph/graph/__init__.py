"""Dependency graph engine."""

from .classifier import compute_component_types, summarize
from .engine import ComponentEnvGraph
from .notifier import UpdateNotifier
from .reconciler import FileSetReconciler
from .sources import SourceRegistry
from .store import GraphNodeStore

__all__ = [
    "ComponentEnvGraph",
    "FileSetReconciler",
    "GraphNodeStore",
    "SourceRegistry",
    "UpdateNotifier",
    "compute_component_types",
    "summarize",
]
