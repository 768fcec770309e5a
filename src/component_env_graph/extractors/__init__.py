"""Directive and import extraction."""

from .base import SourceParser
from .directives import TreeSitterSourceParser
from .resolver import ModuleResolver
from .tsconfig import TsConfig, load_tsconfig, strip_json_comments

__all__ = [
    "SourceParser",
    "TreeSitterSourceParser",
    "ModuleResolver",
    "TsConfig",
    "load_tsconfig",
    "strip_json_comments",
]
