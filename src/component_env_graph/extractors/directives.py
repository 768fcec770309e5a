"""Directive and import extraction using Tree-sitter."""

import logging
import os
from typing import Dict, List, Optional, Sequence

from tree_sitter import Node, Parser
from tree_sitter_language_pack import get_parser

from .base import SourceParser
from .resolver import ModuleResolver
from ..constants import CLIENT_DIRECTIVES
from ..exceptions import ConfigurationError, SourceParseError
from ..models import ParseResult

logger = logging.getLogger(__name__)


class TreeSitterSourceParser(SourceParser):
    """
    Tree-sitter based directive and import extractor.

    PATTERN: Load grammars once, reuse parsers for every file
    CRITICAL: Only the first top-level statement can be the client directive
    GOTCHA: Tree-sitter uses bytes, not strings
    """

    # Grammar used for each source extension
    GRAMMAR_BY_EXTENSION: Dict[str, str] = {
        ".ts": "typescript",
        ".mts": "typescript",
        ".cts": "typescript",
        ".tsx": "tsx",
        ".js": "tsx",
        ".jsx": "tsx",
        ".mjs": "tsx",
        ".cjs": "tsx",
    }

    def __init__(self, resolver: Optional[ModuleResolver] = None):
        """
        Initialize parser and load grammars.

        Args:
            resolver: Specifier resolver (relative-only when omitted)
        """
        super().__init__()
        self.resolver = resolver or ModuleResolver()
        self.parsers: Dict[str, Parser] = {}
        self._load_grammars()

    def _load_grammars(self) -> None:
        """Load the Tree-sitter grammars this parser needs."""
        for grammar in sorted(set(self.GRAMMAR_BY_EXTENSION.values())):
            try:
                self.parsers[grammar] = get_parser(grammar)
            except Exception as e:
                raise ConfigurationError(f"Failed to load {grammar} grammar: {e}") from e
            logger.debug(f"Loaded {grammar} grammar")

    def parse(self, path: str, text: str) -> ParseResult:
        """
        Parse a file and resolve its static imports.

        Args:
            path: Absolute file path
            text: File content

        Returns:
            ParseResult with the directive flag and resolved targets

        Raises:
            SourceParseError: If the file contains syntax errors
        """
        grammar = self.GRAMMAR_BY_EXTENSION.get(os.path.splitext(path)[1].lower(), "tsx")
        tree = self.parsers[grammar].parse(text.encode("utf-8"))
        root = tree.root_node

        if root.has_error:
            self._add_error(f"Syntax error in {path}")
            raise SourceParseError(path, "syntax error")

        statements = [child for child in root.named_children if child.type != "hash_bang_line"]

        resolved: List[str] = []
        unresolved: List[str] = []
        for specifier in self.collect_module_specifiers(statements):
            target = self.resolver.resolve(specifier, path)
            if target is not None:
                resolved.append(target)
            elif self.resolver.is_local(specifier) and self.resolver.may_resolve_to_source(specifier):
                unresolved.append(specifier)

        return ParseResult(
            has_client_directive=self.has_client_directive(statements),
            resolved_import_targets=tuple(resolved),
            unresolved_local_specifiers=tuple(unresolved),
        )

    @staticmethod
    def has_client_directive(statements: Sequence[Node]) -> bool:
        """
        Check if the first top-level statement is the client directive.

        Only the exact forms 'use client' and "use client", with or without a
        trailing semicolon, count. A leading comment disqualifies the file.
        """
        if not statements:
            return False
        first = statements[0]
        if first.type != "expression_statement":
            return False
        text = _node_text(first).strip()
        return text in CLIENT_DIRECTIVES

    @staticmethod
    def collect_module_specifiers(statements: Sequence[Node]) -> List[str]:
        """
        Collect module specifiers of static imports and re-exports.

        Imports come first, then re-exports, each in source order.
        """
        imports: List[str] = []
        exports: List[str] = []

        for statement in statements:
            if statement.type == "import_statement":
                target = imports
            elif statement.type == "export_statement":
                target = exports
            else:
                continue

            source = statement.child_by_field_name("source")
            if source is None:
                continue
            specifier = _string_value(source)
            if specifier:
                target.append(specifier)

        return imports + exports


def _node_text(node: Node) -> str:
    """Decode the source text of a node."""
    return (node.text or b"").decode("utf-8", errors="replace")


def _string_value(node: Node) -> Optional[str]:
    """Strip the quotes from a string literal node."""
    raw = _node_text(node)
    if len(raw) >= 2 and raw[0] in "'\"" and raw[-1] == raw[0]:
        return raw[1:-1]
    return None
