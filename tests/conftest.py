"""Shared fixtures for component environment graph tests."""

import os
from pathlib import Path
from typing import Dict, Iterable, Optional, Set

import pytest

from component_env_graph.exceptions import SourceParseError
from component_env_graph.extractors import SourceParser
from component_env_graph.models import ParseResult

TSCONFIG = '{ "compilerOptions": { "jsx": "react" }, "include": ["**/*"] }'


class ProjectFiles:
    """Temporary TypeScript project on disk."""

    def __init__(self, root: Path):
        self.root = root

    @property
    def root_dir(self) -> str:
        return str(self.root)

    def path(self, relative: str) -> str:
        return os.path.join(str(self.root), relative)

    def write(self, relative: str, content: str) -> str:
        full_path = self.path(relative)
        os.makedirs(os.path.dirname(full_path), exist_ok=True)
        with open(full_path, "w", encoding="utf-8") as f:
            f.write(content)
        return full_path

    def write_all(self, files: Dict[str, str]) -> None:
        for relative, content in files.items():
            self.write(relative, content)

    def remove(self, relative: str) -> str:
        full_path = self.path(relative)
        if os.path.exists(full_path):
            os.remove(full_path)
        return full_path


class CannedParser(SourceParser):
    """Parser double returning canned results keyed by absolute path."""

    def __init__(
        self,
        results: Optional[Dict[str, ParseResult]] = None,
        broken: Iterable[str] = (),
    ):
        super().__init__()
        self.results: Dict[str, ParseResult] = dict(results or {})
        self.broken: Set[str] = set(broken)
        self.calls = []

    def set(self, path: str, client: bool = False, imports: Iterable[str] = (), unresolved=()) -> None:
        self.results[path] = ParseResult(
            has_client_directive=client,
            resolved_import_targets=tuple(imports),
            unresolved_local_specifiers=tuple(unresolved),
        )

    def parse(self, path: str, text: str) -> ParseResult:
        self.calls.append(path)
        if path in self.broken:
            raise SourceParseError(path, "syntax error")
        return self.results.get(path, ParseResult())


@pytest.fixture
def project(tmp_path):
    """Create an empty project with a tsconfig.json."""
    root = tmp_path / "project"
    root.mkdir()
    (root / "tsconfig.json").write_text(TSCONFIG)
    return ProjectFiles(root)


@pytest.fixture
def canned_parser():
    """Parser double with no canned results."""
    return CannedParser()


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep COMPONENT_ENV_* variables from leaking into tests."""
    for key in list(os.environ):
        if key.startswith("COMPONENT_ENV_"):
            monkeypatch.delenv(key, raising=False)
