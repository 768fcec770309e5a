"""Data models for the component environment graph."""

from enum import Enum
from typing import Optional, Set, Tuple

from pydantic import BaseModel, ConfigDict, Field


class ComponentType(str, Enum):
    """Runtime environment a file executes in."""

    CLIENT = "client"  # Declares the directive or is reachable from a file that does
    SERVER = "server"  # Not reachable from any client entry
    UNIVERSAL = "universal"  # Imported from both client and server files


class FileNode(BaseModel):
    """A single analyzed file in the dependency graph."""

    model_config = ConfigDict(frozen=True)

    file_path: str = Field(description="Absolute file path, the node identity")
    is_client: bool = Field(default=False, description="First statement is the client directive")
    imports: Tuple[str, ...] = Field(
        default_factory=tuple, description="Resolved absolute paths of static imports/re-exports"
    )
    type: Optional[ComponentType] = Field(default=None, description="Environment classification")

    def with_type(self, component_type: ComponentType) -> "FileNode":
        """Return a copy of this node carrying the given classification."""
        return self.model_copy(update={"type": component_type})


class ParseResult(BaseModel):
    """What the parser collaborator reports about one source file."""

    model_config = ConfigDict(frozen=True)

    has_client_directive: bool = Field(default=False)
    resolved_import_targets: Tuple[str, ...] = Field(default_factory=tuple)
    unresolved_local_specifiers: Tuple[str, ...] = Field(
        default_factory=tuple,
        description="Relative or aliased specifiers that did not resolve to a file",
    )


class SourceFile(BaseModel):
    """Registered source text of a file in the parse set."""

    path: str = Field(description="Absolute file path")
    text: str = Field(description="File content")


class ReconcileResult(BaseModel):
    """Outcome of synchronizing the parse set with the file system."""

    affected: Set[str] = Field(default_factory=set, description="Paths whose node must be recomputed")
    registered: Set[str] = Field(default_factory=set, description="Paths newly added to the parse set")
    evicted: Set[str] = Field(default_factory=set, description="Paths removed from the parse set")
    full_scan: bool = Field(default=False)
