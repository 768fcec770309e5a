"""Classification of graph nodes into client, server and universal."""

from typing import Dict, Iterable, List, Mapping, Set

from ..models import ComponentType, FileNode


def compute_component_types(nodes: Mapping[str, FileNode]) -> Dict[str, ComponentType]:
    """
    Classify every node of the graph.

    Pure computation: returns a fresh mapping and never mutates `nodes`.

    - client: declares the directive, or is reachable from a file that does
    - server: not reachable from any client entry
    - universal: not client-marked, imported by both a client and a server file

    Promotion to universal looks at baseline types only; a universal importer
    counts as neither client nor server for another node.

    Args:
        nodes: Current node store (read-only)

    Returns:
        Mapping of file path to ComponentType covering every node
    """
    client_entries = get_client_entries(nodes)
    client_reachable = get_client_reachable(nodes, client_entries)
    types = init_node_types(nodes, client_reachable)
    importers = collect_importers(nodes)
    for file_path in compute_universal_set(nodes, importers, types):
        types[file_path] = ComponentType.UNIVERSAL
    return types


def get_client_entries(nodes: Mapping[str, FileNode]) -> List[str]:
    """Paths of nodes that declare the client directive."""
    return [node.file_path for node in nodes.values() if node.is_client]


def get_client_reachable(nodes: Mapping[str, FileNode], client_entries: Iterable[str]) -> Set[str]:
    """
    Closure of the client entries under the import relation.

    Only edges into existing nodes are followed. Each node is visited once,
    so import cycles terminate.
    """
    reachable: Set[str] = set()
    stack = [entry for entry in client_entries if entry in nodes]

    while stack:
        file_path = stack.pop()
        if file_path in reachable:
            continue
        reachable.add(file_path)
        for target in nodes[file_path].imports:
            if target in nodes and target not in reachable:
                stack.append(target)

    return reachable


def init_node_types(nodes: Mapping[str, FileNode], client_reachable: Set[str]) -> Dict[str, ComponentType]:
    """Baseline typing: client if reachable from a client entry, else server."""
    return {
        file_path: ComponentType.CLIENT if file_path in client_reachable else ComponentType.SERVER
        for file_path in nodes
    }


def collect_importers(nodes: Mapping[str, FileNode]) -> Dict[str, Set[str]]:
    """Map every node to the set of nodes importing it."""
    importers: Dict[str, Set[str]] = {}
    for file_path, node in nodes.items():
        for target in node.imports:
            if target in nodes:
                importers.setdefault(target, set()).add(file_path)
    return importers


def compute_universal_set(
    nodes: Mapping[str, FileNode],
    importers: Mapping[str, Set[str]],
    types: Mapping[str, ComponentType],
) -> Set[str]:
    """Non-client-marked nodes imported by both client and server files."""
    universal: Set[str] = set()
    for file_path, node in nodes.items():
        if node.is_client:
            continue
        importing = importers.get(file_path)
        if importing and is_universal_type(types, importing):
            universal.add(file_path)
    return universal


def is_universal_type(types: Mapping[str, ComponentType], importers: Iterable[str]) -> bool:
    """Check if the importers include both a client and a server file."""
    has_client = False
    has_server = False
    for importer in importers:
        component_type = types.get(importer)
        if component_type == ComponentType.CLIENT:
            has_client = True
        elif component_type == ComponentType.SERVER:
            has_server = True
        if has_client and has_server:
            return True
    return False


def summarize(nodes: Mapping[str, FileNode]) -> Dict[str, int]:
    """Count classified nodes per component type."""
    counts = {component_type.value: 0 for component_type in ComponentType}
    for node in nodes.values():
        if node.type is not None:
            counts[node.type.value] += 1
    return counts
