"""Command line interface."""

import json
import logging
import os
import sys
import time
from typing import Mapping, Optional, Tuple

import click
from rich.console import Console
from rich.table import Table

from . import __version__
from .config import GraphConfig, load_config
from .exceptions import ConfigurationError
from .graph import ComponentEnvGraph, summarize
from .models import ComponentType, FileNode
from .watcher import ProjectWatcher

logger = logging.getLogger(__name__)

TYPE_STYLES = {
    ComponentType.CLIENT: "magenta",
    ComponentType.SERVER: "cyan",
    ComponentType.UNIVERSAL: "green",
}


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    if not verbose:
        logging.getLogger("watchdog").setLevel(logging.WARNING)


def _create_graph(
    console: Console,
    root: str,
    tsconfig: Optional[str],
    exclude: Tuple[str, ...],
    config_path: Optional[str],
    verbose: bool,
) -> Tuple[ComponentEnvGraph, GraphConfig]:
    """Load configuration and construct the graph, exiting on config errors."""
    try:
        config = load_config(root, config_path)
        _configure_logging(verbose or config.debug)
        # --tsconfig is relative to the cwd, the configured path to the project root
        tsconfig_path = tsconfig
        if not tsconfig_path and config.tsconfig_path:
            tsconfig_path = os.path.join(root, config.tsconfig_path)
        graph = ComponentEnvGraph(
            root,
            tsconfig_file_path=tsconfig_path,
            exclude=[*config.exclude, *exclude],
        )
    except ConfigurationError as e:
        console.print(f"[red]Configuration error: {e}[/red]")
        sys.exit(2)
    return graph, config


def _relative(graph: ComponentEnvGraph, file_path: str) -> str:
    try:
        return os.path.relpath(file_path, graph.root_dir).replace(os.sep, "/")
    except ValueError:
        return file_path


def _filter_nodes(
    nodes: Mapping[str, FileNode], type_filter: Optional[str]
) -> Mapping[str, FileNode]:
    if not type_filter:
        return nodes
    return {path: node for path, node in nodes.items() if node.type == type_filter}


def render_table(console: Console, graph: ComponentEnvGraph, nodes: Mapping[str, FileNode]) -> None:
    """Print classifications as a table followed by a summary line."""
    table = Table(title=f"Component environments: {graph.root_dir}")
    table.add_column("File", style="bold")
    table.add_column("Type")
    table.add_column("Directive", justify="center")
    table.add_column("Imports", justify="right")

    for file_path in sorted(nodes):
        node = nodes[file_path]
        style = TYPE_STYLES.get(node.type, "white")
        table.add_row(
            _relative(graph, file_path),
            f"[{style}]{node.type.value if node.type else '-'}[/{style}]",
            "✓" if node.is_client else "",
            str(len(node.imports)),
        )

    console.print(table)
    render_summary(console, graph)


def render_summary(console: Console, graph: ComponentEnvGraph) -> None:
    """Print node counts per component type."""
    counts = summarize(graph.nodes)
    parts = [
        f"[{TYPE_STYLES[t]}]{t.value}: {counts[t.value]}[/{TYPE_STYLES[t]}]"
        for t in ComponentType
    ]
    console.print(f"{len(graph.nodes)} files - " + ", ".join(parts))


def graph_to_dict(graph: ComponentEnvGraph, nodes: Mapping[str, FileNode]) -> dict:
    """Serialize classifications for JSON output."""
    return {
        "root": graph.root_dir,
        "summary": summarize(graph.nodes),
        "files": {
            _relative(graph, file_path): {
                "type": node.type.value if node.type else None,
                "is_client": node.is_client,
                "imports": [_relative(graph, target) for target in node.imports],
            }
            for file_path, node in sorted(nodes.items())
        },
    }


def common_options(func):
    """Options shared by every command."""
    func = click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")(func)
    func = click.option(
        "--config", "config_path", type=click.Path(dir_okay=False), help="Config file path"
    )(func)
    func = click.option(
        "--exclude",
        "-e",
        multiple=True,
        help="Additional exclusion glob (repeatable)",
    )(func)
    func = click.option(
        "--tsconfig",
        type=click.Path(dir_okay=False),
        help="tsconfig.json path (default <root>/tsconfig.json)",
    )(func)
    func = click.argument(
        "root", type=click.Path(exists=True, file_okay=False), default="."
    )(func)
    return func


@click.group()
@click.version_option(__version__, prog_name="component-env-graph")
def main() -> None:
    """
    Classify React Server Components files as client, server or universal.

    Full scan of the current project:
        component-env-graph scan

    Only client files, as JSON:
        component-env-graph scan ./app --type client --format json

    Keep classifications current while editing:
        component-env-graph watch ./app
    """


@main.command()
@common_options
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["table", "json"]),
    default="table",
    help="Output format",
)
@click.option(
    "--type",
    "type_filter",
    type=click.Choice([t.value for t in ComponentType]),
    help="Only show files of this type",
)
def scan(
    root: str,
    tsconfig: Optional[str],
    exclude: Tuple[str, ...],
    config_path: Optional[str],
    verbose: bool,
    output_format: str,
    type_filter: Optional[str],
) -> None:
    """Build the graph once and print every file's environment."""
    console = Console()
    graph, _ = _create_graph(console, root, tsconfig, exclude, config_path, verbose)
    graph.build()

    nodes = _filter_nodes(graph.nodes, type_filter)
    if output_format == "json":
        click.echo(json.dumps(graph_to_dict(graph, nodes), indent=2))
    else:
        render_table(console, graph, nodes)


@main.command()
@common_options
@click.option(
    "--debounce",
    type=float,
    default=None,
    help="Seconds to batch file events (default from config)",
)
def watch(
    root: str,
    tsconfig: Optional[str],
    exclude: Tuple[str, ...],
    config_path: Optional[str],
    verbose: bool,
    debounce: Optional[float],
) -> None:
    """Build the graph, then rebuild incrementally on every change."""
    console = Console()
    graph, config = _create_graph(console, root, tsconfig, exclude, config_path, verbose)
    graph.build()
    render_summary(console, graph)

    def on_rebuild(paths):
        label = f"{len(paths)} changed" if paths else "full rescan"
        console.print(f"[dim]Rebuilt ({label})[/dim]")
        render_summary(console, graph)

    watcher = ProjectWatcher(
        graph,
        debounce_seconds=debounce if debounce is not None else config.debounce_seconds,
        on_rebuild=on_rebuild,
    )
    if not watcher.start():
        console.print("[red]Failed to start file watcher[/red]")
        sys.exit(1)

    console.print(f"[bold]Watching {graph.root_dir}[/bold] (Ctrl+C to stop)")
    try:
        while watcher.is_running:
            time.sleep(0.5)
    except KeyboardInterrupt:
        pass
    finally:
        watcher.stop()


if __name__ == "__main__":
    main()
