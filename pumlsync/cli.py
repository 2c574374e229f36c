"""CLI entry point for pumlsync."""

from __future__ import annotations

import signal
import time
from pathlib import Path
from typing import Annotated

import typer
import yaml
from rich import print as rprint
from rich.syntax import Syntax
from rich.table import Table

from pumlsync.config import PumlsyncConfig, load_config
from pumlsync.config.loader import DEFAULT_CONFIG_TEMPLATE, PROJECT_CONFIG_NAME
from pumlsync.errors import PumlsyncError
from pumlsync.log import configure_logging
from pumlsync.markers import (
    DIAGRAM_MARKER,
    DIAGRAM_SOURCE_ATTRIBUTE,
    TARGET_PATH_ATTRIBUTE,
    InMemoryMarkerStore,
    MarkerStore,
    SQLiteMarkerStore,
    get_diagram_marker,
)
from pumlsync.providers import ProviderRegistry, build_registry
from pumlsync.render import create_renderer
from pumlsync.sync import (
    ResourceChangeEvent,
    SyncReport,
    create_resource_listener,
    render_to_target,
)
from pumlsync.watch import WorkspaceWatcher
from pumlsync.workspace import Workspace

app = typer.Typer(
    name="pumlsync",
    help="Keep rendered PlantUML diagrams in sync with their sources.",
)

config_app = typer.Typer(help="Manage pumlsync configuration.")
app.add_typer(config_app, name="config")

markers_app = typer.Typer(help="Inspect diagram markers.")
app.add_typer(markers_app, name="markers")

# Global state
_config: PumlsyncConfig | None = None
_root: Path = Path(".")


def _get_config() -> PumlsyncConfig:
    if _config is None:
        return load_config(root=_root)
    return _config


@app.callback()
def main(
    config: Annotated[
        str | None, typer.Option("--config", "-c", help="Path to pumlsync.yaml")
    ] = None,
    root: Annotated[
        str, typer.Option("--root", "-r", help="Workspace root directory")
    ] = ".",
) -> None:
    """Global options."""
    global _config, _root
    _root = Path(root).resolve()
    try:
        _config = load_config(config, root=_root)
    except ValueError as e:
        rprint(f"[red]{e}[/red]")
        raise typer.Exit(1) from e
    configure_logging(_config.log_level, _config.log_format)


def _open_store(cfg: PumlsyncConfig, root: Path) -> MarkerStore:
    if cfg.markers.store == "memory":
        return InMemoryMarkerStore()
    db_path = Path(cfg.markers.db_path)
    if not db_path.is_absolute():
        db_path = root / db_path
    return SQLiteMarkerStore(db_path)


def _open_workspace() -> Workspace:
    cfg = _get_config()
    try:
        return Workspace(_root, _open_store(cfg, _root))
    except PumlsyncError as e:
        rprint(f"[red]{e}[/red]")
        raise typer.Exit(1) from e


def _get_registry() -> ProviderRegistry:
    try:
        return build_registry(_get_config().providers)
    except PumlsyncError as e:
        rprint(f"[red]{e}[/red]")
        raise typer.Exit(1) from e


def _to_workspace_path(workspace: Workspace, path: str) -> str:
    """Accept either a workspace path (``/docs/a.puml``) or a filesystem path.

    Relative paths are taken relative to the workspace root.
    """
    candidate = Path(path)
    if not candidate.is_absolute():
        candidate = workspace.root / candidate
    if candidate.exists() or candidate.is_relative_to(workspace.root) or not path.startswith("/"):
        try:
            return workspace.workspace_path(candidate)
        except ValueError as e:
            rprint(f"[red]{e}[/red]")
            raise typer.Exit(1) from e
    return path


def _print_report(report: SyncReport) -> None:
    table = Table(title="Sync Report")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right", style="green")
    table.add_row("Rendered", str(len(report.rendered)))
    table.add_row("Skipped", str(len(report.skipped)))
    table.add_row("Failed", str(len(report.failed)))
    rprint(table)
    for path, error in report.failed:
        rprint(f"  [red]error:[/red] {path}: {error}")


@app.command()
def render(
    source: Annotated[str, typer.Argument(help="File holding the diagram text")],
    target: Annotated[str, typer.Argument(help="Output file (.png, .svg, .puml, ...)")],
) -> None:
    """Render SOURCE into TARGET and remember the pair for future changes."""
    workspace = _open_workspace()
    source_path = _to_workspace_path(workspace, source)
    target_path = _to_workspace_path(workspace, target)
    renderer = create_renderer(_get_config().renderer)
    try:
        render_to_target(workspace, _get_registry(), renderer, source_path, target_path)
    except (PumlsyncError, LookupError, OSError) as e:
        rprint(f"[red]Render failed:[/red] {e}")
        raise typer.Exit(1) from e
    rprint(f"[green]Rendered[/green] {source_path} -> {target_path}")


@app.command()
def sync() -> None:
    """Re-render every marked source into its recorded target once."""
    workspace = _open_workspace()
    listener = create_resource_listener(
        workspace, _get_registry(), create_renderer(_get_config().renderer)
    )
    report = listener.sync_all()
    _print_report(report)
    if report.failed:
        raise typer.Exit(1)


@app.command()
def watch() -> None:
    """Watch the workspace and re-render marked sources when they change."""
    cfg = _get_config()
    workspace = _open_workspace()
    listener = create_resource_listener(workspace, _get_registry(), create_renderer(cfg.renderer))
    session = SyncReport()

    def _on_change(event: ResourceChangeEvent) -> SyncReport:
        report = listener.resource_changed(event)
        session.merge(report)
        for path in report.rendered:
            rprint(f"[green]Rendered[/green] {path}")
        return report

    watcher = WorkspaceWatcher(
        workspace,
        _on_change,
        debounce_seconds=cfg.watch.debounce_seconds,
        ignore_dirs=cfg.watch.ignore_dirs,
    )

    stop = False

    def _signal_handler(sig, frame):
        nonlocal stop
        stop = True

    signal.signal(signal.SIGINT, _signal_handler)
    signal.signal(signal.SIGTERM, _signal_handler)

    rprint(f"[bold]Watching[/bold] {workspace.root} (Ctrl+C to stop)")
    with watcher:
        while not stop:
            time.sleep(1)
    _print_report(session)


@app.command()
def providers() -> None:
    """List diagram-text providers in the order they are consulted."""
    table = Table(title="Diagram-text providers")
    table.add_column("#", justify="right")
    table.add_column("Name", style="cyan")
    table.add_column("Class", style="dim")
    for i, provider in enumerate(_get_registry(), start=1):
        name = getattr(provider, "name", "-")
        table.add_row(str(i), name, f"{type(provider).__module__}.{type(provider).__name__}")
    rprint(table)


@markers_app.command("list")
def markers_list() -> None:
    """List diagram markers and their targets."""
    workspace = _open_workspace()
    table = Table(title="Diagram markers")
    table.add_column("Source", style="cyan")
    table.add_column("Target", style="green")
    table.add_column("Lines", justify="right")
    try:
        markers = workspace.store.all(DIAGRAM_MARKER)
    except PumlsyncError as e:
        rprint(f"[red]{e}[/red]")
        raise typer.Exit(1) from e
    for marker in markers:
        text = marker.attributes.get(DIAGRAM_SOURCE_ATTRIBUTE) or ""
        table.add_row(
            marker.path,
            marker.attributes.get(TARGET_PATH_ATTRIBUTE) or "-",
            str(len(text.splitlines())),
        )
    rprint(table)


@markers_app.command("show")
def markers_show(
    path: Annotated[str, typer.Argument(help="Source file")],
) -> None:
    """Show the attributes recorded for one source file."""
    workspace = _open_workspace()
    source_path = _to_workspace_path(workspace, path)
    marker = get_diagram_marker(workspace.store, source_path)
    if marker is None:
        rprint(f"[yellow]No marker on {source_path}[/yellow]")
        raise typer.Exit(1)
    rprint(Syntax(yaml.safe_dump(marker.attributes, sort_keys=False), "yaml"))


@markers_app.command("clear")
def markers_clear(
    path: Annotated[str, typer.Argument(help="Source file")],
) -> None:
    """Forget the target recorded for a source file."""
    workspace = _open_workspace()
    source_path = _to_workspace_path(workspace, path)
    marker = get_diagram_marker(workspace.store, source_path)
    if marker is None:
        rprint(f"[yellow]No marker on {source_path}[/yellow]")
        raise typer.Exit(1)
    try:
        workspace.store.delete(marker)
    except PumlsyncError as e:
        rprint(f"[red]{e}[/red]")
        raise typer.Exit(1) from e
    rprint(f"[green]Cleared[/green] {source_path}")


@config_app.command("show")
def config_show() -> None:
    """Show current resolved configuration."""
    cfg = _get_config()
    rprint(Syntax(yaml.dump(cfg.model_dump(), default_flow_style=False), "yaml"))


@config_app.command("init")
def config_init(
    force: bool = typer.Option(False, "--force", help="Overwrite existing config"),
) -> None:
    """Create a default pumlsync.yaml at the workspace root."""
    target = _root / PROJECT_CONFIG_NAME
    if target.exists() and not force:
        rprint("[yellow]pumlsync.yaml already exists.[/yellow] Use --force to overwrite.")
        raise typer.Exit(1)
    target.write_text(DEFAULT_CONFIG_TEMPLATE)
    rprint(f"[green]Created[/green] {target}")


if __name__ == "__main__":
    app()
