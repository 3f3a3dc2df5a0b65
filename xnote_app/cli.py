from __future__ import annotations

import json
from pathlib import Path
from typing import Annotated, Any, Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.prompt import Confirm
from rich.table import Table

from xnote.clean import FanoutSink, JobController, LoggingSink, MemorySink, ProgressEvent, WorkspaceNotFoundError
from xnote.workspace import FileNode, get_files, search_text

from .logging import resolve_log_dir
from .service import CleanService
from .settings import load_settings

app = typer.Typer(
    add_completion=False,
    help="xnote: workspace maintenance + API for the xnote notes app",
    rich_markup_mode="rich",
)
console = Console()


# ═══════════════════════════════════════════════════════════════════════════════
# HELPERS
# ═══════════════════════════════════════════════════════════════════════════════

class _ProgressSink(MemorySink):
    """Mirror clean progress onto a Rich progress line."""

    def __init__(self, progress: Progress, task_id: Any):
        super().__init__()
        self._bar = progress
        self._task_id = task_id

    def emit_progress(self, event: ProgressEvent) -> None:
        super().emit_progress(event)
        self._bar.update(self._task_id, description=f"[cyan]{event.phase.value}[/cyan] {event.message}")


def _workspace_root(root: Optional[str]) -> Path:
    if root:
        return Path(root)
    s = load_settings()
    return Path(s.XNOTE_WORKSPACE)


def _scan(root: Path, *, quiet: bool = False) -> tuple[CleanService, list[str]]:
    s = load_settings()
    jobs = JobController()
    with Progress(
        SpinnerColumn(),
        TextColumn("{task.description}"),
        console=console,
        transient=True,
        disable=quiet,
    ) as progress:
        task_id = progress.add_task("Scanning…", total=None)
        sink = _ProgressSink(progress, task_id)
        service = CleanService(jobs, FanoutSink(sink, LoggingSink()), assets_dir_name=s.XNOTE_ASSETS_DIR)
        try:
            result = service.find_unused_images(root)
        except WorkspaceNotFoundError as e:
            console.print(f"[red]Error:[/red] {e}: {root}")
            raise typer.Exit(code=1)
    return service, result["images"]


def _images_table(images: list[str], root: Path) -> Table:
    t = Table(title=f"[bold]Unused images[/bold] ({len(images):,})")
    t.add_column("#", justify="right", style="dim")
    t.add_column("Path", style="cyan")
    for i, p in enumerate(images, start=1):
        try:
            shown = str(Path(p).relative_to(root.resolve()))
        except ValueError:
            shown = p
        t.add_row(str(i), shown)
    return t


def _tree_lines(nodes: list[FileNode], depth: int = 0) -> list[str]:
    lines: list[str] = []
    for n in nodes:
        pad = "  " * depth
        if n.is_dir:
            lines.append(f"{pad}[bold]{n.name}/[/bold]")
            lines.extend(_tree_lines(n.children or [], depth + 1))
        else:
            lines.append(f"{pad}{n.name} [dim]{n.last_modified or ''}[/dim]")
    return lines


# ═══════════════════════════════════════════════════════════════════════════════
# COMMANDS
# ═══════════════════════════════════════════════════════════════════════════════

@app.command("status", help="[bold cyan]S[/bold cyan]how configuration")
def status():
    """Show the current configuration."""
    s = load_settings()
    console.print(Panel.fit(
        "\n".join([
            f"[bold]Home:[/bold]         {s.XNOTE_HOME}",
            f"[bold]Workspace:[/bold]    {s.XNOTE_WORKSPACE}",
            f"[bold]Assets dir:[/bold]   {s.XNOTE_ASSETS_DIR}",
            f"[bold]API Server:[/bold]   http://{s.XNOTE_API_HOST}:{s.XNOTE_API_PORT}",
            f"[bold]Log dir:[/bold]      {resolve_log_dir(s)} ({s.XNOTE_LOG_LEVEL})",
        ]),
        title="[bold]Configuration[/bold]",
    ))


@app.command("scan", help="[bold cyan]F[/bold cyan]ind images no note references")
def scan(
    root: Optional[str] = typer.Argument(None, help="Workspace root (default: XNOTE_WORKSPACE)"),
    json_out: bool = typer.Option(False, "--json", help="Print machine-readable JSON"),
):
    target = _workspace_root(root)
    _, images = _scan(target, quiet=json_out)

    if json_out:
        typer.echo(json.dumps({"images": images}, ensure_ascii=False, indent=2))
        return

    if not images:
        console.print("[green]✓ No unused images found.[/green]")
        return
    console.print(_images_table(images, target))


@app.command("clean", help="[bold cyan]D[/bold cyan]elete images no note references")
def clean(
    root: Optional[str] = typer.Argument(None, help="Workspace root (default: XNOTE_WORKSPACE)"),
    apply: bool = typer.Option(False, "--apply", help="Actually delete files (default is dry-run)."),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip the confirmation prompt."),
):
    """Scan, then optionally delete unused images.

    Deletion is restricted to files inside the workspace root; folders left
    empty by a deletion are removed too.
    """
    target = _workspace_root(root)
    service, images = _scan(target)

    if not images:
        console.print("[green]✓ No unused images found.[/green]")
        return

    console.print(_images_table(images, target))
    console.print(f"\nMode: {'APPLY (deleting)' if apply else 'DRY-RUN (no deletions)'}")

    if not apply:
        console.print("\n[dim]Nothing deleted. Re-run with --apply to delete the files above.[/dim]")
        return

    if not yes and not Confirm.ask(f"Delete {len(images):,} file(s)?", default=False):
        console.print("[yellow]Aborted.[/yellow]")
        raise typer.Exit(code=1)

    outcome = service.delete_unused_images(target, images)
    console.print(f"\n[bold green]✓ Deleted {outcome.deleted:,} / {outcome.total:,} file(s)[/bold green]")


@app.command("tree", help="List notes and folders")
def tree(
    path: Optional[str] = typer.Argument(None, help="Folder to list (default: XNOTE_WORKSPACE)"),
    depth: int = typer.Option(3, "--depth", help="Maximum folder depth"),
):
    target = _workspace_root(path)
    try:
        nodes = get_files(target, max_depth=depth)
    except WorkspaceNotFoundError:
        console.print(f"[red]Error:[/red] Directory does not exist: {target}")
        raise typer.Exit(code=1)
    if not nodes:
        console.print("[dim](empty)[/dim]")
        return
    console.print("\n".join(_tree_lines(nodes)))


@app.command("search", help="Search note text")
def search(
    query: str = typer.Argument(..., help="Case-insensitive text to look for"),
    root: Optional[str] = typer.Option(None, "--root", help="Workspace root (default: XNOTE_WORKSPACE)"),
    limit: int = typer.Option(50, "-n", "--limit", help="Max results"),
):
    s = load_settings()
    target = _workspace_root(root)
    hits = search_text(target, query, limit, max_limit=s.XNOTE_SEARCH_MAX_HITS, assets_dir_name=s.XNOTE_ASSETS_DIR)
    if not hits:
        console.print("[dim]No results.[/dim]")
        return

    t = Table(title=f"[bold]Results[/bold] ({len(hits)})")
    t.add_column("File", style="cyan")
    t.add_column("Line", justify="right")
    t.add_column("Preview")
    for h in hits:
        t.add_row(h.name, str(h.line), h.preview.strip()[:120])
    console.print(t)


@app.command("run", help="[bold cyan]R[/bold cyan]un the API server")
@app.command("serve", hidden=True)  # Alias
def run(
    host: Annotated[
        Optional[str],
        typer.Option(help="Host to bind"),
    ] = None,
    port: Annotated[
        Optional[int],
        typer.Option(help="Port to bind"),
    ] = None,
):
    """Start the FastAPI server for the desktop shell."""
    import uvicorn

    from .logging import setup_api_logging

    s = load_settings()
    host = host or s.XNOTE_API_HOST
    port = port or s.XNOTE_API_PORT

    log_file = setup_api_logging(s)

    console.print(Panel.fit(
        f"[bold]API Server starting...[/bold]\n\n"
        f"  URL:  [cyan]http://{host}:{port}[/cyan]\n"
        f"  Docs: [cyan]http://{host}:{port}/docs[/cyan]\n\n"
        f"  Logs: [cyan]{log_file}[/cyan]\n\n"
        f"[dim]Press CTRL+C to stop[/dim]",
        title="[bold green]xnote API[/bold green]",
    ))

    uvicorn.run(
        "xnote_app.app:app",
        host=host,
        port=port,
        reload=False,
        access_log=bool(getattr(s, "XNOTE_LOG_ACCESS", False)),
        log_config=None,
    )


def main():
    app()
