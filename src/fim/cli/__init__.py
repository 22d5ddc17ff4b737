"""
CLI for the File Index Manager.

Provides command-line access to the file indexes of a project directory.
"""

import time
from pathlib import Path
from typing import Optional

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from fim.core.config import configure_logging, load_config
from fim.core.errors import FileIndexError, TraversalLimitExceeded
from fim.core.path_utils import validate_project_root
from fim.infrastructure.root_provider import ProjectRoot
from fim.services import (
    ServicesContainer,
    create_file_index_manager,
    create_watch_service,
)

# Initialize Rich Console
console = Console()

app = typer.Typer(
    name="fim",
    help="File Index Manager - named file indexes over a project directory",
    add_completion=False,
)


@app.callback()
def main(
    ctx: typer.Context,
    config: Optional[Path] = typer.Option(
        None, "--config", "-c", help="Path to a YAML or JSON configuration file"
    ),
):
    """File Index Manager - named file indexes over a project directory."""
    load_dotenv()
    ctx.obj = config


def _warn_limit_exceeded(error: TraversalLimitExceeded) -> None:
    console.print(f"[bold yellow]Warning:[/bold yellow] {error}")


def get_services(ctx: typer.Context, path: Path) -> ServicesContainer:
    """
    Validate the project path and build the services for it.

    Exits with status 1 if the path cannot be used as a project root.
    """
    validation = validate_project_root(path)
    if not validation.valid:
        console.print(f"[bold red]Error:[/bold red] {validation.error_message}")
        raise typer.Exit(1)

    try:
        config = load_config(ctx.obj)
        configure_logging(config.logging)
    except (OSError, ValueError) as e:
        console.print(f"[bold red]Error:[/bold red] Invalid configuration: {e}")
        raise typer.Exit(1)

    root_provider = ProjectRoot(path)
    manager = create_file_index_manager(
        config=config,
        root_provider=root_provider,
        on_limit_exceeded=_warn_limit_exceeded,
    )
    return ServicesContainer(config=config, root_provider=root_provider, manager=manager)


def _print_record_path(full_path: str) -> None:
    console.print(full_path, markup=False, highlight=False, soft_wrap=True)


@app.command(name="list")
def list_records(
    ctx: typer.Context,
    path: Path = typer.Argument(..., help="Project directory"),
    index: str = typer.Option("all", "--index", "-i", help="Index to list"),
    limit: Optional[int] = typer.Option(
        None, "--limit", "-n", min=1, help="Maximum number of records to print"
    ),
):
    """List the records of an index."""
    try:
        services = get_services(ctx, path)
        records = services.manager.get_index_records(index)

        shown = records if limit is None else records[:limit]
        for record in shown:
            _print_record_path(record.full_path)

        console.print(f"[bold blue]{len(records)}[/bold blue] file(s) in index '{index}'")
        if len(shown) < len(records):
            console.print(f"[dim]... and {len(records) - len(shown)} more[/dim]")

    except FileIndexError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def find(
    ctx: typer.Context,
    path: Path = typer.Argument(..., help="Project directory"),
    filename: str = typer.Argument(..., help="Exact filename to look for"),
    index: str = typer.Option("all", "--index", "-i", help="Index to search"),
):
    """Find every file with the given name."""
    try:
        services = get_services(ctx, path)
        matches = services.manager.get_records_by_name(index, filename)

        if not matches:
            console.print(f"[yellow]No files named '{filename}' in index '{index}'[/yellow]")
            raise typer.Exit(1)

        for record in matches:
            _print_record_path(record.full_path)
        console.print(f"[bold green]{len(matches)}[/bold green] match(es)")

    except FileIndexError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def status(
    ctx: typer.Context,
    path: Path = typer.Argument(..., help="Project directory"),
):
    """Show index sizes and details of the last sync."""
    try:
        services = get_services(ctx, path)
        manager = services.manager
        result = manager.sync()

        summary = Table.grid(padding=1)
        summary.add_column(style="bold")
        summary.add_column()
        summary.add_row("Files visited:", str(result.files_visited))
        summary.add_row("Duration:", f"{result.duration_ms:.1f}ms")
        summary.add_row("Max files:", str(manager.max_files))
        patterns = services.config.indexing.ignore_patterns
        summary.add_row("Ignore patterns:", ", ".join(patterns) if patterns else "none")

        if result.skipped_directories:
            summary.add_row(
                "Skipped dirs:", f"[red]{len(result.skipped_directories)}[/red]"
            )
        if result.limit_exceeded:
            summary.add_row("File limit:", "[yellow]reached, indexes are partial[/yellow]")

        console.print(
            Panel(
                summary,
                title="[bold green]Index Status[/bold green]",
                border_style="green",
                expand=False,
            )
        )

        sizes = Table(title="Indexes")
        sizes.add_column("Index", style="cyan")
        sizes.add_column("Files", justify="right")
        for name, size in result.index_sizes.items():
            sizes.add_row(name, str(size))
        console.print(sizes)

        if result.skipped_directories:
            console.print("\n[bold red]Skipped Directories:[/bold red]")
            for directory in result.skipped_directories[:5]:
                console.print(f"  - {directory}", markup=False, highlight=False)
            if len(result.skipped_directories) > 5:
                console.print(f"  ... and {len(result.skipped_directories) - 5} more")

    except FileIndexError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def watch(
    ctx: typer.Context,
    path: Path = typer.Argument(..., help="Project directory to watch"),
    interval: float = typer.Option(
        1.0, "--interval", help="Seconds between checks for invalidated indexes"
    ),
):
    """Keep the indexes fresh while files change, until interrupted."""
    services = get_services(ctx, path)
    manager = services.manager
    watch_service = create_watch_service(services)

    try:
        _print_sizes(manager.sync().index_sizes)
        watch_service.start()
        console.print(f"[bold blue]Watching[/bold blue] {path} (Ctrl+C to stop)")

        while True:
            time.sleep(interval)
            if manager.is_dirty:
                _print_sizes(manager.sync().index_sizes)

    except KeyboardInterrupt:
        console.print("\n[cyan]Stopping watch...[/cyan]")
    except FileIndexError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)
    finally:
        watch_service.stop()
        manager.close()

    stats = watch_service.get_stats()
    console.print(
        f"Events: {stats.events_received}, invalidations: {stats.invalidations}"
    )


def _print_sizes(index_sizes: dict[str, int]) -> None:
    sizes = ", ".join(f"{name}={size}" for name, size in index_sizes.items())
    console.print(f"[green]Indexes updated:[/green] {sizes}")


if __name__ == "__main__":
    app()
