"""
Rich progress displays for CLI operations.

All output goes to stderr to preserve stdout for machine-readable output
(saved paths, prediction ids).
"""

from collections.abc import Iterator, Sequence
from contextlib import contextmanager

from rich.console import Console
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn, TimeElapsedColumn
from rich.table import Table

from minimax_image.core.models import DownloadedAsset, Job

# Console for stderr output (preserves stdout for machine output)
console = Console(stderr=True)


@contextmanager
def generation_progress(model: str, number_of_images: int) -> Iterator[None]:
    """
    Display a spinner while a prediction runs.

    Args:
        model: The model being used
        number_of_images: How many images were requested

    Yields:
        None while generation is in progress
    """
    progress = Progress(
        SpinnerColumn(spinner_name="dots"),
        TextColumn("[green]{task.description}"),
        TimeElapsedColumn(),
        console=console,
        transient=True,  # Disappears when done
    )
    description = f"Generating {number_of_images} image(s) [dim]({model})[/dim]"
    with progress:
        task = progress.add_task(description, total=None)
        yield
        progress.update(task, completed=True)


def print_assets(
    assets: Sequence[DownloadedAsset],
    title: str,
    generation_time: float | None = None,
) -> None:
    """Print a panel listing each image with its local path or failure and source."""
    table = Table.grid(padding=(0, 2))
    table.add_column(style="cyan", justify="right", vertical="top")
    table.add_column(style="white")

    for asset in assets:
        if asset.local_path is not None:
            table.add_row(f"Image {asset.index}", f"[bold green]{asset.local_path}[/bold green]")
        else:
            message = asset.error.message if asset.error else "not saved"
            table.add_row(f"Image {asset.index}", f"[red]Local save failed:[/red] {message}")
        table.add_row("", f"[dim]{asset.source}[/dim]")
    if generation_time is not None:
        table.add_row("Time", f"{generation_time:.1f}s")

    degraded = any(not asset.saved for asset in assets)
    style = "yellow" if degraded else "green"
    panel = Panel(
        table,
        title=f"[bold {style}]{title}[/bold {style}]",
        border_style=style,
        padding=(1, 2),
    )
    console.print()
    console.print(panel)


def print_job(job: Job) -> None:
    """Print a prediction snapshot."""
    table = Table.grid(padding=(0, 2))
    table.add_column(style="cyan", justify="right", vertical="top")
    table.add_column(style="white")
    table.add_row("ID", f"[bold]{job.id}[/bold]")
    table.add_row("Status", job.status.value)
    if job.model:
        table.add_row("Model", job.model)
    for label, value in (
        ("Created", job.created_at),
        ("Started", job.started_at),
        ("Completed", job.completed_at),
    ):
        if value:
            table.add_row(label, value)
    if job.prompt:
        table.add_row("Prompt", f"[dim]{job.prompt}[/dim]")
    if job.error:
        table.add_row("Error", f"[red]{job.error}[/red]")
    console.print(Panel(table, title="[bold]Prediction[/bold]", padding=(1, 2)))
    if job.logs:
        console.print(job.logs, style="dim", markup=False, highlight=False)


def print_info(message: str) -> None:
    """Print an info message in cyan."""
    console.print(f"[cyan]ℹ[/cyan] {message}")


def print_warning(message: str) -> None:
    """Print a warning message in yellow."""
    console.print(f"[yellow]⚠[/yellow] {message}")


def print_error(message: str) -> None:
    """Print an error message in red."""
    console.print(f"[red]✗[/red] {message}")


def print_success(message: str) -> None:
    """Print a success message in green."""
    console.print(f"[green]✓[/green] {message}")
