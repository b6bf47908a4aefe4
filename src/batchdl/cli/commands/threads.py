"""Threads command: show the per-item parallelism chosen for sizes."""

import typer

from ...downloads.threads import best_threads
from ..output.progress import format_bytes
from ..state import CLIState


def threads(
    ctx: typer.Context,
    sizes: list[int] = typer.Argument(..., help="Item sizes in bytes"),
    max_threads: int | None = typer.Option(
        None, "--max", "-m", help="Per-item thread cap (defaults to --threads)", min=1
    ),
) -> None:
    """Print the thread count each size would be downloaded with.

    Examples:
        batchdl threads 500000 10485760 62914560
        batchdl threads 62914560 --max 4
    """
    state: CLIState = ctx.obj
    cap = max_threads if max_threads is not None else state.settings.threads

    for size in sizes:
        if size < 0:
            typer.secho(f"✗ Invalid size: {size}", fg=typer.colors.RED)
            raise typer.Exit(code=1)
        typer.echo(f"{size} ({format_bytes(size)}): {best_threads(size, cap)}")
