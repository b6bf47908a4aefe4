"""Progress display for the CLI."""

import typer

from ...domain.item import DownloadItem
from ...domain.outcome import BatchSummary, Outcome, OutcomeStatus
from ...tracking.base import BaseProgress, ProgressState


def format_bytes(bytes_value: float) -> str:
    """Convert bytes to human-readable format (KB, MB, GB)."""
    for unit in ["B", "KB", "MB", "GB", "TB"]:
        if bytes_value < 1024:
            if unit == "B":
                return f"{int(bytes_value)} {unit}"
            return f"{bytes_value:.1f} {unit}"
        bytes_value /= 1024
    return f"{bytes_value:.1f} PB"


class ConsoleProgress(BaseProgress):
    """Prints one line when an item starts and one when it ends."""

    async def on_add(self, item: DownloadItem) -> None:
        typer.echo(f"Downloading: {item.name} ({format_bytes(item.file.size)})")

    async def on_download(self, item: DownloadItem, state: ProgressState) -> None:
        pass

    async def on_done(self, item: DownloadItem, outcome: Outcome) -> None:
        match outcome.status:
            case OutcomeStatus.SUCCEEDED:
                typer.secho(
                    f"✓ Downloaded: {item.name} "
                    f"({format_bytes(outcome.bytes_transferred)})",
                    fg=typer.colors.GREEN,
                )
            case OutcomeStatus.FAILED:
                typer.secho(f"✗ Failed: {item.name}", fg=typer.colors.RED)
                typer.secho(f"  Error: {outcome.error_message}", fg=typer.colors.RED)
            case OutcomeStatus.CANCELLED:
                typer.secho(f"- Cancelled: {item.name}", fg=typer.colors.YELLOW)


def display_summary(summary: BatchSummary) -> None:
    """Display the batch totals."""
    color = typer.colors.GREEN if summary.failed == 0 else typer.colors.YELLOW
    typer.secho(
        f"{summary.succeeded}/{summary.total} downloaded, {summary.failed} failed, "
        f"{summary.cancelled} cancelled ({format_bytes(summary.bytes_transferred)})",
        fg=color,
    )


def display_fatal_error(error: Exception) -> None:
    typer.secho(f"✗ Batch aborted: {error}", fg=typer.colors.RED)
