"""CLI application factory."""

from pathlib import Path

import typer

from ..app import create_app
from ..config.settings import LogLevel, Settings, build_settings
from .commands.download import download
from .commands.threads import threads
from .state import CLIState


def create_cli_app(
    settings: Settings | None = None, state: CLIState | None = None
) -> typer.Typer:
    """Create CLI application with optional settings or state override.

    Args:
        settings: Optional Settings override for testing
        state: Optional CLIState override (e.g. with mocked factories)

    Returns:
        Configured Typer application with commands registered
    """
    app = typer.Typer(
        name="batchdl",
        help="Batch downloader - concurrent multi-part downloads with progress",
        no_args_is_help=True,
    )

    @app.callback()
    def setup(
        ctx: typer.Context,
        download_dir: Path | None = typer.Option(
            None,
            "--download-dir",
            "-d",
            help="Directory to save downloads",
        ),
        threads_: int | None = typer.Option(
            None,
            "--threads",
            "-t",
            help="Maximum parallel parts per item",
            min=1,
        ),
        limit: int | None = typer.Option(
            None,
            "--limit",
            "-l",
            help="Maximum items downloaded at the same time",
            min=1,
        ),
        part_size: int | None = typer.Option(
            None,
            "--part-size",
            help="Bytes requested per part",
            min=1,
        ),
        verbose: bool = typer.Option(
            False,
            "--verbose",
            "-v",
            help="Enable verbose output (DEBUG logging)",
        ),
    ) -> None:
        """Global options available to all commands."""
        if state is not None:
            ctx.obj = state
            return

        if settings is not None:
            resolved_settings = settings
        else:
            resolved_settings = build_settings(
                download_dir=download_dir,
                threads=threads_,
                limit=limit,
                part_size=part_size,
                log_level=LogLevel.DEBUG if verbose else None,
            )

        create_app(resolved_settings)
        ctx.obj = CLIState(resolved_settings)

    app.command()(download)
    app.command()(threads)
    return app


def main() -> None:
    create_cli_app()()
