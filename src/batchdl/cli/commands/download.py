"""Download command implementation."""

import asyncio
import typing as t
from pathlib import Path
from urllib.parse import unquote, urlsplit

import aiofiles.os
import typer

from ...domain.exceptions import BatchDownloadError
from ...domain.item import FileItem, RemoteFileInfo
from ...domain.outcome import BatchSummary
from ...downloads.iterator import IterableSource
from ...downloads.options import DownloaderOptions
from ...downloads.pool import SessionPool
from ...tracking.base import BaseProgress
from ...tracking.tracker import CompositeProgress, LoggingProgress
from ..output.progress import ConsoleProgress, display_fatal_error, display_summary
from ..state import CLI_DC, CLIState


def filename_from_url(url: str, index: int) -> str:
    """Derive a local filename from the last URL path segment."""
    name = unquote(urlsplit(url).path.rsplit("/", 1)[-1])
    return name or f"download-{index}"


async def probe_items(
    urls: t.Sequence[str],
    pool: SessionPool,
    download_dir: Path,
    takeout: bool = False,
) -> t.AsyncIterator[FileItem]:
    """Yield one FileItem per URL, sizing each with a HEAD request.

    A failing HEAD ends enumeration with that error.
    """
    client = await (pool.takeout(CLI_DC) if takeout else pool.client(CLI_DC))
    for index, url in enumerate(urls):
        async with client.session.head(
            client.url_for(url), allow_redirects=True
        ) as response:
            response.raise_for_status()
            size = response.content_length or 0

        name = filename_from_url(url, index)
        yield FileItem(
            name=name,
            file=RemoteFileInfo(location=url, size=size, dc=CLI_DC),
            destination=download_dir / name,
            takeout=takeout,
        )


async def run_downloads(
    urls: t.Sequence[str],
    state: CLIState,
    progress: BaseProgress,
    download_dir: Path,
    takeout: bool = False,
) -> BatchSummary:
    """Core download logic with injected dependencies.

    Raises:
        BatchDownloadError: If the batch was cancelled or enumeration failed
    """
    await aiofiles.os.makedirs(download_dir, exist_ok=True)

    async with state.create_pool() as pool:
        options = DownloaderOptions.from_settings(
            state.settings,
            pool=pool,
            engine=state.create_engine(),
            iterator=IterableSource(probe_items(urls, pool, download_dir, takeout)),
            progress=progress,
        )
        downloader = state.create_downloader(options)
        return await downloader.download(state.settings.limit)


def download(
    ctx: typer.Context,
    urls: list[str] = typer.Argument(..., help="URLs to download"),
    output: Path | None = typer.Option(
        None, "-o", "--output", help="Output directory"
    ),
    takeout: bool = typer.Option(
        False, "--takeout", help="Fetch every item through takeout sessions"
    ),
) -> None:
    """Download files concurrently.

    Items that fail are reported and skipped; the command only fails when the
    batch is cancelled or the item list cannot be read.

    Examples:
        batchdl download https://example.com/a.zip https://example.com/b.iso
        batchdl -l 4 -t 8 download https://example.com/big.iso -o /tmp/dl
    """
    state: CLIState = ctx.obj
    output_dir = output if output else state.settings.download_dir
    progress = CompositeProgress(ConsoleProgress(), LoggingProgress())

    try:
        summary = asyncio.run(
            run_downloads(urls, state, progress, output_dir, takeout=takeout)
        )
    except BatchDownloadError as e:
        display_fatal_error(e)
        raise typer.Exit(code=1)

    display_summary(summary)
