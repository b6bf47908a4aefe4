#!/usr/bin/env python3
"""
02_progress_and_cancel.py - Track progress and cancel a running batch

Demonstrates: ProgressTracker + LoggingProgress, Downloader.cancel()
Note: Requires internet connection to run
"""
import asyncio
from pathlib import Path

from batchdl import (
    DownloadCancelledError,
    Downloader,
    DownloaderOptions,
    FileItem,
    HttpTransferEngine,
    IterableSource,
    ProgressTracker,
    RemoteFileInfo,
    SessionPool,
)
from batchdl.tracking import CompositeProgress, LoggingProgress

DOWNLOAD_DIR = Path("./downloads")


def make_items():
    for size_mb in (1, 10, 100):
        name = f"02-cancel-{size_mb}Mb.dat"
        yield FileItem(
            name=name,
            file=RemoteFileInfo(
                location=f"/files/{size_mb}Mb.dat", size=size_mb << 20, dc=1
            ),
            destination=DOWNLOAD_DIR / name,
        )


async def main() -> None:
    DOWNLOAD_DIR.mkdir(exist_ok=True)
    tracker = ProgressTracker()

    async with SessionPool({1: "https://proof.ovh.net"}) as pool:
        downloader = Downloader(
            DownloaderOptions(
                pool=pool,
                engine=HttpTransferEngine(),
                iterator=IterableSource(make_items()),
                progress=CompositeProgress(tracker, LoggingProgress()),
                threads=8,
            )
        )
        batch = asyncio.create_task(downloader.download(limit=2))

        await asyncio.sleep(3)
        print("Cancelling batch...")
        downloader.cancel()

        try:
            await batch
        except DownloadCancelledError as e:
            print(f"Batch stopped: {e}")

    for name, info in tracker.get_all_items().items():
        print(f"  {name}: {info.status} ({info.get_progress():.0%})")


if __name__ == "__main__":
    asyncio.run(main())
