#!/usr/bin/env python3
"""
01_basic_batch.py - Download a small batch from one endpoint

Demonstrates: Downloader with SessionPool, HttpTransferEngine and FileItems
Note: Requires internet connection to run
"""
import asyncio
from pathlib import Path

from batchdl import (
    Downloader,
    DownloaderOptions,
    FileItem,
    HttpTransferEngine,
    IterableSource,
    RemoteFileInfo,
    SessionPool,
)

DOWNLOAD_DIR = Path("./downloads")


async def main() -> None:
    print("Starting basic batch example...")
    DOWNLOAD_DIR.mkdir(exist_ok=True)

    items = [
        FileItem(
            name="01-basic-1Mb.dat",
            file=RemoteFileInfo(location="/files/1Mb.dat", size=1 << 20, dc=1),
            destination=DOWNLOAD_DIR / "01-basic-1Mb.dat",
        ),
        FileItem(
            name="01-basic-10Mb.dat",
            file=RemoteFileInfo(location="/files/10Mb.dat", size=10 << 20, dc=1),
            destination=DOWNLOAD_DIR / "01-basic-10Mb.dat",
        ),
    ]

    async with SessionPool({1: "https://proof.ovh.net"}) as pool:
        downloader = Downloader(
            DownloaderOptions(
                pool=pool,
                engine=HttpTransferEngine(),
                iterator=IterableSource(items),
            )
        )
        summary = await downloader.download(limit=2)

    print(f"{summary.succeeded}/{summary.total} files saved to {DOWNLOAD_DIR}/")


if __name__ == "__main__":
    asyncio.run(main())
