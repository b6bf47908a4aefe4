"""Download operations - downloader, item sources, pools and engines."""

from ..domain.exceptions import (
    DownloadCancelledError,
    EnumerationError,
    TransferError,
)
from .iterator import BaseItemIterator, IterableSource
from .options import DownloaderOptions
from .orchestrator import CancelScope, Downloader
from .pool import BaseClientPool, EndpointClient, SessionPool
from .threads import THREAD_LEVELS, ThreadLevel, best_threads
from .transfer import BaseTransferEngine, ChunkSink, HttpTransferEngine
from .writer import ProgressWriter

__all__ = [
    # Core downloads
    "Downloader",
    "DownloaderOptions",
    "CancelScope",
    "best_threads",
    "ThreadLevel",
    "THREAD_LEVELS",
    # Item sources
    "BaseItemIterator",
    "IterableSource",
    # Clients
    "BaseClientPool",
    "EndpointClient",
    "SessionPool",
    # Transfer
    "BaseTransferEngine",
    "ChunkSink",
    "HttpTransferEngine",
    "ProgressWriter",
    # Errors
    "DownloadCancelledError",
    "EnumerationError",
    "TransferError",
]
