"""batchdl - concurrent batch downloader with size-adaptive parallelism."""

from .domain import (
    BatchDownloadError,
    BatchSummary,
    DownloadCancelledError,
    DownloadItem,
    EnumerationError,
    FileItem,
    Outcome,
    OutcomeStatus,
    RemoteFileInfo,
    TransferError,
)
from .downloads import (
    BaseClientPool,
    BaseItemIterator,
    BaseTransferEngine,
    Downloader,
    DownloaderOptions,
    HttpTransferEngine,
    IterableSource,
    SessionPool,
    best_threads,
)
from .tracking import BaseProgress, NullProgress, ProgressState, ProgressTracker

__all__ = [
    "Downloader",
    "DownloaderOptions",
    "best_threads",
    "BaseItemIterator",
    "IterableSource",
    "BaseClientPool",
    "SessionPool",
    "BaseTransferEngine",
    "HttpTransferEngine",
    "BaseProgress",
    "NullProgress",
    "ProgressState",
    "ProgressTracker",
    "DownloadItem",
    "FileItem",
    "RemoteFileInfo",
    "Outcome",
    "OutcomeStatus",
    "BatchSummary",
    "BatchDownloadError",
    "DownloadCancelledError",
    "EnumerationError",
    "TransferError",
]
