"""Domain models - items, outcomes and errors."""

from .exceptions import (
    BatchDownloadError,
    DownloadCancelledError,
    DownloaderAlreadyStartedError,
    EnumerationError,
    TransferError,
    UnknownEndpointError,
    is_cancellation,
)
from .item import (
    DownloadItem,
    FileItem,
    FileTarget,
    RemoteFile,
    RemoteFileInfo,
    WriteTarget,
)
from .outcome import BatchSummary, Outcome, OutcomeStatus

__all__ = [
    # Items
    "DownloadItem",
    "RemoteFile",
    "WriteTarget",
    "FileItem",
    "FileTarget",
    "RemoteFileInfo",
    # Outcomes
    "Outcome",
    "OutcomeStatus",
    "BatchSummary",
    # Errors
    "BatchDownloadError",
    "DownloadCancelledError",
    "DownloaderAlreadyStartedError",
    "EnumerationError",
    "TransferError",
    "UnknownEndpointError",
    "is_cancellation",
]
