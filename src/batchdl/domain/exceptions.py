"""Custom exceptions for the batch downloader."""

import asyncio


class BatchDownloadError(Exception):
    """Base exception for batch downloader errors."""

    pass


class DownloaderAlreadyStartedError(BatchDownloadError):
    """Raised when download() is called more than once on a Downloader."""

    pass


class DownloadCancelledError(BatchDownloadError):
    """Raised when the batch was cancelled.

    This is the only per-item error class that stops the whole batch. The
    triggering error, if any, is available as __cause__.
    """

    pass


class EnumerationError(BatchDownloadError):
    """Raised when the item source failed to produce further items.

    The source's own exception is available as __cause__.
    """

    pass


class TransferError(BatchDownloadError):
    """Non-cancellation failure while transferring a single item.

    Reported to the progress sink as the item's failure outcome and never
    propagated past the item's task.
    """

    pass


class UnknownEndpointError(BatchDownloadError, KeyError):
    """Raised when a client pool has no endpoint registered for a dc id."""

    def __init__(self, dc: int) -> None:
        self.dc = dc
        super().__init__(f"no endpoint registered for dc {dc}")

    def __str__(self) -> str:
        return str(self.args[0])


def is_cancellation(exc: BaseException | None) -> bool:
    """Check whether an error denotes cancellation.

    Follows explicit wrapping (``raise ... from ...``) to any depth and
    descends into exception groups. Implicit __context__ links are not
    followed, and a TimeoutError ends the walk: asyncio.timeout() raises it
    from the CancelledError it converted, and a deadline on a single part is
    a per-item failure rather than a batch cancellation.
    """
    seen: set[int] = set()
    pending: list[BaseException] = [exc] if exc is not None else []
    while pending:
        current = pending.pop()
        if id(current) in seen:
            continue
        seen.add(id(current))

        if isinstance(current, (asyncio.CancelledError, DownloadCancelledError)):
            return True
        if isinstance(current, TimeoutError):
            continue
        if isinstance(current, BaseExceptionGroup):
            pending.extend(current.exceptions)
        if current.__cause__ is not None:
            pending.append(current.__cause__)
    return False
