"""Batch downloader coordinating concurrent per-item transfers.

This module provides the Downloader class which drains an item source, runs
one task per item under a concurrency limit, and decides which per-item
errors stop the whole batch.
"""

import asyncio
import typing as t

from ..domain.exceptions import (
    DownloadCancelledError,
    DownloaderAlreadyStartedError,
    EnumerationError,
    is_cancellation,
)
from ..domain.item import DownloadItem
from ..domain.outcome import BatchSummary, Outcome
from ..infrastructure.logging import get_logger
from .options import DownloaderOptions
from .threads import best_threads
from .writer import ProgressWriter

if t.TYPE_CHECKING:
    import loguru


class CancelScope:
    """Cancellation signal shared by the coordinating loop and all item tasks.

    Only tasks that have started running are attached, so a task that is
    launched after the scope is cancelled still runs, sees the cancelled
    scope and reports its item as cancelled.
    """

    def __init__(self) -> None:
        self._event = asyncio.Event()
        self._tasks: set[asyncio.Task[None]] = set()
        self.cause: DownloadCancelledError | None = None

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    async def wait(self) -> None:
        await self._event.wait()

    def attach(self, task: asyncio.Task[None]) -> None:
        self._tasks.add(task)

    def detach(self, task: asyncio.Task[None]) -> None:
        self._tasks.discard(task)

    def cancel(self, cause: DownloadCancelledError) -> bool:
        """Cancel the scope and every attached task except the caller.

        Returns:
            False if the scope was already cancelled (first cause wins)
        """
        if self._event.is_set():
            return False

        self.cause = cause
        self._event.set()
        current = asyncio.current_task()
        for task in list(self._tasks):
            if task is not current:
                task.cancel()
        return True


class Downloader:
    """Downloads every item of a source concurrently.

    Key responsibilities:
    - Drains the item source from a single coordinating loop
    - Bounds the number of in-flight items with a semaphore
    - Picks per-item parallelism with best_threads()
    - Reports each item's start, progress and outcome to the progress sink
    - Stops the batch on cancellation; logs and skips other item failures

    Implementation decisions:
    - An item whose transfer fails with a non-cancellation error is reported
      as FAILED and the batch continues
    - A cancellation-class error aborts running siblings and stops
      enumeration, then download() raises DownloadCancelledError
    - An enumeration error is raised after in-flight items finish and takes
      precedence over every task result
    - Cancelling the task awaiting download() (or an asyncio.timeout around
      it) aborts the batch the same way and then propagates unchanged

    Usage:
        downloader = Downloader(
            DownloaderOptions(
                pool=pool,
                engine=HttpTransferEngine(),
                iterator=IterableSource(items),
                progress=ProgressTracker(),
            )
        )
        summary = await downloader.download(limit=2)
    """

    def __init__(
        self,
        options: DownloaderOptions,
        logger: "loguru.Logger" = get_logger(__name__),
    ) -> None:
        """Initialise the downloader.

        Args:
            options: Collaborators and tuning values for the run
            logger: Logger instance for recording downloader events
        """
        self._opts = options
        self._logger = logger
        self._scope = CancelScope()
        self._summary = BatchSummary()
        self._started = False
        self._semaphore = asyncio.Semaphore()
        self._tasks: set[asyncio.Task[None]] = set()

    @property
    def options(self) -> DownloaderOptions:
        return self._opts

    @property
    def is_cancelled(self) -> bool:
        return self._scope.cancelled

    def cancel(self) -> None:
        """Cancel the batch.

        Running items are aborted and reported as cancelled, no further items
        are dequeued, and download() raises DownloadCancelledError.
        """
        self._scope.cancel(DownloadCancelledError("download: cancelled by caller"))

    async def download(self, limit: int) -> BatchSummary:
        """Download all items with at most ``limit`` in flight.

        May be called once per Downloader.

        Args:
            limit: Maximum number of items downloaded concurrently

        Returns:
            Summary of the batch; per-item failures are counted, not raised

        Raises:
            ValueError: If limit < 1
            DownloaderAlreadyStartedError: If called a second time
            EnumerationError: If the item source failed
            DownloadCancelledError: If the batch was cancelled
        """
        if limit < 1:
            raise ValueError(f"limit must be at least 1, got {limit}")
        if self._started:
            raise DownloaderAlreadyStartedError("Downloader already started")
        self._started = True

        self._semaphore = asyncio.Semaphore(limit)
        try:
            enumeration_error = await self._enumerate()
            await self._wait()
        except BaseException:
            # Cancelled by the caller (or failed unexpectedly): abort items,
            # let every launched item report, re-raise.
            self._scope.cancel(DownloadCancelledError("download: cancelled"))
            await self._wait()
            raise

        if enumeration_error is not None:
            raise EnumerationError(f"iter: {enumeration_error}") from enumeration_error
        if self._scope.cause is not None:
            raise self._scope.cause

        self._logger.debug(
            f"Batch finished: {self._summary.succeeded} succeeded, "
            f"{self._summary.failed} failed, {self._summary.cancelled} cancelled"
        )
        return self._summary

    async def _enumerate(self) -> Exception | None:
        """Launch one task per item until the source ends or the scope is cancelled.

        Returns:
            The error that ended enumeration, or None
        """
        iterator = self._opts.iterator
        while not self._scope.cancelled:
            try:
                if not await self._poll_next():
                    break
                item = iterator.current()
            except Exception as exc:
                return exc

            try:
                await self._semaphore.acquire()
            except asyncio.CancelledError:
                self._launch_cancelled(item)
                raise
            self._launch(item)

        return iterator.error()

    async def _poll_next(self) -> bool:
        """Advance the item source, giving up as soon as the scope is cancelled."""
        next_item = asyncio.ensure_future(self._opts.iterator.has_next())
        scope_cancelled = asyncio.ensure_future(self._scope.wait())
        try:
            done, _ = await asyncio.wait(
                {next_item, scope_cancelled}, return_when=asyncio.FIRST_COMPLETED
            )
        except asyncio.CancelledError:
            # The source may already have handed out an item.
            if _yielded(next_item):
                self._launch_cancelled(self._opts.iterator.current())
            raise
        finally:
            scope_cancelled.cancel()
            if not next_item.done():
                next_item.cancel()

        if next_item in done:
            return next_item.result()
        return False

    def _launch(self, item: DownloadItem) -> None:
        task = asyncio.create_task(self._run(item), name=f"download:{item.name}")
        self._tasks.add(task)
        task.add_done_callback(self._task_done)

    def _launch_cancelled(self, item: DownloadItem) -> None:
        """Launch a dequeued item without a slot after the caller cancelled.

        The scope is cancelled first, so the task reports the item as
        CANCELLED without transferring it.
        """
        self._scope.cancel(DownloadCancelledError("download: cancelled"))
        self._launch(item)

    def _task_done(self, task: asyncio.Task[None]) -> None:
        self._tasks.discard(task)
        self._semaphore.release()

    async def _wait(self) -> None:
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def _run(self, item: DownloadItem) -> None:
        """Task body for one item: start, transfer, always report the outcome."""
        task = asyncio.current_task()
        assert task is not None
        self._scope.attach(task)

        outcome = Outcome.cancelled()
        try:
            await self._opts.progress.on_add(item)
            outcome = await self._download(item)
        except DownloadCancelledError as exc:
            outcome = Outcome.cancelled(exc)
            if self._scope.cancel(exc):
                self._logger.warning(f"Batch cancelled by {item.name}: {exc}")
        except asyncio.CancelledError as exc:
            outcome = Outcome.cancelled(exc)
            raise
        except Exception as exc:
            self._logger.exception(f"Unexpected error processing {item.name}")
            outcome = Outcome.failed(exc)
        finally:
            self._scope.detach(task)
            self._summary.record(outcome)
            await self._report_done(item, outcome)

    async def _download(self, item: DownloadItem) -> Outcome:
        """Resolve the item's client and transfer it.

        Returns:
            SUCCEEDED or FAILED outcome, or CANCELLED if the scope was
            already cancelled before any work

        Raises:
            DownloadCancelledError: If the transfer failed with a
                cancellation-class error
            asyncio.CancelledError: If this task itself was cancelled
        """
        if self._scope.cancelled:
            return Outcome.cancelled(self._scope.cause)

        threads = best_threads(item.file.size, self._opts.threads)
        self._logger.debug(
            f"Start download {item.name} (dc={item.file.dc}, "
            f"size={item.file.size}, threads={threads}, takeout={item.takeout})"
        )

        writer = ProgressWriter(item, self._opts.progress)
        try:
            if item.takeout:
                client = await self._opts.pool.takeout(item.file.dc)
            else:
                client = await self._opts.pool.client(item.file.dc)

            transferred = await self._opts.engine.transfer(
                client,
                item.file.location,
                self._opts.part_size,
                threads,
                writer,
            )
        except asyncio.CancelledError as exc:
            task = asyncio.current_task()
            if task is not None and task.cancelling():
                raise
            # Cancellation raised by the engine itself, not delivered to us.
            raise DownloadCancelledError(f"download: {item.name}") from exc
        except Exception as exc:
            if is_cancellation(exc):
                raise DownloadCancelledError(f"download: {item.name}: {exc}") from exc
            self._logger.error(
                f"Failed to download {item.name}: {type(exc).__name__}: {exc}"
            )
            return Outcome.failed(exc, writer.downloaded)

        self._logger.debug(f"Finished download {item.name} ({transferred} bytes)")
        return Outcome.succeeded(transferred)

    async def _report_done(self, item: DownloadItem, outcome: Outcome) -> None:
        try:
            await self._opts.progress.on_done(item, outcome)
        except Exception:
            # Logged with traceback; the batch continues.
            self._logger.exception(f"Progress sink failed on_done for {item.name}")


def _yielded(future: "asyncio.Future[bool]") -> bool:
    """True if a finished has_next() future reported a new item."""
    return (
        future.done()
        and not future.cancelled()
        and future.exception() is None
        and future.result() is True
    )
