"""Tests for batch cancellation and enumeration errors in Downloader."""

import asyncio

import pytest

from batchdl.domain.exceptions import (
    DownloadCancelledError,
    EnumerationError,
    TransferError,
)
from batchdl.domain.outcome import OutcomeStatus
from tests.fixtures.fakes import (
    BlockingIterator,
    BrokenCurrentIterator,
    RaisingIterator,
    make_item,
)


class TestCallerCancellation:
    """Test Downloader.cancel() and cancelling the awaiting task."""

    @pytest.mark.asyncio
    async def test_cancel_aborts_running_item_and_stops_enumeration(
        self, make_downloader, fake_engine, recording_progress
    ):
        """With limit 1, cancelling during item 2 cancels it and skips item 4."""
        items = [make_item(f"item{i}") for i in range(1, 5)]
        fake_engine.gates["/item2"] = asyncio.Event()
        downloader = make_downloader(items)

        batch = asyncio.create_task(downloader.download(limit=1))
        await fake_engine.started["/item2"].wait()
        downloader.cancel()

        with pytest.raises(DownloadCancelledError, match="cancelled by caller"):
            await batch

        assert downloader.is_cancelled
        assert recording_progress.status_of("item1") == OutcomeStatus.SUCCEEDED
        assert recording_progress.status_of("item2") == OutcomeStatus.CANCELLED
        # item3 may have been dequeued already; if so it never transferred.
        if "item3" in recording_progress.added:
            assert recording_progress.status_of("item3") == OutcomeStatus.CANCELLED
        assert "/item3" not in fake_engine.locations
        assert "item4" not in recording_progress.added
        assert sorted(recording_progress.added) == sorted(recording_progress.done)

    @pytest.mark.asyncio
    async def test_cancel_before_download(self, make_downloader, recording_progress):
        downloader = make_downloader([make_item("a")])
        downloader.cancel()

        with pytest.raises(DownloadCancelledError):
            await downloader.download(limit=1)

        assert recording_progress.events == []

    @pytest.mark.asyncio
    async def test_cancel_interrupts_blocked_enumeration(
        self, make_downloader, fake_engine, recording_progress
    ):
        """A source blocked in has_next() does not delay cancellation."""
        fake_engine.gates["/a"] = asyncio.Event()
        iterator = BlockingIterator([make_item("a")])
        downloader = make_downloader(iterator)

        batch = asyncio.create_task(downloader.download(limit=2))
        await iterator.blocked.wait()
        await fake_engine.started["/a"].wait()
        downloader.cancel()

        with pytest.raises(DownloadCancelledError):
            await asyncio.wait_for(batch, timeout=1)

        assert recording_progress.status_of("a") == OutcomeStatus.CANCELLED

    @pytest.mark.asyncio
    async def test_cancelling_awaiting_task_propagates(
        self, make_downloader, fake_engine, recording_progress
    ):
        """The caller's CancelledError is re-raised after items report."""
        fake_engine.gates["/a"] = asyncio.Event()
        downloader = make_downloader([make_item("a")])

        batch = asyncio.create_task(downloader.download(limit=1))
        await fake_engine.started["/a"].wait()
        batch.cancel()

        with pytest.raises(asyncio.CancelledError):
            await batch

        assert downloader.is_cancelled
        assert recording_progress.status_of("a") == OutcomeStatus.CANCELLED

    @pytest.mark.asyncio
    async def test_cancelling_while_waiting_for_a_slot_reports_held_item(
        self, make_downloader, fake_engine, recording_progress
    ):
        """An item dequeued while the limit is saturated still starts and finishes."""
        dequeued: list[str] = []

        def generate():
            for name in ("a", "b", "c"):
                dequeued.append(name)
                yield make_item(name)

        fake_engine.gates["/a"] = asyncio.Event()
        downloader = make_downloader(generate())

        batch = asyncio.create_task(downloader.download(limit=1))
        await fake_engine.started["/a"].wait()
        while "b" not in dequeued:
            await asyncio.sleep(0)
        for _ in range(3):
            await asyncio.sleep(0)
        batch.cancel()

        with pytest.raises(asyncio.CancelledError):
            await batch

        assert dequeued == ["a", "b"]
        assert sorted(recording_progress.added) == dequeued
        assert sorted(recording_progress.done) == dequeued
        assert recording_progress.status_of("b") == OutcomeStatus.CANCELLED
        assert fake_engine.locations == ["/a"]

    @pytest.mark.asyncio
    async def test_deadline_around_download(
        self, make_downloader, fake_engine, recording_progress
    ):
        fake_engine.gates["/a"] = asyncio.Event()
        downloader = make_downloader([make_item("a")])

        with pytest.raises(TimeoutError):
            async with asyncio.timeout(0.05):
                await downloader.download(limit=1)

        assert recording_progress.status_of("a") == OutcomeStatus.CANCELLED


class TestItemCancellation:
    """Test cancellation-class errors raised while transferring an item."""

    @pytest.mark.asyncio
    async def test_engine_cancellation_aborts_batch(
        self, make_downloader, fake_engine, recording_progress, mock_logger
    ):
        fake_engine.gates["/slow"] = asyncio.Event()
        fake_engine.errors["/boom"] = asyncio.CancelledError()
        items = [make_item("slow"), make_item("boom"), make_item("later")]

        with pytest.raises(DownloadCancelledError, match="download: boom") as exc_info:
            await make_downloader(items).download(limit=2)

        assert isinstance(exc_info.value.__cause__, asyncio.CancelledError)
        assert recording_progress.status_of("boom") == OutcomeStatus.CANCELLED
        assert recording_progress.status_of("slow") == OutcomeStatus.CANCELLED
        assert "/later" not in fake_engine.locations
        mock_logger.warning.assert_called_once()

    @pytest.mark.asyncio
    async def test_wrapped_cancellation_aborts_batch(
        self, make_downloader, fake_engine
    ):
        """An error explicitly raised from a cancellation is a cancellation."""
        error = TransferError("part 3 failed")
        error.__cause__ = asyncio.CancelledError()
        fake_engine.errors["/a"] = error

        with pytest.raises(DownloadCancelledError) as exc_info:
            await make_downloader([make_item("a")]).download(limit=1)

        assert exc_info.value.__cause__ is error

    @pytest.mark.asyncio
    async def test_cancellation_inside_group_aborts_batch(
        self, make_downloader, fake_engine
    ):
        fake_engine.errors["/a"] = ExceptionGroup(
            "parts", [OSError("reset"), DownloadCancelledError("remote")]
        )

        with pytest.raises(DownloadCancelledError):
            await make_downloader([make_item("a")]).download(limit=1)

    @pytest.mark.asyncio
    async def test_first_cancellation_cause_wins(self, make_downloader, fake_engine):
        fake_engine.errors["/a"] = DownloadCancelledError("first")
        fake_engine.errors["/b"] = DownloadCancelledError("second")

        with pytest.raises(DownloadCancelledError, match="first"):
            await make_downloader([make_item("a"), make_item("b")]).download(limit=1)


class TestEnumerationErrors:
    """Test failures of the item source."""

    @pytest.mark.asyncio
    async def test_source_error_raised_after_items_finish(
        self, make_downloader, recording_progress
    ):
        """Items yielded before the failure complete; then the error surfaces."""
        failure = RuntimeError("listing failed")

        def generate():
            yield make_item("a")
            yield make_item("b")
            raise failure

        with pytest.raises(EnumerationError, match="iter: listing failed") as exc_info:
            await make_downloader(generate()).download(limit=2)

        assert exc_info.value.__cause__ is failure
        assert recording_progress.status_of("a") == OutcomeStatus.SUCCEEDED
        assert recording_progress.status_of("b") == OutcomeStatus.SUCCEEDED

    @pytest.mark.asyncio
    async def test_raising_has_next(self, make_downloader, recording_progress):
        failure = ConnectionError("page 2 unavailable")
        iterator = RaisingIterator([make_item("a")], failure)

        with pytest.raises(EnumerationError) as exc_info:
            await make_downloader(iterator).download(limit=1)

        assert exc_info.value.__cause__ is failure
        assert recording_progress.done == ["a"]

    @pytest.mark.asyncio
    async def test_enumeration_error_takes_precedence_over_cancellation(
        self, make_downloader, fake_engine
    ):
        fake_engine.errors["/a"] = DownloadCancelledError("remote")
        iterator = RaisingIterator([make_item("a")], RuntimeError("listing failed"))

        with pytest.raises(EnumerationError):
            await make_downloader(iterator).download(limit=1)

    @pytest.mark.asyncio
    async def test_current_failure_waits_for_launched_items(
        self, make_downloader, fake_engine, recording_progress
    ):
        """An error from current() is an enumeration error raised after items finish."""
        fake_engine.delay = 0.01
        failure = LookupError("no current item")
        iterator = BrokenCurrentIterator([make_item("a")], failure)

        with pytest.raises(EnumerationError) as exc_info:
            await make_downloader(iterator).download(limit=2)

        assert exc_info.value.__cause__ is failure
        assert fake_engine.active == 0
        assert recording_progress.status_of("a") == OutcomeStatus.SUCCEEDED
