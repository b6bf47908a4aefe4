"""Progress sinks that record or log item state.

ProgressTracker keeps per-item state for querying after (or during) a run.
LoggingProgress writes the lifecycle to loguru. CompositeProgress fans one
notification out to several sinks.
"""

import asyncio
import enum
import typing as t
from collections import Counter

from pydantic import BaseModel, Field

from ..domain.item import DownloadItem
from ..domain.outcome import Outcome, OutcomeStatus
from ..infrastructure.logging import get_logger
from .base import BaseProgress, ProgressState

if t.TYPE_CHECKING:
    import loguru


class ItemStatus(enum.StrEnum):
    """Item lifecycle states as seen by the tracker.

    Flow: IN_PROGRESS -> (SUCCEEDED | FAILED | CANCELLED)
    """

    IN_PROGRESS = "in_progress"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    CANCELLED = "cancelled"

    @classmethod
    def from_outcome(cls, status: OutcomeStatus) -> "ItemStatus":
        return cls(status.value)


class ItemInfo(BaseModel):
    """State container for one tracked item."""

    name: str = Field(description="Item name")
    status: ItemStatus = Field(default=ItemStatus.IN_PROGRESS)
    bytes_downloaded: int = Field(default=0, ge=0)
    total_bytes: int = Field(default=0, ge=0)
    error: str | None = Field(
        default=None, description="Error message if the item did not succeed"
    )

    def get_progress(self) -> float:
        """Calculate progress as fraction (0.0 to 1.0)."""
        if self.total_bytes == 0:
            return 0.0
        return min(self.bytes_downloaded / self.total_bytes, 1.0)

    def is_terminal(self) -> bool:
        return self.status != ItemStatus.IN_PROGRESS


class TrackerStats(BaseModel):
    """Aggregate statistics about all tracked items."""

    total: int = Field(ge=0)
    in_progress: int = Field(ge=0)
    succeeded: int = Field(ge=0)
    failed: int = Field(ge=0)
    cancelled: int = Field(ge=0)
    completed_bytes: int = Field(ge=0, description="Bytes of succeeded items")


class ProgressTracker(BaseProgress):
    """Tracks item state keyed by item name.

    Usage:
        tracker = ProgressTracker()
        downloader = Downloader(DownloaderOptions(..., progress=tracker))
        await downloader.download(limit=2)

        info = tracker.get_item_info("video.mp4")
        print(f"Status: {info.status}, Progress: {info.get_progress()}")
    """

    def __init__(self, logger: "loguru.Logger" = get_logger(__name__)) -> None:
        self._items: dict[str, ItemInfo] = {}
        self._lock = asyncio.Lock()
        self._logger = logger

    async def on_add(self, item: DownloadItem) -> None:
        async with self._lock:
            self._items[item.name] = ItemInfo(
                name=item.name, total_bytes=item.file.size
            )

    async def on_download(self, item: DownloadItem, state: ProgressState) -> None:
        async with self._lock:
            info = self._items.setdefault(
                item.name, ItemInfo(name=item.name, total_bytes=state.total)
            )
            info.bytes_downloaded = state.downloaded

    async def on_done(self, item: DownloadItem, outcome: Outcome) -> None:
        async with self._lock:
            info = self._items.setdefault(
                item.name, ItemInfo(name=item.name, total_bytes=item.file.size)
            )
            info.status = ItemStatus.from_outcome(outcome.status)
            info.error = outcome.error_message
            if outcome.is_success:
                info.bytes_downloaded = outcome.bytes_transferred
        self._logger.debug(f"Tracked {item.name} as {info.status}")

    def get_item_info(self, name: str) -> ItemInfo | None:
        return self._items.get(name)

    def get_all_items(self) -> dict[str, ItemInfo]:
        """Copy of the tracked items keyed by name."""
        return self._items.copy()

    def get_stats(self) -> TrackerStats:
        """Summary statistics about all tracked items."""
        infos = list(self._items.values())
        statuses: Counter[ItemStatus] = Counter(info.status for info in infos)

        return TrackerStats(
            total=len(infos),
            in_progress=statuses.get(ItemStatus.IN_PROGRESS, 0),
            succeeded=statuses.get(ItemStatus.SUCCEEDED, 0),
            failed=statuses.get(ItemStatus.FAILED, 0),
            cancelled=statuses.get(ItemStatus.CANCELLED, 0),
            completed_bytes=sum(
                info.bytes_downloaded
                for info in infos
                if info.status == ItemStatus.SUCCEEDED
            ),
        )


class LoggingProgress(BaseProgress):
    """Writes item lifecycle to the logger. Per-part progress goes to TRACE."""

    def __init__(self, logger: "loguru.Logger" = get_logger(__name__)) -> None:
        self._logger = logger

    async def on_add(self, item: DownloadItem) -> None:
        self._logger.info(f"Started {item.name} ({item.file.size} bytes)")

    async def on_download(self, item: DownloadItem, state: ProgressState) -> None:
        self._logger.trace(
            f"{item.name}: {state.downloaded}/{state.total} bytes "
            f"({state.fraction:.0%})"
        )

    async def on_done(self, item: DownloadItem, outcome: Outcome) -> None:
        match outcome.status:
            case OutcomeStatus.SUCCEEDED:
                self._logger.info(
                    f"Finished {item.name} ({outcome.bytes_transferred} bytes)"
                )
            case OutcomeStatus.FAILED:
                self._logger.error(f"Failed {item.name}: {outcome.error_message}")
            case OutcomeStatus.CANCELLED:
                self._logger.warning(f"Cancelled {item.name}")


class CompositeProgress(BaseProgress):
    """Forwards every notification to each wrapped sink in order."""

    def __init__(self, *sinks: BaseProgress) -> None:
        self.sinks = sinks

    async def on_add(self, item: DownloadItem) -> None:
        for sink in self.sinks:
            await sink.on_add(item)

    async def on_download(self, item: DownloadItem, state: ProgressState) -> None:
        for sink in self.sinks:
            await sink.on_download(item, state)

    async def on_done(self, item: DownloadItem, outcome: Outcome) -> None:
        for sink in self.sinks:
            await sink.on_done(item, outcome)
