"""Abstract base class for progress sinks."""

from abc import ABC, abstractmethod

from pydantic import BaseModel, Field

from ..domain.item import DownloadItem
from ..domain.outcome import Outcome


class ProgressState(BaseModel):
    """Bytes received so far for one item."""

    downloaded: int = Field(default=0, ge=0, description="Bytes written so far")
    total: int = Field(default=0, ge=0, description="Item size in bytes")

    @property
    def fraction(self) -> float:
        """Progress as a fraction (0.0 to 1.0)."""
        if self.total == 0:
            return 0.0
        return min(self.downloaded / self.total, 1.0)


class BaseProgress(ABC):
    """Receives item lifecycle notifications from the downloader.

    For every item the downloader accepts, on_add() is called exactly once,
    followed by any number of on_download() calls and exactly one on_done().
    Calls for different items interleave, so implementations must tolerate
    concurrent invocation.
    """

    @abstractmethod
    async def on_add(self, item: DownloadItem) -> None:
        """Called when an item's task starts."""
        pass

    @abstractmethod
    async def on_download(self, item: DownloadItem, state: ProgressState) -> None:
        """Called after each part of an item is written."""
        pass

    @abstractmethod
    async def on_done(self, item: DownloadItem, outcome: Outcome) -> None:
        """Called once when an item's task ends, whatever the outcome."""
        pass
