"""Null object implementation of a progress sink."""

from ..domain.item import DownloadItem
from ..domain.outcome import Outcome
from .base import BaseProgress, ProgressState


class NullProgress(BaseProgress):
    """Null object implementation of progress that does nothing.

    Use when progress reporting is not needed but a sink is required.
    """

    async def on_add(self, item: DownloadItem) -> None:
        pass

    async def on_download(self, item: DownloadItem, state: ProgressState) -> None:
        pass

    async def on_done(self, item: DownloadItem, outcome: Outcome) -> None:
        pass
