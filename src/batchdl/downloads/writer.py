"""Sink handed to transfer engines: writes parts and reports progress."""

from ..domain.item import DownloadItem
from ..tracking.base import BaseProgress, ProgressState


class ProgressWriter:
    """Writes parts to the item's target and reports cumulative progress."""

    def __init__(self, item: DownloadItem, progress: BaseProgress) -> None:
        self._item = item
        self._progress = progress
        self.downloaded = 0

    async def write_at(self, data: bytes, offset: int) -> int:
        written = await self._item.target.write_at(data, offset)
        self.downloaded += written
        await self._progress.on_download(
            self._item,
            ProgressState(downloaded=self.downloaded, total=self._item.file.size),
        )
        return written
