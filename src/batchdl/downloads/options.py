"""Downloader configuration bundle."""

from dataclasses import dataclass, field

from ..config.settings import Settings
from ..tracking.base import BaseProgress
from ..tracking.null import NullProgress
from .iterator import BaseItemIterator
from .pool import BaseClientPool
from .transfer import BaseTransferEngine


@dataclass(frozen=True)
class DownloaderOptions:
    """Everything a Downloader needs for one run. Never mutated during a run.

    Attributes:
        pool: Resolves an item's dc (and takeout flag) to a client
        engine: Performs the chunked transfer of one item
        iterator: Source of items, drained by the coordinating loop
        progress: Receives item lifecycle notifications
        part_size: Bytes per part requested by the engine
        threads: Maximum per-item parallelism
    """

    pool: BaseClientPool
    engine: BaseTransferEngine
    iterator: BaseItemIterator
    progress: BaseProgress = field(default_factory=NullProgress)
    part_size: int = 512 * 1024
    threads: int = 4

    def __post_init__(self) -> None:
        if self.part_size < 1:
            raise ValueError(f"part_size must be positive, got {self.part_size}")
        if self.threads < 1:
            raise ValueError(f"threads must be at least 1, got {self.threads}")

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        *,
        pool: BaseClientPool,
        engine: BaseTransferEngine,
        iterator: BaseItemIterator,
        progress: BaseProgress | None = None,
    ) -> "DownloaderOptions":
        """Build options taking part size and thread cap from settings."""
        return cls(
            pool=pool,
            engine=engine,
            iterator=iterator,
            progress=progress or NullProgress(),
            part_size=settings.part_size,
            threads=settings.threads,
        )
