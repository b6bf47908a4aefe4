"""CLI state container."""

import typing as t

from ..config.settings import Settings
from ..downloads.options import DownloaderOptions
from ..downloads.orchestrator import Downloader
from ..downloads.pool import SessionPool
from ..downloads.transfer import BaseTransferEngine, HttpTransferEngine

DownloaderFactory = t.Callable[[DownloaderOptions], Downloader]
PoolFactory = t.Callable[[Settings], SessionPool]
EngineFactory = t.Callable[[], BaseTransferEngine]

# CLI items all live on one endpoint; locations are absolute URLs.
CLI_DC = 0


def _default_pool(settings: Settings) -> SessionPool:
    return SessionPool({CLI_DC: ""}, timeout=settings.timeout)


class CLIState:
    """Application state container for CLI commands.

    Holds Settings and the factories commands use to build collaborators,
    so tests can swap them for mocks.
    """

    def __init__(
        self,
        settings: Settings,
        downloader_factory: DownloaderFactory | None = None,
        pool_factory: PoolFactory | None = None,
        engine_factory: EngineFactory | None = None,
    ) -> None:
        self.settings = settings
        self._downloader_factory = downloader_factory or Downloader
        self._pool_factory = pool_factory or _default_pool
        self._engine_factory = engine_factory or HttpTransferEngine

    def create_downloader(self, options: DownloaderOptions) -> Downloader:
        return self._downloader_factory(options)

    def create_pool(self) -> SessionPool:
        return self._pool_factory(self.settings)

    def create_engine(self) -> BaseTransferEngine:
        return self._engine_factory()
