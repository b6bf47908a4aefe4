"""Pytest configuration and fixtures for batchdl tests."""

import typing as t

import loguru
import pytest
import pytest_asyncio
from aiohttp import ClientSession
from typer.testing import CliRunner

from batchdl.app import create_app
from batchdl.config.settings import Environment, LogLevel, Settings
from batchdl.downloads import Downloader, DownloaderOptions, IterableSource
from batchdl.infrastructure.logging import reset_logging
from batchdl.tracking import ProgressTracker
from tests.fixtures.fakes import FakeEngine, FakePool, RecordingProgress


@pytest.fixture
def test_settings():
    """Provide test-specific settings."""
    return Settings(
        environment=Environment.TESTING,
        log_level=LogLevel.CRITICAL,  # Minimal logging during tests
    )


@pytest.fixture
def test_app(test_settings):
    """Provide a test app with clean logging state."""
    reset_logging()
    app = create_app(settings=test_settings)
    yield app
    reset_logging()


@pytest.fixture(autouse=True)
def clean_logging_state():
    """Automatically reset logging before each test for isolation."""
    reset_logging()
    yield
    reset_logging()


@pytest.fixture
def mock_logger(mocker):
    """Provide a mock logger for testing that captures log calls."""
    logger = mocker.Mock(spec=loguru.logger)
    return logger


@pytest_asyncio.fixture
async def aio_client():
    """Provide a real aiohttp ClientSession for integration testing."""
    session = ClientSession()
    yield session
    await session.close()


@pytest.fixture
def fake_pool():
    return FakePool()


@pytest.fixture
def fake_engine():
    return FakeEngine()


@pytest.fixture
def recording_progress():
    return RecordingProgress()


@pytest.fixture
def tracker(mock_logger):
    """Provide a ProgressTracker with mocked logger for testing."""
    return ProgressTracker(logger=mock_logger)


@pytest.fixture
def make_downloader(
    fake_pool, fake_engine, recording_progress, mock_logger
) -> t.Callable[..., Downloader]:
    """Factory fixture to create Downloader instances with fake collaborators.

    ``items`` may be a list, any (async) iterable or a ready BaseItemIterator.
    """

    def _make_downloader(
        items: t.Any = (),
        threads: int = 4,
        part_size: int = 1024,
        progress=None,
        pool=None,
        engine=None,
    ) -> Downloader:
        iterator = items if hasattr(items, "has_next") else IterableSource(items)
        options = DownloaderOptions(
            pool=pool or fake_pool,
            engine=engine or fake_engine,
            iterator=iterator,
            progress=progress or recording_progress,
            part_size=part_size,
            threads=threads,
        )
        return Downloader(options, logger=mock_logger)

    return _make_downloader


@pytest.fixture
def cli_runner():
    """Provide Typer CLI test runner."""
    return CliRunner()
