"""Shared fixtures for CLI tests."""

import pytest

from batchdl.cli.app import create_cli_app
from batchdl.cli.state import CLIState
from batchdl.config.settings import Environment, LogLevel, Settings
from batchdl.domain.outcome import BatchSummary
from batchdl.downloads import Downloader


@pytest.fixture
def cli_settings(tmp_path):
    """Provide CLI Settings with known values."""
    return Settings(
        environment=Environment.TESTING,
        log_level=LogLevel.CRITICAL,
        download_dir=tmp_path / "downloads",
        part_size=16384,
        threads=4,
        limit=3,
    )


@pytest.fixture
def mock_downloader(mocker):
    """Provide a mocked Downloader whose batch succeeds."""
    mock = mocker.Mock(spec=Downloader)
    mock.download = mocker.AsyncMock(
        return_value=BatchSummary(
            total=2, succeeded=2, bytes_transferred=3 * 1024 * 1024
        )
    )
    return mock


@pytest.fixture
def downloader_factory(mocker, mock_downloader):
    return mocker.Mock(return_value=mock_downloader)


@pytest.fixture
def app_with_mock_downloader(cli_settings, downloader_factory):
    """Provide CLI app whose state builds the mocked downloader."""
    state = CLIState(cli_settings, downloader_factory=downloader_factory)
    return create_cli_app(state=state)


@pytest.fixture
def cli_app(cli_settings):
    """Provide CLI app with test settings injected."""
    return create_cli_app(settings=cli_settings)
