from batchdl.app import App, create_app
from batchdl.config.settings import Environment, LogLevel, Settings
from batchdl.infrastructure.logging import get_logger, is_configured


def test_create_app_uses_default_settings():
    app = create_app()
    assert isinstance(app, App)
    assert isinstance(app.settings, Settings)
    assert app.settings.environment == Environment.DEVELOPMENT
    assert app.settings.log_level == LogLevel.INFO


def test_create_app_with_custom_settings(test_settings):
    """Test create_app with custom settings using fixture."""
    app = create_app(settings=test_settings)
    assert app.settings is test_settings
    assert app.settings.environment == Environment.TESTING
    assert app.settings.log_level == LogLevel.CRITICAL


def test_create_app_configures_logging():
    assert is_configured() is False
    _ = create_app()
    assert is_configured() is True


def test_logger_configured_with_test_app(test_app):
    assert is_configured() is True

    logger = get_logger(__name__)
    logger.critical("Test critical message - should appear")
    logger.info("Test info message - should be filtered out")


def test_default_settings_carry_download_tuning():
    app = create_app()
    assert app.settings.part_size == 512 * 1024
    assert app.settings.threads == 4
    assert app.settings.limit == 2


def test_logger_bound_to_module_name_in_production(capsys):
    create_app(Settings(environment=Environment.PRODUCTION, log_level=LogLevel.INFO))

    get_logger("batchdl.downloads.orchestrator").info("batch started")

    err = capsys.readouterr().err
    assert "batch started" in err
    assert '"name": "batchdl.downloads.orchestrator"' in err
