"""Logging infrastructure built on loguru.

Modules obtain a logger with get_logger(__name__). The first call configures
loguru with defaults unless setup_logging() or configure_logger() already ran.
"""

import sys
import typing as t

from loguru import logger

from ..config.settings import Environment, LogLevel, Settings

if t.TYPE_CHECKING:
    import loguru

DEVELOPMENT_FORMAT = (
    "<green>{time:HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{extra[name]}</cyan> - <level>{message}</level>"
)

_configured = False


def configure_logger(
    level: LogLevel | str = LogLevel.INFO,
    environment: Environment = Environment.DEVELOPMENT,
) -> None:
    """Replace loguru handlers with one configured for the environment.

    Development writes a colourised human readable format to stderr,
    production writes serialized JSON lines, testing writes plain text.
    """
    global _configured

    logger.remove()
    logger.configure(extra={"name": "batchdl"})

    match environment:
        case Environment.PRODUCTION:
            logger.add(sys.stderr, level=str(level), serialize=True)
        case Environment.TESTING:
            logger.add(sys.stderr, level=str(level), colorize=False)
        case _:
            logger.add(
                sys.stderr,
                level=str(level),
                format=DEVELOPMENT_FORMAT,
                colorize=True,
                backtrace=True,
            )

    _configured = True


def setup_logging(settings: Settings) -> None:
    """Configure logging from application settings."""
    configure_logger(level=settings.log_level, environment=settings.environment)


def get_logger(name: str) -> "loguru.Logger":
    """Return a logger bound to the given module name.

    Auto-configures loguru with defaults on first use.
    """
    if not _configured:
        configure_logger()
    return logger.bind(name=name)


def reset_logging() -> None:
    """Remove all handlers and forget previous configuration."""
    global _configured

    logger.remove()
    _configured = False


def is_configured() -> bool:
    """True once configure_logger() ran and reset_logging() has not since."""
    return _configured
