"""Infrastructure - logging."""

from .logging import (
    configure_logger,
    get_logger,
    is_configured,
    reset_logging,
    setup_logging,
)

__all__ = [
    "configure_logger",
    "get_logger",
    "is_configured",
    "reset_logging",
    "setup_logging",
]
