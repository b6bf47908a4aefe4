from dataclasses import dataclass

from .config.settings import Settings
from .infrastructure.logging import setup_logging


@dataclass(frozen=True)
class App:
    """Application wiring container.

    Holds references to cross-cutting concerns (currently only `Settings`).
    Passing explicit `Settings` keeps configuration separate from the
    downloader and makes tests easy to set up.
    """

    settings: Settings


def create_app(settings: Settings | None = None) -> App:
    """Create an `App` with provided settings or defaults and configure logging."""
    settings = settings or Settings()
    setup_logging(settings)
    return App(settings=settings)
