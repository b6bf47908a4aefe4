"""Application settings and helpers for building them."""

import enum
import os
import typing as t
from dataclasses import dataclass, field, fields
from pathlib import Path

ENV_PREFIX = "BATCHDL_"


class Environment(enum.StrEnum):
    """Runtime environment for the application."""

    DEVELOPMENT = "development"
    PRODUCTION = "production"
    TESTING = "testing"


class LogLevel(enum.StrEnum):
    """Log levels understood by loguru."""

    TRACE = "TRACE"
    DEBUG = "DEBUG"
    INFO = "INFO"
    SUCCESS = "SUCCESS"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


@dataclass(frozen=True)
class Settings:
    """Settings container used to bootstrap the app.

    The app/CLI layer decides how values are populated (defaults, environment
    variables, command line overrides) through build_settings().
    """

    environment: Environment = Environment.DEVELOPMENT
    log_level: LogLevel = LogLevel.INFO
    download_dir: Path = field(default_factory=lambda: Path("./downloads"))
    # Size of each ranged part requested by the transfer engine.
    part_size: int = 512 * 1024
    # Upper bound for per-item parallelism.
    threads: int = 4
    # Upper bound for items downloaded at the same time.
    limit: int = 2
    timeout: float | None = None


def _coerce(raw: str, current: t.Any) -> t.Any:
    """Convert an environment variable string to the type of the default."""
    if isinstance(current, enum.Enum):
        return type(current)(raw.upper() if isinstance(current, LogLevel) else raw)
    if isinstance(current, bool):
        return raw.lower() in ("1", "true", "yes", "on")
    if isinstance(current, int):
        return int(raw)
    if isinstance(current, Path):
        return Path(raw)
    if current is None or isinstance(current, float):
        return float(raw)
    return raw


def settings_from_env(environ: t.Mapping[str, str] | None = None) -> dict[str, t.Any]:
    """Read BATCHDL_* variables into a dict of Settings overrides."""
    environ = os.environ if environ is None else environ
    defaults = Settings()
    overrides: dict[str, t.Any] = {}
    for f in fields(Settings):
        raw = environ.get(f"{ENV_PREFIX}{f.name.upper()}")
        if raw is None or raw == "":
            continue
        overrides[f.name] = _coerce(raw, getattr(defaults, f.name))
    return overrides


def build_settings(
    environ: t.Mapping[str, str] | None = None, **overrides: t.Any
) -> Settings:
    """Build Settings from defaults, environment variables and overrides.

    Overrides with a None value are ignored so CLI options that were not
    provided fall back to the environment or the defaults.

    Args:
        environ: Mapping to read BATCHDL_* variables from. Defaults to os.environ.
        **overrides: Explicit field values, highest precedence.

    Returns:
        Frozen Settings instance
    """
    values = settings_from_env(environ)
    values.update({key: value for key, value in overrides.items() if value is not None})
    return Settings(**values)
