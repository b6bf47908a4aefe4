"""Progress sinks - tracking and reporting item lifecycle."""

from .base import BaseProgress, ProgressState
from .null import NullProgress
from .tracker import (
    CompositeProgress,
    ItemInfo,
    ItemStatus,
    LoggingProgress,
    ProgressTracker,
    TrackerStats,
)

__all__ = [
    "BaseProgress",
    "ProgressState",
    "NullProgress",
    "ProgressTracker",
    "LoggingProgress",
    "CompositeProgress",
    "ItemInfo",
    "ItemStatus",
    "TrackerStats",
]
