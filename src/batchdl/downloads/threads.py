"""Per-item parallelism heuristic based on file size."""

import typing as t


class ThreadLevel(t.NamedTuple):
    threads: int
    # Exclusive upper bound in bytes.
    size: int


# Ascending by size. Provisional numbers; tune only with measurements.
THREAD_LEVELS: t.Final[tuple[ThreadLevel, ...]] = (
    ThreadLevel(1, 1 << 20),
    ThreadLevel(2, 5 << 20),
    ThreadLevel(4, 20 << 20),
    ThreadLevel(8, 50 << 20),
)


def best_threads(
    size: int,
    max_threads: int,
    levels: t.Sequence[ThreadLevel] = THREAD_LEVELS,
) -> int:
    """Pick how many parts of one item to fetch concurrently.

    Returns the thread level of the first entry whose size bound is strictly
    greater than ``size``, capped at ``max_threads``. Sizes beyond the last
    bound get ``max_threads``.

    Args:
        size: Item size in bytes
        max_threads: Configured per-item maximum, at least 1
        levels: Ascending table of (threads, size bound) pairs

    Returns:
        Thread count in the range [1, max_threads]

    Raises:
        ValueError: If max_threads < 1 or size is negative
    """
    if max_threads < 1:
        raise ValueError(f"max_threads must be at least 1, got {max_threads}")
    if size < 0:
        raise ValueError(f"size must not be negative, got {size}")

    for level in levels:
        if size < level.size:
            return min(level.threads, max_threads)
    return max_threads
