"""Item sources polled by the downloader's coordinating loop."""

import typing as t
from abc import ABC, abstractmethod

from ..domain.item import DownloadItem


class BaseItemIterator(ABC):
    """Abstract lazy, finite, non-restartable sequence of items.

    Only the downloader's coordinating loop polls an iterator, so
    implementations need not be safe for concurrent callers.

    Usage:
        while await iterator.has_next():
            item = iterator.current()
            ...
        if (err := iterator.error()) is not None:
            ...
    """

    @abstractmethod
    async def has_next(self) -> bool:
        """Advance to the next item.

        Returns:
            True if current() now holds a new item, False once the source is
            exhausted or failed.
        """
        pass

    @abstractmethod
    def current(self) -> DownloadItem:
        """Return the item produced by the last successful has_next()."""
        pass

    @abstractmethod
    def error(self) -> Exception | None:
        """Return the error that ended enumeration, or None on exhaustion."""
        pass


class IterableSource(BaseItemIterator):
    """Adapts a sync or async iterable into an item iterator.

    An exception raised by the underlying iterable ends enumeration and is
    reported through error() instead of propagating from has_next().
    """

    def __init__(
        self, items: t.Iterable[DownloadItem] | t.AsyncIterable[DownloadItem]
    ) -> None:
        self._sync: t.Iterator[DownloadItem] | None = None
        self._async: t.AsyncIterator[DownloadItem] | None = None
        if isinstance(items, t.AsyncIterable):
            self._async = aiter(items)
        else:
            self._sync = iter(items)
        self._current: DownloadItem | None = None
        self._error: Exception | None = None
        self._finished = False

    async def has_next(self) -> bool:
        if self._finished:
            return False

        try:
            if self._async is not None:
                self._current = await anext(self._async)
            else:
                assert self._sync is not None
                self._current = next(self._sync)
        except (StopIteration, StopAsyncIteration):
            self._finished = True
            return False
        except Exception as exc:
            self._error = exc
            self._finished = True
            return False
        return True

    def current(self) -> DownloadItem:
        if self._current is None:
            raise LookupError("current() called before a successful has_next()")
        return self._current

    def error(self) -> Exception | None:
        return self._error
