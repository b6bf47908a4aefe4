"""Transfer engines that fetch one item's content in parts.

The downloader only decides how many parts run concurrently; an engine owns
the network protocol and hands each received part to a sink at its offset.
"""

import asyncio
import re
import typing as t
from abc import ABC, abstractmethod
from dataclasses import dataclass

import aiohttp

from ..domain.exceptions import TransferError
from ..infrastructure.logging import get_logger
from .pool import EndpointClient

if t.TYPE_CHECKING:
    import loguru

_CONTENT_RANGE = re.compile(r"^bytes (\d+)-(\d+)/(\d+|\*)$")


class ChunkSink(t.Protocol):
    """Receives parts at caller-specified offsets."""

    async def write_at(self, data: bytes, offset: int) -> int: ...


class BaseTransferEngine(ABC):
    """Abstract chunked transfer of a single remote object."""

    @abstractmethod
    async def transfer(
        self,
        client: t.Any,
        location: str,
        part_size: int,
        threads: int,
        sink: ChunkSink,
    ) -> int:
        """Fetch the object at location and write it through sink.

        Args:
            client: Connection handle resolved by the client pool
            location: Remote location of the object
            part_size: Size of each requested part in bytes
            threads: Number of parts fetched concurrently
            sink: Destination receiving each part at its offset

        Returns:
            Number of bytes transferred

        Raises:
            asyncio.CancelledError: If the transfer was cancelled
            Exception: Any transfer failure (network, protocol or write)
        """
        pass


@dataclass
class _Part:
    data: bytes
    # Object size from Content-Range, None when the server did not say.
    total: int | None
    ranged: bool


class _PartCursor:
    """Hands out part offsets to concurrent fetchers.

    Stops at the known object size, or at the first short part when the
    size is unknown.
    """

    def __init__(self, part_size: int, start: int, total: int | None) -> None:
        self._part_size = part_size
        self._next = start
        self._total = total
        self._done = False

    def claim(self) -> int | None:
        if self._done or (self._total is not None and self._next >= self._total):
            return None
        offset = self._next
        self._next += self._part_size
        return offset

    def finish(self) -> None:
        self._done = True


class HttpTransferEngine(BaseTransferEngine):
    """Fetches objects over HTTP with concurrent Range requests.

    The first part is fetched alone; its Content-Range tells the object size
    and whether the server honours ranges. The remaining parts are then
    fetched by ``threads`` concurrent fetchers. A server that ignores Range
    is accepted only when it returns the whole body for the first part. The
    first part is always handed to the sink, so empty objects are created too.

    Usage:
        engine = HttpTransferEngine()
        async with SessionPool({1: "https://dc1.example"}) as pool:
            client = await pool.client(1)
            written = await engine.transfer(client, "/files/a.bin", 512 * 1024, 4, target)
    """

    def __init__(self, logger: "loguru.Logger" = get_logger(__name__)) -> None:
        self._logger = logger

    async def transfer(
        self,
        client: EndpointClient,
        location: str,
        part_size: int,
        threads: int,
        sink: ChunkSink,
    ) -> int:
        if part_size < 1:
            raise ValueError(f"part_size must be positive, got {part_size}")
        if threads < 1:
            raise ValueError(f"threads must be at least 1, got {threads}")

        url = client.url_for(location)
        self._logger.debug(f"Transferring {url} (part_size={part_size}, threads={threads})")

        first = await self._fetch_part(client.session, url, 0, part_size)
        # Written even when empty so a 0-byte object still reaches the target.
        await sink.write_at(first.data, 0)
        transferred = len(first.data)
        if not first.ranged or len(first.data) < part_size:
            return transferred

        cursor = _PartCursor(part_size, start=part_size, total=first.total)

        async def fetch_parts() -> None:
            nonlocal transferred
            while (offset := cursor.claim()) is not None:
                part = await self._fetch_part(client.session, url, offset, part_size)
                if not part.ranged:
                    raise TransferError(
                        f"{url} ignored Range for offset {offset}; cannot resume mid-object"
                    )
                transferred += await self._write(sink, part.data, offset)
                if len(part.data) < part_size:
                    cursor.finish()

        try:
            async with asyncio.TaskGroup() as group:
                for _ in range(threads):
                    group.create_task(fetch_parts())
        except BaseExceptionGroup as errors:
            # Surface the first part failure as the item's error.
            raise errors.exceptions[0]

        return transferred

    async def _write(self, sink: ChunkSink, data: bytes, offset: int) -> int:
        if not data:
            return 0
        await sink.write_at(data, offset)
        return len(data)

    async def _fetch_part(
        self,
        session: aiohttp.ClientSession,
        url: str,
        offset: int,
        part_size: int,
    ) -> _Part:
        headers = {"Range": f"bytes={offset}-{offset + part_size - 1}"}
        async with session.get(url, headers=headers) as response:
            # Range starts past the end of the object
            if response.status == 416:
                return _Part(data=b"", total=None, ranged=True)

            response.raise_for_status()
            data = await response.read()

            if response.status != 206:
                return _Part(data=data, total=len(data), ranged=False)
            return _Part(
                data=data,
                total=_parse_total(response.headers.get("Content-Range")),
                ranged=True,
            )


def _parse_total(content_range: str | None) -> int | None:
    """Extract the object size from a Content-Range header, if present."""
    if not content_range:
        return None
    match = _CONTENT_RANGE.match(content_range.strip())
    if match is None or match.group(3) == "*":
        return None
    return int(match.group(3))
