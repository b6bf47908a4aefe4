"""Client pools mapping an endpoint (dc) id to a connection handle."""

import asyncio
import ssl
import typing as t
from abc import ABC, abstractmethod
from dataclasses import dataclass
from urllib.parse import urljoin

import aiohttp
import certifi

from ..domain.exceptions import UnknownEndpointError
from ..infrastructure.logging import get_logger

if t.TYPE_CHECKING:
    import loguru


class BaseClientPool(ABC):
    """Abstract pool of clients shared read-only by all download tasks.

    Implementations must be safe for concurrent use.
    """

    @abstractmethod
    async def client(self, dc: int) -> t.Any:
        """Return the regular client for an endpoint."""
        pass

    @abstractmethod
    async def takeout(self, dc: int) -> t.Any:
        """Return the takeout-mode client for an endpoint."""
        pass


@dataclass(frozen=True)
class EndpointClient:
    """aiohttp session bound to one endpoint's base URL."""

    dc: int
    base_url: str
    session: aiohttp.ClientSession
    takeout: bool = False

    def url_for(self, location: str) -> str:
        """Resolve an item location against the endpoint base URL.

        Absolute locations are returned unchanged.
        """
        return urljoin(self.base_url.rstrip("/") + "/", location)


class SessionPool(BaseClientPool):
    """aiohttp session pool with one lazily opened session per (dc, mode).

    Each endpoint is registered with a base URL. Takeout sessions use the
    same base URL and send the extra takeout headers.

    Usage:
        async with SessionPool({1: "https://dc1.example", 2: "https://dc2.example"}) as pool:
            client = await pool.client(2)
    """

    def __init__(
        self,
        endpoints: t.Mapping[int, str],
        takeout_headers: t.Mapping[str, str] | None = None,
        timeout: float | None = None,
        logger: "loguru.Logger" = get_logger(__name__),
    ) -> None:
        """Initialise the pool.

        Args:
            endpoints: Base URL per endpoint (dc) id
            takeout_headers: Headers sent by takeout sessions
            timeout: Total timeout per request in seconds (None = no timeout)
            logger: Logger instance for recording pool events
        """
        self._endpoints = dict(endpoints)
        self._takeout_headers = dict(takeout_headers or {"X-Takeout": "1"})
        self._timeout = timeout
        self._logger = logger
        self._clients: dict[tuple[int, bool], EndpointClient] = {}
        self._lock = asyncio.Lock()

    async def __aenter__(self) -> "SessionPool":
        return self

    async def __aexit__(self, *args: t.Any) -> None:
        await self.close()

    async def client(self, dc: int) -> EndpointClient:
        return await self._get(dc, takeout=False)

    async def takeout(self, dc: int) -> EndpointClient:
        return await self._get(dc, takeout=True)

    async def close(self) -> None:
        """Close every session opened by the pool. Idempotent."""
        clients = list(self._clients.values())
        self._clients.clear()
        for client in clients:
            await client.session.close()

    async def _get(self, dc: int, takeout: bool) -> EndpointClient:
        if dc not in self._endpoints:
            raise UnknownEndpointError(dc)

        key = (dc, takeout)
        async with self._lock:
            client = self._clients.get(key)
            if client is None:
                client = EndpointClient(
                    dc=dc,
                    base_url=self._endpoints[dc],
                    session=self._open_session(takeout),
                    takeout=takeout,
                )
                self._clients[key] = client
                self._logger.debug(
                    f"Opened {'takeout ' if takeout else ''}session for dc {dc} "
                    f"({client.base_url})"
                )
        return client

    def _open_session(self, takeout: bool) -> aiohttp.ClientSession:
        # certifi bundle for portable certificate verification
        ssl_context = ssl.create_default_context(cafile=certifi.where())
        connector = aiohttp.TCPConnector(ssl=ssl_context)
        return aiohttp.ClientSession(
            connector=connector,
            headers=self._takeout_headers if takeout else None,
            timeout=aiohttp.ClientTimeout(total=self._timeout),
        )
