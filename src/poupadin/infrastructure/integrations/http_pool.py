"""Shared HTTP client pool for connection reuse across the API clients.

Hey future me - the auth client, the gateway and every resource client talk
to the same host. Instead of each of them creating its own httpx.AsyncClient
(wasting TCP connections and ignoring keep-alive), they all ask this pool.

Unlike a module-level singleton, one pool belongs to one PoupadinClient, so
two clients in one process (tests!) never share connections or state.

Usage:
    pool = HttpClientPool(settings.api)
    client = await pool.get_client()
    response = await client.get("/budget/")   # base_url is already set

Don't forget pool.close() at shutdown - PoupadinClient.aclose() does it.
"""

import asyncio
import logging

import httpx

from poupadin.config import ApiSettings

logger = logging.getLogger(__name__)


class HttpClientPool:
    """Lazily created httpx.AsyncClient shared by one client instance.

    Features:
    - Lazy initialization (created on first use)
    - Safe under concurrent first use via asyncio.Lock
    - Limits and timeout from ApiSettings
    - Accepts an externally owned client (tests inject a MockTransport client)
    """

    def __init__(
        self,
        settings: ApiSettings,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize pool.

        Args:
            settings: API settings (base URL, timeout, limits)
            client: Pre-built client to use instead of creating one. The pool
                does NOT close a client it didn't create.
        """
        self._settings = settings
        self._client = client
        self._owns_client = client is None
        self._lock = asyncio.Lock()

    @property
    def base_url(self) -> str:
        """Base URL requests are resolved against."""
        return self._settings.base_url

    async def get_client(self) -> httpx.AsyncClient:
        """Get the shared HTTP client instance, creating it on first call."""
        if self._client is not None:
            return self._client

        async with self._lock:
            if self._client is None:
                self._client = httpx.AsyncClient(
                    base_url=self._settings.base_url,
                    timeout=httpx.Timeout(self._settings.timeout),
                    limits=httpx.Limits(
                        max_keepalive_connections=self._settings.max_keepalive,
                        max_connections=self._settings.max_connections,
                    ),
                    headers={"Content-Type": "application/json"},
                )
                self._owns_client = True
                logger.info(
                    "HTTP client pool initialized (base_url=%s, timeout=%.1fs, max_conn=%d)",
                    self._settings.base_url,
                    self._settings.timeout,
                    self._settings.max_connections,
                )
            return self._client

    async def close(self) -> None:
        """Close the HTTP client (if we created it) and release all connections.

        An injected client stays in place: its owner closes it, and building a
        fresh client at settings.base_url would bypass its transport.
        """
        async with self._lock:
            if self._client is not None and self._owns_client:
                await self._client.aclose()
                logger.info("HTTP client pool closed")
                self._client = None

    def is_initialized(self) -> bool:
        """Check if a client exists."""
        return self._client is not None
