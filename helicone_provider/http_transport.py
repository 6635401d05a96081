"""
HTTP transport for the Helicone provider

This module provides the default "fetch" used to reach the gateway:
- A single send per call, streaming or buffered
- Connection pooling and keep-alive settings
- Configurable timeouts

Retries are deliberately absent here. Retry and fallback policy is
declared to the gateway through request headers and executed there.
"""

from __future__ import annotations

import logging
from typing import Any, Protocol

import httpx
from pydantic import BaseModel

logger = logging.getLogger(__name__)


class HttpConfig(BaseModel):
    """Configuration for the default HTTP transport."""

    timeout: float = 60.0
    max_keepalive_connections: int = 20
    max_connections: int = 100
    keepalive_expiry: float = 30.0


class Fetch(Protocol):
    """
    Pluggable transport used by the language model.

    Receives a fully built request and returns the response. When
    ``stream`` is true the body must not be read eagerly; the caller
    consumes it with ``aiter_bytes()`` and closes the response.
    """

    async def __call__(
        self, request: httpx.Request, *, stream: bool = False
    ) -> httpx.Response: ...


class HttpxFetch:
    """
    Default ``Fetch`` implementation backed by ``httpx.AsyncClient``.

    The client is created on first use so that building a provider never
    opens sockets.
    """

    def __init__(
        self,
        config: HttpConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Initialize the transport.

        Args:
            config: HTTP configuration settings
            transport: Optional httpx transport (e.g. ``httpx.MockTransport``)
        """
        self.config = config or HttpConfig()
        self._transport = transport
        self._http: httpx.AsyncClient | None = None

    @property
    def http(self) -> httpx.AsyncClient:
        if self._http is None:
            self._http = httpx.AsyncClient(
                timeout=httpx.Timeout(self.config.timeout),
                limits=httpx.Limits(
                    max_keepalive_connections=self.config.max_keepalive_connections,
                    max_connections=self.config.max_connections,
                    keepalive_expiry=self.config.keepalive_expiry,
                ),
                transport=self._transport,
            )
        return self._http

    async def __call__(
        self, request: httpx.Request, *, stream: bool = False
    ) -> httpx.Response:
        logger.debug(f"{request.method} {request.url} (stream={stream})")
        return await self.http.send(request, stream=stream)

    async def close(self) -> None:
        """Close the HTTP client and clean up resources."""
        if self._http is not None:
            await self._http.aclose()
            self._http = None

    async def __aenter__(self) -> HttpxFetch:
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.close()


def create_http_config_from_dict(config_dict: dict[str, Any]) -> HttpConfig:
    """
    Create HttpConfig from a dictionary (e.g., from YAML config).

    Args:
        config_dict: Dictionary containing an optional ``http`` block

    Returns:
        HttpConfig instance with validated settings
    """
    http_config = config_dict.get("http") or {}
    defaults = HttpConfig()

    return HttpConfig(
        timeout=http_config.get("timeout", defaults.timeout),
        max_keepalive_connections=http_config.get(
            "max_keepalive_connections", defaults.max_keepalive_connections
        ),
        max_connections=http_config.get("max_connections", defaults.max_connections),
        keepalive_expiry=http_config.get("keepalive_expiry", defaults.keepalive_expiry),
    )
