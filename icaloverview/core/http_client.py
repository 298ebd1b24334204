"""Shared HTTP client manager for upstream ICS fetches.

One pooled ``httpx.AsyncClient`` per client id is reused across aggregation
passes instead of opening a client per fetch.
"""

import asyncio
import logging
from typing import Optional

import httpx

logger = logging.getLogger(__name__)

_shared_clients: dict[str, httpx.AsyncClient] = {}
_client_lock = asyncio.Lock()

DEFAULT_REQUEST_TIMEOUT = 15.0

_DEFAULT_LIMITS = httpx.Limits(
    max_connections=8,
    max_keepalive_connections=4,
)

# Browser-like headers; some hosted calendars reject obvious automated clients
DEFAULT_BROWSER_HEADERS: dict[str, str] = {
    "User-Agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    "Accept": "text/calendar, text/plain, application/octet-stream, */*",
    "Accept-Language": "nl-NL,nl;q=0.9,en;q=0.8",
    "Cache-Control": "no-cache",
}


def build_timeout(request_timeout: float = DEFAULT_REQUEST_TIMEOUT) -> httpx.Timeout:
    """Bound every phase of an upstream request so a hung feed cannot stall a pass."""
    return httpx.Timeout(
        connect=min(10.0, request_timeout),
        read=request_timeout,
        write=10.0,
        pool=request_timeout,
    )


async def get_shared_client(
    client_id: str = "default",
    timeout: Optional[httpx.Timeout] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> httpx.AsyncClient:
    """Get or create a shared HTTP client with connection pooling.

    Args:
        client_id: Identifier for the client (allows multiple clients if needed)
        timeout: Custom timeout configuration
        transport: Custom transport (tests pass ``httpx.MockTransport``)

    Returns:
        Shared httpx.AsyncClient

    Raises:
        RuntimeError: If client creation fails
    """
    async with _client_lock:
        client = _shared_clients.get(client_id)
        if client is None or client.is_closed:
            try:
                client = httpx.AsyncClient(
                    transport=transport,
                    limits=_DEFAULT_LIMITS,
                    timeout=timeout or build_timeout(),
                    follow_redirects=True,
                    headers=DEFAULT_BROWSER_HEADERS,
                )
            except Exception as e:
                logger.exception("Failed to create shared HTTP client '%s'", client_id)
                raise RuntimeError(f"Failed to create shared HTTP client: {e}") from e
            _shared_clients[client_id] = client
            logger.debug("Created shared HTTP client '%s'", client_id)
        return client


async def close_all_clients() -> None:
    """Close all shared HTTP clients; call on application shutdown."""
    async with _client_lock:
        for client_id, client in _shared_clients.items():
            try:
                if not client.is_closed:
                    await client.aclose()
                    logger.debug("Closed shared HTTP client '%s'", client_id)
            except Exception as e:
                logger.warning("Error closing shared HTTP client '%s': %s", client_id, e)
        _shared_clients.clear()
