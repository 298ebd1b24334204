"""Per-source ICS retrieval through the proxy collaborator."""

import logging
from typing import Optional, Protocol
from urllib.parse import urlparse

import httpx

from .calendar.lite_event_parser import parse_ics_events
from .calendar.lite_models import (
    DEFAULT_PROXY_CONTENT_TYPE,
    CalendarSource,
    EventItem,
    ProxyResponse,
    SourceFetchError,
    SourceFetchResult,
)
from .core.http_client import DEFAULT_REQUEST_TIMEOUT, build_timeout, get_shared_client

logger = logging.getLogger(__name__)


class LiteICSFetchError(Exception):
    """Base exception for ICS fetch errors."""


class LiteICSInvalidURLError(LiteICSFetchError):
    """Target URL is not an absolute http(s) URL."""


class LiteICSNetworkError(LiteICSFetchError):
    """Network error during ICS fetch."""


class LiteICSTimeoutError(LiteICSFetchError):
    """Timeout error during ICS fetch."""


class ProxyClient(Protocol):
    """Fetches a target URL and relays status, body and content-type unchanged."""

    async def fetch(self, url: str) -> ProxyResponse: ...


def is_fetchable_url(url: str) -> bool:
    """Accept only absolute http(s) URLs with a hostname."""
    try:
        parsed = urlparse(url)
    except ValueError:
        return False
    return parsed.scheme in ("http", "https") and bool(parsed.hostname)


class HttpxProxyClient:
    """Proxy collaborator backed by a shared httpx client.

    Non-2xx upstream responses are returned, not raised; only transport
    failures raise. No retries.
    """

    def __init__(
        self,
        request_timeout: float = DEFAULT_REQUEST_TIMEOUT,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.request_timeout = request_timeout
        self._client = client

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is not None:
            return self._client
        return await get_shared_client("proxy", timeout=build_timeout(self.request_timeout))

    async def fetch(self, url: str) -> ProxyResponse:
        """Fetch ``url`` upstream.

        Raises:
            LiteICSInvalidURLError: URL is not http(s)
            LiteICSTimeoutError: Upstream did not answer within the timeout
            LiteICSNetworkError: Any other transport failure
        """
        if not is_fetchable_url(url):
            raise LiteICSInvalidURLError(f"Invalid target URL: {url!r}")

        client = await self._get_client()
        try:
            response = await client.get(url, timeout=build_timeout(self.request_timeout))
        except httpx.TimeoutException as e:
            raise LiteICSTimeoutError(f"time-out na {self.request_timeout:g}s") from e
        except httpx.HTTPError as e:
            raise LiteICSNetworkError(f"netwerkfout: {e}") from e

        content_type = response.headers.get("content-type") or DEFAULT_PROXY_CONTENT_TYPE
        logger.debug(
            "Upstream %s answered %d (%d bytes, %s)",
            url,
            response.status_code,
            len(response.content),
            content_type,
        )
        return ProxyResponse(
            status_code=response.status_code,
            body=response.text,
            content=response.content,
            content_type=content_type,
        )


class LiteICSFetcher:
    """Turns one CalendarSource into EventItems or a source-scoped error."""

    def __init__(self, proxy: ProxyClient) -> None:
        self.proxy = proxy

    def _failure(
        self, source: CalendarSource, message: str = "", status_code: Optional[int] = None
    ) -> SourceFetchResult:
        error = SourceFetchError(
            source_id=source.id,
            source_name=source.display_name,
            status_code=status_code,
            message=message,
        )
        logger.warning("Source %r failed: %s", source.display_name, error.describe())
        return SourceFetchResult(source=source, error=error)

    async def fetch_source(self, source: CalendarSource) -> SourceFetchResult:
        """Fetch, extract and wrap the events of one source.

        Events without a parseable start are dropped here; they cannot be
        placed on a calendar.

        Returns:
            SourceFetchResult with items in file order, or with an error
        """
        if not source.url.strip():
            logger.debug("Source %r has no URL; nothing to fetch", source.display_name)
            return SourceFetchResult(source=source)

        try:
            response = await self.proxy.fetch(source.url)
        except LiteICSInvalidURLError:
            return self._failure(source, message="ongeldige URL")
        except LiteICSFetchError as e:
            return self._failure(source, message=str(e))

        if not response.ok:
            return self._failure(source, status_code=response.status_code)

        events = parse_ics_events(response.body)
        name = source.display_name
        items = [EventItem(event=ev, source=source, source_name=name) for ev in events if ev.has_start]

        dropped = len(events) - len(items)
        if dropped:
            logger.debug("Source %r: dropped %d events without a usable start", name, dropped)
        logger.debug("Source %r: %d events", name, len(items))

        return SourceFetchResult(source=source, items=items)
