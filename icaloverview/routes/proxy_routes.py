"""Passthrough proxy relaying an upstream ICS response unchanged."""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import unquote

from ..lite_fetcher import LiteICSFetchError, LiteICSInvalidURLError, ProxyClient

logger = logging.getLogger(__name__)


def register_proxy_routes(app: Any, proxy: ProxyClient) -> None:
    """Register ``GET /api/ical-proxy?url=...``.

    Upstream status, body and content-type are relayed as-is; a missing or
    non-http(s) URL is a 400, any transport failure a 500.
    """
    from aiohttp import web

    cors = {"Access-Control-Allow-Origin": "*"}

    async def ical_proxy(request: Any) -> Any:
        raw_url = request.query.get("url")
        if not raw_url:
            return web.Response(text="Missing url parameter", status=400, headers=cors)

        # Browsers send the target through encodeURIComponent once more
        target_url = unquote(raw_url)

        try:
            upstream = await proxy.fetch(target_url)
        except LiteICSInvalidURLError:
            return web.Response(text="Invalid target URL", status=400, headers=cors)
        except LiteICSFetchError:
            logger.exception("ical-proxy error for %s", target_url)
            return web.Response(text="Internal ical-proxy error", status=500, headers=cors)

        response = web.Response(body=upstream.raw_body(), status=upstream.status_code)
        response.headers["Content-Type"] = upstream.content_type
        response.headers.update(cors)
        return response

    app.router.add_get("/api/ical-proxy", ical_proxy)
    logger.debug("Proxy routes registered")
