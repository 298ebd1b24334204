"""icaloverview.api.server - asyncio HTTP server for the combined calendar view.

This module:
- builds the aiohttp application with view, navigation, refresh and proxy routes
- runs one aggregation pass at startup and on every POST /api/refresh
- keeps all view state in a single ViewController

Navigation never re-fetches; only a refresh does.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import signal
from typing import Any, Callable, Optional

from aiohttp import web

from ..core.config_manager import (
    DEFAULT_FETCH_CONCURRENCY,
    DEFAULT_REQUEST_TIMEOUT,
    DEFAULT_SERVER_BIND,
    DEFAULT_SERVER_PORT,
    get_config_value,
)
from ..core.http_client import close_all_clients
from ..core.source_store import SourceStore, StaticSourceStore, YamlSourceStore
from ..core.timezone_utils import resolve_display_timezone
from ..domain.view_controller import ViewController
from ..domain.view_renderer import RenderedView
from ..fetch_orchestrator import FetchOrchestrator
from ..lite_fetcher import HttpxProxyClient, LiteICSFetcher, ProxyClient
from ..lite_logging import configure_lite_logging
from ..routes import register_api_routes, register_proxy_routes

logger = logging.getLogger(__name__)


def build_source_store(config: Any) -> SourceStore:
    """Source store from configuration; no sources file means no sources."""
    sources_file = get_config_value(config, "sources_file")
    if sources_file:
        return YamlSourceStore(sources_file)
    logger.warning("No sources file configured (ICALOVERVIEW_SOURCES_FILE)")
    return StaticSourceStore()


def make_app(
    config: Any,
    source_store: Optional[SourceStore] = None,
    proxy: Optional[ProxyClient] = None,
    today_provider: Optional[Callable[..., Any]] = None,
    load_on_startup: bool = True,
) -> web.Application:
    """Create the aiohttp application with routes wired to one controller.

    Args:
        config: Configuration dict (see ConfigManager)
        source_store: Read-only source store; defaults from ``sources_file``
        proxy: Proxy collaborator; defaults to a shared-httpx implementation
        today_provider: Override for "today" (tests)
        load_on_startup: Run an aggregation pass when the app starts
    """
    display_tz = resolve_display_timezone(get_config_value(config, "display_timezone"))
    store = source_store or build_source_store(config)
    proxy = proxy or HttpxProxyClient(
        request_timeout=float(get_config_value(config, "request_timeout", DEFAULT_REQUEST_TIMEOUT))
    )
    orchestrator = FetchOrchestrator(
        LiteICSFetcher(proxy),
        fetch_concurrency=int(
            get_config_value(config, "fetch_concurrency", DEFAULT_FETCH_CONCURRENCY)
        ),
        display_tz=display_tz,
    )
    controller = ViewController(display_tz=display_tz, today_provider=today_provider)
    refresh_lock = asyncio.Lock()

    async def refresh() -> RenderedView:
        async with refresh_lock:
            sources = await store.list_sources()
            logger.debug("Refreshing %d sources", len(sources))
            return await controller.load(orchestrator, sources)

    app = web.Application()
    register_api_routes(app, controller, refresh)
    register_proxy_routes(app, proxy)

    if load_on_startup:

        async def _initial_load(_app: web.Application) -> None:
            await refresh()

        app.on_startup.append(_initial_load)

    async def _cleanup(_app: web.Application) -> None:
        await close_all_clients()

    app.on_cleanup.append(_cleanup)
    return app


async def _serve(config: Any, external_stop_event: asyncio.Event | None = None) -> None:
    """Run the server until signalled to stop.

    Args:
        config: Server configuration dict
        external_stop_event: Optional event to signal shutdown. If provided,
            signal handlers are not registered (caller owns signal handling).
    """
    stop_event = external_stop_event or asyncio.Event()
    app = make_app(config)

    runner = web.AppRunner(app)
    await runner.setup()

    host = get_config_value(config, "server_bind", DEFAULT_SERVER_BIND)
    port = int(get_config_value(config, "server_port", DEFAULT_SERVER_PORT))
    site = web.TCPSite(runner, host=host, port=port)
    try:
        await site.start()
    except OSError:
        logger.exception("Failed to start server on %s:%d", host, port)
        await runner.cleanup()
        raise

    logger.info("Server started on http://%s:%d", host, port)

    if external_stop_event is None:
        loop = asyncio.get_running_loop()

        def _on_signal() -> None:
            logger.info("Shutdown signal received")
            stop_event.set()

        for sig in (signal.SIGINT, signal.SIGTERM):
            with contextlib.suppress(NotImplementedError):
                loop.add_signal_handler(sig, _on_signal)

    await stop_event.wait()
    logger.info("Stop event received, shutting down")
    await runner.cleanup()
    logger.info("Server shutdown complete")


def start_server(config: Any) -> None:
    """Start the asyncio event loop and HTTP server; blocks until SIGINT/SIGTERM.

    Args:
        config: dict with keys:
            - server_bind: host to bind (str)
            - server_port: port (int)
            - sources_file: YAML/JSON file listing the sources
            - request_timeout: upstream timeout in seconds (float, default 15)
            - fetch_concurrency: concurrent fetches (int, default 2, range 1-4)
            - display_timezone: IANA zone used for day grouping (optional)
            - debug_logging: enable debug logging (bool)
    """
    configure_lite_logging(debug_mode=bool(get_config_value(config, "debug_logging", False)))
    try:
        asyncio.run(_serve(config))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
