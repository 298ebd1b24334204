"""View and navigation routes for icaloverview."""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable

from ..domain.view_controller import ViewController
from ..domain.view_renderer import RenderedView, ViewMode

logger = logging.getLogger(__name__)


def view_payload(controller: ViewController, view: RenderedView) -> dict[str, Any]:
    """JSON body for a rendered view plus the per-source error lines."""
    payload = view.model_dump(mode="json")
    payload["errors"] = [error.describe() for error in controller.state.errors]
    payload["loaded"] = controller.state.loaded
    return payload


def register_api_routes(
    app: Any,
    controller: ViewController,
    refresh: Callable[[], Awaitable[RenderedView]],
) -> None:
    """Register view, navigation, refresh and health routes.

    Args:
        app: aiohttp web application
        controller: View controller holding the aggregation state
        refresh: Coroutine function running one aggregation pass
    """
    from aiohttp import web

    async def _json_body(request: Any) -> dict[str, Any]:
        if not request.can_read_body:
            return {}
        try:
            data = await request.json()
        except ValueError as e:
            raise web.HTTPBadRequest(
                text='{"error": "invalid json"}', content_type="application/json"
            ) from e
        return data if isinstance(data, dict) else {}

    async def get_view(request: Any) -> Any:
        mode = request.query.get("mode")
        if mode and mode != controller.state.mode.value:
            try:
                view = controller.switch_view(mode)
            except ValueError:
                return web.json_response({"error": f"invalid mode: {mode!r}"}, status=400)
        else:
            view = controller.render()
        return web.json_response(view_payload(controller, view))

    async def post_mode(request: Any) -> Any:
        data = await _json_body(request)
        mode = data.get("mode")
        try:
            view = controller.switch_view(ViewMode(mode))
        except ValueError:
            return web.json_response({"error": f"invalid mode: {mode!r}"}, status=400)
        return web.json_response(view_payload(controller, view))

    async def post_shift(request: Any) -> Any:
        data = await _json_body(request)
        delta = data.get("delta")
        if isinstance(delta, bool) or not isinstance(delta, int):
            return web.json_response({"error": "delta must be an integer"}, status=400)
        view = controller.shift_reference(delta)
        return web.json_response(view_payload(controller, view))

    async def post_today(_request: Any) -> Any:
        view = controller.jump_to_today()
        return web.json_response(view_payload(controller, view))

    async def post_refresh(_request: Any) -> Any:
        view = await refresh()
        return web.json_response(view_payload(controller, view))

    async def health_check(_request: Any) -> Any:
        state = controller.state
        return web.json_response(
            {
                "status": "ok" if state.loaded else "loading",
                "mode": state.mode.value,
                "source_count": state.source_count,
                "event_count": len(state.items),
                "error_count": len(state.errors),
            }
        )

    app.router.add_get("/api/view", get_view)
    app.router.add_post("/api/view/mode", post_mode)
    app.router.add_post("/api/view/shift", post_shift)
    app.router.add_post("/api/view/today", post_today)
    app.router.add_post("/api/refresh", post_refresh)
    app.router.add_get("/api/health", health_check)

    logger.debug("API routes registered")
