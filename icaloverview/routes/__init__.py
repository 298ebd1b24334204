"""HTTP route registration for icaloverview."""

from .api_routes import register_api_routes
from .proxy_routes import register_proxy_routes

__all__ = ["register_api_routes", "register_proxy_routes"]
