"""HTTP API."""

from .dependencies import configure_rate_limiting, get_request_context, get_services
from .exception_handlers import register_exception_handlers
from .routers import api_router

__all__ = [
    "api_router",
    "configure_rate_limiting",
    "get_request_context",
    "get_services",
    "register_exception_handlers",
]
