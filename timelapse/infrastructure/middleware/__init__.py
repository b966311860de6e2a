"""Middleware infrastructure."""

from timelapse.infrastructure.middleware.error_handler import error_handler_middleware
from timelapse.infrastructure.middleware.request_context import RequestContextMiddleware

__all__ = ["RequestContextMiddleware", "error_handler_middleware"]
