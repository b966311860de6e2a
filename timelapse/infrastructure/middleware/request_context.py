"""Request context middleware: correlation ids, access log, request deadline."""

import asyncio
import time
from uuid import uuid4

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.types import ASGIApp

from timelapse.infrastructure.middleware.error_handler import INTERNAL_SERVER_ERROR
from timelapse.infrastructure.telemetry.logging import (
    clear_request_context,
    get_logger,
    set_request_context,
)

logger = get_logger(__name__)


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Sets up request context for logging and bounds the request duration.

    A request that outlives ``timeout_seconds`` is cancelled, together with
    its outstanding downstream calls, and answered with a 500.
    """

    def __init__(self, app: ASGIApp, timeout_seconds: float | None = None) -> None:
        super().__init__(app)
        self.timeout_seconds = timeout_seconds

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = request.headers.get("X-Request-ID") or str(uuid4())
        set_request_context(request_id=request_id)
        request.state.request_id = request_id

        started = time.perf_counter()
        try:
            try:
                response = await asyncio.wait_for(call_next(request), timeout=self.timeout_seconds)
            except TimeoutError:
                logger.error(
                    "Request timed out",
                    extra={
                        "method": request.method,
                        "path": request.url.path,
                        "timeout_seconds": self.timeout_seconds,
                    },
                )
                response = JSONResponse(status_code=500, content={"message": INTERNAL_SERVER_ERROR})

            response.headers["X-Request-ID"] = request_id
            logger.info(
                "HTTP request completed",
                extra={
                    "method": request.method,
                    "path": request.url.path,
                    "status_code": response.status_code,
                    "duration_ms": round((time.perf_counter() - started) * 1000, 2),
                },
            )
            return response
        finally:
            clear_request_context()
