"""Global error handlers mapping errors to ``{"message": ...}`` responses."""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from timelapse.domain.errors import (
    AppError,
    AuthError,
    NotFoundError,
    UnsupportedMediaTypeError,
    ValidationError,
)
from timelapse.infrastructure.telemetry.logging import get_logger

logger = get_logger(__name__)

AUTHORIZATION_NEEDED = "Authorization needed"
INTERNAL_SERVER_ERROR = "Internal Server Error"


def error_handler_middleware(app: FastAPI) -> None:
    """Register global exception handlers on the FastAPI app."""

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
        """Handle all application errors."""
        status_code = _get_status_code(exc)

        log_level = "warning" if status_code < 500 else "error"
        getattr(logger, log_level)(
            f"Application error: {exc}",
            extra={
                "error_code": exc.code,
                "error_details": exc.details,
                "retryable": exc.retryable,
                "path": request.url.path,
                "method": request.method,
            },
        )

        headers = None
        if isinstance(exc, AuthError):
            message = AUTHORIZATION_NEEDED
            headers = {"WWW-Authenticate": "Bearer"}
        elif status_code >= 500:
            message = INTERNAL_SERVER_ERROR
        else:
            message = exc.message

        return JSONResponse(
            status_code=status_code,
            content={"message": message},
            headers=headers,
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        """Keep framework errors (unknown route, bad method) in the same shape."""
        return JSONResponse(
            status_code=exc.status_code,
            content={"message": str(exc.detail)},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        logger.warning(
            "Request validation failed",
            extra={"path": request.url.path, "errors": exc.errors()},
        )
        return JSONResponse(status_code=400, content={"message": _first_error(exc)})

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Handle unexpected exceptions."""
        logger.exception(
            f"Unhandled exception: {exc}",
            extra={"path": request.url.path, "error_type": type(exc).__name__},
        )
        return JSONResponse(status_code=500, content={"message": INTERNAL_SERVER_ERROR})


def _first_error(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Bad Request"
    error = errors[0]
    location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
    return f"{location}: {error.get('msg', 'invalid value')}" if location else error.get("msg", "")


def _get_status_code(error: AppError) -> int:
    """Map error type to HTTP status code."""
    if isinstance(error, NotFoundError):
        return 404
    if isinstance(error, ValidationError):
        return 400
    if isinstance(error, UnsupportedMediaTypeError):
        return 415
    if isinstance(error, AuthError):
        return 401
    return 500
