"""Telemetry infrastructure (logging)."""

from timelapse.infrastructure.telemetry.logging import (
    ContextLogger,
    clear_request_context,
    configure_logging,
    get_logger,
    request_id_var,
    set_request_context,
    user_id_var,
)

__all__ = [
    "ContextLogger",
    "configure_logging",
    "get_logger",
    "set_request_context",
    "clear_request_context",
    "request_id_var",
    "user_id_var",
]
