"""Database infrastructure."""

from timelapse.infrastructure.database.connection import (
    close_db,
    get_engine,
    get_session_factory,
    init_db,
)

__all__ = [
    "get_engine",
    "get_session_factory",
    "init_db",
    "close_db",
]
