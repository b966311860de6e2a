"""Repository implementations."""

from timelapse.infrastructure.repositories.database import DatabaseTimelapseRepository
from timelapse.infrastructure.repositories.memory import InMemoryTimelapseRepository

__all__ = [
    "DatabaseTimelapseRepository",
    "InMemoryTimelapseRepository",
]
