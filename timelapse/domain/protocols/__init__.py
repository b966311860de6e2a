"""Domain protocols - abstract interfaces for infrastructure."""

from timelapse.domain.protocols.repositories import TimelapseRepository

__all__ = ["TimelapseRepository"]
