"""FastAPI dependency selecting the repository backend."""

from collections.abc import AsyncGenerator

from fastapi import Request

from timelapse.domain.protocols import TimelapseRepository
from timelapse.infrastructure.database.connection import get_session_factory
from timelapse.infrastructure.repositories.database import DatabaseTimelapseRepository


async def get_repository(request: Request) -> AsyncGenerator[TimelapseRepository, None]:
    """Yield the application's fixed repository, else a session-scoped database one."""
    repository = request.app.state.repository
    if repository is not None:
        yield repository
        return

    factory = get_session_factory()
    async with factory() as session:
        yield DatabaseTimelapseRepository(session)
