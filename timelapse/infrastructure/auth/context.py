"""FastAPI dependencies exposing the authenticated user."""

from fastapi import Depends, Header, Request

from timelapse.domain.protocols import TimelapseRepository
from timelapse.infrastructure.auth.gate import AuthContext, AuthenticationGate
from timelapse.infrastructure.auth.oidc import VerifierRegistry
from timelapse.infrastructure.repositories.provider import get_repository
from timelapse.infrastructure.telemetry.logging import set_request_context


def get_verifier_registry(request: Request) -> VerifierRegistry:
    """Registry built by the application lifespan."""
    return request.app.state.verifier_registry


async def get_auth(
    authorization: str | None = Header(default=None, alias="Authorization"),
    registry: VerifierRegistry = Depends(get_verifier_registry),
    repository: TimelapseRepository = Depends(get_repository),
) -> AuthContext:
    """FastAPI dependency to get authenticated user context.

    Expects an ``Authorization: Bearer <token>`` header.
    """
    auth = await AuthenticationGate(registry, repository).authenticate(authorization)
    set_request_context(user_id=str(auth.user_id))
    return auth
