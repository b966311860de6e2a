"""The authentication pipeline every API request goes through.

bearer header -> unverified issuer -> trusted verifier -> user record.
"""

from dataclasses import dataclass
from uuid import UUID

from timelapse.domain.entities import User
from timelapse.domain.errors import UntrustedIssuerError
from timelapse.domain.protocols import TimelapseRepository
from timelapse.infrastructure.auth.oidc import IdentityClaims, VerifierRegistry
from timelapse.infrastructure.auth.tokens import bearer_token, extract_issuer
from timelapse.infrastructure.telemetry.logging import get_logger

logger = get_logger(__name__)


@dataclass
class AuthContext:
    """Authenticated user context available in request handlers."""

    user: User
    claims: IdentityClaims

    @property
    def user_id(self) -> UUID:
        return self.user.id

    @property
    def email(self) -> str:
        return self.claims.email


class AuthenticationGate:
    """Turns an Authorization header into an ``AuthContext``.

    Credential problems raise ``AuthError`` subclasses; repository failures
    propagate unchanged.
    """

    def __init__(self, registry: VerifierRegistry, repository: TimelapseRepository):
        self.registry = registry
        self.repository = repository

    async def verify(self, issuer: str, token: str) -> IdentityClaims:
        verifier = self.registry.get(issuer)
        if verifier is None:
            raise UntrustedIssuerError(message=f"Unknown issuer: {issuer}", issuer=issuer)
        return await verifier.verify(token)

    async def resolve_user(self, claims: IdentityClaims) -> User:
        user, created = await self.repository.get_or_create_user(
            claims.issuer, claims.subject, claims.email
        )
        if created:
            logger.info(
                "Created user for new identity",
                extra={"user_id": str(user.id), "issuer": claims.issuer},
            )
        return user

    async def authenticate(self, authorization: str | None) -> AuthContext:
        token = bearer_token(authorization)
        issuer = extract_issuer(token)
        claims = await self.verify(issuer, token)
        user = await self.resolve_user(claims)
        return AuthContext(user=user, claims=claims)
