"""OpenID Connect token verification for a fixed set of trusted issuers."""

import asyncio
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Protocol

import httpx
import jwt
from jwt import PyJWKClient

from timelapse.config import Settings
from timelapse.domain.errors import MissingClaimsError, TokenExpiredError, TokenInvalidError
from timelapse.infrastructure.auth.tokens import normalize_issuer
from timelapse.infrastructure.telemetry.logging import get_logger

logger = get_logger(__name__)

DISCOVERY_PATH = "/.well-known/openid-configuration"


@dataclass(frozen=True)
class IdentityClaims:
    """Verified identity claims of a bearer token."""

    issuer: str
    subject: str
    email: str = ""
    raw_claims: dict[str, Any] = field(default_factory=dict)


class SigningKeySource(Protocol):
    """What the verifier needs from ``PyJWKClient``."""

    def get_signing_key_from_jwt(self, token: str) -> Any: ...


class IssuerVerifier:
    """Verifies tokens of one issuer against that issuer's published keys."""

    def __init__(
        self,
        issuer: str,
        key_source: SigningKeySource,
        audiences: list[str] | None = None,
        algorithms: list[str] | None = None,
    ):
        self.issuer = normalize_issuer(issuer)
        self.key_source = key_source
        self.audiences = audiences or []
        self.algorithms = algorithms or ["RS256"]

    async def verify(self, token: str) -> IdentityClaims:
        """Verify signature, expiry, issuer and (if configured) audience.

        Raises:
            TokenExpiredError: If token is expired
            TokenInvalidError: If token is invalid
            MissingClaimsError: If the token carries no usable subject
        """
        try:
            # Key lookup may hit the network; keep it off the event loop.
            signing_key = await asyncio.to_thread(self.key_source.get_signing_key_from_jwt, token)

            claims = jwt.decode(
                token,
                signing_key.key,
                algorithms=self.algorithms,
                audience=self.audiences or None,
                options={
                    "verify_signature": True,
                    "verify_exp": True,
                    "verify_aud": bool(self.audiences),
                    "verify_iss": False,
                    "require": ["exp", "iss", "sub"],
                },
            )

        except jwt.ExpiredSignatureError as e:
            logger.warning("Token expired", extra={"issuer": self.issuer, "error": str(e)})
            raise TokenExpiredError(
                message="Token has expired",
                details={"error": str(e)},
            ) from e

        except jwt.MissingRequiredClaimError as e:
            logger.warning(
                "Ignoring token with missing claims",
                extra={"issuer": self.issuer, "error": str(e)},
            )
            raise MissingClaimsError(
                message="Token is missing required claims",
                details={"error": str(e)},
            ) from e

        except jwt.InvalidAudienceError as e:
            logger.warning("Invalid token audience", extra={"issuer": self.issuer, "error": str(e)})
            raise TokenInvalidError(
                message="Invalid token audience",
                details={"error": str(e)},
            ) from e

        except jwt.PyJWKClientError as e:
            logger.warning(
                "Could not obtain signing key",
                extra={"issuer": self.issuer, "error": str(e)},
            )
            raise TokenInvalidError(
                message="Signing key unavailable",
                details={"error": str(e)},
            ) from e

        except jwt.PyJWTError as e:
            logger.warning("Ignoring invalid token", extra={"issuer": self.issuer, "error": str(e)})
            raise TokenInvalidError(
                message="Invalid token",
                details={"error": str(e)},
            ) from e

        token_issuer = claims.get("iss")
        if not isinstance(token_issuer, str) or normalize_issuer(token_issuer) != self.issuer:
            logger.warning(
                "Invalid token issuer",
                extra={"issuer": self.issuer, "token_issuer": token_issuer},
            )
            raise TokenInvalidError(message="Invalid token issuer")

        subject = claims.get("sub")
        email = claims.get("email") or ""
        if not isinstance(subject, str) or not subject or not isinstance(email, str):
            logger.warning("Ignoring token with missing claims", extra={"issuer": self.issuer})
            raise MissingClaimsError(message="Token subject or email is malformed")

        logger.debug("Token verified successfully", extra={"issuer": self.issuer, "sub": subject})

        return IdentityClaims(
            issuer=self.issuer,
            subject=subject,
            email=email,
            raw_claims=claims,
        )


class VerifierRegistry:
    """Immutable issuer → verifier mapping, built once at startup."""

    def __init__(self, verifiers: Mapping[str, IssuerVerifier] | None = None):
        self._verifiers = MappingProxyType(
            {normalize_issuer(issuer): verifier for issuer, verifier in (verifiers or {}).items()}
        )

    def get(self, issuer: str) -> IssuerVerifier | None:
        return self._verifiers.get(normalize_issuer(issuer))

    @property
    def issuers(self) -> list[str]:
        return list(self._verifiers)

    def __len__(self) -> int:
        return len(self._verifiers)


async def discover_verifier(
    issuer: str,
    settings: Settings,
    http_client: httpx.AsyncClient,
) -> IssuerVerifier:
    """Build a verifier from the issuer's discovery document.

    Raises:
        httpx.HTTPError: If the document cannot be fetched
        ValueError: If the document is malformed or names another issuer
    """
    issuer = normalize_issuer(issuer)
    response = await http_client.get(f"{issuer}{DISCOVERY_PATH}")
    response.raise_for_status()
    document = response.json()

    if not isinstance(document, dict):
        raise ValueError("Discovery document is not a JSON object")
    advertised = document.get("issuer")
    if not isinstance(advertised, str) or normalize_issuer(advertised) != issuer:
        raise ValueError(f"Discovery document names issuer {advertised!r}")
    jwks_uri = document.get("jwks_uri")
    if not isinstance(jwks_uri, str) or not jwks_uri:
        raise ValueError("Discovery document has no jwks_uri")

    key_source = PyJWKClient(
        jwks_uri,
        cache_keys=True,
        timeout=settings.oidc_timeout_seconds,
    )
    return IssuerVerifier(
        issuer=issuer,
        key_source=key_source,
        audiences=settings.oidc_audience_list,
        algorithms=settings.oidc_algorithm_list,
    )


async def build_verifier_registry(
    settings: Settings,
    http_client: httpx.AsyncClient | None = None,
) -> VerifierRegistry:
    """Discover every trusted issuer; issuers that fail discovery are disabled."""
    owns_client = http_client is None
    client = http_client or httpx.AsyncClient(timeout=settings.oidc_timeout_seconds)

    verifiers: dict[str, IssuerVerifier] = {}
    try:
        for issuer in settings.trusted_issuer_list:
            try:
                verifiers[issuer] = await discover_verifier(issuer, settings, client)
            except (httpx.HTTPError, ValueError) as exc:
                logger.error(
                    "Disabling authentication provider",
                    extra={"issuer": issuer, "error": str(exc)},
                )
                continue
            logger.info("Authentication provider enabled", extra={"issuer": issuer})
    finally:
        if owns_client:
            await client.aclose()

    return VerifierRegistry(verifiers)
