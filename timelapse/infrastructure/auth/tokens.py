"""Bearer token plumbing that runs before any signature check."""

import jwt

from timelapse.domain.errors import MissingCredentialsError, TokenMalformedError


def normalize_issuer(issuer: str) -> str:
    """Canonical form of an issuer URL.

    Some providers put a bare host name in ``iss`` (``accounts.google.com``);
    those get an ``https://`` scheme.
    """
    issuer = issuer.strip().rstrip("/")
    if ":" not in issuer:
        issuer = f"https://{issuer}"
    return issuer


def bearer_token(authorization: str | None) -> str:
    """Return the token of an ``Authorization: Bearer <token>`` header."""
    if not authorization:
        raise MissingCredentialsError(message="No authorization header")

    scheme, _, token = authorization.strip().partition(" ")
    token = token.strip()
    if scheme.lower() != "bearer" or not token:
        raise MissingCredentialsError(
            message="Authorization header does not contain bearer token"
        )
    return token


def extract_issuer(token: str) -> str:
    """Read the issuer claim from a JWT without verifying it.

    Only used to pick the verifier; trust is decided by that verifier.

    Raises:
        TokenMalformedError: If the payload segment cannot be decoded.
    """
    try:
        claims = jwt.decode(token, options={"verify_signature": False})
    except jwt.DecodeError as exc:
        raise TokenMalformedError(
            message="Could not decode token payload",
            details={"error": str(exc)},
        ) from exc

    issuer = claims.get("iss")
    if not isinstance(issuer, str) or not issuer.strip():
        raise TokenMalformedError(message="Token has no issuer claim")
    return normalize_issuer(issuer)
