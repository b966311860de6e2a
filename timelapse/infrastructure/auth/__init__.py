"""Authentication infrastructure - bearer tokens from trusted OIDC issuers."""

from timelapse.infrastructure.auth.context import get_auth, get_verifier_registry
from timelapse.infrastructure.auth.gate import AuthContext, AuthenticationGate
from timelapse.infrastructure.auth.oidc import (
    IdentityClaims,
    IssuerVerifier,
    VerifierRegistry,
    build_verifier_registry,
)
from timelapse.infrastructure.auth.tokens import bearer_token, extract_issuer

__all__ = [
    "AuthContext",
    "AuthenticationGate",
    "IdentityClaims",
    "IssuerVerifier",
    "VerifierRegistry",
    "build_verifier_registry",
    "bearer_token",
    "extract_issuer",
    "get_auth",
    "get_verifier_registry",
]
