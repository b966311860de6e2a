"""Tests for OpenID Connect verification and discovery."""

from unittest.mock import MagicMock

import httpx
import jwt
import pytest
from cryptography.hazmat.primitives.asymmetric import rsa

from timelapse.config import Settings
from timelapse.domain.errors import MissingClaimsError, TokenExpiredError, TokenInvalidError
from timelapse.infrastructure.auth import IssuerVerifier, VerifierRegistry, build_verifier_registry
from timelapse.infrastructure.auth.oidc import discover_verifier

TEST_ISSUER = "https://issuer.test"


class TestIssuerVerifier:
    """Test token verification."""

    @pytest.mark.asyncio
    async def test_valid_token(self, verifier, make_token):
        """Test that a valid token yields its identity claims."""
        claims = await verifier.verify(make_token(subject="abc", email="a@example.com"))

        assert claims.issuer == TEST_ISSUER
        assert claims.subject == "abc"
        assert claims.email == "a@example.com"
        assert claims.raw_claims["sub"] == "abc"

    @pytest.mark.asyncio
    async def test_email_is_optional(self, verifier, make_token):
        """Test tokens without an email claim."""
        claims = await verifier.verify(make_token(email=None))
        assert claims.email == ""

    @pytest.mark.asyncio
    async def test_expired_token(self, verifier, make_token):
        """Test that expired tokens are rejected."""
        with pytest.raises(TokenExpiredError):
            await verifier.verify(make_token(expires_in=-60))

    @pytest.mark.asyncio
    async def test_foreign_signature(self, verifier):
        """Test that a token signed with another key is rejected."""
        other_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
        token = jwt.encode(
            {"iss": TEST_ISSUER, "sub": "abc", "exp": 4102444800}, other_key, algorithm="RS256"
        )

        with pytest.raises(TokenInvalidError):
            await verifier.verify(token)

    @pytest.mark.asyncio
    async def test_issuer_claim_must_match_verifier(self, verifier, make_token):
        """Test that a verifier only accepts its own issuer."""
        with pytest.raises(TokenInvalidError, match="Invalid token issuer"):
            await verifier.verify(make_token(issuer="https://other.test"))

    @pytest.mark.asyncio
    async def test_blank_subject(self, verifier, make_token):
        """Test that a token without a usable subject is rejected."""
        with pytest.raises(MissingClaimsError):
            await verifier.verify(make_token(subject=""))

    @pytest.mark.asyncio
    async def test_malformed_email(self, verifier, make_token):
        """Test that a non-string email is rejected."""
        with pytest.raises(MissingClaimsError):
            await verifier.verify(make_token(email=["a@example.com"]))

    @pytest.mark.asyncio
    async def test_audience_checked_when_configured(self, key_source, make_token):
        """Test audience verification."""
        verifier = IssuerVerifier(
            issuer=TEST_ISSUER,
            key_source=key_source,
            audiences=["client-1"],
            algorithms=["RS256"],
        )

        assert (await verifier.verify(make_token(aud="client-1"))).subject == "subject-1"
        with pytest.raises(TokenInvalidError):
            await verifier.verify(make_token(aud="client-2"))
        with pytest.raises(MissingClaimsError):
            await verifier.verify(make_token())

    @pytest.mark.asyncio
    async def test_key_lookup_failure(self, make_token):
        """Test that an unavailable key set rejects the token."""
        key_source = MagicMock()
        key_source.get_signing_key_from_jwt.side_effect = jwt.PyJWKClientError("no keys")
        verifier = IssuerVerifier(issuer=TEST_ISSUER, key_source=key_source)

        with pytest.raises(TokenInvalidError, match="Signing key unavailable"):
            await verifier.verify(make_token())


class TestVerifierRegistry:
    """Test the issuer registry."""

    def test_lookup_is_normalized(self, verifier):
        """Test that lookups ignore trailing slashes."""
        registry = VerifierRegistry({f"{TEST_ISSUER}/": verifier})

        assert registry.get(TEST_ISSUER) is verifier
        assert registry.get("https://other.test") is None
        assert registry.issuers == [TEST_ISSUER]
        assert len(registry) == 1

    def test_registry_is_read_only(self, verifier):
        """Test that the registry cannot be modified after construction."""
        source = {TEST_ISSUER: verifier}
        registry = VerifierRegistry(source)
        source.clear()

        assert len(registry) == 1
        with pytest.raises(TypeError):
            registry._verifiers["https://evil.test"] = verifier


def discovery_transport(documents: dict[str, dict]) -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        issuer = str(request.url).removesuffix("/.well-known/openid-configuration")
        if issuer not in documents:
            return httpx.Response(500)
        return httpx.Response(200, json=documents[issuer])

    return httpx.MockTransport(handler)


class TestDiscovery:
    """Test verifier discovery."""

    @pytest.mark.asyncio
    async def test_discovers_jwks(self):
        """Test that discovery reads jwks_uri."""
        settings = Settings(oidc_audiences="client-1")
        transport = discovery_transport(
            {TEST_ISSUER: {"issuer": TEST_ISSUER, "jwks_uri": f"{TEST_ISSUER}/jwks"}}
        )

        async with httpx.AsyncClient(transport=transport) as client:
            verifier = await discover_verifier(f"{TEST_ISSUER}/", settings, client)

        assert verifier.issuer == TEST_ISSUER
        assert verifier.audiences == ["client-1"]
        assert verifier.key_source.uri == f"{TEST_ISSUER}/jwks"

    @pytest.mark.asyncio
    async def test_rejects_document_for_other_issuer(self):
        """Test that a discovery document naming another issuer is refused."""
        transport = discovery_transport(
            {TEST_ISSUER: {"issuer": "https://evil.test", "jwks_uri": "https://evil.test/jwks"}}
        )

        async with httpx.AsyncClient(transport=transport) as client:
            with pytest.raises(ValueError, match="names issuer"):
                await discover_verifier(TEST_ISSUER, Settings(), client)

    @pytest.mark.asyncio
    async def test_failing_issuer_is_disabled(self):
        """Test that an issuer failing discovery is left out of the registry."""
        settings = Settings(trusted_issuers=f"{TEST_ISSUER},https://broken.test")
        transport = discovery_transport(
            {TEST_ISSUER: {"issuer": TEST_ISSUER, "jwks_uri": f"{TEST_ISSUER}/jwks"}}
        )

        async with httpx.AsyncClient(transport=transport) as client:
            registry = await build_verifier_registry(settings, client)

        assert registry.issuers == [TEST_ISSUER]
