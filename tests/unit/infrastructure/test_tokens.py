"""Tests for bearer token plumbing."""

import base64
import json

import jwt
import pytest

from timelapse.domain.errors import MissingCredentialsError, TokenMalformedError
from timelapse.infrastructure.auth.tokens import bearer_token, extract_issuer, normalize_issuer


def unsigned_token(payload) -> str:
    def segment(data) -> str:
        raw = json.dumps(data).encode() if not isinstance(data, bytes) else data
        return base64.urlsafe_b64encode(raw).rstrip(b"=").decode()

    return f"{segment({'alg': 'none'})}.{segment(payload)}.sig"


class TestBearerToken:
    """Test Authorization header parsing."""

    def test_extracts_token(self):
        """Test a well-formed header."""
        assert bearer_token("Bearer abc.def.ghi") == "abc.def.ghi"
        assert bearer_token("bearer   abc") == "abc"

    def test_missing_header(self):
        """Test that a missing header is rejected."""
        with pytest.raises(MissingCredentialsError, match="No authorization header"):
            bearer_token(None)

    @pytest.mark.parametrize("header", ["Basic dXNlcjpwdw==", "Bearer", "Bearer   ", "token"])
    def test_non_bearer_header(self, header):
        """Test that other schemes are rejected."""
        with pytest.raises(MissingCredentialsError, match="does not contain bearer token"):
            bearer_token(header)


class TestExtractIssuer:
    """Test reading the unverified issuer."""

    def test_reads_issuer(self):
        """Test that the issuer claim is returned normalized."""
        assert extract_issuer(unsigned_token({"iss": "https://issuer.test/"})) == (
            "https://issuer.test"
        )

    def test_bare_host_gets_scheme(self):
        """Test issuers given as a bare host."""
        assert extract_issuer(unsigned_token({"iss": "accounts.google.com"})) == (
            "https://accounts.google.com"
        )

    def test_signed_and_expired_token(self):
        """Test that neither the signature nor expiry matter for picking the verifier."""
        key = "an-hmac-key-of-at-least-thirty-two-bytes"
        token = jwt.encode({"iss": "https://issuer.test", "exp": 1}, key, algorithm="HS256")
        assert extract_issuer(token) == "https://issuer.test"

    @pytest.mark.parametrize(
        "token",
        [
            "no-dots",
            "a.!!!.c",
            unsigned_token(b"not json"),
            unsigned_token({"sub": "x"}),
            unsigned_token({"iss": 5}),
            unsigned_token(["iss"]),
        ],
    )
    def test_malformed(self, token):
        """Test that undecodable payloads and missing issuers are rejected."""
        with pytest.raises(TokenMalformedError):
            extract_issuer(token)


class TestNormalizeIssuer:
    """Test issuer normalization."""

    def test_normalizes(self):
        """Test trimming, trailing slash and missing scheme."""
        assert normalize_issuer(" https://issuer.test/ ") == "https://issuer.test"
        assert normalize_issuer("http://localhost:8080") == "http://localhost:8080"
        assert normalize_issuer("issuer.test") == "https://issuer.test"
