"""Pytest configuration and fixtures."""

import time
from collections.abc import Callable, Generator
from types import SimpleNamespace
from typing import Any

import jwt
import pytest
from cryptography.hazmat.primitives.asymmetric import rsa
from fastapi import FastAPI
from fastapi.testclient import TestClient

from timelapse.config import Settings
from timelapse.infrastructure.auth import IssuerVerifier, VerifierRegistry
from timelapse.infrastructure.repositories import InMemoryTimelapseRepository
from timelapse.main import create_app

TEST_ISSUER = "https://issuer.test"
OTHER_ISSUER = "https://other.test"


class StaticKeySource:
    """Signing key source returning one fixed public key."""

    def __init__(self, public_key: Any):
        self.public_key = public_key
        self.calls = 0

    def get_signing_key_from_jwt(self, token: str) -> SimpleNamespace:
        self.calls += 1
        return SimpleNamespace(key=self.public_key)


@pytest.fixture(scope="session")
def signing_key() -> rsa.RSAPrivateKey:
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture
def settings() -> Settings:
    """Test settings with the in-memory backend."""
    return Settings(
        environment="development",
        repository_backend="memory",
        trusted_issuers=TEST_ISSUER,
        oidc_audiences="",
        oidc_algorithms="RS256",
        log_level="DEBUG",
        log_format="text",
    )


@pytest.fixture
def key_source(signing_key: rsa.RSAPrivateKey) -> StaticKeySource:
    return StaticKeySource(signing_key.public_key())


@pytest.fixture
def verifier(key_source: StaticKeySource) -> IssuerVerifier:
    return IssuerVerifier(issuer=TEST_ISSUER, key_source=key_source, algorithms=["RS256"])


@pytest.fixture
def registry(verifier: IssuerVerifier) -> VerifierRegistry:
    return VerifierRegistry({TEST_ISSUER: verifier})


@pytest.fixture
def make_token(signing_key: rsa.RSAPrivateKey) -> Callable[..., str]:
    """Factory for RS256 tokens; claims default to a valid test identity."""

    def factory(
        subject: str = "subject-1",
        email: str = "user@example.com",
        issuer: str = TEST_ISSUER,
        expires_in: int = 3600,
        **claims: Any,
    ) -> str:
        now = int(time.time())
        payload = {
            "iss": issuer,
            "sub": subject,
            "email": email,
            "iat": now,
            "exp": now + expires_in,
            **claims,
        }
        return jwt.encode(payload, signing_key, algorithm="RS256")

    return factory


@pytest.fixture
def auth_headers(make_token: Callable[..., str]) -> dict[str, str]:
    return {"Authorization": f"Bearer {make_token()}"}


@pytest.fixture
def repository() -> InMemoryTimelapseRepository:
    return InMemoryTimelapseRepository()


@pytest.fixture
def app(
    settings: Settings,
    registry: VerifierRegistry,
    repository: InMemoryTimelapseRepository,
) -> FastAPI:
    return create_app(settings, verifier_registry=registry, repository=repository)


@pytest.fixture
def client(app: FastAPI) -> Generator[TestClient, None, None]:
    with TestClient(app) as test_client:
        yield test_client
