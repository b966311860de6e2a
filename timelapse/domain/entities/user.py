"""User and identity entities."""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from uuid import UUID


@dataclass
class Identity:
    """A login at one identity provider, keyed by (issuer, subject_id)."""

    issuer: str
    subject_id: str
    email: str = ""

    def __post_init__(self) -> None:
        if not self.issuer:
            raise ValueError("Identity issuer is required")
        if not self.subject_id:
            raise ValueError("Identity subject_id is required")

    def matches(self, issuer: str, subject_id: str) -> bool:
        return self.issuer == issuer and self.subject_id == subject_id


@dataclass
class User:
    """A user, created on first login from an unseen identity."""

    id: UUID
    identities: list[Identity] = field(default_factory=list)
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    def identity_for(self, issuer: str, subject_id: str) -> Identity | None:
        for identity in self.identities:
            if identity.matches(issuer, subject_id):
                return identity
        return None
