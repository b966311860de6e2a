"""Typed error hierarchy for timelapse.

All application errors inherit from AppError and provide:
- message: Human-readable description (returned to API callers where safe)
- code: Machine-readable error code
- details: Additional context as dict (logged, never returned)
- retryable: Whether the operation can be retried
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any


@dataclass
class AppError(Exception):
    """Base application error with full context."""

    message: str = ""
    code: str = "APP_ERROR"
    details: dict[str, Any] = field(default_factory=dict)
    retryable: bool = False
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))

    def __str__(self) -> str:
        return self.message or self.code

    def __post_init__(self) -> None:
        super().__init__(str(self))

    def to_dict(self) -> dict[str, Any]:
        """Serialize error for logging."""
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details,
            "retryable": self.retryable,
            "timestamp": self.timestamp.isoformat(),
        }


# --- Not Found Errors ---


@dataclass
class NotFoundError(AppError):
    """Resource not found."""

    code: str = "NOT_FOUND"


@dataclass
class ProjectNotFoundError(NotFoundError):
    """Project does not exist for this user."""

    code: str = "PROJECT_NOT_FOUND"


@dataclass
class TimeEntryNotFoundError(NotFoundError):
    """Time entry does not exist in this project."""

    code: str = "TIME_ENTRY_NOT_FOUND"


# --- Validation Errors ---


@dataclass
class ValidationError(AppError):
    """Input validation failed."""

    code: str = "VALIDATION_ERROR"


@dataclass
class DuplicateProjectError(ValidationError):
    """A project with the same name already exists."""

    code: str = "DUPLICATE_PROJECT"


@dataclass
class UnsupportedMediaTypeError(AppError):
    """Request body has an unsupported content type or charset."""

    message: str = "Unsupported Media Type"
    code: str = "UNSUPPORTED_MEDIA_TYPE"


@dataclass
class TimeReferenceParseError(ValidationError):
    """A free-form time reference could not be parsed."""

    code: str = "TIME_PARSE_ERROR"


# --- Auth Errors ---


@dataclass
class AuthError(AppError):
    """Authentication failed. Never carries verification detail to the caller."""

    code: str = "AUTH_ERROR"


@dataclass
class MissingCredentialsError(AuthError):
    """No usable bearer credential in the request."""

    code: str = "MISSING_CREDENTIALS"


@dataclass
class TokenMalformedError(AuthError):
    """Token payload could not be decoded."""

    code: str = "TOKEN_MALFORMED"


@dataclass
class UntrustedIssuerError(AuthError):
    """Token was issued by a provider outside the trusted set."""

    code: str = "UNTRUSTED_ISSUER"
    issuer: str = ""


@dataclass
class TokenExpiredError(AuthError):
    """JWT token has expired."""

    code: str = "TOKEN_EXPIRED"
    retryable: bool = True  # Can retry with fresh token


@dataclass
class TokenInvalidError(AuthError):
    """JWT token failed verification."""

    code: str = "TOKEN_INVALID"


@dataclass
class MissingClaimsError(AuthError):
    """Verified token lacks subject or email."""

    code: str = "MISSING_CLAIMS"


# --- Repository Errors ---


@dataclass
class RepositoryError(AppError):
    """Persistence operation failed."""

    code: str = "REPOSITORY_ERROR"
    operation: str = ""
    retryable: bool = True
