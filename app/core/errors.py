"""Application-level exception types.

This module defines domain errors used across services/adapters, enabling
consistent error handling, logging, and API responses. The HTTP status each
error maps to lives on the class so the exception handler stays generic.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, NotRequired, TypedDict


class ErrorDetails(TypedDict, total=False):
    """Structured error context for observability and clients.

    Fields are optional to keep backward compatibility while encouraging
    consistent shapes across the codebase.
    """

    code: str
    message: str
    hint: str
    field: str
    limit: int
    remaining: int
    reset: int
    max_length: int
    request_id: str
    context: NotRequired[dict[str, Any]]


@dataclass
class AppError(Exception):
    """Base error for application/domain failures.

    Attributes:
        code: Stable, machine-readable error code.
        message: Human-readable error message.
        details: Optional structured details for debugging/observability.
    """

    code: str
    message: str
    details: ErrorDetails | None = None

    status_code = 400

    def __post_init__(self) -> None:
        # Populate Exception args so str(error) is useful in logs/tracebacks.
        super().__init__(self.message)


class ValidationAppError(AppError):
    """Raised when request content or field validation fails."""

    status_code = 400


class AuthenticationAppError(AppError):
    """Raised when the caller has no valid session or credentials."""

    status_code = 401


class AuthorizationAppError(AppError):
    """Raised when an authenticated caller may not perform the action."""

    status_code = 403


class NotFoundAppError(AppError):
    """Raised when the target resource does not exist."""

    status_code = 404


class ConflictAppError(AppError):
    """Raised when a write collides with existing state (e.g. taken username)."""

    status_code = 409


@dataclass
class RateLimitAppError(AppError):
    """Raised when a client exceeds its request budget.

    Carries the X-RateLimit-* and Retry-After headers for the 429 response.
    """

    headers: dict[str, str] = field(default_factory=dict)

    status_code = 429


class StoreAppError(AppError):
    """Raised when the credential store fails or times out."""

    status_code = 500


class ConfigurationAppError(AppError):
    """Raised when required configuration is missing or malformed."""

    status_code = 500
