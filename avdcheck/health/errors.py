"""Exception taxonomy for health checks.

Every fault raised while a check evaluates is caught at the runner boundary
and converted into an ``Error`` outcome. ``NotFoundError`` is the exception:
checks treat it as a valid empty result.
"""

from typing import Any


class HealthCheckError(Exception):
    """Base exception for health check errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.details = details or {}


class TransientFetchError(HealthCheckError):
    """Raised when the resource inventory cannot be reached (network or auth)."""

    pass


class NotFoundError(HealthCheckError):
    """Raised when the queried resource type has no instances."""

    pass


class CheckFault(HealthCheckError):
    """Unexpected failure inside a check's own evaluation logic."""

    def __init__(self, check_name: str, error: Exception):
        super().__init__(
            f"{type(error).__name__}: {error}",
            details={"check_name": check_name, "error_type": type(error).__name__},
        )
        self.check_name = check_name
        self.error = error


class CredentialError(HealthCheckError):
    """Raised when credential material cannot be resolved."""

    pass
