from __future__ import annotations

from typing import Any


class ServiceError(Exception):
    """Base exception for every failure that may reach the HTTP boundary.

    Carries the common envelope fields: the service that failed, a human message,
    a machine-readable code and, when the failure maps to an HTTP status, that
    status.
    """

    default_code = "SERVER_ERROR"
    default_status_code: int | None = None

    def __init__(
        self,
        service: str,
        message: str,
        code: str | None = None,
        status_code: int | None = None,
    ):
        super().__init__(message)
        self.service = service
        self.message = message
        self.code = code or self.default_code
        self.status_code = status_code if status_code is not None else self.default_status_code

    def to_envelope(self) -> dict[str, Any]:
        return {"success": False, "service": self.service, "error": self.message, "code": self.code}

    def http_status(self) -> int:
        return self.status_code or 500

    def __repr__(self) -> str:
        return f"{type(self).__name__}(service={self.service!r}, code={self.code!r}, status_code={self.status_code!r})"


class RequestValidationFailed(ServiceError):
    """Raised when a request body is malformed."""

    default_code = "VALIDATION_ERROR"
    default_status_code = 400


class NotConfiguredError(ServiceError):
    """Raised when credentials/configuration are missing."""

    default_code = "NOT_CONFIGURED"
    default_status_code = 503


class ProviderHTTPError(ServiceError):
    """Raised when a vendor answers with a non-2xx status."""

    def __init__(self, service: str, message: str, status_code: int):
        super().__init__(service, message, code=str(status_code), status_code=status_code)


class ProviderAuthError(ProviderHTTPError):
    """Raised when a vendor rejects credentials."""


class RateLimitedError(ProviderHTTPError):
    """Raised when a vendor answers 429."""

    def __init__(self, service: str, message: str):
        super().__init__(service, message, status_code=429)


class NotFoundError(ServiceError):
    """Raised when the requested symbol or resource does not exist upstream."""

    default_code = "NOT_FOUND"
    default_status_code = 404


class UpstreamTimeoutError(ServiceError):
    """Raised when a vendor call exceeds its timeout."""

    default_code = "TIMEOUT"
    default_status_code = 503


class UpstreamUnavailableError(ServiceError):
    """Raised when a vendor cannot be reached."""

    default_code = "CONNECTION_ERROR"
    default_status_code = 503


class InvalidResponseError(ServiceError):
    """Raised when a vendor answers 2xx with a payload we cannot read."""

    default_code = "INVALID_RESPONSE"
    default_status_code = 502


class ConfidentialComputeError(ServiceError):
    """Raised by FHE backend operations (init, encrypt, decrypt, compute)."""


class DependencyMissingError(Exception):
    """Raised when an optional runtime dependency is absent."""
