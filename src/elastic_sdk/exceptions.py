"""SDK-specific exceptions."""

from __future__ import annotations

from typing import Mapping


class ElasticError(Exception):
    """Base exception for all Elastic SDK failures."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        error_type: str | None = None,
        body: object = None,
        headers: Mapping[str, str] | None = None,
        retry_after: float | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.error_type = error_type
        self.body = body
        self.headers = dict(headers) if headers is not None else {}
        self.retry_after = retry_after
        self.cause = cause

    def __str__(self) -> str:
        if self.status_code is None:
            return str(self.args[0])
        parts = [f"{self.status_code}"]
        if self.error_type:
            parts.append(self.error_type)
        return " ".join(parts) + f": {self.args[0]}"


class ElasticValidationError(ElasticError):
    """Raised when a request cannot be built from the given options."""


class ElasticDecodeError(ElasticValidationError):
    """Raised when a response body does not match the expected shape."""


class ElasticHTTPError(ElasticError):
    """Raised for HTTP non-success responses."""


class ElasticAuthError(ElasticHTTPError):
    """Raised for authentication and authorization failures."""


class ElasticNotFoundError(ElasticHTTPError):
    """Raised for HTTP 404 responses."""


class ElasticRateLimitError(ElasticHTTPError):
    """Raised for HTTP 429 responses."""


class ElasticNetworkError(ElasticError):
    """Raised for transport-level failures like DNS and TCP errors."""


class ElasticTimeoutError(ElasticError):
    """Raised when a request exceeds configured timeout."""
