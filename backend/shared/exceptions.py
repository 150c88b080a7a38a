"""
Base exception classes for the TrustCircle backend.

Each module should define its own exceptions that inherit from these bases.
This enables consistent error handling across the application.
"""

from typing import Optional, Any


class TrustCircleError(Exception):
    """
    Base exception for all TrustCircle errors.

    All custom exceptions should inherit from this class.
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to a dictionary for API responses."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


class NotFoundError(TrustCircleError):
    """Resource not found."""

    pass


class AlreadyExistsError(TrustCircleError):
    """Resource already exists (duplicate grant, duplicate pending request)."""

    pass


class ValidationError(TrustCircleError):
    """Input validation failed."""

    pass


class AuthenticationError(TrustCircleError):
    """Authentication failed (invalid or missing credentials)."""

    pass


class AuthorizationError(TrustCircleError):
    """Authorization failed (insufficient permissions)."""

    pass


class ExternalServiceError(TrustCircleError):
    """Error communicating with an external service."""

    def __init__(
        self,
        message: str,
        service: str,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message, code, details)
        self.service = service
        self.details["service"] = service


class TransientStoreError(ExternalServiceError):
    """The document store failed or was unavailable. Safe to retry manually."""

    def __init__(
        self,
        message: str,
        operation: str,
        original_error: Optional[str] = None,
    ):
        super().__init__(
            message,
            service="document_store",
            code="STORE_UNAVAILABLE",
            details={"operation": operation, "original_error": original_error},
        )
