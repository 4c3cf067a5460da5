"""
Base exception classes for the Adminboard backend.

Each module should define its own exceptions that inherit from these bases.
Every exception carries the HTTP status it maps to, so the API error
handlers can render a stable response without knowing the module.
"""

from typing import Optional, Any


class AdminboardError(Exception):
    """
    Base exception for all Adminboard errors.

    All custom exceptions should inherit from this class.
    """

    status_code: int = 500

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
        """Convert exception to the rejection envelope used by the API."""
        result: dict[str, Any] = {
            "success": False,
            "message": self.message,
            "code": self.code,
        }
        if self.details:
            result["details"] = self.details
        return result


class NotFoundError(AdminboardError):
    """Resource not found."""

    status_code = 404


class ValidationError(AdminboardError):
    """Input validation failed."""

    status_code = 400


class ConflictError(AdminboardError):
    """Resource conflicts with an existing one (e.g. duplicate email)."""

    status_code = 409


class AuthenticationError(AdminboardError):
    """Authentication failed (invalid or missing credentials)."""

    status_code = 401


class AuthorizationError(AdminboardError):
    """Authorization failed (insufficient permissions)."""

    status_code = 403


class RateLimitError(AdminboardError):
    """Too many requests from the same client within the window."""

    status_code = 429

    def __init__(self, message: str = "Too many requests", retry_after: int = 0):
        super().__init__(message, code="RATE_LIMITED")
        self.retry_after = retry_after

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["retryAfter"] = self.retry_after
        return result


class ConfigurationError(AdminboardError):
    """Server is misconfigured (e.g. missing signing secret)."""

    status_code = 500

    def __init__(self, message: str, setting: Optional[str] = None):
        super().__init__(
            message,
            code="CONFIGURATION_ERROR",
            details={"setting": setting} if setting else None,
        )

    def to_dict(self) -> dict[str, Any]:
        # Clients only learn that the server is misconfigured, not which setting.
        return {
            "success": False,
            "message": "Server configuration error",
            "code": self.code,
        }
