"""
Authentication module exceptions.

These exceptions are raised by the auth module and caught by the API
error handlers to return appropriate HTTP responses.
"""

from typing import Iterable

from shared.exceptions import AuthenticationError, AuthorizationError


class MissingTokenError(AuthenticationError):
    """Raised when no authentication token is provided."""

    def __init__(self, message: str = "Access token required"):
        super().__init__(message, code="MISSING_TOKEN")


class InvalidTokenError(AuthenticationError):
    """Raised when a JWT token is malformed or its signature does not match."""

    status_code = 403

    def __init__(self, message: str = "Invalid token format"):
        super().__init__(message, code="INVALID_TOKEN")


class ExpiredTokenError(AuthenticationError):
    """Raised when a JWT token has expired."""

    status_code = 403

    def __init__(self, message: str = "Token has expired"):
        super().__init__(message, code="TOKEN_EXPIRED")


class InvalidRefreshTokenError(AuthenticationError):
    """Raised when a refresh token is invalid, expired or its account unusable."""

    def __init__(self, message: str = "Invalid or expired refresh token"):
        super().__init__(message, code="INVALID_REFRESH_TOKEN")


class AccountNotFoundError(AuthenticationError):
    """Raised when the token's identity doesn't exist in the database."""

    def __init__(self, identity_id: str):
        super().__init__(
            "Invalid token - user not found",
            code="ACCOUNT_NOT_FOUND",
            details={"user_id": identity_id},
        )


class AccountSuspendedError(AuthenticationError):
    """Raised when the identity's status is anything other than active."""

    def __init__(self, status: str):
        super().__init__(
            f"Account is {status}",
            code="ACCOUNT_SUSPENDED",
            details={"status": status},
        )
        self.status = status


class InvalidCredentialsError(AuthenticationError):
    """Raised when login email or password is wrong."""

    def __init__(self, message: str = "Email or password is incorrect"):
        super().__init__(message, code="INVALID_CREDENTIALS")


class UnauthenticatedError(AuthenticationError):
    """Raised by guards when no identity has been attached to the request."""

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message, code="UNAUTHENTICATED")


class ForbiddenError(AuthorizationError):
    """Raised when the identity's role is not among the allowed roles."""

    def __init__(self, required_roles: Iterable[str], user_role: str, message: str = ""):
        required = sorted(required_roles)
        super().__init__(
            message or f"Access denied. Required role: {' or '.join(required)}",
            code="FORBIDDEN",
            details={"required_roles": required, "user_role": user_role},
        )
