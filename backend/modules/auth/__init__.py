"""
Authentication module.

Handles token issuance and verification, request authentication, and the
account flows (register, login, refresh, logout, profile, password).

Public API:
- IAuthService: Interface for auth operations
- IIdentityStore: Interface for identity persistence
- TokenService: Signed session tokens
- TokenClaims: Decoded token payload
- Auth exceptions: MissingTokenError, InvalidTokenError, etc.
"""

from .interfaces import IAuthService, IIdentityStore
from .models import TokenClaims, TokenType
from .tokens import TokenService
from .exceptions import (
    MissingTokenError,
    InvalidTokenError,
    ExpiredTokenError,
    InvalidRefreshTokenError,
    AccountNotFoundError,
    AccountSuspendedError,
    InvalidCredentialsError,
    UnauthenticatedError,
    ForbiddenError,
)

__all__ = [
    # Interfaces
    "IAuthService",
    "IIdentityStore",
    # Tokens
    "TokenService",
    "TokenClaims",
    "TokenType",
    # Exceptions
    "MissingTokenError",
    "InvalidTokenError",
    "ExpiredTokenError",
    "InvalidRefreshTokenError",
    "AccountNotFoundError",
    "AccountSuspendedError",
    "InvalidCredentialsError",
    "UnauthenticatedError",
    "ForbiddenError",
]
