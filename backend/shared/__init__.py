"""
Shared infrastructure for Adminboard backend.

This package contains cross-cutting concerns that are used by multiple modules:
- config: Centralized settings management
- database: Supabase client factory
- exceptions: Base exception classes
- models: Identity, Role and AccountStatus shared by every module

Note: Business logic should NOT go here. This is for infrastructure only.
"""

from .config import Settings, get_settings, validate_security_settings
from .database import get_supabase_client, reset_client_cache
from .exceptions import (
    AdminboardError,
    NotFoundError,
    ValidationError,
    ConflictError,
    AuthenticationError,
    AuthorizationError,
    RateLimitError,
    ConfigurationError,
)
from .models import AccountStatus, Identity, IdentityRecord, Role

__all__ = [
    "Settings",
    "get_settings",
    "validate_security_settings",
    "get_supabase_client",
    "reset_client_cache",
    "AdminboardError",
    "NotFoundError",
    "ValidationError",
    "ConflictError",
    "AuthenticationError",
    "AuthorizationError",
    "RateLimitError",
    "ConfigurationError",
    "AccountStatus",
    "Identity",
    "IdentityRecord",
    "Role",
]
