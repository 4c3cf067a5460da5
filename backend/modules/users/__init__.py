"""
User administration module.

Admin-only management of identities: listing, creation, updates,
deactivation and bulk actions.

Public API:
- UserAdminService: Admin operations on identities
- UserNotFoundError, SelfActionError: Module exceptions
"""

from .service import UserAdminService
from .exceptions import SelfActionError, UserNotFoundError

__all__ = [
    "UserAdminService",
    "SelfActionError",
    "UserNotFoundError",
]
