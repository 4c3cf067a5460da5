"""
Authentication module interface.

Other modules should depend on IAuthService and IIdentityStore, not the
concrete implementations. This enables testing with in-memory stores.
"""

from datetime import datetime
from typing import Any, Optional, Protocol, runtime_checkable

from shared.models import AccountStatus, Identity, IdentityRecord, Role

from .models import ClientInfo, LoginResult


@runtime_checkable
class IIdentityStore(Protocol):
    """
    Persistence contract for identities.

    Implementations must normalize role, status and email on write
    (see shared.models.normalize_identity_fields).
    """

    def find_by_id(self, identity_id: str) -> Optional[Identity]:
        """Load an identity without its password hash."""
        ...

    def find_by_id_with_secret(self, identity_id: str) -> Optional[IdentityRecord]:
        """Load an identity including its password hash."""
        ...

    def find_by_email_with_secret(self, email: str) -> Optional[IdentityRecord]:
        """Load an identity by (case-insensitive) email, including its hash."""
        ...

    def exists(
        self,
        username: Optional[str] = None,
        email: Optional[str] = None,
        exclude_id: Optional[str] = None,
    ) -> bool:
        """Whether another identity already uses the username or email."""
        ...

    def create(self, data: dict[str, Any]) -> Identity:
        """Insert a new identity. `data` must include password_hash."""
        ...

    def update_by_id(self, identity_id: str, patch: dict[str, Any]) -> Optional[Identity]:
        """Apply a partial update. Returns None if the identity doesn't exist."""
        ...

    def update_many(self, identity_ids: list[str], patch: dict[str, Any]) -> int:
        """Apply a partial update to several identities. Returns the count updated."""
        ...

    def delete_by_id(self, identity_id: str) -> bool:
        """Hard delete. Returns False if the identity doesn't exist."""
        ...

    def list(
        self,
        page: int = 1,
        page_size: int = 20,
        search: Optional[str] = None,
        role: Optional[Role] = None,
        status: Optional[AccountStatus] = None,
    ) -> tuple[list[Identity], int]:
        """List identities, newest first. Returns (page items, total count)."""
        ...

    def count(
        self,
        role: Optional[Role] = None,
        status: Optional[AccountStatus] = None,
        is_online: Optional[bool] = None,
        created_since: Optional[datetime] = None,
        created_before: Optional[datetime] = None,
    ) -> int:
        """Count identities matching every given filter."""
        ...


@runtime_checkable
class IAuthService(Protocol):
    """
    Interface for authentication operations.

    This protocol defines the contract that the auth module exposes
    to the API layer.
    """

    async def authenticate(self, token: Optional[str]) -> Identity:
        """
        Authenticate a bearer token and return the acting identity.

        Raises:
            MissingTokenError, InvalidTokenError, ExpiredTokenError,
            AccountNotFoundError, AccountSuspendedError
        """
        ...

    async def register(self, username: str, email: str, password: str) -> Identity:
        ...

    async def login(
        self,
        email: str,
        password: str,
        remember_me: bool = False,
        client: Optional[ClientInfo] = None,
    ) -> LoginResult:
        ...

    async def refresh(self, refresh_token: str) -> str:
        ...

    async def logout(self, identity: Identity) -> None:
        ...

    async def update_profile(
        self,
        identity: Identity,
        username: Optional[str] = None,
        email: Optional[str] = None,
    ) -> Identity:
        ...

    async def change_password(
        self,
        identity: Identity,
        current_password: str,
        new_password: str,
    ) -> None:
        ...
