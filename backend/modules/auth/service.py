"""
Authentication service implementation.

Authenticates bearer tokens against the identity store and implements the
account flows (register, login, refresh, logout, profile, password).
"""

import logging
from datetime import datetime, timezone
from typing import Callable, Optional

from shared.exceptions import ConflictError, ValidationError
from shared.models import AccountStatus, Identity, Role

from modules.realtime.interfaces import IBroadcaster
from .exceptions import (
    AccountNotFoundError,
    AccountSuspendedError,
    InvalidCredentialsError,
    InvalidRefreshTokenError,
    MissingTokenError,
)
from .interfaces import IIdentityStore
from .models import ClientInfo, LoginResult
from .passwords import PasswordHasher
from .tokens import TokenService

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def is_active(status: object) -> bool:
    """
    Case-insensitive check that an account status is active.

    Stores normalize status on write, but rows written before that
    normalization may still carry "Active" or "ACTIVE".
    """
    value = status.value if isinstance(status, AccountStatus) else str(status)
    return value.strip().lower() == AccountStatus.ACTIVE.value


class AuthService:
    """
    Implementation of the authentication service.

    The role embedded in a token is a snapshot from issuance. Authentication
    re-reads the identity to check its status, not to refresh the role.
    """

    def __init__(
        self,
        identity_store: IIdentityStore,
        tokens: TokenService,
        hasher: Optional[PasswordHasher] = None,
        broadcaster: Optional[IBroadcaster] = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self._store = identity_store
        self._tokens = tokens
        self._hasher = hasher or PasswordHasher()
        self._broadcaster = broadcaster
        self._clock = clock

    @property
    def tokens(self) -> TokenService:
        return self._tokens

    async def authenticate(self, token: Optional[str]) -> Identity:
        """
        Authenticate a bearer token and return the acting identity.

        Raises:
            MissingTokenError: No token
            InvalidTokenError: Bad signature or format
            ExpiredTokenError: Token past its expiry
            AccountNotFoundError: Identity no longer exists
            AccountSuspendedError: Identity is not active
        """
        if not token:
            raise MissingTokenError()

        claims = self._tokens.verify(token)

        identity = self._store.find_by_id(claims.identity_id)
        if identity is None:
            raise AccountNotFoundError(claims.identity_id)

        if not is_active(identity.status):
            raise AccountSuspendedError(identity.status.value)

        return self._touch(identity)

    async def register(self, username: str, email: str, password: str) -> Identity:
        """
        Create a new active identity with the user role.

        Raises:
            ConflictError: If the username or email is already taken
        """
        if self._store.exists(email=email):
            raise ConflictError("User already exists with this email", code="CONFLICT")
        if self._store.exists(username=username):
            raise ConflictError("Username is already taken", code="CONFLICT")

        return self._store.create({
            "username": username.strip(),
            "email": email,
            "password_hash": self._hasher.hash(password),
            "role": Role.USER,
            "status": AccountStatus.ACTIVE,
            "is_online": False,
            "login_count": 0,
        })

    async def login(
        self,
        email: str,
        password: str,
        remember_me: bool = False,
        client: Optional[ClientInfo] = None,
    ) -> LoginResult:
        """
        Verify credentials and issue tokens.

        Raises:
            InvalidCredentialsError: Unknown email or wrong password
            AccountSuspendedError: Account is not active
        """
        record = self._store.find_by_email_with_secret(email)
        if record is None or not self._hasher.verify(password, record.password_hash):
            raise InvalidCredentialsError()

        if not is_active(record.status):
            raise AccountSuspendedError(record.status.value)

        client = client or ClientInfo()
        now = self._clock()
        updated = self._store.update_by_id(record.id, {
            "last_login": now,
            "last_activity": now,
            "is_online": True,
            "login_count": record.login_count + 1,
            "last_login_ip": client.ip,
            "last_login_user_agent": client.user_agent,
        })
        identity = updated or record.to_identity()
        self._notify_status(identity.id, True)

        return LoginResult(
            token=self._tokens.issue(identity.id, identity.role, extended=remember_me),
            refresh_token=self._tokens.issue_refresh(identity.id),
            user=identity,
        )

    async def refresh(self, refresh_token: str) -> str:
        """
        Exchange a refresh token for a new default-lifetime access token.

        The refresh token itself is not extended.

        Raises:
            InvalidRefreshTokenError: Bad token, unknown or inactive identity
        """
        claims = self._tokens.verify_refresh(refresh_token)

        identity = self._store.find_by_id(claims.identity_id)
        if identity is None or not is_active(identity.status):
            raise InvalidRefreshTokenError()

        return self._tokens.issue(identity.id, identity.role)

    async def logout(self, identity: Identity) -> None:
        """Mark the identity offline."""
        self._store.update_by_id(identity.id, {
            "is_online": False,
            "last_activity": self._clock(),
        })
        self._notify_status(identity.id, False)

    async def update_profile(
        self,
        identity: Identity,
        username: Optional[str] = None,
        email: Optional[str] = None,
    ) -> Identity:
        """
        Change the identity's own username and/or email.

        Raises:
            ConflictError: If the new username or email is taken
            ValidationError: If nothing would change
        """
        patch: dict[str, str] = {}
        if username is not None and username.strip() != identity.username:
            patch["username"] = username.strip()
        if email is not None and email.lower() != identity.email:
            patch["email"] = email

        if not patch:
            raise ValidationError("No profile changes provided", code="VALIDATION_ERROR")
        if self._store.exists(
            username=patch.get("username"),
            email=patch.get("email"),
            exclude_id=identity.id,
        ):
            raise ConflictError("Username or email is already in use", code="CONFLICT")

        updated = self._store.update_by_id(identity.id, patch)
        if updated is None:
            raise AccountNotFoundError(identity.id)
        return updated

    async def change_password(
        self,
        identity: Identity,
        current_password: str,
        new_password: str,
    ) -> None:
        """
        Replace the identity's password.

        Raises:
            ValidationError: New password too short or equal to the current one
            InvalidCredentialsError: Current password is wrong
        """
        if len(new_password) < 6:
            raise ValidationError(
                "New password must be at least 6 characters long",
                code="VALIDATION_ERROR",
            )
        if new_password == current_password:
            raise ValidationError(
                "New password must be different from current password",
                code="VALIDATION_ERROR",
            )

        record = self._store.find_by_id_with_secret(identity.id)
        if record is None:
            raise AccountNotFoundError(identity.id)
        if not self._hasher.verify(current_password, record.password_hash):
            raise InvalidCredentialsError("Current password is incorrect")

        self._store.update_by_id(identity.id, {
            "password_hash": self._hasher.hash(new_password),
        })

    def _touch(self, identity: Identity) -> Identity:
        """
        Record the request on the identity (last activity, online flag).

        Best effort: a failed write never fails authentication.
        """
        now = self._clock()
        try:
            updated = self._store.update_by_id(identity.id, {
                "last_activity": now,
                "is_online": True,
            })
        except Exception as e:
            logger.warning(f"Failed to update activity for user {identity.id}: {e}")
            return identity

        if not identity.is_online:
            self._notify_status(identity.id, True)
        return updated or identity.model_copy(update={"last_activity": now, "is_online": True})

    def _notify_status(self, identity_id: str, is_online: bool) -> None:
        if self._broadcaster is None:
            return
        try:
            self._broadcaster.user_status_changed(identity_id, is_online)
        except Exception as e:
            logger.warning(f"Status broadcast failed for user {identity_id}: {e}")
