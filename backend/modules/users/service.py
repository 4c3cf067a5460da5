"""
User administration service.

Admin operations on identities. Guards against an admin acting on their
own identity live here, since only the operation knows its target.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Optional

from shared.exceptions import ConflictError, ValidationError
from shared.models import AccountStatus, Identity, Role

from modules.auth.interfaces import IIdentityStore
from modules.auth.passwords import PasswordHasher
from .exceptions import SelfActionError, UserNotFoundError
from .models import (
    BulkAction,
    BulkActionResult,
    CreateUserRequest,
    UpdateUserRequest,
    UserListResponse,
    UserStats,
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def exclude_actor(actor: Identity, user_ids: list[str]) -> list[str]:
    """Drop the acting identity (and duplicates) from a target list."""
    seen: set[str] = set()
    result = []
    for user_id in user_ids:
        if user_id == actor.id or user_id in seen:
            continue
        seen.add(user_id)
        result.append(user_id)
    return result


class UserAdminService:
    """Identity management for admins."""

    def __init__(
        self,
        identity_store: IIdentityStore,
        hasher: Optional[PasswordHasher] = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self._store = identity_store
        self._hasher = hasher or PasswordHasher()
        self._clock = clock

    async def list_users(
        self,
        page: int = 1,
        page_size: int = 20,
        search: Optional[str] = None,
        role: Optional[Role] = None,
        status: Optional[AccountStatus] = None,
    ) -> UserListResponse:
        items, total = self._store.list(page, page_size, search, role, status)
        return UserListResponse(
            items=items,
            total=total,
            page=page,
            page_size=page_size,
            has_more=page * page_size < total,
        )

    async def stats(self) -> UserStats:
        """Totals by status, role and presence, plus recent registrations."""
        now = self._clock()
        week_ago = now - timedelta(days=7)
        this_week = self._store.count(created_since=week_ago)
        last_week = self._store.count(
            created_since=now - timedelta(days=14),
            created_before=week_ago,
        )
        growth = round((this_week - last_week) / last_week * 100, 1) if last_week else 0.0

        return UserStats(
            total_users=self._store.count(),
            active_users=self._store.count(status=AccountStatus.ACTIVE),
            inactive_users=self._store.count(status=AccountStatus.INACTIVE),
            suspended_users=self._store.count(status=AccountStatus.SUSPENDED),
            admin_users=self._store.count(role=Role.ADMIN),
            online_users=self._store.count(is_online=True),
            registrations_today=self._store.count(
                created_since=now.replace(hour=0, minute=0, second=0, microsecond=0),
            ),
            registrations_this_week=this_week,
            registrations_this_month=self._store.count(created_since=now - timedelta(days=30)),
            weekly_growth_rate=growth,
        )

    async def get_user(self, user_id: str) -> Identity:
        identity = self._store.find_by_id(user_id)
        if identity is None:
            raise UserNotFoundError(user_id)
        return identity

    async def create_user(self, request: CreateUserRequest) -> Identity:
        if self._store.exists(username=request.username, email=request.email):
            raise ConflictError("User already exists with this username or email", code="CONFLICT")

        return self._store.create({
            "username": request.username.strip(),
            "email": request.email,
            "password_hash": self._hasher.hash(request.password),
            "role": request.role,
            "status": request.status,
            "is_online": False,
            "login_count": 0,
        })

    async def update_user(
        self,
        actor: Identity,
        user_id: str,
        request: UpdateUserRequest,
    ) -> Identity:
        """
        Update another identity.

        Raises:
            SelfActionError: Admin demoting or deactivating themselves
            ConflictError: Username or email taken
            UserNotFoundError: Unknown target
        """
        patch = request.model_dump(exclude_none=True)
        if not patch:
            raise ValidationError("No changes provided", code="VALIDATION_ERROR")

        if user_id == actor.id:
            if patch.get("role") not in (None, Role.ADMIN):
                raise SelfActionError("demote")
            if patch.get("status") not in (None, AccountStatus.ACTIVE):
                raise SelfActionError("deactivate")

        if self._store.exists(
            username=patch.get("username"),
            email=patch.get("email"),
            exclude_id=user_id,
        ):
            raise ConflictError("Username or email is already in use", code="CONFLICT")

        if patch.get("status") not in (None, AccountStatus.ACTIVE):
            patch["is_online"] = False

        updated = self._store.update_by_id(user_id, patch)
        if updated is None:
            raise UserNotFoundError(user_id)
        return updated

    async def toggle_online(self, user_id: str) -> Identity:
        """Flip the online flag and stamp last activity."""
        identity = await self.get_user(user_id)
        updated = self._store.update_by_id(user_id, {
            "is_online": not identity.is_online,
            "last_activity": self._clock(),
        })
        if updated is None:
            raise UserNotFoundError(user_id)
        return updated

    async def delete_user(self, actor: Identity, user_id: str, permanent: bool = False) -> None:
        """
        Deactivate (default) or permanently delete an identity.

        Raises:
            SelfActionError: Admin targeting themselves
            UserNotFoundError: Unknown target
        """
        if user_id == actor.id:
            raise SelfActionError("delete")

        if permanent:
            found = self._store.delete_by_id(user_id)
        else:
            found = self._store.update_by_id(user_id, {
                "status": AccountStatus.INACTIVE,
                "is_online": False,
                "last_activity": self._clock(),
            }) is not None

        if not found:
            raise UserNotFoundError(user_id)

    async def bulk_action(
        self,
        actor: Identity,
        user_ids: list[str],
        action: BulkAction,
        role: Optional[Role] = None,
    ) -> BulkActionResult:
        """
        Apply an action to several identities.

        The acting admin's own ID is always filtered out.

        Raises:
            ValidationError: update_role without a role
        """
        patch: dict[str, Any] = {"last_activity": self._clock()}
        if action is BulkAction.ACTIVATE:
            patch["status"] = AccountStatus.ACTIVE
        elif action is BulkAction.DEACTIVATE:
            patch["status"] = AccountStatus.INACTIVE
            patch["is_online"] = False
        elif action is BulkAction.SUSPEND:
            patch["status"] = AccountStatus.SUSPENDED
            patch["is_online"] = False
        elif action is BulkAction.UPDATE_ROLE:
            if role is None:
                raise ValidationError("Valid role is required", code="VALIDATION_ERROR")
            patch["role"] = role

        targets = exclude_actor(actor, user_ids)
        modified = self._store.update_many(targets, patch) if targets else 0

        return BulkActionResult(
            modified_count=modified,
            requested_count=len(user_ids),
            skipped_self=actor.id in user_ids,
        )
