"""
Identity repository for database access.

Provides both a Supabase-backed repository (for production) and an
in-memory store (for testing and local development). Both normalize
role, status and email on write.
"""

import uuid
from datetime import datetime, timezone
from typing import Any, Optional

from supabase import Client

from shared.models import (
    AccountStatus,
    Identity,
    IdentityRecord,
    Role,
    normalize_identity_fields,
)
from shared.repository import BaseRepository

# Projection that never includes password_hash
PUBLIC_COLUMNS = ",".join(Identity.model_fields)


def _quoted_pattern(term: str) -> str:
    """Quote a substring pattern so PostgREST filter syntax in it stays literal."""
    escaped = term.replace("\\", "\\\\").replace('"', '\\"')
    return f'"%{escaped}%"'


class IdentityRepository(BaseRepository[Identity]):
    """
    Repository for the users table.

    Note: This repository does NOT perform authorization checks.
    The service layer is responsible for that.
    """

    def __init__(self, db: Client, table: str = "users") -> None:
        super().__init__(db, table)

    def find_by_id(self, identity_id: str) -> Optional[Identity]:
        result = self._query().select(PUBLIC_COLUMNS).eq("id", identity_id).execute()
        if not result.data:
            return None
        return Identity.model_validate(result.data[0])

    def find_by_id_with_secret(self, identity_id: str) -> Optional[IdentityRecord]:
        result = self._query().select("*").eq("id", identity_id).execute()
        if not result.data:
            return None
        return IdentityRecord.model_validate(result.data[0])

    def find_by_email_with_secret(self, email: str) -> Optional[IdentityRecord]:
        result = self._query().select("*").eq("email", email.strip().lower()).execute()
        if not result.data:
            return None
        return IdentityRecord.model_validate(result.data[0])

    def exists(
        self,
        username: Optional[str] = None,
        email: Optional[str] = None,
        exclude_id: Optional[str] = None,
    ) -> bool:
        checks = []
        if username:
            checks.append(("username", username.strip()))
        if email:
            checks.append(("email", email.strip().lower()))

        for column, value in checks:
            query = self._query().select("id").eq(column, value)
            if exclude_id:
                query = query.neq("id", exclude_id)
            if query.limit(1).execute().data:
                return True
        return False

    def create(self, data: dict[str, Any]) -> Identity:
        row = normalize_identity_fields(data)
        now = datetime.now(timezone.utc).isoformat()
        row.setdefault("created_at", now)
        row.setdefault("updated_at", now)
        result = self._query().insert(row).execute()
        return Identity.model_validate(result.data[0])

    def update_by_id(self, identity_id: str, patch: dict[str, Any]) -> Optional[Identity]:
        result = (
            self._query()
            .update(self._prepare_patch(patch))
            .eq("id", identity_id)
            .execute()
        )
        if not result.data:
            return None
        return Identity.model_validate(result.data[0])

    def update_many(self, identity_ids: list[str], patch: dict[str, Any]) -> int:
        if not identity_ids:
            return 0
        result = (
            self._query()
            .update(self._prepare_patch(patch))
            .in_("id", identity_ids)
            .execute()
        )
        return len(result.data or [])

    def delete_by_id(self, identity_id: str) -> bool:
        result = self._query().delete().eq("id", identity_id).execute()
        return bool(result.data)

    def list(
        self,
        page: int = 1,
        page_size: int = 20,
        search: Optional[str] = None,
        role: Optional[Role] = None,
        status: Optional[AccountStatus] = None,
    ) -> tuple[list[Identity], int]:
        offset = (page - 1) * page_size

        query = self._query().select(PUBLIC_COLUMNS, count="exact")
        if search:
            pattern = _quoted_pattern(search.strip())
            query = query.or_(f"username.ilike.{pattern},email.ilike.{pattern}")
        if role:
            query = query.eq("role", Role(role).value)
        if status:
            query = query.eq("status", AccountStatus(status).value)

        result = (
            query.order("created_at", desc=True)
            .range(offset, offset + page_size - 1)
            .execute()
        )
        items = [Identity.model_validate(row) for row in result.data or []]
        return items, result.count or 0

    def count(
        self,
        role: Optional[Role] = None,
        status: Optional[AccountStatus] = None,
        is_online: Optional[bool] = None,
        created_since: Optional[datetime] = None,
        created_before: Optional[datetime] = None,
    ) -> int:
        query = self._query().select("id", count="exact", head=True)
        if role:
            query = query.eq("role", Role(role).value)
        if status:
            query = query.eq("status", AccountStatus(status).value)
        if is_online is not None:
            query = query.eq("is_online", is_online)
        if created_since:
            query = query.gte("created_at", created_since.isoformat())
        if created_before:
            query = query.lt("created_at", created_before.isoformat())
        return query.execute().count or 0

    @staticmethod
    def _prepare_patch(patch: dict[str, Any]) -> dict[str, Any]:
        row = normalize_identity_fields(patch)
        row["updated_at"] = datetime.now(timezone.utc)
        return {
            key: value.isoformat() if isinstance(value, datetime) else value
            for key, value in row.items()
        }


class InMemoryIdentityStore:
    """
    Identity store with in-memory storage.

    For testing and development. Use IdentityRepository for production.
    """

    def __init__(self) -> None:
        self._rows: dict[str, dict[str, Any]] = {}

    def find_by_id(self, identity_id: str) -> Optional[Identity]:
        row = self._rows.get(identity_id)
        return Identity.model_validate(row) if row else None

    def find_by_id_with_secret(self, identity_id: str) -> Optional[IdentityRecord]:
        row = self._rows.get(identity_id)
        return IdentityRecord.model_validate(row) if row else None

    def find_by_email_with_secret(self, email: str) -> Optional[IdentityRecord]:
        email = email.strip().lower()
        for row in self._rows.values():
            if row["email"] == email:
                return IdentityRecord.model_validate(row)
        return None

    def exists(
        self,
        username: Optional[str] = None,
        email: Optional[str] = None,
        exclude_id: Optional[str] = None,
    ) -> bool:
        email = email.strip().lower() if email else None
        for row in self._rows.values():
            if row["id"] == exclude_id:
                continue
            if username and row["username"] == username.strip():
                return True
            if email and row["email"] == email:
                return True
        return False

    def create(self, data: dict[str, Any]) -> Identity:
        row = normalize_identity_fields(data)
        now = datetime.now(timezone.utc)
        row.setdefault("id", str(uuid.uuid4()))
        row.setdefault("role", Role.USER.value)
        row.setdefault("status", AccountStatus.ACTIVE.value)
        row.setdefault("created_at", now)
        row.setdefault("updated_at", now)
        self._rows[row["id"]] = row
        return Identity.model_validate(row)

    def insert_raw(self, row: dict[str, Any]) -> None:
        """Store a row exactly as given, bypassing normalization (legacy data)."""
        self._rows[row["id"]] = dict(row)

    def update_by_id(self, identity_id: str, patch: dict[str, Any]) -> Optional[Identity]:
        row = self._rows.get(identity_id)
        if row is None:
            return None
        row.update(normalize_identity_fields(patch))
        row["updated_at"] = datetime.now(timezone.utc)
        return Identity.model_validate(row)

    def update_many(self, identity_ids: list[str], patch: dict[str, Any]) -> int:
        updated = 0
        for identity_id in identity_ids:
            if self.update_by_id(identity_id, patch) is not None:
                updated += 1
        return updated

    def delete_by_id(self, identity_id: str) -> bool:
        return self._rows.pop(identity_id, None) is not None

    def list(
        self,
        page: int = 1,
        page_size: int = 20,
        search: Optional[str] = None,
        role: Optional[Role] = None,
        status: Optional[AccountStatus] = None,
    ) -> tuple[list[Identity], int]:
        items = [Identity.model_validate(row) for row in self._rows.values()]
        if search:
            term = search.lower()
            items = [i for i in items if term in i.username.lower() or term in i.email]
        if role:
            items = [i for i in items if i.role is Role(role)]
        if status:
            items = [i for i in items if i.status is AccountStatus(status)]

        epoch = datetime.min.replace(tzinfo=timezone.utc)
        items.sort(key=lambda i: i.created_at or epoch, reverse=True)
        offset = (page - 1) * page_size
        return items[offset:offset + page_size], len(items)

    def count(
        self,
        role: Optional[Role] = None,
        status: Optional[AccountStatus] = None,
        is_online: Optional[bool] = None,
        created_since: Optional[datetime] = None,
        created_before: Optional[datetime] = None,
    ) -> int:
        total = 0
        for row in self._rows.values():
            identity = Identity.model_validate(row)
            if role and identity.role is not Role(role):
                continue
            if status and identity.status is not AccountStatus(status):
                continue
            if is_online is not None and identity.is_online is not is_online:
                continue
            if created_since and (identity.created_at is None or identity.created_at < created_since):
                continue
            if created_before and (identity.created_at is None or identity.created_at >= created_before):
                continue
            total += 1
        return total
