"""
Shared data models used across modules.

These models are shared infrastructure, not business logic.
Module-specific models should stay in their respective module directories.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Generic, Optional, TypeVar
from pydantic import BaseModel, EmailStr, Field, field_validator


T = TypeVar("T")


class _CaseInsensitiveEnum(str, Enum):
    """String enum that accepts any casing and resolves to the canonical value."""

    @classmethod
    def _missing_(cls, value: object):
        if isinstance(value, str):
            lowered = value.strip().lower()
            for member in cls:
                if member.value == lowered:
                    return member
        return None


class Role(_CaseInsensitiveEnum):
    """Identity role."""

    ADMIN = "admin"
    USER = "user"


class AccountStatus(_CaseInsensitiveEnum):
    """Identity account status."""

    ACTIVE = "active"
    INACTIVE = "inactive"
    SUSPENDED = "suspended"


class Identity(BaseModel):
    """
    An authenticated account, as seen by route handlers.

    This is the projection loaded by the auth chain and attached to the
    request. It never contains the password hash.
    """

    id: str = Field(..., description="Identity ID")
    username: str = Field(..., description="Unique username")
    email: EmailStr = Field(..., description="Unique email address (lowercase)")
    role: Role = Field(default=Role.USER, description="Identity role")
    status: AccountStatus = Field(default=AccountStatus.ACTIVE, description="Account status")

    is_online: bool = Field(default=False, description="Whether the identity is online")
    last_activity: Optional[datetime] = Field(None, description="Last authenticated request")

    # Login metadata
    login_count: int = Field(default=0, description="Number of successful logins")
    last_login: Optional[datetime] = Field(None, description="Last successful login")
    last_login_ip: Optional[str] = Field(None, description="IP of the last login")
    last_login_user_agent: Optional[str] = Field(None, description="User agent of the last login")

    created_at: Optional[datetime] = Field(None, description="Account creation time")
    updated_at: Optional[datetime] = Field(None, description="Last update time")

    model_config = {
        "frozen": True,
        "extra": "ignore",  # Drops password_hash and unknown columns
    }

    @field_validator("role", mode="before")
    @classmethod
    def _unknown_role_is_user(cls, value: Any) -> Any:
        if isinstance(value, str):
            try:
                return Role(value)
            except ValueError:
                return Role.USER
        return value

    @field_validator("status", mode="before")
    @classmethod
    def _unknown_status_is_suspended(cls, value: Any) -> Any:
        """Stored statuses outside the enum (legacy "deleted") never count as active."""
        if isinstance(value, str):
            try:
                return AccountStatus(value)
            except ValueError:
                return AccountStatus.SUSPENDED
        return value


class IdentityRecord(Identity):
    """Identity including its password hash. Never returned to callers."""

    password_hash: str = Field(..., description="bcrypt hash of the password")

    def to_identity(self) -> Identity:
        """Strip the password hash."""
        return Identity.model_validate(self.model_dump(exclude={"password_hash"}))


def normalize_identity_fields(data: dict[str, Any]) -> dict[str, Any]:
    """
    Normalize role, status and email to their canonical form.

    Applied by every identity store on write, so stored values always use
    lowercase enum values regardless of the caller's casing.

    Raises:
        ValueError: If role or status is not a known value
    """
    normalized = dict(data)
    if normalized.get("role") is not None:
        normalized["role"] = Role(normalized["role"]).value
    if normalized.get("status") is not None:
        normalized["status"] = AccountStatus(normalized["status"]).value
    if normalized.get("email") is not None:
        normalized["email"] = str(normalized["email"]).strip().lower()
    return normalized


class ApiResponse(BaseModel, Generic[T]):
    """Success envelope returned by every endpoint."""

    success: bool = True
    message: Optional[str] = None
    data: Optional[T] = None
