"""
User administration data models.
"""

from enum import Enum
from typing import Optional
from pydantic import BaseModel, ConfigDict, EmailStr, Field

from shared.models import AccountStatus, Identity, Role


class BulkAction(str, Enum):
    """Actions an admin can apply to several identities at once."""

    ACTIVATE = "activate"
    DEACTIVATE = "deactivate"
    SUSPEND = "suspend"
    UPDATE_ROLE = "update_role"


class CreateUserRequest(BaseModel):
    """Admin-created account."""

    username: str = Field(..., min_length=3, max_length=50)
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=128)
    role: Role = Role.USER
    status: AccountStatus = AccountStatus.ACTIVE


class UpdateUserRequest(BaseModel):
    """Partial update of any identity by an admin."""

    username: Optional[str] = Field(None, min_length=3, max_length=50)
    email: Optional[EmailStr] = None
    role: Optional[Role] = None
    status: Optional[AccountStatus] = None


class BulkActionData(BaseModel):
    role: Optional[Role] = None


class BulkActionRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_ids: list[str] = Field(..., alias="userIds", min_length=1)
    action: BulkAction
    data: BulkActionData = Field(default_factory=BulkActionData)


class BulkActionResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    modified_count: int = Field(..., serialization_alias="modifiedCount")
    requested_count: int = Field(..., serialization_alias="requestedCount")
    skipped_self: bool = Field(..., serialization_alias="skippedSelf")


class UserListResponse(BaseModel):
    """Paginated identity list."""

    model_config = ConfigDict(populate_by_name=True)

    items: list[Identity]
    total: int
    page: int
    page_size: int = Field(..., serialization_alias="pageSize")
    has_more: bool = Field(..., serialization_alias="hasMore")


class UserStats(BaseModel):
    """Identity totals for the dashboard."""

    model_config = ConfigDict(populate_by_name=True)

    total_users: int = Field(..., serialization_alias="totalUsers")
    active_users: int = Field(..., serialization_alias="activeUsers")
    inactive_users: int = Field(..., serialization_alias="inactiveUsers")
    suspended_users: int = Field(..., serialization_alias="suspendedUsers")
    admin_users: int = Field(..., serialization_alias="adminUsers")
    online_users: int = Field(..., serialization_alias="onlineUsers")
    registrations_today: int = Field(..., serialization_alias="todayRegistrations")
    registrations_this_week: int = Field(..., serialization_alias="thisWeekRegistrations")
    registrations_this_month: int = Field(..., serialization_alias="thisMonthRegistrations")
    weekly_growth_rate: float = Field(..., serialization_alias="weeklyGrowthRate")
