"""
Activity module data models.

An activity record is an immutable audit-trail entry for a security- or
mutation-relevant action.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
import uuid

from pydantic import BaseModel, Field


class ActivityType(str, Enum):
    """Closed set of audited action types."""

    LOGIN = "login"
    LOGOUT = "logout"
    REGISTER = "register"
    PROFILE_UPDATE = "profile_update"
    PASSWORD_CHANGE = "password_change"
    POST_CREATE = "post_create"
    POST_UPDATE = "post_update"
    POST_DELETE = "post_delete"
    COMMENT_CREATE = "comment_create"
    LIKE = "like"
    SHARE = "share"
    SETTINGS_CHANGE = "settings_change"
    FILE_UPLOAD = "file_upload"
    FILE_DOWNLOAD = "file_download"
    ADMIN_ACTION = "admin_action"
    SYSTEM_ALERT = "system_alert"
    ERROR = "error"


class Severity(str, Enum):
    """How much attention an activity deserves."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ActivityRecord(BaseModel):
    """A single audit-trail entry."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    user_id: str = Field(..., description="Acting identity")
    type: ActivityType
    description: str = Field(..., min_length=1)
    ip: Optional[str] = None
    user_agent: Optional[str] = None
    metadata: dict[str, Any] = Field(default_factory=dict)
    severity: Severity = Severity.LOW
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    model_config = {"frozen": True, "extra": "ignore"}


class ActivityListResponse(BaseModel):
    """Recent activity records, newest first."""

    items: list[ActivityRecord]
    count: int
