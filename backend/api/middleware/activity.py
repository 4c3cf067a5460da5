"""
Activity logging dependency.

Wraps a route so a successful call leaves an audit record. The record is
written after the handler returns and never changes the response.
"""

from typing import Optional

from fastapi import Depends, Request

from modules.activity.models import ActivityType, Severity
from modules.activity.service import ActivityLogger

from ..dependencies import get_activity_logger
from .auth import current_identity


def log_activity(
    activity_type: ActivityType,
    description: Optional[str] = None,
    severity: Severity = Severity.LOW,
):
    """
    Build a dependency that records an activity once the handler succeeds.

    Must run after get_current_user; anonymous requests are not recorded.

    Usage:
        @router.post(
            "/logout",
            dependencies=[Depends(log_activity(ActivityType.LOGOUT, "User logged out"))],
        )
    """

    async def dependency(
        request: Request,
        activity: ActivityLogger = Depends(get_activity_logger),
    ):
        yield

        identity = current_identity(request)
        if identity is None:
            return
        activity.record(
            identity.id,
            activity_type,
            description or f"User {activity_type.value}",
            request=request,
            metadata={"endpoint": request.url.path, "method": request.method},
            severity=severity,
        )

    return dependency
