"""
User administration API endpoints.

Every route is rate limited, authenticated and admin only.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

from api.dependencies import get_activity_logger, get_activity_store, get_user_admin_service
from api.middleware.activity import log_activity
from api.middleware.auth import get_current_user, require_admin
from api.middleware.rate_limit import rate_limit
from modules.activity.interfaces import IActivityStore
from modules.activity.models import ActivityListResponse, ActivityType, Severity
from modules.activity.service import ActivityLogger
from shared.models import AccountStatus, ApiResponse, Identity, Role

from .models import (
    BulkActionRequest,
    BulkActionResult,
    CreateUserRequest,
    UpdateUserRequest,
    UserListResponse,
    UserStats,
)
from .service import UserAdminService

users_limit = rate_limit(
    15 * 60 * 1000,  # 15 minutes
    50,
    "Too many user operations",
)

router = APIRouter(
    dependencies=[
        Depends(users_limit),
        Depends(get_current_user),
        Depends(require_admin),
    ],
)


@router.get("/activity", response_model=ApiResponse[ActivityListResponse])
async def list_activity(
    limit: int = Query(default=50, ge=1, le=200, description="Maximum records"),
    user_id: Optional[str] = Query(default=None, alias="userId"),
    activity_type: Optional[ActivityType] = Query(default=None, alias="type"),
    store: IActivityStore = Depends(get_activity_store),
) -> ApiResponse[ActivityListResponse]:
    """Recent activity records, newest first."""
    items = store.list_recent(limit=limit, user_id=user_id, activity_type=activity_type)
    return ApiResponse(data=ActivityListResponse(items=items, count=len(items)))


@router.get("", response_model=ApiResponse[UserListResponse])
async def list_users(
    page: int = Query(default=1, ge=1, description="Page number (1-indexed)"),
    page_size: int = Query(default=20, ge=1, le=100, alias="limit", description="Items per page"),
    search: Optional[str] = Query(default=None, max_length=100),
    role: Optional[Role] = Query(default=None),
    status: Optional[AccountStatus] = Query(default=None),
    service: UserAdminService = Depends(get_user_admin_service),
) -> ApiResponse[UserListResponse]:
    """List identities with pagination, search and filters."""
    result = await service.list_users(page, page_size, search, role, status)
    return ApiResponse(data=result)


@router.get("/stats", response_model=ApiResponse[UserStats])
async def user_stats(
    service: UserAdminService = Depends(get_user_admin_service),
) -> ApiResponse[UserStats]:
    return ApiResponse(data=await service.stats())


@router.get("/{user_id}", response_model=ApiResponse[Identity])
async def get_user(
    user_id: str,
    service: UserAdminService = Depends(get_user_admin_service),
) -> ApiResponse[Identity]:
    return ApiResponse(data=await service.get_user(user_id))


@router.post(
    "",
    response_model=ApiResponse[Identity],
    status_code=201,
    dependencies=[
        Depends(log_activity(ActivityType.ADMIN_ACTION, "Admin created a user", Severity.HIGH)),
    ],
)
async def create_user(
    body: CreateUserRequest,
    service: UserAdminService = Depends(get_user_admin_service),
) -> ApiResponse[Identity]:
    identity = await service.create_user(body)
    return ApiResponse(message="User created successfully", data=identity)


@router.put(
    "/{user_id}",
    response_model=ApiResponse[Identity],
    dependencies=[
        Depends(log_activity(ActivityType.ADMIN_ACTION, "Admin updated a user", Severity.HIGH)),
    ],
)
async def update_user(
    user_id: str,
    body: UpdateUserRequest,
    actor: Identity = Depends(get_current_user),
    service: UserAdminService = Depends(get_user_admin_service),
) -> ApiResponse[Identity]:
    identity = await service.update_user(actor, user_id, body)
    return ApiResponse(message="User updated successfully", data=identity)


@router.patch(
    "/{user_id}/toggle-status",
    response_model=ApiResponse[Identity],
    dependencies=[
        Depends(log_activity(ActivityType.ADMIN_ACTION, "Admin toggled online status", Severity.MEDIUM)),
    ],
)
async def toggle_online_status(
    user_id: str,
    service: UserAdminService = Depends(get_user_admin_service),
) -> ApiResponse[Identity]:
    """Flip an identity's online flag."""
    identity = await service.toggle_online(user_id)
    presence = "online" if identity.is_online else "offline"
    return ApiResponse(message=f"User {presence} status updated", data=identity)


@router.delete(
    "/{user_id}",
    response_model=ApiResponse[None],
    dependencies=[
        Depends(log_activity(ActivityType.ADMIN_ACTION, "Admin deleted a user", Severity.HIGH)),
    ],
)
async def delete_user(
    user_id: str,
    permanent: bool = Query(default=False),
    actor: Identity = Depends(get_current_user),
    service: UserAdminService = Depends(get_user_admin_service),
) -> ApiResponse[None]:
    """Deactivate an identity, or delete it with ?permanent=true."""
    await service.delete_user(actor, user_id, permanent=permanent)
    outcome = "permanently deleted" if permanent else "deactivated"
    return ApiResponse(message=f"User {outcome} successfully")


@router.post("/bulk-action", response_model=ApiResponse[BulkActionResult])
async def bulk_action(
    body: BulkActionRequest,
    request: Request,
    actor: Identity = Depends(get_current_user),
    service: UserAdminService = Depends(get_user_admin_service),
    activity: ActivityLogger = Depends(get_activity_logger),
) -> ApiResponse[BulkActionResult]:
    """Apply an action to several identities. The caller is never affected."""
    result = await service.bulk_action(actor, body.user_ids, body.action, body.data.role)
    activity.record(
        actor.id,
        ActivityType.ADMIN_ACTION,
        f"Bulk action {body.action.value}: {result.modified_count} users",
        request=request,
        metadata={
            "action": body.action.value,
            "user_ids": body.user_ids,
            "modified_count": result.modified_count,
        },
        severity=Severity.HIGH,
    )
    return ApiResponse(
        message=f"Bulk action completed: {result.modified_count} users updated",
        data=result,
    )
