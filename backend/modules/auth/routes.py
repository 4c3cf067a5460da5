"""
Auth API endpoints.

Registration, login, token refresh, logout, profile and password changes.
"""

from fastapi import APIRouter, Depends, Request

from api.dependencies import get_activity_logger, get_auth_service
from api.middleware.activity import log_activity
from api.middleware.auth import get_current_user
from api.middleware.rate_limit import rate_limit
from modules.activity.models import ActivityType, Severity
from modules.activity.service import ActivityLogger, client_ip
from shared.models import ApiResponse, Identity

from .interfaces import IAuthService
from .models import (
    ChangePasswordRequest,
    ClientInfo,
    LoginRequest,
    LoginResult,
    RefreshRequest,
    RefreshResult,
    RegisterRequest,
    UpdateProfileRequest,
)

router = APIRouter()

register_limit = rate_limit(
    60 * 60 * 1000,  # 1 hour
    5,
    "Too many registration attempts, please try again later",
)
login_limit = rate_limit(
    15 * 60 * 1000,  # 15 minutes
    10,
    "Too many login attempts, please try again later",
)


@router.post(
    "/register",
    response_model=ApiResponse[Identity],
    status_code=201,
    dependencies=[Depends(register_limit)],
)
async def register(
    body: RegisterRequest,
    request: Request,
    auth: IAuthService = Depends(get_auth_service),
    activity: ActivityLogger = Depends(get_activity_logger),
) -> ApiResponse[Identity]:
    """Create a new account with the user role."""
    identity = await auth.register(body.username, body.email, body.password)
    activity.record(
        identity.id,
        ActivityType.REGISTER,
        f"New account registered: {identity.username}",
        request=request,
    )
    return ApiResponse(message="Signup successful", data=identity)


@router.post(
    "/login",
    response_model=ApiResponse[LoginResult],
    dependencies=[Depends(login_limit)],
)
async def login(
    body: LoginRequest,
    request: Request,
    auth: IAuthService = Depends(get_auth_service),
    activity: ActivityLogger = Depends(get_activity_logger),
) -> ApiResponse[LoginResult]:
    """
    Log in with email and password.

    Returns an access token (30 days with rememberMe, 7 days otherwise)
    and a refresh token.
    """
    client = ClientInfo(ip=client_ip(request), user_agent=request.headers.get("user-agent"))
    result = await auth.login(body.email, body.password, body.remember_me, client)
    activity.record(
        result.user.id,
        ActivityType.LOGIN,
        "User logged in",
        request=request,
        metadata={"remember_me": body.remember_me},
    )
    return ApiResponse(message="Login successful", data=result)


@router.post("/refresh-token", response_model=ApiResponse[RefreshResult])
async def refresh_token(
    body: RefreshRequest,
    auth: IAuthService = Depends(get_auth_service),
) -> ApiResponse[RefreshResult]:
    """Exchange a refresh token for a new access token."""
    token = await auth.refresh(body.refresh_token)
    return ApiResponse(message="Token refreshed", data=RefreshResult(token=token))


@router.post(
    "/logout",
    response_model=ApiResponse[None],
    dependencies=[
        Depends(get_current_user),
        Depends(log_activity(ActivityType.LOGOUT, "User logged out")),
    ],
)
async def logout(
    user: Identity = Depends(get_current_user),
    auth: IAuthService = Depends(get_auth_service),
) -> ApiResponse[None]:
    """Mark the current identity offline."""
    await auth.logout(user)
    return ApiResponse(message="Logout successful")


@router.get("/profile", response_model=ApiResponse[Identity])
async def get_profile(
    user: Identity = Depends(get_current_user),
) -> ApiResponse[Identity]:
    """Get the current identity's profile."""
    return ApiResponse(data=user)


@router.put(
    "/profile",
    response_model=ApiResponse[Identity],
    dependencies=[
        Depends(get_current_user),
        Depends(log_activity(ActivityType.PROFILE_UPDATE, "User updated profile")),
    ],
)
async def update_profile(
    body: UpdateProfileRequest,
    user: Identity = Depends(get_current_user),
    auth: IAuthService = Depends(get_auth_service),
) -> ApiResponse[Identity]:
    """Change the current identity's username and/or email."""
    updated = await auth.update_profile(user, username=body.username, email=body.email)
    return ApiResponse(message="Profile updated successfully", data=updated)


@router.put("/change-password", response_model=ApiResponse[None])
async def change_password(
    body: ChangePasswordRequest,
    request: Request,
    user: Identity = Depends(get_current_user),
    auth: IAuthService = Depends(get_auth_service),
    activity: ActivityLogger = Depends(get_activity_logger),
) -> ApiResponse[None]:
    """Change the current identity's password."""
    await auth.change_password(user, body.current_password, body.new_password)
    activity.record(
        user.id,
        ActivityType.PASSWORD_CHANGE,
        "Changed password",
        request=request,
        severity=Severity.MEDIUM,
    )
    return ApiResponse(message="Password changed successfully")
