"""
Authentication and authorization dependencies.

get_current_user authenticates the bearer token and attaches the identity
to request.state. require_role builds guards that read that identity.
"""

from typing import Optional, Union

from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from modules.auth.exceptions import ForbiddenError, MissingTokenError, UnauthenticatedError
from modules.auth.interfaces import IAuthService
from shared.models import Identity, Role

from ..dependencies import get_auth_service

# Bearer token extractor
bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    auth: IAuthService = Depends(get_auth_service),
) -> Identity:
    """
    Dependency that requires authentication.

    Use this for endpoints that require a logged-in identity.

    Usage:
        @router.get("/protected")
        async def protected_route(user: Identity = Depends(get_current_user)):
            return {"user_id": user.id}
    """
    if credentials is None:
        raise MissingTokenError()

    identity = await auth.authenticate(credentials.credentials)
    request.state.identity = identity
    return identity


def current_identity(request: Request) -> Optional[Identity]:
    """Identity attached by get_current_user, if any."""
    return getattr(request.state, "identity", None)


def require_role(*roles: Union[Role, str], message: str = ""):
    """
    Build a guard that only lets the given roles through.

    Must run after get_current_user. If no identity is attached, the guard
    rejects with 401 rather than letting the request through.

    Usage:
        router = APIRouter(dependencies=[
            Depends(get_current_user),
            Depends(require_role(Role.ADMIN)),
        ])
    """
    allowed = {
        (role.value if isinstance(role, Role) else str(role)).lower() for role in roles
    }

    async def guard(request: Request) -> Identity:
        identity = current_identity(request)
        if identity is None:
            raise UnauthenticatedError()

        # Roles are normalized on write; lower() covers rows written before that.
        user_role = identity.role.value.lower()
        if user_role not in allowed:
            raise ForbiddenError(allowed, user_role, message=message)
        return identity

    return guard


require_admin = require_role(Role.ADMIN, message="Admin access required")

# Type aliases for cleaner route definitions
RequireAuth = Depends(get_current_user)
RequireAdmin = Depends(require_admin)
