"""
Dependency injection setup for FastAPI.

This module provides the "container" that wires together all module
implementations. Each module exposes its service through an interface,
and this file creates the concrete implementations.

Tests build a container with in-memory stores and install it with
set_container().
"""

from typing import TYPE_CHECKING, Optional

from shared.config import Settings, get_settings

# Type checking imports for interfaces (avoids circular imports)
if TYPE_CHECKING:
    from modules.activity.interfaces import IActivityStore
    from modules.activity.service import ActivityLogger
    from modules.auth.interfaces import IIdentityStore
    from modules.auth.passwords import PasswordHasher
    from modules.auth.service import AuthService
    from modules.auth.tokens import TokenService
    from modules.realtime.interfaces import IBroadcaster
    from modules.users.service import UserAdminService


class ServiceContainer:
    """
    Container for all service instances.

    This class manages the lifecycle of service instances and their
    dependencies. Services are created lazily on first access, and any
    store or collaborator can be supplied up front instead.

    All services are cached as singletons within the container.
    Use reset() to clear all cached services for testing.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        identity_store: "IIdentityStore | None" = None,
        activity_store: "IActivityStore | None" = None,
        broadcaster: "IBroadcaster | None" = None,
        tokens: "TokenService | None" = None,
    ) -> None:
        self._settings = settings
        self._identity_store = identity_store
        self._activity_store = activity_store
        self._broadcaster = broadcaster
        self._tokens = tokens
        self._hasher: "PasswordHasher | None" = None
        self._auth_service: "AuthService | None" = None
        self._activity_logger: "ActivityLogger | None" = None
        self._user_admin_service: "UserAdminService | None" = None

    @property
    def settings(self) -> Settings:
        if self._settings is None:
            self._settings = get_settings()
        return self._settings

    @property
    def identity_store(self) -> "IIdentityStore":
        """Get the identity store (Supabase users table by default)."""
        if self._identity_store is None:
            from modules.auth.repository import IdentityRepository
            from shared.database import get_supabase_client
            self._identity_store = IdentityRepository(
                get_supabase_client(), table=self.settings.users_table
            )
        return self._identity_store

    @property
    def activity_store(self) -> "IActivityStore":
        """Get the activity store (Supabase activities table by default)."""
        if self._activity_store is None:
            from modules.activity.repository import ActivityRepository
            from shared.database import get_supabase_client
            self._activity_store = ActivityRepository(
                get_supabase_client(), table=self.settings.activities_table
            )
        return self._activity_store

    @property
    def broadcaster(self) -> "IBroadcaster":
        if self._broadcaster is None:
            from modules.realtime.service import LoggingBroadcaster
            self._broadcaster = LoggingBroadcaster()
        return self._broadcaster

    @property
    def tokens(self) -> "TokenService":
        """Get the token service. Raises ConfigurationError without secrets."""
        if self._tokens is None:
            from modules.auth.tokens import TokenService
            self._tokens = TokenService.from_settings(self.settings)
        return self._tokens

    @property
    def hasher(self) -> "PasswordHasher":
        if self._hasher is None:
            from modules.auth.passwords import PasswordHasher
            self._hasher = PasswordHasher(rounds=self.settings.bcrypt_rounds)
        return self._hasher

    @property
    def auth(self) -> "AuthService":
        """Get the auth service instance."""
        if self._auth_service is None:
            from modules.auth.service import AuthService
            self._auth_service = AuthService(
                identity_store=self.identity_store,
                tokens=self.tokens,
                hasher=self.hasher,
                broadcaster=self.broadcaster,
            )
        return self._auth_service

    @property
    def activity(self) -> "ActivityLogger":
        """Get the activity logger instance."""
        if self._activity_logger is None:
            from modules.activity.service import ActivityLogger
            self._activity_logger = ActivityLogger(
                store=self.activity_store,
                broadcaster=self.broadcaster,
            )
        return self._activity_logger

    @property
    def users(self) -> "UserAdminService":
        """Get the user administration service instance."""
        if self._user_admin_service is None:
            from modules.users.service import UserAdminService
            self._user_admin_service = UserAdminService(
                identity_store=self.identity_store,
                hasher=self.hasher,
            )
        return self._user_admin_service

    async def shutdown(self) -> None:
        """Flush pending activity writes, if the activity logger was ever built."""
        if self._activity_logger is not None:
            await self._activity_logger.drain()

    def reset(self) -> None:
        """
        Reset all cached services.

        Supplied stores are dropped too; the next access rebuilds defaults.
        """
        self._identity_store = None
        self._activity_store = None
        self._broadcaster = None
        self._tokens = None
        self._hasher = None
        self._auth_service = None
        self._activity_logger = None
        self._user_admin_service = None


# Module-level container singleton
_container: ServiceContainer | None = None


def get_container() -> ServiceContainer:
    """Get the singleton service container."""
    global _container
    if _container is None:
        _container = ServiceContainer()
    return _container


def set_container(container: ServiceContainer) -> None:
    """Install a pre-built container (tests, alternative wiring)."""
    global _container
    _container = container


def reset_container() -> None:
    """
    Reset the service container.

    This clears the cached container, so the next call to get_container()
    will create a fresh container with new service instances.
    """
    global _container
    _container = None


# FastAPI dependency functions
# These are the functions that should be used in route Depends() calls


def get_auth_service() -> "AuthService":
    """FastAPI dependency for auth service."""
    return get_container().auth


def get_activity_logger() -> "ActivityLogger":
    """FastAPI dependency for the activity logger."""
    return get_container().activity


def get_activity_store() -> "IActivityStore":
    """FastAPI dependency for reading the activity trail."""
    return get_container().activity_store


def get_user_admin_service() -> "UserAdminService":
    """FastAPI dependency for user administration."""
    return get_container().users
