"""
Shared test fixtures and utilities.

This module provides common test infrastructure used across all test modules:
in-memory stores, a wired service container and a TestClient around it.
"""

from datetime import datetime, timedelta, timezone
from typing import Callable
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from api.dependencies import ServiceContainer, reset_container, set_container
from api.middleware.rate_limit import reset_rate_limiters
from modules.activity.repository import InMemoryActivityStore
from modules.auth.passwords import PasswordHasher
from modules.auth.repository import InMemoryIdentityStore
from modules.auth.tokens import TokenService
from modules.realtime.service import LoggingBroadcaster
from shared.config import Settings
from shared.models import AccountStatus, Identity, Role


# Test secrets (only for testing)
TEST_JWT_SECRET = "test-secret-key-for-testing-only"
TEST_REFRESH_SECRET = "test-refresh-secret-for-testing-only"
TEST_PASSWORD = "correct-horse-battery"


@pytest.fixture(autouse=True)
def reset_global_state():
    """Reset the container singleton and rate limiters around each test."""
    reset_container()
    reset_rate_limiters()
    yield
    reset_container()
    reset_rate_limiters()


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        jwt_secret=TEST_JWT_SECRET,
        jwt_refresh_secret=TEST_REFRESH_SECRET,
        bcrypt_rounds=4,
        environment="test",
    )


@pytest.fixture
def password() -> str:
    """Password every identity from make_identity is created with by default."""
    return TEST_PASSWORD


@pytest.fixture
def identity_store() -> InMemoryIdentityStore:
    return InMemoryIdentityStore()


@pytest.fixture
def activity_store() -> InMemoryActivityStore:
    return InMemoryActivityStore()


@pytest.fixture
def broadcaster() -> MagicMock:
    return MagicMock(spec=LoggingBroadcaster)


@pytest.fixture
def hasher() -> PasswordHasher:
    return PasswordHasher(rounds=4)


@pytest.fixture
def tokens(settings: Settings) -> TokenService:
    return TokenService.from_settings(settings)


@pytest.fixture
def make_identity(
    identity_store: InMemoryIdentityStore,
    hasher: PasswordHasher,
) -> Callable[..., Identity]:
    """Factory creating identities in the in-memory store."""
    counter = {"n": 0}

    def _make(
        username: str = "",
        role: Role = Role.USER,
        status: AccountStatus = AccountStatus.ACTIVE,
        password: str = TEST_PASSWORD,
        **extra,
    ) -> Identity:
        counter["n"] += 1
        username = username or f"user{counter['n']}"
        return identity_store.create({
            "username": username,
            "email": f"{username}@example.com",
            "password_hash": hasher.hash(password),
            "role": role,
            "status": status,
            **extra,
        })

    return _make


@pytest.fixture
def auth_headers(tokens: TokenService) -> Callable[[Identity], dict[str, str]]:
    """Build Authorization headers for an identity."""

    def _headers(identity: Identity, extended: bool = False) -> dict[str, str]:
        token = tokens.issue(identity.id, identity.role, extended=extended)
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture
def container(
    settings: Settings,
    identity_store: InMemoryIdentityStore,
    activity_store: InMemoryActivityStore,
    broadcaster: MagicMock,
    tokens: TokenService,
) -> ServiceContainer:
    container = ServiceContainer(
        settings=settings,
        identity_store=identity_store,
        activity_store=activity_store,
        broadcaster=broadcaster,
        tokens=tokens,
    )
    set_container(container)
    return container


@pytest.fixture
def client(container: ServiceContainer):
    """TestClient over an app wired to the in-memory container."""
    from api.app import create_app

    with TestClient(create_app(), raise_server_exceptions=False) as test_client:
        yield test_client


@pytest.fixture
def tokens_issued_ago(settings: Settings) -> Callable[[float], TokenService]:
    """Token services whose clock is frozen `days` in the past."""

    def _tokens(days: float) -> TokenService:
        moment = datetime.now(timezone.utc) - timedelta(days=days)
        return TokenService.from_settings(settings, clock=lambda: moment)

    return _tokens
