import pytest
from pydantic import ValidationError

from modules.auth.models import (
    ChangePasswordRequest,
    LoginRequest,
    LoginResult,
    RefreshRequest,
    RegisterRequest,
    TokenClaims,
    TokenType,
)
from shared.models import Identity, Role


class TestTokenClaims:
    def test_create_access_claims(self):
        """Should parse an access token payload."""
        claims = TokenClaims(sub="user-123", role="admin", type="access", exp=2, iat=1)
        assert claims.identity_id == "user-123"
        assert claims.role is Role.ADMIN
        assert claims.type is TokenType.ACCESS

    def test_refresh_claims_have_no_role(self):
        claims = TokenClaims(sub="user-123", type="refresh", exp=2, iat=1)
        assert claims.role is None

    def test_claims_are_immutable(self):
        claims = TokenClaims(sub="user-123", type="access", role="user", exp=2, iat=1)
        with pytest.raises(ValidationError):
            claims.sub = "different-id"

    def test_unknown_type_rejected(self):
        with pytest.raises(ValidationError):
            TokenClaims(sub="user-123", type="session", exp=2, iat=1)


class TestRequests:
    def test_login_accepts_camel_case(self):
        request = LoginRequest.model_validate({
            "email": "a@example.com",
            "password": "x",
            "rememberMe": True,
        })
        assert request.remember_me is True

    def test_login_defaults_remember_me(self):
        assert LoginRequest(email="a@example.com", password="x").remember_me is False

    def test_register_rejects_short_password(self):
        with pytest.raises(ValidationError):
            RegisterRequest(username="alice", email="a@example.com", password="123")

    def test_register_ignores_role(self):
        request = RegisterRequest.model_validate({
            "username": "alice",
            "email": "a@example.com",
            "password": "secret123",
            "role": "admin",
        })
        assert not hasattr(request, "role")

    def test_refresh_alias(self):
        assert RefreshRequest.model_validate({"refreshToken": "abc"}).refresh_token == "abc"

    def test_change_password_aliases(self):
        request = ChangePasswordRequest.model_validate({
            "currentPassword": "old-pass",
            "newPassword": "new-pass",
        })
        assert request.current_password == "old-pass"
        assert request.new_password == "new-pass"


class TestLoginResult:
    def test_serializes_refresh_token_alias(self):
        result = LoginResult(
            token="access",
            refresh_token="refresh",
            user=Identity(id="user-123", username="alice", email="alice@example.com"),
        )
        dumped = result.model_dump(by_alias=True)
        assert dumped["refreshToken"] == "refresh"
        assert dumped["user"]["id"] == "user-123"
