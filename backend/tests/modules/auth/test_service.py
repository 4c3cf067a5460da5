import pytest
from unittest.mock import MagicMock, patch

from modules.auth.exceptions import (
    AccountNotFoundError,
    AccountSuspendedError,
    ExpiredTokenError,
    InvalidCredentialsError,
    InvalidRefreshTokenError,
    InvalidTokenError,
    MissingTokenError,
)
from modules.auth.models import ClientInfo
from modules.auth.service import AuthService, is_active
from shared.exceptions import ConflictError, ValidationError
from shared.models import AccountStatus, Role


@pytest.fixture
def service(identity_store, tokens, hasher, broadcaster):
    return AuthService(identity_store, tokens, hasher=hasher, broadcaster=broadcaster)


class TestIsActive:
    @pytest.mark.parametrize("status", ["active", "Active", "ACTIVE", AccountStatus.ACTIVE])
    def test_active_in_any_case(self, status):
        assert is_active(status) is True

    @pytest.mark.parametrize(
        "status", ["suspended", "Suspended", "inactive", AccountStatus.SUSPENDED, ""]
    )
    def test_not_active(self, status):
        assert is_active(status) is False


class TestAuthenticate:
    @pytest.mark.asyncio
    async def test_valid_token(self, service, tokens, make_identity):
        """Should return the identity behind a valid token."""
        identity = make_identity("alice")

        result = await service.authenticate(tokens.issue(identity.id, identity.role))

        assert result.id == identity.id
        assert result.username == "alice"

    @pytest.mark.asyncio
    async def test_marks_identity_online(self, service, tokens, make_identity, identity_store, broadcaster):
        """Authentication should refresh last_activity and broadcast coming online."""
        identity = make_identity()

        result = await service.authenticate(tokens.issue(identity.id, identity.role))

        assert result.is_online is True
        assert identity_store.find_by_id(identity.id).last_activity is not None
        broadcaster.user_status_changed.assert_called_once_with(identity.id, True)

    @pytest.mark.asyncio
    async def test_no_broadcast_when_already_online(self, service, tokens, make_identity, broadcaster):
        identity = make_identity(is_online=True)

        await service.authenticate(tokens.issue(identity.id, identity.role))

        broadcaster.user_status_changed.assert_not_called()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("token", [None, ""])
    async def test_missing_token(self, service, token):
        """Should raise MissingTokenError for an absent token."""
        with pytest.raises(MissingTokenError):
            await service.authenticate(token)

    @pytest.mark.asyncio
    async def test_invalid_token(self, service):
        with pytest.raises(InvalidTokenError):
            await service.authenticate("not-a-valid-token")

    @pytest.mark.asyncio
    async def test_expired_token(self, service, tokens_issued_ago, make_identity):
        identity = make_identity()
        token = tokens_issued_ago(8).issue(identity.id, identity.role)

        with pytest.raises(ExpiredTokenError):
            await service.authenticate(token)

    @pytest.mark.asyncio
    async def test_deleted_identity(self, service, tokens):
        """A valid token for a vanished identity should be rejected."""
        with pytest.raises(AccountNotFoundError):
            await service.authenticate(tokens.issue("ghost", Role.USER))

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", ["suspended", "Suspended", "SUSPENDED", "Inactive"])
    async def test_non_active_identity(self, service, tokens, identity_store, status):
        """Legacy mixed-case statuses should still block authentication."""
        identity_store.insert_raw({
            "id": "legacy-1",
            "username": "legacy",
            "email": "legacy@example.com",
            "password_hash": "x",
            "role": "User",
            "status": status,
        })

        with pytest.raises(AccountSuspendedError) as exc_info:
            await service.authenticate(tokens.issue("legacy-1", Role.USER))
        assert exc_info.value.status == status.lower()

    @pytest.mark.asyncio
    async def test_legacy_active_identity(self, service, tokens, identity_store):
        identity_store.insert_raw({
            "id": "legacy-2",
            "username": "legacy2",
            "email": "legacy2@example.com",
            "password_hash": "x",
            "role": "ADMIN",
            "status": "Active",
        })

        identity = await service.authenticate(tokens.issue("legacy-2", Role.ADMIN))
        assert identity.role is Role.ADMIN

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", ["deleted", "Deleted", "banned"])
    async def test_unknown_status_blocks_authentication(self, service, tokens, identity_store, status):
        identity_store.insert_raw({
            "id": "legacy-3",
            "username": "legacy3",
            "email": "legacy3@example.com",
            "password_hash": "x",
            "role": "user",
            "status": status,
        })

        with pytest.raises(AccountSuspendedError) as exc_info:
            await service.authenticate(tokens.issue("legacy-3", Role.USER))
        assert exc_info.value.status_code == 401

    @pytest.mark.asyncio
    async def test_role_comes_from_identity_not_token(self, service, tokens, make_identity):
        """The attached identity carries the stored role."""
        identity = make_identity(role=Role.USER)

        result = await service.authenticate(tokens.issue(identity.id, Role.ADMIN))

        assert result.role is Role.USER

    @pytest.mark.asyncio
    async def test_activity_write_failure_does_not_fail(self, service, tokens, make_identity, identity_store):
        """A failed last_activity write should be logged, not raised."""
        identity = make_identity()

        with patch.object(identity_store, "update_by_id", side_effect=RuntimeError("db down")), \
             patch("modules.auth.service.logger") as mock_logger:
            result = await service.authenticate(tokens.issue(identity.id, identity.role))

        assert result.id == identity.id
        mock_logger.warning.assert_called_once()

    @pytest.mark.asyncio
    async def test_broadcast_failure_does_not_fail(self, service, tokens, make_identity, broadcaster):
        identity = make_identity()
        broadcaster.user_status_changed.side_effect = RuntimeError("socket closed")

        result = await service.authenticate(tokens.issue(identity.id, identity.role))

        assert result.id == identity.id


class TestRegister:
    @pytest.mark.asyncio
    async def test_creates_active_user(self, service, identity_store, hasher):
        identity = await service.register("newbie", "Newbie@Example.com", "secret123")

        assert identity.role is Role.USER
        assert identity.status is AccountStatus.ACTIVE
        assert identity.email == "newbie@example.com"
        record = identity_store.find_by_id_with_secret(identity.id)
        assert hasher.verify("secret123", record.password_hash)

    @pytest.mark.asyncio
    async def test_duplicate_email(self, service, make_identity):
        make_identity("alice")
        with pytest.raises(ConflictError, match="email"):
            await service.register("alice2", "ALICE@example.com", "secret123")

    @pytest.mark.asyncio
    async def test_duplicate_username(self, service, make_identity):
        make_identity("alice")
        with pytest.raises(ConflictError, match="Username"):
            await service.register("alice", "other@example.com", "secret123")


class TestLogin:
    @pytest.mark.asyncio
    async def test_successful_login(self, service, tokens, make_identity, identity_store, broadcaster, password):
        """Should issue tokens and record login metadata."""
        identity = make_identity("alice")
        client = ClientInfo(ip="10.0.0.1", user_agent="pytest")

        result = await service.login("alice@example.com", password, client=client)

        assert tokens.verify(result.token).identity_id == identity.id
        assert tokens.verify_refresh(result.refresh_token).identity_id == identity.id
        assert result.user.login_count == 1
        assert result.user.is_online is True
        assert result.user.last_login_ip == "10.0.0.1"
        assert result.user.last_login_user_agent == "pytest"
        broadcaster.user_status_changed.assert_called_once_with(identity.id, True)

    @pytest.mark.asyncio
    async def test_remember_me_extends_token(self, service, tokens, make_identity, password):
        make_identity("alice")

        result = await service.login("alice@example.com", password, remember_me=True)

        claims = tokens.verify(result.token)
        assert claims.exp - claims.iat == 30 * 24 * 3600

    @pytest.mark.asyncio
    async def test_email_is_case_insensitive(self, service, make_identity, password):
        make_identity("alice")
        result = await service.login("ALICE@Example.com", password)
        assert result.user.username == "alice"

    @pytest.mark.asyncio
    async def test_wrong_password(self, service, make_identity):
        make_identity("alice")
        with pytest.raises(InvalidCredentialsError):
            await service.login("alice@example.com", "wrong-password")

    @pytest.mark.asyncio
    async def test_unknown_email(self, service, password):
        with pytest.raises(InvalidCredentialsError):
            await service.login("nobody@example.com", password)

    @pytest.mark.asyncio
    async def test_suspended_account(self, service, make_identity, password):
        make_identity("alice", status=AccountStatus.SUSPENDED)
        with pytest.raises(AccountSuspendedError):
            await service.login("alice@example.com", password)


class TestRefresh:
    @pytest.mark.asyncio
    async def test_issues_new_access_token(self, service, tokens, make_identity):
        identity = make_identity(role=Role.ADMIN)

        token = await service.refresh(tokens.issue_refresh(identity.id))

        claims = tokens.verify(token)
        assert claims.identity_id == identity.id
        assert claims.role is Role.ADMIN

    @pytest.mark.asyncio
    async def test_inactive_identity(self, service, tokens, make_identity):
        identity = make_identity(status=AccountStatus.INACTIVE)
        with pytest.raises(InvalidRefreshTokenError):
            await service.refresh(tokens.issue_refresh(identity.id))

    @pytest.mark.asyncio
    async def test_unknown_identity(self, service, tokens):
        with pytest.raises(InvalidRefreshTokenError):
            await service.refresh(tokens.issue_refresh("ghost"))


class TestLogout:
    @pytest.mark.asyncio
    async def test_marks_offline(self, service, make_identity, identity_store, broadcaster):
        identity = make_identity(is_online=True)

        await service.logout(identity)

        assert identity_store.find_by_id(identity.id).is_online is False
        broadcaster.user_status_changed.assert_called_once_with(identity.id, False)

    @pytest.mark.asyncio
    async def test_without_broadcaster(self, identity_store, tokens, hasher, make_identity):
        service = AuthService(identity_store, tokens, hasher=hasher)
        identity = make_identity(is_online=True)

        await service.logout(identity)

        assert identity_store.find_by_id(identity.id).is_online is False


class TestUpdateProfile:
    @pytest.mark.asyncio
    async def test_changes_username(self, service, make_identity):
        identity = make_identity("alice")
        updated = await service.update_profile(identity, username="alicia")
        assert updated.username == "alicia"

    @pytest.mark.asyncio
    async def test_no_changes(self, service, make_identity):
        identity = make_identity("alice")
        with pytest.raises(ValidationError):
            await service.update_profile(identity, username="alice", email="ALICE@example.com")

    @pytest.mark.asyncio
    async def test_email_taken(self, service, make_identity):
        make_identity("bob")
        identity = make_identity("alice")
        with pytest.raises(ConflictError):
            await service.update_profile(identity, email="bob@example.com")


class TestChangePassword:
    @pytest.mark.asyncio
    async def test_changes_password(self, service, make_identity, identity_store, hasher, password):
        identity = make_identity()

        await service.change_password(identity, password, "brand-new-pass")

        record = identity_store.find_by_id_with_secret(identity.id)
        assert hasher.verify("brand-new-pass", record.password_hash)

    @pytest.mark.asyncio
    async def test_wrong_current_password(self, service, make_identity):
        identity = make_identity()
        with pytest.raises(InvalidCredentialsError, match="Current password"):
            await service.change_password(identity, "not-it", "brand-new-pass")

    @pytest.mark.asyncio
    async def test_same_password(self, service, make_identity, password):
        identity = make_identity()
        with pytest.raises(ValidationError, match="different"):
            await service.change_password(identity, password, password)

    @pytest.mark.asyncio
    async def test_too_short(self, service, make_identity, password):
        identity = make_identity()
        with pytest.raises(ValidationError, match="at least 6"):
            await service.change_password(identity, password, "abc")


class TestWithMockStore:
    """AuthService against a bare mock of IIdentityStore."""

    @pytest.mark.asyncio
    async def test_authenticate_looks_up_subject(self, tokens):
        store = MagicMock()
        store.find_by_id.return_value = None
        service = AuthService(store, tokens)

        with pytest.raises(AccountNotFoundError):
            await service.authenticate(tokens.issue("user-123", Role.USER))

        store.find_by_id.assert_called_once_with("user-123")
