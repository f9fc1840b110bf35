"""
Authentication Tests for Hive Portal.

Tests for:
- JWT creation and decoding
- Redis-backed sessions
- Sign-in and the admin role check
"""

from datetime import timedelta
from unittest.mock import AsyncMock, patch

import pytest

from portal.core.exceptions import AuthError
from portal.models import User
from portal.services import auth_service
from portal.services.auth_service import (
    authenticate_user,
    create_access_token,
    create_admin,
    create_session,
    decode_token,
    get_current_user_from_session,
    invalidate_session,
    is_admin,
    validate_session,
)


@pytest.fixture
def mock_redis():
    """Redis client double patched into the session helpers."""
    client = AsyncMock()
    with patch.object(auth_service, "get_redis", new=AsyncMock(return_value=client)):
        yield client


@pytest.fixture
def make_user(store):
    async def _make(**overrides) -> User:
        values = {
            "email": "admin@hive.example",
            "password_hash": "hashed",
            "display_name": "管理员",
            "role": "admin",
            "is_active": True,
        }
        values.update(overrides)
        return await store.insert(User, values)

    return _make


# ============== Tokens ==============

class TestTokens:
    """Tests for JWT access tokens."""

    def test_token_round_trip(self):
        token = create_access_token({"sub": "user-1"}, expires_delta=timedelta(minutes=5))

        payload = decode_token(token)

        assert payload["sub"] == "user-1"
        assert "exp" in payload

    def test_expired_token_rejected(self):
        token = create_access_token({"sub": "user-1"}, expires_delta=timedelta(minutes=-1))

        with pytest.raises(AuthError) as exc_info:
            decode_token(token)

        assert exc_info.value.status_code == 401

    def test_garbage_token_rejected(self):
        with pytest.raises(AuthError):
            decode_token("not.a.token")


# ============== Sessions ==============

class TestSessions:
    """Tests for Redis-backed admin sessions."""

    @pytest.mark.asyncio
    async def test_create_session(self, mock_redis):
        session_id = await create_session("user-1")

        assert session_id
        mock_redis.hset.assert_called_once()
        key = mock_redis.hset.call_args.args[0]
        assert key == f"session:{session_id}"
        assert mock_redis.hset.call_args.kwargs["mapping"]["user_id"] == "user-1"
        mock_redis.expire.assert_called_once()

    @pytest.mark.asyncio
    async def test_validate_session_refreshes_expiry(self, mock_redis):
        mock_redis.hgetall.return_value = {"user_id": "user-1"}

        user_id = await validate_session("abc")

        assert user_id == "user-1"
        mock_redis.expire.assert_called_once()

    @pytest.mark.asyncio
    async def test_validate_unknown_session(self, mock_redis):
        mock_redis.hgetall.return_value = {}

        with pytest.raises(AuthError):
            await validate_session("abc")

    @pytest.mark.asyncio
    async def test_invalidate_session(self, mock_redis):
        await invalidate_session("abc")

        mock_redis.delete.assert_called_once_with("session:abc")

    @pytest.mark.asyncio
    async def test_session_resolves_to_user(self, mock_redis, db, make_user):
        user = await make_user()
        mock_redis.hgetall.return_value = {"user_id": user.id}

        resolved = await get_current_user_from_session(db, "abc")

        assert resolved.id == user.id

    @pytest.mark.asyncio
    async def test_session_for_deleted_user_is_dropped(self, mock_redis, db):
        mock_redis.hgetall.return_value = {"user_id": "gone"}

        with pytest.raises(AuthError):
            await get_current_user_from_session(db, "abc")

        mock_redis.delete.assert_called_once_with("session:abc")


# ============== Sign-in ==============

class TestAuthenticate:
    """Tests for authenticate_user."""

    @pytest.mark.asyncio
    async def test_authenticate_ignores_email_case(self, db, make_user):
        user = await make_user()

        with patch.object(auth_service, "verify_password", return_value=True):
            signed_in = await authenticate_user(db, " Admin@Hive.Example ", "secret")

        assert signed_in.id == user.id

    @pytest.mark.asyncio
    async def test_wrong_password(self, db, make_user):
        await make_user()

        with patch.object(auth_service, "verify_password", return_value=False):
            with pytest.raises(AuthError) as exc_info:
                await authenticate_user(db, "admin@hive.example", "wrong")

        assert exc_info.value.status_code == 401

    @pytest.mark.asyncio
    async def test_unknown_email(self, db):
        with pytest.raises(AuthError):
            await authenticate_user(db, "nobody@hive.example", "secret")

    @pytest.mark.asyncio
    async def test_disabled_account(self, db, make_user):
        await make_user(is_active=False)

        with patch.object(auth_service, "verify_password", return_value=True):
            with pytest.raises(AuthError) as exc_info:
                await authenticate_user(db, "admin@hive.example", "secret")

        assert exc_info.value.status_code == 403

    @pytest.mark.asyncio
    async def test_create_admin_promotes_existing_user(self, db, make_user):
        user = await make_user(role="editor")

        with patch.object(auth_service, "get_password_hash", return_value="new-hash"):
            promoted = await create_admin(db, "admin@hive.example", "new-password")

        assert promoted.id == user.id
        assert promoted.role == "admin"
        assert promoted.password_hash == "new-hash"

    @pytest.mark.asyncio
    async def test_create_admin_new_account(self, db):
        with patch.object(auth_service, "get_password_hash", return_value="hash"):
            admin = await create_admin(db, "new@hive.example", "password", "新管理员")

        assert admin.role == "admin"
        assert admin.is_active is True
        assert is_admin(admin)


# ============== Role Check ==============

class TestIsAdmin:

    def test_admin_role(self):
        assert is_admin(User(role="admin", is_active=True))

    def test_other_roles(self):
        assert not is_admin(User(role="editor", is_active=True))
        assert not is_admin(User(role="user", is_active=True))

    def test_inactive_admin(self):
        assert not is_admin(User(role="admin", is_active=False))

    def test_no_user(self):
        assert not is_admin(None)
