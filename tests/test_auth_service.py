"""
Tests for AuthService — signup, login, refresh, logout and account deletion.
"""

import uuid
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest

from auth.errors import AuthErrorCode
from auth.jwt import TokenService
from auth.service import (
    INVALID_CREDENTIALS_MESSAGE,
    MALFORMED_SUBJECT_MESSAGE,
    USER_NOT_FOUND_MESSAGE,
    USERNAME_TAKEN_MESSAGE,
    AuthService,
)
from conftest import TEST_SECRET, make_account
from database.accounts import ConstraintViolation
from utils.schemas import LoginRequest, RegisterRequest


@pytest.fixture
def service(store, tokens):
    return AuthService(store, tokens)


def _register(username="alice", password="secret123", **extra):
    return RegisterRequest(username=username, password=password, **extra)


class TestRegister:
    @pytest.mark.asyncio
    async def test_success_returns_token_and_id(self, service, store, tokens):
        outcome = await service.register(_register(name="Alice", last_name="Liddell"))

        assert outcome.success is True
        assert outcome.error is None
        assert outcome.user_id in store.by_id
        claims = tokens.validate(outcome.token)
        assert claims.user_id == str(outcome.user_id)
        assert claims.username == "alice"

        account = store.by_id[outcome.user_id]
        assert account.name == "Alice"
        assert account.last_name == "Liddell"
        assert account.password_hash != "secret123"

    @pytest.mark.asyncio
    async def test_duplicate_username(self, service, store):
        await service.register(_register())
        outcome = await service.register(_register(password="another1"))

        assert outcome.success is False
        assert outcome.error == AuthErrorCode.USERNAME_TAKEN
        assert outcome.message == USERNAME_TAKEN_MESSAGE
        assert outcome.token is None
        assert await store.count_all() == 1

    @pytest.mark.asyncio
    async def test_lost_insert_race_maps_to_username_taken(self, tokens):
        racing = SimpleNamespace(
            find_by_username=AsyncMock(return_value=None),
            insert=AsyncMock(side_effect=ConstraintViolation("alice")),
        )
        outcome = await AuthService(racing, tokens).register(_register())

        assert outcome.success is False
        assert outcome.error == AuthErrorCode.USERNAME_TAKEN

    @pytest.mark.asyncio
    async def test_store_failure_propagates(self, tokens):
        broken = SimpleNamespace(
            find_by_username=AsyncMock(side_effect=ConnectionError("db down")),
        )
        with pytest.raises(ConnectionError):
            await AuthService(broken, tokens).register(_register())


class TestLogin:
    @pytest.mark.asyncio
    async def test_success(self, service):
        registered = await service.register(_register())
        outcome = await service.login(LoginRequest(username="alice", password="secret123"))

        assert outcome.success is True
        assert outcome.user_id == registered.user_id
        assert outcome.token

    @pytest.mark.asyncio
    async def test_unknown_user_and_wrong_password_look_identical(self, service):
        await service.register(_register())
        unknown = await service.login(LoginRequest(username="nobody", password="secret123"))
        wrong = await service.login(LoginRequest(username="alice", password="wrong-pass"))

        for outcome in (unknown, wrong):
            assert outcome.success is False
            assert outcome.error == AuthErrorCode.INVALID_CREDENTIALS
            assert outcome.message == INVALID_CREDENTIALS_MESSAGE
        assert unknown.model_dump() == wrong.model_dump()

    @pytest.mark.asyncio
    async def test_corrupt_stored_hash_is_invalid_credentials(self, service, store):
        account = make_account("carol")
        account.password_hash = "%%% not base64 %%%"
        await store.insert(account)

        outcome = await service.login(LoginRequest(username="carol", password="secret123"))
        assert outcome.error == AuthErrorCode.INVALID_CREDENTIALS


class TestRefreshToken:
    @pytest.mark.asyncio
    async def test_fresh_token_for_valid_token(self, service, tokens):
        registered = await service.register(_register())
        outcome = await service.refresh_token(registered.token)

        assert outcome.success is True
        assert outcome.user_id == registered.user_id
        assert tokens.validate(outcome.token, verify_exp=True) is not None

    @pytest.mark.asyncio
    async def test_expired_token_can_be_refreshed(self, store, tokens):
        account = make_account()
        await store.insert(account)
        past = datetime.now(timezone.utc) - timedelta(days=30)
        expired = TokenService(TEST_SECRET, clock=lambda: past).issue(account)

        outcome = await AuthService(store, tokens).refresh_token(expired)

        assert outcome.success is True
        assert tokens.validate(outcome.token, verify_exp=True) is not None

    @pytest.mark.asyncio
    async def test_forged_token_rejected(self, service):
        registered = await service.register(_register())
        forged = TokenService("some-other-secret-of-sufficient-length").issue(
            SimpleNamespace(user_id=registered.user_id, username="alice")
        )
        outcome = await service.refresh_token(forged)

        assert outcome.success is False
        assert outcome.error == AuthErrorCode.INVALID_TOKEN

    @pytest.mark.asyncio
    async def test_garbage_token(self, service):
        outcome = await service.refresh_token("garbage")
        assert outcome.error == AuthErrorCode.INVALID_TOKEN

    @pytest.mark.asyncio
    async def test_subject_not_a_uuid(self, service, tokens):
        token = tokens.issue(SimpleNamespace(user_id="not-a-uuid", username="alice"))
        outcome = await service.refresh_token(token)

        assert outcome.error == AuthErrorCode.INVALID_TOKEN
        assert outcome.message == MALFORMED_SUBJECT_MESSAGE

    @pytest.mark.asyncio
    async def test_deleted_account_cannot_refresh(self, service):
        registered = await service.register(_register())
        await service.delete_account(registered.user_id)

        outcome = await service.refresh_token(registered.token)
        assert outcome.success is False
        assert outcome.error == AuthErrorCode.USER_NOT_FOUND
        assert outcome.message == USER_NOT_FOUND_MESSAGE


class TestDeleteAndLogout:
    @pytest.mark.asyncio
    async def test_delete_removes_account(self, service, store):
        registered = await service.register(_register())
        outcome = await service.delete_account(registered.user_id)

        assert outcome.success is True
        assert outcome.token is None
        assert await store.find_by_id(registered.user_id) is None

        login = await service.login(LoginRequest(username="alice", password="secret123"))
        assert login.error == AuthErrorCode.INVALID_CREDENTIALS

    @pytest.mark.asyncio
    async def test_delete_unknown_account(self, service):
        outcome = await service.delete_account(uuid.uuid4())
        assert outcome.success is False
        assert outcome.error == AuthErrorCode.USER_NOT_FOUND

    @pytest.mark.asyncio
    async def test_username_reusable_after_delete(self, service):
        first = await service.register(_register())
        await service.delete_account(first.user_id)

        second = await service.register(_register())
        assert second.success is True
        assert second.user_id != first.user_id

    def test_logout_always_succeeds(self, service):
        outcome = service.logout()
        assert outcome.success is True
        assert outcome.token is None
