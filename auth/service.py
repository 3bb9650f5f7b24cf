"""
Account lifecycle — signup, login, refresh, logout, delete.

Every operation returns an ``AuthResponse``; credential and token problems are
reported through ``success=False`` plus an ``AuthErrorCode``, never raised.
Store errors (connectivity, …) propagate unchanged.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone

from auth.errors import AuthErrorCode
from auth.jwt import TokenService
from auth.password import hash_password, verify_password
from database.accounts import AccountStore, ConstraintViolation
from database.models import Account
from utils.schemas import AuthResponse, LoginRequest, RegisterRequest

logger = logging.getLogger(__name__)

USERNAME_TAKEN_MESSAGE = "Username is already in use"
INVALID_CREDENTIALS_MESSAGE = "Invalid username or password"
INVALID_TOKEN_MESSAGE = "Invalid token"
MALFORMED_SUBJECT_MESSAGE = "Token does not contain valid user information"
USER_NOT_FOUND_MESSAGE = "User not found"


def _failure(code: AuthErrorCode, message: str) -> AuthResponse:
    return AuthResponse(success=False, message=message, error=code)


class AuthService:
    def __init__(self, store: AccountStore, tokens: TokenService):
        self.store = store
        self.tokens = tokens

    async def register(self, req: RegisterRequest) -> AuthResponse:
        if await self.store.find_by_username(req.username) is not None:
            return _failure(AuthErrorCode.USERNAME_TAKEN, USERNAME_TAKEN_MESSAGE)

        now = datetime.now(timezone.utc)
        account = Account(
            user_id=uuid.uuid4(),
            username=req.username,
            password_hash=hash_password(req.password),
            name=req.name,
            last_name=req.last_name,
            created_at=now,
            updated_at=now,
        )
        try:
            await self.store.insert(account)
        except ConstraintViolation:
            # Lost the race against a concurrent signup for the same name.
            return _failure(AuthErrorCode.USERNAME_TAKEN, USERNAME_TAKEN_MESSAGE)

        logger.info("Registered user %s (%s)", account.username, account.user_id)
        return AuthResponse(
            success=True,
            message="Registration successful",
            token=self.tokens.issue(account),
            user_id=account.user_id,
        )

    async def login(self, req: LoginRequest) -> AuthResponse:
        account = await self.store.find_by_username(req.username)
        if account is None or not verify_password(req.password, account.password_hash):
            logger.info("Failed login for username %r", req.username)
            return _failure(AuthErrorCode.INVALID_CREDENTIALS, INVALID_CREDENTIALS_MESSAGE)

        logger.info("Login: %s (%s)", account.username, account.user_id)
        return AuthResponse(
            success=True,
            message="Login successful",
            token=self.tokens.issue(account),
            user_id=account.user_id,
        )

    async def refresh_token(self, token: str) -> AuthResponse:
        """Exchange a correctly signed token, expired or not, for a fresh one."""
        claims = self.tokens.validate(token)
        if claims is None:
            return _failure(AuthErrorCode.INVALID_TOKEN, INVALID_TOKEN_MESSAGE)

        try:
            user_id = uuid.UUID(claims.user_id)
        except (TypeError, ValueError, AttributeError):
            return _failure(AuthErrorCode.INVALID_TOKEN, MALFORMED_SUBJECT_MESSAGE)

        account = await self.store.find_by_id(user_id)
        if account is None:
            return _failure(AuthErrorCode.USER_NOT_FOUND, USER_NOT_FOUND_MESSAGE)

        logger.info("Token refreshed for %s", account.user_id)
        return AuthResponse(
            success=True,
            message="Token updated successfully",
            token=self.tokens.issue(account),
            user_id=account.user_id,
        )

    async def delete_account(self, user_id: uuid.UUID) -> AuthResponse:
        """Remove the account. The caller must have authenticated ``user_id``."""
        account = await self.store.find_by_id(user_id)
        if account is None:
            return _failure(AuthErrorCode.USER_NOT_FOUND, USER_NOT_FOUND_MESSAGE)

        await self.store.delete(account)
        logger.info("Deleted account %s", user_id)
        return AuthResponse(success=True, message="Account deleted successfully")

    def logout(self) -> AuthResponse:
        # Tokens are stateless; the client discards its copy.
        return AuthResponse(success=True, message="Logged out successfully")
