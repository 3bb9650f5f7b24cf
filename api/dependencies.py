"""
FastAPI dependencies (shared across routes).
"""

from __future__ import annotations

import uuid
from functools import lru_cache
from typing import AsyncGenerator, Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from auth.jwt import TokenService
from auth.service import AuthService
from config.settings import config
from database.accounts import AccountStore
from database.session import get_db_session
from users.service import UserService

# auto_error=False: missing or non-Bearer headers fall through to the 401 below.
_bearer_scheme = HTTPBearer(auto_error=False)


async def db_session(session: AsyncSession = Depends(get_db_session)) -> AsyncGenerator[AsyncSession, None]:
    """Re-export so routes import from a single place."""
    yield session


@lru_cache(maxsize=1)
def get_token_service() -> TokenService:
    return TokenService.from_settings(config)


def get_account_store(session: AsyncSession = Depends(db_session)) -> AccountStore:
    return AccountStore(session)


def get_auth_service(
    store: AccountStore = Depends(get_account_store),
    tokens: TokenService = Depends(get_token_service),
) -> AuthService:
    return AuthService(store, tokens)


def get_user_service(store: AccountStore = Depends(get_account_store)) -> UserService:
    return UserService(
        store,
        default_page_size=config.default_page_size,
        max_page_size=config.max_page_size,
    )


async def get_current_user_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer_scheme),
    tokens: TokenService = Depends(get_token_service),
) -> uuid.UUID:
    """
    Extract and verify the Bearer token from the Authorization header.
    Returns the authenticated user id.  Expired tokens are rejected here.
    """
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing Bearer token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    claims = tokens.validate(credentials.credentials, verify_exp=True)
    if claims is None or claims.expires_at is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    try:
        return uuid.UUID(claims.user_id)
    except (TypeError, ValueError):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not properly identified",
        )
