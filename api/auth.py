"""
Authentication routes — signup, login, refresh-token, logout, delete-account.

Failed outcomes keep the ``AuthResponse`` body and only change the status code.
"""

from __future__ import annotations

import logging
import uuid

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from api.dependencies import get_auth_service, get_current_user_id
from auth.service import AuthService
from utils.schemas import AuthResponse, LoginRequest, RefreshTokenRequest, RegisterRequest

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])


def _reply(outcome: AuthResponse, failure_status: int) -> JSONResponse:
    code = status.HTTP_200_OK if outcome.success else failure_status
    return JSONResponse(
        status_code=code,
        content=outcome.model_dump(mode="json", by_alias=True),
    )


@router.post("/signup", response_model=AuthResponse)
async def signup(
    req: RegisterRequest,
    auth: AuthService = Depends(get_auth_service),
) -> JSONResponse:
    """Register a new user and return a token."""
    return _reply(await auth.register(req), status.HTTP_400_BAD_REQUEST)


@router.post("/login", response_model=AuthResponse)
async def login(
    req: LoginRequest,
    auth: AuthService = Depends(get_auth_service),
) -> JSONResponse:
    """Login with username + password."""
    return _reply(await auth.login(req), status.HTTP_401_UNAUTHORIZED)


@router.post("/refresh-token", response_model=AuthResponse)
async def refresh_token(
    req: RefreshTokenRequest,
    auth: AuthService = Depends(get_auth_service),
) -> JSONResponse:
    """Exchange a (possibly expired) token for a fresh one."""
    return _reply(await auth.refresh_token(req.token), status.HTTP_400_BAD_REQUEST)


@router.post("/logout", response_model=AuthResponse)
async def logout(
    user_id: uuid.UUID = Depends(get_current_user_id),
    auth: AuthService = Depends(get_auth_service),
) -> JSONResponse:
    logger.info("Logout: %s", user_id)
    return _reply(auth.logout(), status.HTTP_400_BAD_REQUEST)


@router.delete("/delete-account", response_model=AuthResponse)
async def delete_account(
    user_id: uuid.UUID = Depends(get_current_user_id),
    auth: AuthService = Depends(get_auth_service),
) -> JSONResponse:
    """Permanently delete the caller's account."""
    return _reply(await auth.delete_account(user_id), status.HTTP_404_NOT_FOUND)
