"""
User listing routes (authenticated).
"""

from __future__ import annotations

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from api.dependencies import get_current_user_id, get_user_service
from users.service import UserService
from utils.schemas import PaginatedResponse, UserOut

router = APIRouter(tags=["user"], dependencies=[Depends(get_current_user_id)])


@router.get("", response_model=PaginatedResponse[UserOut])
async def list_users(
    # Plain strings so junk input falls back to the defaults instead of a 422.
    page_number: Optional[str] = Query(None, alias="pageNumber", description="Page number (starting from 1)"),
    page_size: Optional[str] = Query(None, alias="pageSize", description="Items per page (maximum 100)"),
    users: UserService = Depends(get_user_service),
) -> PaginatedResponse[UserOut]:
    """Paginated list of all users, newest first."""
    return await users.list_users(page_number, page_size)


@router.get("/{user_id}", response_model=UserOut)
async def get_user(
    user_id: uuid.UUID,
    users: UserService = Depends(get_user_service),
) -> UserOut:
    user = await users.get_user(user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user
