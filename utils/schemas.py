"""
Pydantic schemas for the API.

Wire format is camelCase (``userId``, ``totalItems`` …); Python code uses the
snake_case field names.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from auth.errors import AuthErrorCode

T = TypeVar("T")


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ═══════════════════════════════════════════════════════════════════════════════
# Auth
# ═══════════════════════════════════════════════════════════════════════════════


class RegisterRequest(CamelModel):
    username: str = Field(..., min_length=3, max_length=50)
    password: str = Field(..., min_length=6, max_length=100)
    name: Optional[str] = Field(None, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)


class LoginRequest(CamelModel):
    username: str
    password: str


class RefreshTokenRequest(CamelModel):
    token: str = Field(..., min_length=1)


class AuthResponse(CamelModel):
    """Uniform outcome of every account-lifecycle operation."""

    success: bool
    message: str
    token: Optional[str] = None
    user_id: Optional[uuid.UUID] = None
    error: Optional[AuthErrorCode] = None


# ═══════════════════════════════════════════════════════════════════════════════
# Users
# ═══════════════════════════════════════════════════════════════════════════════


class UserOut(CamelModel):
    """Public projection of an account — never includes the password hash."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, from_attributes=True,
    )

    user_id: uuid.UUID
    username: str
    name: Optional[str] = None
    last_name: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class PaginationMetadata(CamelModel):
    total_items: int
    current_page: int
    total_pages: int
    items_per_page: int
    has_next_page: bool
    has_previous_page: bool


class PaginatedResponse(CamelModel, Generic[T]):
    data: List[T] = Field(default_factory=list)
    pagination: PaginationMetadata


# ═══════════════════════════════════════════════════════════════════════════════
# Documents
# ═══════════════════════════════════════════════════════════════════════════════


class DocumentResponse(CamelModel):
    file_name: str
    text: str
    file_size: int
    page_count: int = 0


class TableData(CamelModel):
    title: str = ""
    data: List[List[str]] = Field(default_factory=list)
    text_representation: str = ""
    description: str = ""


class ImageInfo(CamelModel):
    page_number: int = 1
    description: str = ""


class DocumentMetadata(CamelModel):
    title: str = ""
    author: str = ""
    creator: str = ""
    keywords: str = ""
    page_count: int = 1
    creation_date: str = ""


class DocumentAnalysis(CamelModel):
    file_name: str
    file_size: int
    document_title: str = ""
    summary: str = ""
    key_points: List[str] = Field(default_factory=list)
    tables: List[TableData] = Field(default_factory=list)
    images: List[ImageInfo] = Field(default_factory=list)
    conclusions: List[str] = Field(default_factory=list)
    metadata: Optional[DocumentMetadata] = None
