"""
User API schemas.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import Field, field_validator

from core.schemas import CamelModel, blank_to_none


class CreateUserRequest(CamelModel):
    name: str = Field(..., min_length=1, max_length=200)
    email: str = Field(..., min_length=3, max_length=320)
    password: str = Field(..., min_length=8, max_length=72)
    document: str = Field(..., min_length=1, max_length=32)
    phone: str | None = Field(default=None, max_length=32)
    address_id: str | None = None
    role_id: str | None = None

    @field_validator("phone", "address_id", "role_id", mode="before")
    @classmethod
    def _blank_to_none(cls, value):
        return blank_to_none(value) if isinstance(value, str) else value


class UserResponse(CamelModel):
    id: str
    name: str
    email: str
    document: str
    phone: str | None = None
    address_id: str | None = None
    role_id: str | None = None
    enterprise_id: str
    created_at: datetime | None = None


class PageMeta(CamelModel):
    limit: int
    next_cursor: str | None = None
    has_more: bool


class UserPageResponse(CamelModel):
    items: list[UserResponse]
    meta: PageMeta
