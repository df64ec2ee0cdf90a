"""
Address API schemas.
"""

from __future__ import annotations

from pydantic import Field

from core.schemas import CamelModel


class AddressInput(CamelModel):
    zip_code: str = Field(..., min_length=1, max_length=16)
    state: str = Field(..., min_length=1, max_length=64)
    city: str = Field(..., min_length=1, max_length=128)
    neighborhood: str = Field(..., min_length=1, max_length=128)
    street: str = Field(..., min_length=1, max_length=256)
    num: str = Field(..., min_length=1, max_length=16)
    latitude: str | None = Field(default=None, max_length=32)
    longitude: str | None = Field(default=None, max_length=32)
    add_info: str | None = Field(default=None, max_length=256)
