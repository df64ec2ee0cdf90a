"""
Enterprise API schemas.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import Field, field_validator

from addresses.schemas import AddressInput
from core.schemas import CamelModel, blank_to_none


class EnterpriseFields(CamelModel):
    cnpj: str = Field(..., min_length=1, max_length=32)
    email: str = Field(..., min_length=3, max_length=320)
    name: str = Field(..., min_length=1, max_length=200)
    fantasy_name: str | None = Field(default=None, max_length=200)
    phone: str | None = Field(default=None, max_length=32)
    address: AddressInput | None = None

    @field_validator("fantasy_name", "phone", mode="before")
    @classmethod
    def _blank_to_none(cls, value):
        return blank_to_none(value) if isinstance(value, str) else value


class AdminUserInput(CamelModel):
    name: str = Field(..., min_length=1, max_length=200)
    email: str = Field(..., min_length=3, max_length=320)
    password: str = Field(..., min_length=8, max_length=72)
    document: str = Field(..., min_length=1, max_length=32)
    phone: str | None = Field(default=None, max_length=32)

    @field_validator("phone", mode="before")
    @classmethod
    def _blank_to_none(cls, value):
        return blank_to_none(value) if isinstance(value, str) else value


class CreateEnterpriseRequest(EnterpriseFields):
    admin: AdminUserInput


class UpdateEnterpriseRequest(EnterpriseFields):
    address_id: str | None = None

    @field_validator("address_id", mode="before")
    @classmethod
    def _blank_address_id(cls, value):
        return blank_to_none(value) if isinstance(value, str) else value


class CreateEnterpriseResponse(CamelModel):
    enterprise_id: str
    user_id: str


class EnterpriseResponse(CamelModel):
    id: str
    cnpj: str
    email: str
    name: str
    fantasy_name: str | None = None
    phone: str | None = None
    address_id: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
