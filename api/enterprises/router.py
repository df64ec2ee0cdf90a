"""
Enterprise API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, status

from auth import dependencies as auth_dependencies
from auth.security import PasswordHasher
from core.uow import UnitOfWork

from . import schemas, service

router = APIRouter(prefix="/enterprises")


@router.post("", status_code=status.HTTP_201_CREATED, response_model=schemas.CreateEnterpriseResponse)
async def create_enterprise(
    payload: schemas.CreateEnterpriseRequest,
    uow: UnitOfWork = Depends(auth_dependencies.get_uow),
    hasher: PasswordHasher = Depends(auth_dependencies.get_password_hasher),
) -> schemas.CreateEnterpriseResponse:
    """
    Sign-up: create a new enterprise and its first (Administrador) user.

    Public, like login: this is how a tenant comes to exist, and the caller
    authenticates afterwards with the admin credentials.
    """
    return await service.create_enterprise(payload, uow=uow, hasher=hasher)


@router.get("/{enterprise_id}", response_model=schemas.EnterpriseResponse)
async def get_enterprise(
    enterprise_id: str,
    tenant_id: str = Depends(auth_dependencies.require_tenant),
    uow: UnitOfWork = Depends(auth_dependencies.get_uow),
) -> schemas.EnterpriseResponse:
    return await service.get_enterprise(enterprise_id, tenant_id=tenant_id, uow=uow)


@router.put("", response_model=schemas.EnterpriseResponse)
async def update_enterprise(
    payload: schemas.UpdateEnterpriseRequest,
    tenant_id: str = Depends(auth_dependencies.require_tenant),
    uow: UnitOfWork = Depends(auth_dependencies.get_uow),
) -> schemas.EnterpriseResponse:
    """
    Update the caller's own enterprise; the id comes from the token.
    """
    return await service.update_enterprise(payload, tenant_id=tenant_id, uow=uow)
