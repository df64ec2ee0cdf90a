"""
Specimen API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response, status

from auth import dependencies as auth_dependencies
from core.schemas import IdResponse
from core.uow import UnitOfWork

from . import schemas, service

router = APIRouter(prefix="/specimens")


@router.post("", status_code=status.HTTP_201_CREATED, response_model=IdResponse)
async def create_specimen(
    payload: schemas.CreateSpecimenRequest,
    tenant_id: str = Depends(auth_dependencies.require_tenant),
    uow: UnitOfWork = Depends(auth_dependencies.get_uow),
) -> IdResponse:
    specimen_id = await service.create_specimen(payload, tenant_id=tenant_id, uow=uow)
    return IdResponse(id=specimen_id)


@router.get("/{specimen_id}", response_model=schemas.SpecimenResponse)
async def get_specimen(
    specimen_id: str,
    tenant_id: str = Depends(auth_dependencies.require_tenant),
    uow: UnitOfWork = Depends(auth_dependencies.get_uow),
) -> schemas.SpecimenResponse:
    return await service.get_specimen(specimen_id, tenant_id=tenant_id, uow=uow)


@router.put("/{specimen_id}", response_model=schemas.SpecimenResponse)
async def update_specimen(
    specimen_id: str,
    payload: schemas.UpdateSpecimenRequest,
    tenant_id: str = Depends(auth_dependencies.require_tenant),
    uow: UnitOfWork = Depends(auth_dependencies.get_uow),
) -> schemas.SpecimenResponse:
    return await service.update_specimen(specimen_id, payload, tenant_id=tenant_id, uow=uow)


@router.delete("/{specimen_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_specimen(
    specimen_id: str,
    tenant_id: str = Depends(auth_dependencies.require_tenant),
    uow: UnitOfWork = Depends(auth_dependencies.get_uow),
) -> Response:
    await service.delete_specimen(specimen_id, tenant_id=tenant_id, uow=uow)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
