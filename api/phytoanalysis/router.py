"""
Phytosociological analysis API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Response, status

from auth import dependencies as auth_dependencies
from core.schemas import IdResponse
from core.uow import UnitOfWork

from . import schemas, service

router = APIRouter(prefix="/phyto-analyses")


@router.post("", status_code=status.HTTP_201_CREATED, response_model=IdResponse)
async def create_analysis(
    payload: schemas.CreatePhytoAnalysisRequest,
    tenant_id: str = Depends(auth_dependencies.require_tenant),
    uow: UnitOfWork = Depends(auth_dependencies.get_uow),
) -> IdResponse:
    """
    Create an analysis together with its specimens (all or nothing).
    """
    analysis_id = await service.create_analysis(payload, tenant_id=tenant_id, uow=uow)
    return IdResponse(id=analysis_id)


@router.get("", response_model=schemas.PhytoAnalysisListResponse)
async def list_analyses(
    project_id: str | None = Query(default=None, alias="projectId"),
    limit: int | None = Query(default=None),
    offset: int = Query(default=0, ge=0),
    tenant_id: str = Depends(auth_dependencies.require_tenant),
    uow: UnitOfWork = Depends(auth_dependencies.get_uow),
) -> schemas.PhytoAnalysisListResponse:
    return await service.list_analyses(
        tenant_id=tenant_id,
        uow=uow,
        project_id=project_id,
        limit=limit,
        offset=offset,
    )


@router.get("/project/{project_id}", response_model=schemas.PhytoAnalysisListResponse)
async def list_by_project(
    project_id: str,
    tenant_id: str = Depends(auth_dependencies.require_tenant),
    uow: UnitOfWork = Depends(auth_dependencies.get_uow),
) -> schemas.PhytoAnalysisListResponse:
    return await service.list_by_project(project_id, tenant_id=tenant_id, uow=uow)


@router.get("/enterprise/{enterprise_id}", response_model=schemas.PhytoAnalysisListResponse)
async def list_by_enterprise(
    enterprise_id: str,
    tenant_id: str = Depends(auth_dependencies.require_tenant),
    uow: UnitOfWork = Depends(auth_dependencies.get_uow),
) -> schemas.PhytoAnalysisListResponse:
    return await service.list_by_enterprise(enterprise_id, tenant_id=tenant_id, uow=uow)


@router.get("/{analysis_id}", response_model=schemas.PhytoAnalysisDetailResponse)
async def get_analysis(
    analysis_id: str,
    tenant_id: str = Depends(auth_dependencies.require_tenant),
    uow: UnitOfWork = Depends(auth_dependencies.get_uow),
) -> schemas.PhytoAnalysisDetailResponse:
    return await service.get_analysis(analysis_id, tenant_id=tenant_id, uow=uow)


@router.get("/{analysis_id}/specimens", response_model=schemas.SpecimenListResponse)
async def list_specimens(
    analysis_id: str,
    tenant_id: str = Depends(auth_dependencies.require_tenant),
    uow: UnitOfWork = Depends(auth_dependencies.get_uow),
) -> schemas.SpecimenListResponse:
    return await service.list_specimens(analysis_id, tenant_id=tenant_id, uow=uow)


@router.put("/{analysis_id}", response_model=schemas.PhytoAnalysisResponse)
async def update_analysis(
    analysis_id: str,
    payload: schemas.UpdatePhytoAnalysisRequest,
    tenant_id: str = Depends(auth_dependencies.require_tenant),
    uow: UnitOfWork = Depends(auth_dependencies.get_uow),
) -> schemas.PhytoAnalysisResponse:
    return await service.update_analysis(analysis_id, payload, tenant_id=tenant_id, uow=uow)


@router.delete("/{analysis_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_analysis(
    analysis_id: str,
    tenant_id: str = Depends(auth_dependencies.require_tenant),
    uow: UnitOfWork = Depends(auth_dependencies.get_uow),
) -> Response:
    await service.delete_analysis(analysis_id, tenant_id=tenant_id, uow=uow)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
