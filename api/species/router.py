"""
Species catalog API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status

from auth import dependencies as auth_dependencies
from core.uow import UnitOfWork

from . import schemas, service

router = APIRouter(prefix="/species")


@router.get("", response_model=schemas.SpeciesListResponse)
async def list_species(
    limit: int | None = Query(default=None, ge=0),
    offset: int = Query(default=0, ge=0),
    _: str = Depends(auth_dependencies.require_tenant),
    uow: UnitOfWork = Depends(auth_dependencies.get_uow),
) -> schemas.SpeciesListResponse:
    return await service.list_species(uow=uow, limit=limit, offset=offset)


@router.get("/{species_id}", response_model=schemas.SpeciesResponse)
async def get_species(
    species_id: str,
    _: str = Depends(auth_dependencies.require_tenant),
    uow: UnitOfWork = Depends(auth_dependencies.get_uow),
) -> schemas.SpeciesResponse:
    return await service.get_species(species_id, uow=uow)


@router.post("", status_code=status.HTTP_201_CREATED, response_model=schemas.SpeciesResponse)
async def create_species(
    payload: schemas.CreateSpeciesRequest,
    _: str = Depends(auth_dependencies.require_tenant),
    uow: UnitOfWork = Depends(auth_dependencies.get_uow),
) -> schemas.SpeciesResponse:
    return await service.create_species(payload, uow=uow)
