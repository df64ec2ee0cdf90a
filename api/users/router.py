"""
User API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status

from auth import dependencies as auth_dependencies
from auth.security import PasswordHasher
from core.schemas import IdResponse
from core.uow import UnitOfWork

from . import schemas, service

router = APIRouter(prefix="/users")


@router.post("", status_code=status.HTTP_201_CREATED, response_model=IdResponse)
async def create_user(
    payload: schemas.CreateUserRequest,
    tenant_id: str = Depends(auth_dependencies.require_tenant),
    uow: UnitOfWork = Depends(auth_dependencies.get_uow),
    hasher: PasswordHasher = Depends(auth_dependencies.get_password_hasher),
) -> IdResponse:
    user_id = await service.create_user(payload, tenant_id=tenant_id, uow=uow, hasher=hasher)
    return IdResponse(id=user_id)


@router.get("", response_model=schemas.UserPageResponse)
async def list_users(
    limit: int | None = Query(default=None),
    cursor: str | None = Query(default=None, max_length=2048),
    tenant_id: str = Depends(auth_dependencies.require_tenant),
    uow: UnitOfWork = Depends(auth_dependencies.get_uow),
) -> schemas.UserPageResponse:
    """
    Cursor-paginated users of the caller's enterprise, ordered by email.
    """
    return await service.list_users(tenant_id=tenant_id, uow=uow, limit=limit, cursor=cursor)
