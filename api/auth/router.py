"""
Auth API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from core.uow import UnitOfWork

from . import dependencies, schemas, service
from .security import Claims, PasswordHasher, TokenService

router = APIRouter(prefix="/auth")


@router.post("/login", response_model=schemas.LoginResponse)
async def login(
    payload: schemas.LoginRequest,
    uow: UnitOfWork = Depends(dependencies.get_uow),
    tokens: TokenService = Depends(dependencies.get_token_service),
    hasher: PasswordHasher = Depends(dependencies.get_password_hasher),
) -> schemas.LoginResponse:
    return await service.login(payload, uow=uow, tokens=tokens, hasher=hasher)


@router.get("/me", response_model=schemas.MeResponse)
async def me(claims: Claims = Depends(dependencies.require_claims)) -> schemas.MeResponse:
    return service.me(claims)
