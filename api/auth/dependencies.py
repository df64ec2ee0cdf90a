"""
Auth dependencies for protected FastAPI routes.

`require_claims` admits any request with a valid bearer token.
`require_tenant` additionally requires the token to carry a tenant; handlers
take the tenant id from here and never from the request body.
"""

from __future__ import annotations

from fastapi import Depends, Header, Request

from core.errors import AppError, ErrorCode
from core.uow import UnitOfWork

from .security import Claims, PasswordHasher, TokenService


def _extract_bearer_token(authorization: str | None) -> str:
    raw = (authorization or "").strip()
    if not raw:
        raise AppError(ErrorCode.UNAUTHORIZED, "bearer token required")

    parts = raw.split(" ", 1)
    if len(parts) != 2:
        raise AppError(ErrorCode.UNAUTHORIZED, "bearer token required")

    scheme, token = parts[0].strip().lower(), parts[1].strip()
    if scheme != "bearer" or not token:
        raise AppError(ErrorCode.UNAUTHORIZED, "bearer token required")
    return token


def get_token_service(request: Request) -> TokenService:
    return request.app.state.token_service


def get_password_hasher(request: Request) -> PasswordHasher:
    return request.app.state.password_hasher


def get_uow(request: Request) -> UnitOfWork:
    return request.app.state.uow


async def require_claims(
    request: Request,
    authorization: str | None = Header(default=None),
    tokens: TokenService = Depends(get_token_service),
) -> Claims:
    token = _extract_bearer_token(authorization)
    claims = tokens.parse(token)
    request.state.claims = claims
    return claims


async def require_tenant(
    request: Request,
    claims: Claims = Depends(require_claims),
) -> str:
    tenant_id = (claims.tenant_id or "").strip()
    if not tenant_id:
        raise AppError(ErrorCode.FORBIDDEN, "enterprise access required", fields={"sub": claims.sub})
    request.state.tenant_id = tenant_id
    return tenant_id


def claims_of(request: Request) -> Claims | None:
    return getattr(request.state, "claims", None)


def tenant_id_of(request: Request) -> str:
    return str(getattr(request.state, "tenant_id", "") or "")
