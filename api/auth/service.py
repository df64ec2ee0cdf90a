"""
Auth business logic.
"""

from __future__ import annotations

from starlette.concurrency import run_in_threadpool

from core.errors import AppError, ErrorCode
from core.logging import get_logger
from core.uow import UnitOfWork
from users.repository import normalize_email

from . import schemas
from .security import Claims, PasswordHasher, TokenService

log = get_logger(__name__)


async def login(
    payload: schemas.LoginRequest,
    *,
    uow: UnitOfWork,
    tokens: TokenService,
    hasher: PasswordHasher,
) -> schemas.LoginResponse:
    email = normalize_email(payload.email)
    user_row = await uow.repos().users().get_by_email(email)
    if user_row is None:
        log.info("login_failed", reason="unknown_email")
        raise AppError(ErrorCode.UNAUTHORIZED, "invalid credentials")

    # bcrypt is CPU bound; keep it off the event loop.
    is_valid = await run_in_threadpool(hasher.compare, str(user_row.get("password_hash") or ""), payload.password)
    if not is_valid:
        log.info("login_failed", reason="password_mismatch", user_id=str(user_row["id"]))
        raise AppError(ErrorCode.UNAUTHORIZED, "invalid credentials")

    return schemas.LoginResponse(
        access_token=tokens.mint(user_row),
        expires_in=tokens.access_ttl_seconds,
    )


def me(claims: Claims) -> schemas.MeResponse:
    return schemas.MeResponse(
        id=claims.sub,
        email=claims.email,
        name=claims.name,
        enterprise_id=claims.tenant_id or None,
        role_id=claims.role_id,
    )
