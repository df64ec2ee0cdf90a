"""
User business logic (tenant scoped).
"""

from __future__ import annotations

import uuid

from starlette.concurrency import run_in_threadpool

from auth.security import PasswordHasher
from core.pagination import CursorKey, clamp_limit, decode_cursor, paginate
from core.uow import UnitOfWork

from . import schemas


def _to_user_response(row: dict) -> schemas.UserResponse:
    return schemas.UserResponse(
        id=str(row["id"]),
        name=str(row["name"]),
        email=str(row["email"]),
        document=str(row["document"]),
        phone=row.get("phone"),
        address_id=row.get("address_id"),
        role_id=row.get("role_id"),
        enterprise_id=str(row["enterprise_id"]),
        created_at=row.get("created_at"),
    )


def _cursor_key(row: dict) -> CursorKey:
    return CursorKey(email=str(row["email"]), id=str(row["id"]))


async def create_user(
    payload: schemas.CreateUserRequest,
    *,
    tenant_id: str,
    uow: UnitOfWork,
    hasher: PasswordHasher,
) -> str:
    password_hash = await run_in_threadpool(hasher.hash, payload.password)
    row = await uow.repos().users().create(
        user_id=str(uuid.uuid4()),
        enterprise_id=tenant_id,
        name=payload.name.strip(),
        email=payload.email,
        password_hash=password_hash,
        document=payload.document.strip(),
        phone=payload.phone,
        address_id=payload.address_id,
        role_id=payload.role_id,
    )
    return str(row["id"])


async def list_users(
    *,
    tenant_id: str,
    uow: UnitOfWork,
    limit: int | None = None,
    cursor: str | None = None,
) -> schemas.UserPageResponse:
    page_limit = clamp_limit(limit)
    after = decode_cursor(cursor)
    rows = await uow.repos().users().list_page(enterprise_id=tenant_id, after=after, limit=page_limit)
    page = paginate(rows, page_limit, _cursor_key)
    return schemas.UserPageResponse(
        items=[_to_user_response(r) for r in page.items],
        meta=schemas.PageMeta(limit=page.limit, next_cursor=page.next_cursor, has_more=page.has_more),
    )
