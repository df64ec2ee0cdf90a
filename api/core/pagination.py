"""
Opaque cursor pagination over `(email, id)` ordered listings.

A cursor is the unpadded base64url form of `{"email": ..., "id": ...}` in
canonical JSON. It carries no tenant: the listing query always re-applies the
caller's tenant, so a cursor from another tenant just yields a different page.
"""

from __future__ import annotations

import base64
import binascii
import json
from dataclasses import dataclass
from typing import Callable, Generic, TypeVar

from .errors import AppError, ErrorCode

DEFAULT_LIMIT = 50
MAX_LIMIT = 1000

T = TypeVar("T")


@dataclass(frozen=True)
class CursorKey:
    email: str
    id: str


@dataclass(frozen=True)
class Page(Generic[T]):
    items: list[T]
    limit: int
    has_more: bool
    next_cursor: str | None


def clamp_limit(limit: int | None) -> int:
    if limit is None:
        return DEFAULT_LIMIT
    return max(1, min(MAX_LIMIT, int(limit)))


def encode_cursor(key: CursorKey) -> str:
    payload = json.dumps(
        {"email": key.email, "id": key.id},
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
    )
    return base64.urlsafe_b64encode(payload.encode("utf-8")).decode("ascii").rstrip("=")


def _bad_cursor(reason: str) -> AppError:
    return AppError(ErrorCode.INVALID, "invalid cursor", fields={"reason": reason})


def decode_cursor(raw: str | None) -> CursorKey | None:
    """
    Decode a cursor string; None/empty means "from the beginning".

    Raises AppError(invalid) on padding, bad base64, bad JSON or a wrong shape.
    """
    value = (raw or "").strip()
    if not value:
        return None
    if "=" in value:
        raise _bad_cursor("padding")

    try:
        decoded = base64.b64decode(value + "=" * (-len(value) % 4), altchars=b"-_", validate=True)
    except (binascii.Error, ValueError) as exc:
        raise _bad_cursor("base64") from exc

    try:
        data = json.loads(decoded.decode("utf-8"))
    except (UnicodeDecodeError, ValueError) as exc:
        raise _bad_cursor("json") from exc

    if not isinstance(data, dict):
        raise _bad_cursor("shape")
    email, key_id = data.get("email"), data.get("id")
    if not isinstance(email, str) or not isinstance(key_id, str) or not key_id:
        raise _bad_cursor("shape")
    return CursorKey(email=email, id=key_id)


def paginate(rows: list[T], limit: int, key_of: Callable[[T], CursorKey]) -> Page[T]:
    """
    Turn a `limit + 1` fetch into a page.

    The next cursor always points at the last retained row; with
    `has_more=False` it is informational only.
    """
    has_more = len(rows) > limit
    items = rows[:limit]
    next_cursor = encode_cursor(key_of(items[-1])) if items else None
    return Page(items=items, limit=limit, has_more=has_more, next_cursor=next_cursor)
