"""
User persistence helpers.
"""

from __future__ import annotations

import asyncpg

from core import db
from core.errors import AppError, ErrorCode
from core.pagination import CursorKey

_USER_COLUMNS = """
    id, enterprise_id, name, email, document, phone, address_id, role_id,
    created_at, updated_at
"""


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


class UserRepository:
    def __init__(self, executor: db.Executor) -> None:
        self._db = executor

    async def get_by_email(self, email: str) -> dict | None:
        """Lookup for login; the only query that returns the password hash."""
        return await db.fetch_one(
            self._db,
            f"""
            SELECT {_USER_COLUMNS}, password_hash
            FROM users
            WHERE email = $1
            """,
            normalize_email(email),
        )

    async def get_by_id(self, user_id: str, *, enterprise_id: str) -> dict | None:
        return await db.fetch_one(
            self._db,
            f"""
            SELECT {_USER_COLUMNS}
            FROM users
            WHERE id = $1
              AND enterprise_id = $2
            """,
            user_id,
            enterprise_id,
        )

    async def create(
        self,
        *,
        user_id: str,
        enterprise_id: str,
        name: str,
        email: str,
        password_hash: str,
        document: str,
        phone: str | None = None,
        address_id: str | None = None,
        role_id: str | None = None,
    ) -> dict:
        try:
            row = await db.fetch_one(
                self._db,
                f"""
                INSERT INTO users (id, enterprise_id, name, email, password_hash, document, phone, address_id, role_id)
                VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9)
                RETURNING {_USER_COLUMNS}
                """,
                user_id,
                enterprise_id,
                name,
                normalize_email(email),
                password_hash,
                document,
                phone,
                address_id,
                role_id,
            )
        except asyncpg.UniqueViolationError as exc:
            raise AppError(ErrorCode.CONFLICT, "email already registered") from exc
        if row is None:
            raise RuntimeError("Failed to create user.")
        return row

    async def list_page(
        self,
        *,
        enterprise_id: str,
        after: CursorKey | None,
        limit: int,
    ) -> list[dict]:
        """
        Users of one tenant in `(email, id)` order, strictly after `after`.

        Fetches `limit + 1` rows so the caller can tell whether more exist.
        """
        if after is None:
            return await db.fetch_all(
                self._db,
                f"""
                SELECT {_USER_COLUMNS}
                FROM users
                WHERE enterprise_id = $1
                ORDER BY email, id
                LIMIT $2
                """,
                enterprise_id,
                limit + 1,
            )

        return await db.fetch_all(
            self._db,
            f"""
            SELECT {_USER_COLUMNS}
            FROM users
            WHERE enterprise_id = $1
              AND (email, id) > ($2, $3)
            ORDER BY email, id
            LIMIT $4
            """,
            enterprise_id,
            after.email,
            after.id,
            limit + 1,
        )
