"""
Enterprise (tenant) persistence helpers.
"""

from __future__ import annotations

import asyncpg

from core import db
from core.errors import AppError, ErrorCode

_ENTERPRISE_COLUMNS = "id, cnpj, email, name, fantasy_name, phone, address_id, created_at, updated_at"


class EnterpriseRepository:
    def __init__(self, executor: db.Executor) -> None:
        self._db = executor

    async def create(
        self,
        *,
        enterprise_id: str,
        cnpj: str,
        email: str,
        name: str,
        fantasy_name: str | None = None,
        phone: str | None = None,
        address_id: str | None = None,
    ) -> dict:
        try:
            row = await db.fetch_one(
                self._db,
                f"""
                INSERT INTO enterprises (id, cnpj, email, name, fantasy_name, phone, address_id)
                VALUES ($1, $2, $3, $4, $5, $6, $7)
                RETURNING {_ENTERPRISE_COLUMNS}
                """,
                enterprise_id,
                cnpj,
                email,
                name,
                fantasy_name,
                phone,
                address_id,
            )
        except asyncpg.UniqueViolationError as exc:
            raise AppError(ErrorCode.CONFLICT, "enterprise already exists", fields={"cnpj": cnpj}) from exc
        if row is None:
            raise RuntimeError("Failed to create enterprise.")
        return row

    async def get_by_id(self, enterprise_id: str) -> dict | None:
        return await db.fetch_one(
            self._db,
            f"""
            SELECT {_ENTERPRISE_COLUMNS}
            FROM enterprises
            WHERE id = $1
            """,
            enterprise_id,
        )

    async def update(
        self,
        enterprise_id: str,
        *,
        cnpj: str,
        email: str,
        name: str,
        fantasy_name: str | None,
        phone: str | None,
        address_id: str | None,
    ) -> dict | None:
        try:
            return await db.fetch_one(
                self._db,
                f"""
                UPDATE enterprises
                SET cnpj = $2,
                    email = $3,
                    name = $4,
                    fantasy_name = $5,
                    phone = $6,
                    address_id = $7,
                    updated_at = now()
                WHERE id = $1
                RETURNING {_ENTERPRISE_COLUMNS}
                """,
                enterprise_id,
                cnpj,
                email,
                name,
                fantasy_name,
                phone,
                address_id,
            )
        except asyncpg.UniqueViolationError as exc:
            raise AppError(ErrorCode.CONFLICT, "enterprise already exists", fields={"cnpj": cnpj}) from exc

    async def create_parameter(
        self,
        *,
        parameter_id: str,
        enterprise_id: str,
        title: str,
        value: str | None,
        is_default: bool = False,
    ) -> dict:
        row = await db.fetch_one(
            self._db,
            """
            INSERT INTO parameters (id, title, value, enterprise_id, is_default)
            VALUES ($1, $2, $3, $4, $5)
            RETURNING id, title, value, enterprise_id, is_default
            """,
            parameter_id,
            title,
            value,
            enterprise_id,
            is_default,
        )
        if row is None:
            raise RuntimeError("Failed to create parameter.")
        return row

    async def create_product(
        self,
        *,
        product_id: str,
        enterprise_id: str,
        name: str,
        suggested_value: str | None,
        deliverable: bool = False,
        is_default: bool = False,
    ) -> dict:
        row = await db.fetch_one(
            self._db,
            """
            INSERT INTO products (id, name, suggested_value, enterprise_id, deliverable, is_default)
            VALUES ($1, $2, $3, $4, $5, $6)
            RETURNING id, name, suggested_value, enterprise_id, deliverable, is_default
            """,
            product_id,
            name,
            suggested_value,
            enterprise_id,
            deliverable,
            is_default,
        )
        if row is None:
            raise RuntimeError("Failed to create product.")
        return row
