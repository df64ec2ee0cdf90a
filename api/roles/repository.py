"""
Role, permission and feature persistence helpers.

Features are a global catalog seeded by migration; roles and their
permissions belong to one enterprise.
"""

from __future__ import annotations

from core import db


class RoleRepository:
    def __init__(self, executor: db.Executor) -> None:
        self._db = executor

    async def create(self, *, role_id: str, title: str, enterprise_id: str) -> dict:
        row = await db.fetch_one(
            self._db,
            """
            INSERT INTO roles (id, title, enterprise_id)
            VALUES ($1, $2, $3)
            RETURNING id, title, enterprise_id, created_at, updated_at
            """,
            role_id,
            title,
            enterprise_id,
        )
        if row is None:
            raise RuntimeError("Failed to create role.")
        return row

    async def list_features(self) -> list[dict]:
        return await db.fetch_all(
            self._db,
            """
            SELECT id, name
            FROM features
            ORDER BY name
            """,
        )

    async def create_permission(
        self,
        *,
        permission_id: str,
        feature_id: str,
        role_id: str,
        create: bool,
        read: bool,
        update: bool,
        delete: bool,
    ) -> None:
        await db.execute(
            self._db,
            """
            INSERT INTO permissions (id, feature_id, role_id, "create", "read", "update", "delete")
            VALUES ($1, $2, $3, $4, $5, $6, $7)
            """,
            permission_id,
            feature_id,
            role_id,
            create,
            read,
            update,
            delete,
        )
