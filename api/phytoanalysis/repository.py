"""
Phytosociological analysis persistence helpers.

Analyses belong to a project; the tenant check always goes through
`projects.enterprise_id`.
"""

from __future__ import annotations

from datetime import datetime

from core import db

_ANALYSIS_COLUMNS = """
    pa.id, pa.title, pa.initial_date, pa.portion_quantity, pa.portion_area,
    pa.total_area, pa.sampled_area, pa.description, pa.project_id,
    pa.created_at, pa.updated_at
"""


class PhytoAnalysisRepository:
    def __init__(self, executor: db.Executor) -> None:
        self._db = executor

    async def project_in_tenant(self, project_id: str, *, enterprise_id: str) -> dict | None:
        return await db.fetch_one(
            self._db,
            """
            SELECT id, title, enterprise_id
            FROM projects
            WHERE id = $1
              AND enterprise_id = $2
            """,
            project_id,
            enterprise_id,
        )

    async def create(
        self,
        *,
        analysis_id: str,
        title: str,
        initial_date: datetime,
        portion_quantity: int,
        portion_area: float,
        total_area: float,
        sampled_area: float,
        description: str | None,
        project_id: str,
    ) -> dict:
        row = await db.fetch_one(
            self._db,
            """
            INSERT INTO phyto_analyses (
                id, title, initial_date, portion_quantity, portion_area,
                total_area, sampled_area, description, project_id
            )
            VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9)
            RETURNING id, title, initial_date, portion_quantity, portion_area,
                      total_area, sampled_area, description, project_id,
                      created_at, updated_at
            """,
            analysis_id,
            title,
            initial_date,
            portion_quantity,
            portion_area,
            total_area,
            sampled_area,
            description,
            project_id,
        )
        if row is None:
            raise RuntimeError("Failed to insert phyto analysis.")
        return row

    async def get_by_id(self, analysis_id: str, *, enterprise_id: str) -> dict | None:
        return await db.fetch_one(
            self._db,
            f"""
            SELECT {_ANALYSIS_COLUMNS}, p.title AS project_title
            FROM phyto_analyses pa
            JOIN projects p ON p.id = pa.project_id
            WHERE pa.id = $1
              AND p.enterprise_id = $2
            """,
            analysis_id,
            enterprise_id,
        )

    async def list_page(
        self,
        *,
        enterprise_id: str,
        project_id: str | None,
        limit: int,
        offset: int,
    ) -> list[dict]:
        return await db.fetch_all(
            self._db,
            f"""
            SELECT {_ANALYSIS_COLUMNS}
            FROM phyto_analyses pa
            JOIN projects p ON p.id = pa.project_id
            WHERE p.enterprise_id = $1
              AND ($2::text IS NULL OR pa.project_id = $2)
            ORDER BY pa.created_at DESC, pa.id
            LIMIT $3 OFFSET $4
            """,
            enterprise_id,
            project_id,
            limit,
            offset,
        )

    async def list_by_project(self, project_id: str, *, enterprise_id: str) -> list[dict]:
        return await db.fetch_all(
            self._db,
            f"""
            SELECT {_ANALYSIS_COLUMNS}
            FROM phyto_analyses pa
            JOIN projects p ON p.id = pa.project_id
            WHERE pa.project_id = $1
              AND p.enterprise_id = $2
            ORDER BY pa.created_at DESC, pa.id
            """,
            project_id,
            enterprise_id,
        )

    async def list_by_enterprise(self, enterprise_id: str) -> list[dict]:
        return await db.fetch_all(
            self._db,
            f"""
            SELECT {_ANALYSIS_COLUMNS}
            FROM phyto_analyses pa
            JOIN projects p ON p.id = pa.project_id
            WHERE p.enterprise_id = $1
            ORDER BY pa.created_at DESC, pa.id
            """,
            enterprise_id,
        )

    async def update(
        self,
        analysis_id: str,
        *,
        title: str,
        initial_date: datetime,
        portion_quantity: int,
        portion_area: float,
        total_area: float,
        sampled_area: float,
        description: str | None,
    ) -> dict | None:
        """Write the mutable subset. project_id is never touched."""
        return await db.fetch_one(
            self._db,
            """
            UPDATE phyto_analyses
            SET title = $2,
                initial_date = $3,
                portion_quantity = $4,
                portion_area = $5,
                total_area = $6,
                sampled_area = $7,
                description = $8,
                updated_at = now()
            WHERE id = $1
            RETURNING id, title, initial_date, portion_quantity, portion_area,
                      total_area, sampled_area, description, project_id,
                      created_at, updated_at
            """,
            analysis_id,
            title,
            initial_date,
            portion_quantity,
            portion_area,
            total_area,
            sampled_area,
            description,
        )

    async def delete(self, analysis_id: str, *, enterprise_id: str) -> bool:
        # specimens go with it (ON DELETE CASCADE).
        status = await db.execute(
            self._db,
            """
            DELETE FROM phyto_analyses pa
            USING projects p
            WHERE pa.id = $1
              AND p.id = pa.project_id
              AND p.enterprise_id = $2
            """,
            analysis_id,
            enterprise_id,
        )
        return db.affected_rows(status) > 0
