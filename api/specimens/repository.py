"""
Specimen persistence helpers.

Specimen reads join the species catalog so callers get the scientific name
without a second query.
"""

from __future__ import annotations

from datetime import datetime

from core import db

_SPECIMEN_COLUMNS = """
    s.id, s.portion, s.height, s.cap1, s.cap2, s.cap3, s.cap4, s.cap5, s.cap6,
    s.register_date, s.phyto_analysis_id, s.species_id, s.created_at, s.updated_at,
    sp.scientific_name, sp.family, sp.popular_name
"""


class SpecimenRepository:
    def __init__(self, executor: db.Executor) -> None:
        self._db = executor

    async def create(
        self,
        *,
        specimen_id: str,
        portion: str,
        height: float,
        caps: list[float | None],
        register_date: datetime,
        phyto_analysis_id: str,
        species_id: str,
    ) -> str:
        cap1, cap2, cap3, cap4, cap5, cap6 = (list(caps) + [None] * 6)[:6]
        row = await db.fetch_one(
            self._db,
            """
            INSERT INTO specimens (
                id, portion, height, cap1, cap2, cap3, cap4, cap5, cap6,
                register_date, phyto_analysis_id, species_id
            )
            VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10, $11, $12)
            RETURNING id
            """,
            specimen_id,
            portion,
            height,
            cap1,
            cap2,
            cap3,
            cap4,
            cap5,
            cap6,
            register_date,
            phyto_analysis_id,
            species_id,
        )
        if row is None:
            raise RuntimeError("Failed to insert specimen.")
        return str(row["id"])

    async def list_by_analysis(self, phyto_analysis_id: str) -> list[dict]:
        """Specimens of one analysis, ordered by plot then register date."""
        return await db.fetch_all(
            self._db,
            f"""
            SELECT {_SPECIMEN_COLUMNS}
            FROM specimens s
            JOIN species sp ON sp.id = s.species_id
            WHERE s.phyto_analysis_id = $1
            ORDER BY s.portion, s.register_date, s.id
            """,
            phyto_analysis_id,
        )

    async def get_by_id(self, specimen_id: str, *, enterprise_id: str) -> dict | None:
        return await db.fetch_one(
            self._db,
            f"""
            SELECT {_SPECIMEN_COLUMNS}
            FROM specimens s
            JOIN species sp ON sp.id = s.species_id
            JOIN phyto_analyses pa ON pa.id = s.phyto_analysis_id
            JOIN projects p ON p.id = pa.project_id
            WHERE s.id = $1
              AND p.enterprise_id = $2
            """,
            specimen_id,
            enterprise_id,
        )

    async def update(
        self,
        specimen_id: str,
        *,
        portion: str,
        height: float,
        caps: list[float | None],
        register_date: datetime,
        species_id: str,
    ) -> bool:
        cap1, cap2, cap3, cap4, cap5, cap6 = (list(caps) + [None] * 6)[:6]
        status = await db.execute(
            self._db,
            """
            UPDATE specimens
            SET portion = $2,
                height = $3,
                cap1 = $4,
                cap2 = $5,
                cap3 = $6,
                cap4 = $7,
                cap5 = $8,
                cap6 = $9,
                register_date = $10,
                species_id = $11,
                updated_at = now()
            WHERE id = $1
            """,
            specimen_id,
            portion,
            height,
            cap1,
            cap2,
            cap3,
            cap4,
            cap5,
            cap6,
            register_date,
            species_id,
        )
        return db.affected_rows(status) > 0

    async def delete(self, specimen_id: str, *, enterprise_id: str) -> bool:
        status = await db.execute(
            self._db,
            """
            DELETE FROM specimens s
            USING phyto_analyses pa, projects p
            WHERE s.id = $1
              AND pa.id = s.phyto_analysis_id
              AND p.id = pa.project_id
              AND p.enterprise_id = $2
            """,
            specimen_id,
            enterprise_id,
        )
        return db.affected_rows(status) > 0
