"""
Species catalog persistence helpers.
"""

from __future__ import annotations

import asyncpg

from core import db
from core.errors import AppError, ErrorCode

_SPECIES_COLUMNS = "id, scientific_name, family, popular_name, habit, created_at, updated_at"

_LEGISLATION_COLUMNS = """
    id, species_id, law_scope, law_id, is_law_active, species_form_factor,
    is_species_protected, species_threat_status, species_origin,
    successional_ecology, created_at, updated_at
"""


class SpeciesRepository:
    def __init__(self, executor: db.Executor) -> None:
        self._db = executor

    async def get_by_scientific_name(self, scientific_name: str) -> dict | None:
        return await db.fetch_one(
            self._db,
            f"""
            SELECT {_SPECIES_COLUMNS}
            FROM species
            WHERE scientific_name = $1
            """,
            scientific_name,
        )

    async def get_by_id(self, species_id: str) -> dict | None:
        return await db.fetch_one(
            self._db,
            f"""
            SELECT {_SPECIES_COLUMNS}
            FROM species
            WHERE id = $1
            """,
            species_id,
        )

    async def list_all(self, *, limit: int, offset: int = 0) -> list[dict]:
        return await db.fetch_all(
            self._db,
            f"""
            SELECT {_SPECIES_COLUMNS}
            FROM species
            ORDER BY scientific_name
            LIMIT $1 OFFSET $2
            """,
            limit,
            offset,
        )

    async def count(self) -> int:
        row = await db.fetch_one(self._db, "SELECT count(*) AS total FROM species")
        return int(row["total"]) if row is not None else 0

    async def legislations_for(self, species_ids: list[str]) -> list[dict]:
        if not species_ids:
            return []
        return await db.fetch_all(
            self._db,
            f"""
            SELECT {_LEGISLATION_COLUMNS}
            FROM species_legislations
            WHERE species_id = ANY($1::text[])
            ORDER BY species_id, created_at
            """,
            species_ids,
        )

    async def create(
        self,
        *,
        species_id: str,
        scientific_name: str,
        family: str,
        popular_name: str | None,
        habit: str | None,
    ) -> dict:
        try:
            row = await db.fetch_one(
                self._db,
                f"""
                INSERT INTO species (id, scientific_name, family, popular_name, habit)
                VALUES ($1, $2, $3, $4, $5)
                RETURNING {_SPECIES_COLUMNS}
                """,
                species_id,
                scientific_name,
                family,
                popular_name,
                habit,
            )
        except asyncpg.UniqueViolationError as exc:
            raise AppError(
                ErrorCode.CONFLICT,
                "species already exists",
                fields={"scientific_name": scientific_name},
            ) from exc
        if row is None:
            raise RuntimeError("Failed to create species.")
        return row

    async def create_legislation(
        self,
        *,
        legislation_id: str,
        species_id: str,
        law_scope: str,
        law_id: str | None,
        is_law_active: bool,
        species_form_factor: float,
        is_species_protected: bool,
        species_threat_status: str,
        species_origin: str,
        successional_ecology: str,
    ) -> dict:
        row = await db.fetch_one(
            self._db,
            f"""
            INSERT INTO species_legislations (
                id, species_id, law_scope, law_id, is_law_active, species_form_factor,
                is_species_protected, species_threat_status, species_origin, successional_ecology
            )
            VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10)
            RETURNING {_LEGISLATION_COLUMNS}
            """,
            legislation_id,
            species_id,
            law_scope,
            law_id,
            is_law_active,
            species_form_factor,
            is_species_protected,
            species_threat_status,
            species_origin,
            successional_ecology,
        )
        if row is None:
            raise RuntimeError("Failed to create species legislation.")
        return row
