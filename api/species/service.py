"""
Species catalog business logic.

The catalog is global (not tenant scoped): every enterprise resolves
specimens against the same scientific names.
"""

from __future__ import annotations

import uuid

from core.errors import AppError, ErrorCode
from core.uow import Repos, UnitOfWork

from . import schemas

MAX_LIST_LIMIT = 10_000


def _to_legislation_response(row: dict) -> schemas.LegislationResponse:
    return schemas.LegislationResponse(
        id=str(row["id"]),
        law_scope=str(row["law_scope"]),
        law_id=row.get("law_id"),
        is_law_active=bool(row["is_law_active"]),
        species_form_factor=float(row["species_form_factor"]),
        is_species_protected=bool(row["is_species_protected"]),
        species_threat_status=str(row["species_threat_status"]),
        species_origin=str(row["species_origin"]),
        successional_ecology=str(row["successional_ecology"]),
        created_at=row.get("created_at"),
        updated_at=row.get("updated_at"),
    )


def _to_species_response(row: dict, legislations: list[dict]) -> schemas.SpeciesResponse:
    return schemas.SpeciesResponse(
        id=str(row["id"]),
        scientific_name=str(row["scientific_name"]),
        family=str(row["family"]),
        popular_name=row.get("popular_name"),
        habit=row.get("habit"),
        created_at=row.get("created_at"),
        updated_at=row.get("updated_at"),
        legislations=[_to_legislation_response(l) for l in legislations],
    )


def _normalize_limit(limit: int | None) -> int:
    # Absent or zero means "everything", still capped.
    if not limit or limit <= 0:
        return MAX_LIST_LIMIT
    return min(limit, MAX_LIST_LIMIT)


async def list_species(
    *,
    uow: UnitOfWork,
    limit: int | None = None,
    offset: int = 0,
) -> schemas.SpeciesListResponse:
    repo = uow.repos().species()
    page_limit = _normalize_limit(limit)
    rows = await repo.list_all(limit=page_limit, offset=max(0, offset))
    legislations = await repo.legislations_for([str(r["id"]) for r in rows])

    by_species: dict[str, list[dict]] = {}
    for item in legislations:
        by_species.setdefault(str(item["species_id"]), []).append(item)

    items = [_to_species_response(r, by_species.get(str(r["id"]), [])) for r in rows]
    return schemas.SpeciesListResponse(
        items=items,
        count=len(items),
        total=await repo.count(),
        limit=page_limit,
        offset=max(0, offset),
    )


async def get_species(species_id: str, *, uow: UnitOfWork) -> schemas.SpeciesResponse:
    repo = uow.repos().species()
    row = await repo.get_by_id(species_id)
    if row is None:
        raise AppError(ErrorCode.NOT_FOUND, "species not found", fields={"species_id": species_id})
    return _to_species_response(row, await repo.legislations_for([species_id]))


async def create_species(payload: schemas.CreateSpeciesRequest, *, uow: UnitOfWork) -> schemas.SpeciesResponse:
    """
    Create a species and its legislation record in one transaction.
    """
    scientific_name = payload.scientific_name.strip()
    family = payload.family.strip()
    if not scientific_name or not family:
        raise AppError(ErrorCode.INVALID, "missing required fields", fields={"fields": ["scientificName", "family"]})

    legislation = payload.legislation

    async def _write(repos: Repos) -> schemas.SpeciesResponse:
        species_repo = repos.species()
        species_row = await species_repo.create(
            species_id=str(uuid.uuid4()),
            scientific_name=scientific_name,
            family=family,
            popular_name=payload.popular_name,
            habit=payload.habit.value if payload.habit is not None else None,
        )
        legislation_row = await species_repo.create_legislation(
            legislation_id=str(uuid.uuid4()),
            species_id=str(species_row["id"]),
            law_scope=legislation.law_scope.value,
            law_id=legislation.law_id,
            is_law_active=legislation.is_law_active,
            species_form_factor=legislation.species_form_factor,
            is_species_protected=legislation.is_species_protected,
            species_threat_status=legislation.species_threat_status.value,
            species_origin=legislation.species_origin.value,
            successional_ecology=legislation.successional_ecology.value,
        )
        return _to_species_response(species_row, [legislation_row])

    return await uow.run_in_tx(_write)
