"""
Specimen business logic.

Specimens are tenant scoped through their analysis' project. The same
measurement checks run here and in the analysis aggregate writer.
"""

from __future__ import annotations

import math
import uuid
from datetime import datetime
from typing import Any

from core.errors import AppError, ErrorCode
from core.uow import Repos, UnitOfWork
from phytoanalysis import indicators

from . import schemas


def is_positive(value: float | None) -> bool:
    """Strictly positive and finite; NaN and infinities are rejected."""
    return value is not None and math.isfinite(value) and value > 0


def validate_measurements(
    *,
    portion: str,
    height: float,
    caps: list[float | None],
    register_date: datetime | None,
    index: int | None = None,
) -> None:
    """
    Raise AppError(invalid) naming the first offending attribute.
    """
    where: dict[str, Any] = {} if index is None else {"specimen_index": index}

    if not (portion or "").strip():
        raise AppError(ErrorCode.INVALID, "specimen portion is required", fields={**where, "field": "portion"})
    if not is_positive(height):
        raise AppError(ErrorCode.INVALID, "specimen height must be positive", fields={**where, "field": "height"})
    if not caps or not is_positive(caps[0]):
        raise AppError(ErrorCode.INVALID, "specimen cap1 must be positive", fields={**where, "field": "cap1"})
    for position, value in enumerate(caps[1:], start=2):
        if value is not None and not is_positive(value):
            raise AppError(
                ErrorCode.INVALID,
                f"specimen cap{position} must be positive",
                fields={**where, "field": f"cap{position}"},
            )
    if register_date is None:
        raise AppError(ErrorCode.INVALID, "specimen register date is required", fields={**where, "field": "registerDate"})


def to_specimen_response(row: dict) -> schemas.SpecimenResponse:
    abi = indicators.individual_basal_area_cm2(indicators.caps_of(row))
    basal = indicators.basal_area_m2(abi)
    return schemas.SpecimenResponse(
        id=str(row["id"]),
        portion=str(row["portion"]),
        height=float(row["height"]),
        cap1=float(row["cap1"]),
        cap2=row.get("cap2"),
        cap3=row.get("cap3"),
        cap4=row.get("cap4"),
        cap5=row.get("cap5"),
        cap6=row.get("cap6"),
        register_date=row["register_date"],
        phyto_analysis_id=str(row["phyto_analysis_id"]),
        species_id=str(row["species_id"]),
        scientific_name=str(row.get("scientific_name") or ""),
        family=str(row.get("family") or ""),
        popular_name=row.get("popular_name"),
        created_at=row.get("created_at"),
        updated_at=row.get("updated_at"),
        volume_m3=indicators.volume_m3(basal, float(row["height"])),
        dbh_cm=indicators.dbh_cm(abi),
        basal_area_m2=basal,
    )


async def _require_species(repos: Repos, species_id: str) -> None:
    if not species_id or await repos.species().get_by_id(species_id) is None:
        raise AppError(ErrorCode.NOT_FOUND, "species not found", fields={"species_id": species_id})


async def create_specimen(
    payload: schemas.CreateSpecimenRequest,
    *,
    tenant_id: str,
    uow: UnitOfWork,
) -> str:
    if not payload.phyto_analysis_id.strip() or not payload.species_id.strip():
        raise AppError(ErrorCode.INVALID, "missing required fields", fields={"fields": ["phytoAnalysisId", "speciesId"]})
    validate_measurements(
        portion=payload.portion,
        height=payload.height,
        caps=payload.caps(),
        register_date=payload.register_date,
    )

    async def _write(repos: Repos) -> str:
        analysis = await repos.phyto_analyses().get_by_id(payload.phyto_analysis_id, enterprise_id=tenant_id)
        if analysis is None:
            raise AppError(
                ErrorCode.NOT_FOUND,
                "phyto analysis not found",
                fields={"phyto_analysis_id": payload.phyto_analysis_id},
            )
        await _require_species(repos, payload.species_id)
        return await repos.specimens().create(
            specimen_id=str(uuid.uuid4()),
            portion=payload.portion.strip(),
            height=payload.height,
            caps=payload.caps(),
            register_date=payload.register_date,
            phyto_analysis_id=payload.phyto_analysis_id,
            species_id=payload.species_id,
        )

    return await uow.run_in_tx(_write)


async def get_specimen(specimen_id: str, *, tenant_id: str, uow: UnitOfWork) -> schemas.SpecimenResponse:
    row = await uow.repos().specimens().get_by_id(specimen_id, enterprise_id=tenant_id)
    if row is None:
        raise AppError(ErrorCode.NOT_FOUND, "specimen not found", fields={"specimen_id": specimen_id})
    return to_specimen_response(row)


async def update_specimen(
    specimen_id: str,
    payload: schemas.UpdateSpecimenRequest,
    *,
    tenant_id: str,
    uow: UnitOfWork,
) -> schemas.SpecimenResponse:
    if not payload.species_id.strip():
        raise AppError(ErrorCode.INVALID, "missing required fields", fields={"fields": ["speciesId"]})
    validate_measurements(
        portion=payload.portion,
        height=payload.height,
        caps=payload.caps(),
        register_date=payload.register_date,
    )

    async def _write(repos: Repos) -> dict:
        specimens = repos.specimens()
        if await specimens.get_by_id(specimen_id, enterprise_id=tenant_id) is None:
            raise AppError(ErrorCode.NOT_FOUND, "specimen not found", fields={"specimen_id": specimen_id})
        await _require_species(repos, payload.species_id)
        await specimens.update(
            specimen_id,
            portion=payload.portion.strip(),
            height=payload.height,
            caps=payload.caps(),
            register_date=payload.register_date,
            species_id=payload.species_id,
        )
        return await specimens.get_by_id(specimen_id, enterprise_id=tenant_id)

    return to_specimen_response(await uow.run_in_tx(_write))


async def delete_specimen(specimen_id: str, *, tenant_id: str, uow: UnitOfWork) -> None:
    deleted = await uow.repos().specimens().delete(specimen_id, enterprise_id=tenant_id)
    if not deleted:
        raise AppError(ErrorCode.NOT_FOUND, "specimen not found", fields={"specimen_id": specimen_id})
