"""
Phytosociological analysis business logic.

`create_analysis` is the aggregate writer: the analysis row and all of its
specimens are written inside one unit of work, so a failure on any specimen
leaves nothing behind.
"""

from __future__ import annotations

import uuid

from core.errors import AppError, ErrorCode
from core.logging import get_logger
from core.pagination import clamp_limit
from core.uow import Repos, UnitOfWork
from specimens.service import is_positive, to_specimen_response, validate_measurements

from . import indicators, schemas

log = get_logger(__name__)


def _validate_fields(payload: schemas.AnalysisFields) -> None:
    if not payload.title.strip():
        raise AppError(ErrorCode.INVALID, "missing required fields", fields={"field": "title"})
    if payload.initial_date is None:
        raise AppError(ErrorCode.INVALID, "missing required fields", fields={"field": "initialDate"})

    checks = (
        ("portionQuantity", payload.portion_quantity),
        ("portionArea", payload.portion_area),
        ("totalArea", payload.total_area),
        ("sampledArea", payload.sampled_area),
    )
    for name, value in checks:
        if not is_positive(value):
            raise AppError(ErrorCode.INVALID, "invalid phyto analysis data", fields={"field": name, "value": value})


def validate_create(payload: schemas.CreatePhytoAnalysisRequest) -> None:
    """All input checks of the aggregate writer. Runs before any I/O."""
    if not payload.project_id.strip():
        raise AppError(ErrorCode.INVALID, "missing required fields", fields={"field": "projectId"})
    _validate_fields(payload)

    for index, specimen in enumerate(payload.specimens):
        validate_measurements(
            portion=specimen.portion,
            height=specimen.height,
            caps=specimen.caps(),
            register_date=specimen.register_date,
            index=index,
        )
        if not specimen.scientific_name.strip():
            raise AppError(
                ErrorCode.INVALID,
                "specimen scientific name is required",
                fields={"specimen_index": index, "field": "scientificName"},
            )


def _to_response(row: dict) -> schemas.PhytoAnalysisResponse:
    return schemas.PhytoAnalysisResponse(
        id=str(row["id"]),
        title=str(row["title"]),
        initial_date=row["initial_date"],
        portion_quantity=int(row["portion_quantity"]),
        portion_area=float(row["portion_area"]),
        total_area=float(row["total_area"]),
        sampled_area=float(row["sampled_area"]),
        description=row.get("description"),
        project_id=str(row["project_id"]),
        created_at=row.get("created_at"),
        updated_at=row.get("updated_at"),
    )


def _to_indicators_response(data: indicators.Indicators) -> schemas.IndicatorsResponse:
    curve = None
    if data.collector_curve is not None:
        curve = [
            schemas.CollectorCurvePointResponse(
                cumulative_area=p.cumulative_area,
                observed_species=p.observed_species,
                trend_species=p.trend_species,
            )
            for p in data.collector_curve
        ]
    return schemas.IndicatorsResponse(
        individuals_count=data.individuals_count,
        species_count=data.species_count,
        plots_count=data.plots_count,
        plots_area=data.plots_area,
        density=data.density,
        basal_area=data.basal_area,
        volume=data.volume,
        replacement_volume=data.replacement_volume,
        sampled_area_ha=data.sampled_area_ha,
        shannon_index=data.shannon_index,
        simpson_index=data.simpson_index,
        pielou_evenness_index=data.pielou_evenness_index,
        species_data=[
            schemas.SpeciesDataResponse(scientific_name=s.scientific_name, da=s.da, dr=s.dr, fa=s.fa)
            for s in data.species_data
        ],
        collector_curve=curve,
    )


def _not_found(analysis_id: str) -> AppError:
    return AppError(ErrorCode.NOT_FOUND, "phyto analysis not found", fields={"phyto_analysis_id": analysis_id})


async def create_analysis(
    payload: schemas.CreatePhytoAnalysisRequest,
    *,
    tenant_id: str,
    uow: UnitOfWork,
) -> str:
    validate_create(payload)
    project_id = payload.project_id.strip()

    async def _write(repos: Repos) -> str:
        analyses = repos.phyto_analyses()
        if await analyses.project_in_tenant(project_id, enterprise_id=tenant_id) is None:
            raise AppError(ErrorCode.NOT_FOUND, "project not found", fields={"project_id": project_id})

        analysis_id = str(uuid.uuid4())
        await analyses.create(
            analysis_id=analysis_id,
            title=payload.title.strip(),
            initial_date=payload.initial_date,
            portion_quantity=payload.portion_quantity,
            portion_area=payload.portion_area,
            total_area=payload.total_area,
            sampled_area=payload.sampled_area,
            description=payload.description,
            project_id=project_id,
        )

        species = repos.species()
        specimens = repos.specimens()
        resolved: dict[str, str] = {}
        for index, item in enumerate(payload.specimens):
            name = item.scientific_name.strip()
            species_id = resolved.get(name)
            if species_id is None:
                row = await species.get_by_scientific_name(name)
                if row is None:
                    raise AppError(
                        ErrorCode.NOT_FOUND,
                        f"species not found with scientific name: {name}",
                        fields={"specimen_index": index, "scientific_name": name},
                    )
                species_id = resolved[name] = str(row["id"])

            await specimens.create(
                specimen_id=str(uuid.uuid4()),
                portion=item.portion.strip(),
                height=item.height,
                caps=item.caps(),
                register_date=item.register_date,
                phyto_analysis_id=analysis_id,
                species_id=species_id,
            )
        return analysis_id

    analysis_id = await uow.run_in_tx(_write)
    log.info("analysis_created", analysis_id=analysis_id, specimens=len(payload.specimens))
    return analysis_id


async def update_analysis(
    analysis_id: str,
    payload: schemas.UpdatePhytoAnalysisRequest,
    *,
    tenant_id: str,
    uow: UnitOfWork,
) -> schemas.PhytoAnalysisResponse:
    """
    Apply the mutable subset to a stored analysis.

    The stored row is read first; its project id is kept whatever the
    payload carries.
    """
    _validate_fields(payload)

    async def _write(repos: Repos) -> dict:
        analyses = repos.phyto_analyses()
        current = await analyses.get_by_id(analysis_id, enterprise_id=tenant_id)
        if current is None:
            raise _not_found(analysis_id)

        row = await analyses.update(
            str(current["id"]),
            title=payload.title.strip(),
            initial_date=payload.initial_date,
            portion_quantity=payload.portion_quantity,
            portion_area=payload.portion_area,
            total_area=payload.total_area,
            sampled_area=payload.sampled_area,
            description=payload.description,
        )
        if row is None:
            raise _not_found(analysis_id)
        return row

    return _to_response(await uow.run_in_tx(_write))


async def delete_analysis(analysis_id: str, *, tenant_id: str, uow: UnitOfWork) -> None:
    deleted = await uow.repos().phyto_analyses().delete(analysis_id, enterprise_id=tenant_id)
    if not deleted:
        raise _not_found(analysis_id)


async def get_analysis(analysis_id: str, *, tenant_id: str, uow: UnitOfWork) -> schemas.PhytoAnalysisDetailResponse:
    repos = uow.repos()
    row = await repos.phyto_analyses().get_by_id(analysis_id, enterprise_id=tenant_id)
    if row is None:
        raise _not_found(analysis_id)

    specimen_rows = await repos.specimens().list_by_analysis(analysis_id)
    data = indicators.compute(
        specimen_rows,
        portion_area=float(row["portion_area"]),
        portion_quantity=int(row["portion_quantity"]),
    )
    base = _to_response(row)
    return schemas.PhytoAnalysisDetailResponse(
        **base.model_dump(),
        project=schemas.ProjectInfo(id=str(row["project_id"]), title=str(row.get("project_title") or "")),
        specimens=[to_specimen_response(s) for s in specimen_rows],
        individuals_count=data.individuals_count,
        species_count=data.species_count,
        indicators=_to_indicators_response(data),
    )


async def list_analyses(
    *,
    tenant_id: str,
    uow: UnitOfWork,
    project_id: str | None = None,
    limit: int | None = None,
    offset: int = 0,
) -> schemas.PhytoAnalysisListResponse:
    page_limit = clamp_limit(limit)
    page_offset = max(0, offset)
    rows = await uow.repos().phyto_analyses().list_page(
        enterprise_id=tenant_id,
        project_id=(project_id or "").strip() or None,
        limit=page_limit,
        offset=page_offset,
    )
    items = [_to_response(r) for r in rows]
    return schemas.PhytoAnalysisListResponse(items=items, count=len(items), limit=page_limit, offset=page_offset)


async def list_by_project(project_id: str, *, tenant_id: str, uow: UnitOfWork) -> schemas.PhytoAnalysisListResponse:
    rows = await uow.repos().phyto_analyses().list_by_project(project_id, enterprise_id=tenant_id)
    items = [_to_response(r) for r in rows]
    return schemas.PhytoAnalysisListResponse(items=items, count=len(items))


async def list_by_enterprise(
    enterprise_id: str,
    *,
    tenant_id: str,
    uow: UnitOfWork,
) -> schemas.PhytoAnalysisListResponse:
    if enterprise_id != tenant_id:
        raise AppError(ErrorCode.FORBIDDEN, "enterprise access required", fields={"enterprise_id": enterprise_id})
    rows = await uow.repos().phyto_analyses().list_by_enterprise(tenant_id)
    items = [_to_response(r) for r in rows]
    return schemas.PhytoAnalysisListResponse(items=items, count=len(items))


async def list_specimens(analysis_id: str, *, tenant_id: str, uow: UnitOfWork) -> schemas.SpecimenListResponse:
    repos = uow.repos()
    if await repos.phyto_analyses().get_by_id(analysis_id, enterprise_id=tenant_id) is None:
        raise _not_found(analysis_id)
    items = [to_specimen_response(s) for s in await repos.specimens().list_by_analysis(analysis_id)]
    return schemas.SpecimenListResponse(items=items, count=len(items))
