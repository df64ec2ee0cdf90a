"""
Phytosociological analysis API schemas.

Numeric and required fields default to empty values here so that the
service can report which attribute is missing with a kinded error.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import Field, field_validator

from core.schemas import CamelModel, blank_to_none
from specimens.schemas import SpecimenMeasurements, SpecimenResponse


class SpecimenInput(SpecimenMeasurements):
    scientific_name: str = ""


class AnalysisFields(CamelModel):
    title: str = ""
    initial_date: datetime | None = None
    portion_quantity: int = 0
    portion_area: float = 0
    total_area: float = 0
    sampled_area: float = 0
    description: str | None = None

    @field_validator("description", mode="before")
    @classmethod
    def _blank_to_none(cls, value):
        return blank_to_none(value) if isinstance(value, str) else value


class CreatePhytoAnalysisRequest(AnalysisFields):
    project_id: str = ""
    specimens: list[SpecimenInput] = Field(default_factory=list)


class UpdatePhytoAnalysisRequest(AnalysisFields):
    pass


class PhytoAnalysisResponse(CamelModel):
    id: str
    title: str
    initial_date: datetime
    portion_quantity: int
    portion_area: float
    total_area: float
    sampled_area: float
    description: str | None = None
    project_id: str
    created_at: datetime | None = None
    updated_at: datetime | None = None


class PhytoAnalysisListResponse(CamelModel):
    items: list[PhytoAnalysisResponse]
    count: int
    limit: int | None = None
    offset: int | None = None


class ProjectInfo(CamelModel):
    id: str
    title: str


class SpeciesDataResponse(CamelModel):
    scientific_name: str
    da: float
    dr: float
    fa: float


class CollectorCurvePointResponse(CamelModel):
    cumulative_area: float
    observed_species: int
    trend_species: float


class IndicatorsResponse(CamelModel):
    individuals_count: int
    species_count: int
    plots_count: int
    plots_area: float
    density: float | None = None
    basal_area: float | None = None
    volume: float | None = None
    replacement_volume: float | None = None
    sampled_area_ha: float | None = None
    shannon_index: float | None = None
    simpson_index: float | None = None
    pielou_evenness_index: float | None = None
    species_data: list[SpeciesDataResponse] = Field(default_factory=list)
    collector_curve: list[CollectorCurvePointResponse] | None = None


class PhytoAnalysisDetailResponse(PhytoAnalysisResponse):
    project: ProjectInfo | None = None
    specimens: list[SpecimenResponse] = Field(default_factory=list)
    individuals_count: int
    species_count: int
    indicators: IndicatorsResponse


class SpecimenListResponse(CamelModel):
    items: list[SpecimenResponse]
    count: int
