"""
Species API schemas.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import Field, field_validator

from core.schemas import CamelModel, blank_to_none


class Habit(str, Enum):
    ARB = "ARB"
    ANF = "ANF"
    ARV = "ARV"
    EME_FIX = "EME FIX"
    FLU_FIX = "FLU FIX"
    FLU_LIV = "FLU LIV"
    HERB = "HERB"
    PAL = "PAL"
    TREP = "TREP"


class LawScope(str, Enum):
    FEDERAL = "FEDERAL"
    STATE = "STATE"
    MUNICIPAL = "MUNICIPAL"


class ThreatStatus(str, Enum):
    LC = "LC"
    CR = "CR"
    NT = "NT"
    EN = "EN"
    VU = "VU"


class Origin(str, Enum):
    EX = "EX"
    EXI = "EXI"
    N = "N"


class SuccessionalEcology(str, Enum):
    P = "P"
    IS = "IS"
    S = "S"
    C = "C"
    LS = "LS"
    MS = "MS"
    AS = "AS"


class LegislationInput(CamelModel):
    law_scope: LawScope
    law_id: str | None = None
    is_law_active: bool = True
    species_form_factor: float = Field(..., gt=0)
    is_species_protected: bool = False
    species_threat_status: ThreatStatus
    species_origin: Origin
    successional_ecology: SuccessionalEcology

    @field_validator("law_id", mode="before")
    @classmethod
    def _blank_to_none(cls, value):
        return blank_to_none(value) if isinstance(value, str) else value


class CreateSpeciesRequest(CamelModel):
    scientific_name: str = Field(..., min_length=1, max_length=300)
    family: str = Field(..., min_length=1, max_length=200)
    popular_name: str | None = Field(default=None, max_length=300)
    habit: Habit | None = None
    legislation: LegislationInput

    @field_validator("popular_name", "habit", mode="before")
    @classmethod
    def _blank_to_none(cls, value):
        return blank_to_none(value) if isinstance(value, str) else value


class LegislationResponse(CamelModel):
    id: str
    law_scope: str
    law_id: str | None = None
    is_law_active: bool
    species_form_factor: float
    is_species_protected: bool
    species_threat_status: str
    species_origin: str
    successional_ecology: str
    created_at: datetime | None = None
    updated_at: datetime | None = None


class SpeciesResponse(CamelModel):
    id: str
    scientific_name: str
    family: str
    popular_name: str | None = None
    habit: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    legislations: list[LegislationResponse] = Field(default_factory=list)


class SpeciesListResponse(CamelModel):
    items: list[SpeciesResponse]
    count: int
    total: int
    limit: int | None = None
    offset: int
