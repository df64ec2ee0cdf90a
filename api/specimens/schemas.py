"""
Specimen API schemas.
"""

from __future__ import annotations

from datetime import datetime

from core.schemas import CamelModel


class SpecimenMeasurements(CamelModel):
    portion: str = ""
    height: float = 0
    cap1: float = 0
    cap2: float | None = None
    cap3: float | None = None
    cap4: float | None = None
    cap5: float | None = None
    cap6: float | None = None
    register_date: datetime | None = None

    def caps(self) -> list[float | None]:
        return [self.cap1, self.cap2, self.cap3, self.cap4, self.cap5, self.cap6]


class CreateSpecimenRequest(SpecimenMeasurements):
    phyto_analysis_id: str = ""
    species_id: str = ""


class UpdateSpecimenRequest(SpecimenMeasurements):
    species_id: str = ""


class SpecimenResponse(CamelModel):
    id: str
    portion: str
    height: float
    cap1: float
    cap2: float | None = None
    cap3: float | None = None
    cap4: float | None = None
    cap5: float | None = None
    cap6: float | None = None
    register_date: datetime
    phyto_analysis_id: str
    species_id: str
    scientific_name: str
    family: str
    popular_name: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    volume_m3: float
    dbh_cm: float
    basal_area_m2: float
