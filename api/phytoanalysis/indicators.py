"""
Phytosociological indicators.

Inputs are specimen rows (dicts with portion, height, cap1..cap6 and
scientific_name) plus the analysis plot layout (portion area in m², number of
plots).

Formulas:
- individual basal area ABI (cm²) = sum(cap_i² / 4π) over the measured caps
- basal area G (m²) = ABI / 10 000
- volume (m³) = G × height
- Shannon H' = -sum(p_i ln p_i), Simpson D = sum(p_i²), Pielou J' = H' / ln S
- per species: DA = n_i / ha, DR = n_i / N × 100, FA = plots_i / P × 100
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Iterable

CAP_FIELDS = ("cap1", "cap2", "cap3", "cap4", "cap5", "cap6")

M2_PER_HECTARE = 10_000.0


@dataclass(frozen=True)
class SpeciesData:
    scientific_name: str
    da: float
    dr: float
    fa: float


@dataclass(frozen=True)
class CollectorCurvePoint:
    cumulative_area: float
    observed_species: int
    trend_species: float


@dataclass
class Indicators:
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
    species_data: list[SpeciesData] = field(default_factory=list)
    collector_curve: list[CollectorCurvePoint] | None = None


def caps_of(specimen: dict[str, Any]) -> list[float]:
    return [float(specimen[name]) for name in CAP_FIELDS if specimen.get(name) is not None]


def individual_basal_area_cm2(caps: Iterable[float]) -> float:
    return sum((c * c) / (4 * math.pi) for c in caps)


def basal_area_m2(abi_cm2: float) -> float:
    return abi_cm2 / M2_PER_HECTARE


def volume_m3(basal_m2: float, height: float) -> float:
    return basal_m2 * height


def dbh_cm(abi_cm2: float) -> float:
    """Diameter at breast height from the equivalent single circumference."""
    if abi_cm2 <= 0:
        return 0.0
    cap_mean = math.sqrt(abi_cm2 * 4 * math.pi)
    return cap_mean / math.pi


def collector_curve(specimens: list[dict[str, Any]], portion_area: float) -> list[CollectorCurvePoint] | None:
    """
    Cumulative species count after each plot, in the order plots first appear.

    The trend is a least-squares line over all points, clamped at zero.
    """
    plots: dict[str, set[str]] = {}
    for s in specimens:
        name = s.get("scientific_name") or ""
        if not name:
            continue
        plots.setdefault(str(s.get("portion") or ""), set()).add(name)

    if not plots:
        return None

    xs: list[float] = [0.0]
    ys: list[int] = [0]
    seen: set[str] = set()
    area = 0.0
    for names in plots.values():
        area += portion_area
        seen |= names
        xs.append(area)
        ys.append(len(seen))

    n = float(len(xs))
    sum_x = sum(xs)
    sum_y = float(sum(ys))
    sum_xy = sum(x * y for x, y in zip(xs, ys))
    sum_x2 = sum(x * x for x in xs)
    denominator = n * sum_x2 - sum_x * sum_x

    slope = intercept = 0.0
    if denominator != 0:
        slope = (n * sum_xy - sum_x * sum_y) / denominator
        intercept = (sum_y - slope * sum_x) / n

    return [
        CollectorCurvePoint(
            cumulative_area=x,
            observed_species=y,
            trend_species=max(0.0, intercept + slope * x),
        )
        for x, y in zip(xs, ys)
    ]


def compute(specimens: list[dict[str, Any]], *, portion_area: float, portion_quantity: int) -> Indicators:
    plots_count = int(portion_quantity)
    plots_area = float(portion_area) * plots_count

    if not specimens:
        return Indicators(
            individuals_count=0,
            species_count=0,
            plots_count=plots_count,
            plots_area=plots_area,
        )

    total = len(specimens)
    per_species: dict[str, int] = {}
    species_plots: dict[str, set[str]] = {}
    for s in specimens:
        name = s.get("scientific_name") or ""
        if not name:
            continue
        per_species[name] = per_species.get(name, 0) + 1
        species_plots.setdefault(name, set()).add(str(s.get("portion") or ""))

    sampled_area_ha = plots_area / M2_PER_HECTARE

    total_basal = 0.0
    total_volume = 0.0
    for s in specimens:
        g = basal_area_m2(individual_basal_area_cm2(caps_of(s)))
        total_basal += g
        total_volume += volume_m3(g, float(s.get("height") or 0.0))

    out = Indicators(
        individuals_count=total,
        species_count=len(per_species),
        plots_count=plots_count,
        plots_area=plots_area,
        replacement_volume=total_volume,
        sampled_area_ha=sampled_area_ha,
    )
    if sampled_area_ha > 0:
        out.density = total / sampled_area_ha
        out.basal_area = total_basal / sampled_area_ha
        out.volume = total_volume / sampled_area_ha

    if per_species:
        shannon = 0.0
        simpson = 0.0
        for n_i in per_species.values():
            p_i = n_i / total
            shannon -= p_i * math.log(p_i)
            simpson += p_i * p_i
        out.shannon_index = shannon
        out.simpson_index = simpson
        if len(per_species) > 1:
            out.pielou_evenness_index = shannon / math.log(len(per_species))

    out.species_data = [
        SpeciesData(
            scientific_name=name,
            da=n_i / sampled_area_ha if sampled_area_ha > 0 else 0.0,
            dr=n_i / total * 100.0,
            fa=len(species_plots[name]) / plots_count * 100.0 if plots_count > 0 else 0.0,
        )
        for name, n_i in sorted(per_species.items())
    ]
    out.collector_curve = collector_curve(specimens, float(portion_area))
    return out
