"""
NYC Zoning Resolution dwelling unit density (ZR §23-52).

Maximum dwelling units = residential floor area / dwelling unit factor
(680 sq ft), rounded up only when the fraction is 0.75 or more.

Affordable, senior and conversion projects have no DUF-based cap. The
engine cannot tell which program a project will use, so both scenarios
are returned as a toggle and the standard one is the default.
"""

from __future__ import annotations

import math
from typing import Optional

from feasibility.models.results import NotApplicableResult, Scenario, ToggleResult
from feasibility.models.schemas import BuildingType, NormalizedDistrict
from feasibility.zoning_engine.citations import cite
from feasibility.zoning_engine.districts import unresolved

DENSITY_LABEL = "density"
DWELLING_UNIT_FACTOR = 680
ROUNDING_THRESHOLD = 0.75
ROUNDING_RULE = "Fractions >= 0.75 round up; otherwise round down"

DUF_APPLIES = "duf_applies"
DUF_NOT_APPLICABLE = "duf_not_applicable"


def round_dwelling_units(units_raw: float) -> int:
    """Round a raw unit count: fraction >= 0.75 rounds up, else down."""
    whole = math.floor(units_raw)
    fraction = round(units_raw - whole, 9)
    return whole + 1 if fraction >= ROUNDING_THRESHOLD else whole


def max_dwelling_units(floor_area: float, duf: float = DWELLING_UNIT_FACTOR) -> int:
    return round_dwelling_units(floor_area / duf)


def density_applies(building_type: BuildingType, existing_units: Optional[int]) -> bool:
    """DUF caps apply to multiple dwellings (three or more units)."""
    return building_type == "multiple_dwelling" or (existing_units or 0) > 2


def calculate_density(
    district: Optional[NormalizedDistrict],
    max_buildable_floor_area: Optional[float],
    building_type: BuildingType,
    existing_units: Optional[int],
    requires_manual_review: bool = False,
):
    if district is None or district.base_district is None:
        return unresolved(district, DENSITY_LABEL)
    if not density_applies(building_type, existing_units):
        return NotApplicableResult(
            notes=("Dwelling unit factor applies to multiple dwellings only.",),
            **cite("23-52"),
        )

    standard_notes = [f"DUF = {DWELLING_UNIT_FACTOR} sq ft per dwelling unit."]
    units_raw = None
    units = None
    if max_buildable_floor_area is None:
        standard_notes.append("Max buildable floor area unavailable; unit cap not computed.")
        requires_manual_review = True
    else:
        units_raw = round(max_buildable_floor_area / DWELLING_UNIT_FACTOR, 4)
        units = float(max_dwelling_units(max_buildable_floor_area))

    scenarios = (
        Scenario(
            id=DUF_APPLIES,
            label="Standard (DUF applies)",
            value=units,
            units_raw=units_raw,
            rounding_rule=ROUNDING_RULE,
            notes=tuple(standard_notes),
        ),
        Scenario(
            id=DUF_NOT_APPLICABLE,
            label="Affordable/Senior/Conversion (DUF not applicable)",
            notes=("No DUF-based unit cap; unit count governed by other constraints.",),
            requires_manual_review=True,
        ),
    )
    return ToggleResult(
        scenarios=scenarios,
        default_scenario=DUF_APPLIES,
        notes=("Select the scenario matching the project's housing program.",),
        requires_manual_review=requires_manual_review,
        **cite("23-52"),
    )
