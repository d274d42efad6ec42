"""
NYC Zoning Resolution maximum residential lot coverage.

Lot coverage is the share of the lot a building may occupy. Rules are
written per base district, so lookups here key on the base district
rather than the full code.

Sources:
  - ZR Section 23-361 (R1-R5 Districts)
  - ZR Section 23-362 (R6-R12 Districts)
"""

from __future__ import annotations

from typing import Optional

from feasibility.models.results import FixedResult, unsupported
from feasibility.models.schemas import BuildingType, LotType, NormalizedDistrict
from feasibility.zoning_engine.citations import cite
from feasibility.zoning_engine.districts import is_high_density, is_low_density, unresolved

LOT_COVERAGE_LABEL = "lot coverage"

# Single- and two-family residences, R1-R5: (corner, interior or through)
SINGLE_TWO_FAMILY_COVERAGE = {
    "R1": (0.80, 0.40),
    "R2": (0.80, 0.40),
    "R3": (0.80, 0.50),
    "R4": (0.80, 0.60),
    "R5": (0.80, 0.60),
}

MULTIPLE_DWELLING_COVERAGE = (1.00, 0.80)
HIGH_DENSITY_COVERAGE = (1.00, 0.80)

# Coverage derived from yard rules rather than a fixed percentage
YARD_BASED_DISTRICTS = {"R2X", "R3A", "R3X"}


def calculate_lot_coverage(
    district: Optional[NormalizedDistrict],
    lot_type: LotType,
    building_type: BuildingType,
):
    """Maximum lot coverage as a fraction of lot area."""
    is_corner = lot_type == "corner"

    if is_high_density(district):
        corner, interior = HIGH_DENSITY_COVERAGE
        return FixedResult(
            value=corner if is_corner else interior,
            unit="fraction",
            notes=(
                "Standard lot coverage used; eligible-site coverage bonuses not evaluated.",
            ),
            **cite("23-362(a)"),
        )

    if not is_low_density(district):
        return unresolved(district, LOT_COVERAGE_LABEL)

    if district.normalized in YARD_BASED_DISTRICTS:
        return unsupported(
            f"Lot coverage in {district.normalized} is governed by yard-based rules; "
            "not computed.",
            requires_manual_review=True,
            **cite("23-361"),
        )

    if building_type == "multiple_dwelling":
        corner, interior = MULTIPLE_DWELLING_COVERAGE
        section = "23-361(b)"
        basis = "multiple dwelling"
    else:
        corner, interior = SINGLE_TWO_FAMILY_COVERAGE[district.base_district]
        section = "23-361(a)"
        basis = "single- or two-family residence"

    lot_label = "corner lot" if is_corner else "interior or through lot"
    return FixedResult(
        value=corner if is_corner else interior,
        unit="fraction",
        notes=(f"Coverage for a {basis} on a {lot_label}.",),
        **cite(section),
    )
