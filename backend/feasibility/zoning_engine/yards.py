"""
NYC Zoning Resolution yard requirements.

Front and side yards are table-driven per district; the rear yard is a
fixed 20 ft baseline. Site-specific modifiers (corner-lot reductions,
line-up rules, shallow-lot relief) are listed as notes and never applied
automatically.

Sources:
  - ZR Section 23-321 / 23-322 (front yards)
  - ZR Section 23-332 / 23-335 (side yards)
  - ZR Section 23-342 (rear yards)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from feasibility.models.results import FixedResult
from feasibility.models.schemas import BuildingType, NormalizedDistrict
from feasibility.zoning_engine.citations import cite
from feasibility.zoning_engine.districts import is_high_density, is_low_density, resolve, unresolved

FRONT_YARD_LABEL = "front yard"
SIDE_YARD_LABEL = "side yard"
REAR_YARD_LABEL = "rear yard"

# ──────────────────────────────────────────────────────────────────
# FRONT YARDS, R1-R5 (ZR 23-321), feet
# ──────────────────────────────────────────────────────────────────

FRONT_YARD_DEPTH = {
    "R1":    20,
    "R1-1":  20,
    "R1-2":  20,
    "R1-2A": 20,
    "R2":    15,
    "R2A":   15,
    "R2X":   15,
    "R3":    15,
    "R3-1":  15,
    "R3-2":  15,
    "R3A":   10,
    "R3X":   10,
    "R4":    10,
    "R4-1":  10,
    "R4A":   10,
    "R4B":   5,
    "R5":    10,
    "R5A":   10,
    "R5B":   5,
    "R5D":   5,
}

# Contextual districts where the front yard must line up with adjacent yards
LINE_UP_DISTRICTS = {"R4B", "R5B", "R5D"}

# ──────────────────────────────────────────────────────────────────
# SIDE YARDS, R1-R5 single- and two-family (ZR 23-332), feet per side
# ──────────────────────────────────────────────────────────────────

SIDE_YARD_WIDTH = {
    "R1":    8,
    "R1-1":  8,
    "R1-2":  15,
    "R1-2A": 15,
    "R2":    5,
    "R2A":   5,
    "R2X":   5,
    "R3":    5,
    "R3-1":  5,
    "R3-2":  5,
    "R3A":   5,
    "R3X":   5,
    "R4":    5,
    "R4-1":  5,
    "R4A":   5,
    "R4B":   0,
    "R5":    5,
    "R5A":   5,
    "R5B":   0,
    "R5D":   0,
}

MULTIPLE_DWELLING_SIDE_YARD_LOW_DENSITY = 8

REAR_YARD_BASELINE_FT = 20
NARROW_LOT_FRONTAGE_FT = 40
NARROW_LOT_REAR_YARD_FT = 30
SHALLOW_LOT_DEPTH_FT = 95


@dataclass(frozen=True)
class YardRequirements:
    front: object
    side: object
    rear: object
    shallow_lot_candidate: bool = False
    lot_frontage_missing: bool = False


def calculate_front_yard(district: Optional[NormalizedDistrict]):
    """Minimum front yard depth."""
    if is_high_density(district):
        return FixedResult(
            value=0,
            notes=("No front yard required in R6-R12 districts.",),
            **cite("23-322"),
        )
    if not is_low_density(district):
        return unresolved(district, FRONT_YARD_LABEL)

    resolution = resolve(FRONT_YARD_DEPTH, district, FRONT_YARD_LABEL)
    if resolution is None:
        return unresolved(district, FRONT_YARD_LABEL)

    notes = [
        "Corner lots: one front yard may be reduced per ZR §23-321; not evaluated.",
        "Front yard may need to be deeper where adjacent buildings are set back further.",
    ]
    if district.normalized in LINE_UP_DISTRICTS:
        notes.append(
            f"{district.normalized} line-up rule: front yard must be at least as deep as an "
            "adjacent front yard and need not exceed 20 ft; not evaluated."
        )
    return FixedResult(
        value=resolution.value,
        notes=tuple(notes),
        assumptions=(resolution.assumption,) if resolution.assumption else (),
        requires_manual_review=True,
        **cite("23-321"),
    )


def calculate_side_yard(district: Optional[NormalizedDistrict], building_type: BuildingType):
    """Minimum width of each side yard."""
    if is_high_density(district):
        return FixedResult(
            value=0,
            notes=(
                "Side yards are not required in R6-R12 districts.",
                "If a side yard is provided it must be at least 8 ft wide.",
            ),
            requires_manual_review=True,
            **cite("23-335"),
        )
    if not is_low_density(district):
        return unresolved(district, SIDE_YARD_LABEL)

    if building_type == "multiple_dwelling":
        return FixedResult(
            value=MULTIPLE_DWELLING_SIDE_YARD_LOW_DENSITY,
            notes=(
                "Multiple dwellings in R1-R5 districts: two side yards, each at least 8 ft.",
                "Side yards may be eliminated on lots abutting an existing party wall; not evaluated.",
            ),
            requires_manual_review=True,
            **cite("23-332"),
        )

    resolution = resolve(SIDE_YARD_WIDTH, district, SIDE_YARD_LABEL)
    if resolution is None:
        return unresolved(district, SIDE_YARD_LABEL)
    notes = [
        "Assumes a detached building; semi-detached and attached buildings have fewer side yards.",
        "Minimum total width of both side yards and narrow-lot reductions not evaluated.",
    ]
    if resolution.value == 0:
        notes[0] = "Attached buildings in this district need no side yards; detached buildings do."
    return FixedResult(
        value=resolution.value,
        notes=tuple(notes),
        assumptions=(resolution.assumption,) if resolution.assumption else (),
        requires_manual_review=True,
        **cite("23-332"),
    )


def calculate_rear_yard(
    district: Optional[NormalizedDistrict],
    lot_frontage: Optional[float],
    lot_depth: Optional[float],
):
    """20 ft rear yard baseline with narrow- and shallow-lot caveats."""
    if not (is_low_density(district) or is_high_density(district)):
        return unresolved(district, REAR_YARD_LABEL)

    notes = [
        "Through lots and corner lots may substitute rear yard equivalents or need no rear "
        "yard; not evaluated.",
    ]
    if lot_frontage is None:
        notes.append("Lot frontage unavailable; narrow-lot rear yard rule could not be checked.")
    elif lot_frontage < NARROW_LOT_FRONTAGE_FT:
        notes.append(
            f"Lot frontage {lot_frontage:g} ft is < {NARROW_LOT_FRONTAGE_FT} ft; a "
            f"{NARROW_LOT_REAR_YARD_FT} ft rear yard may be required."
        )
    if lot_depth is not None and lot_depth < SHALLOW_LOT_DEPTH_FT:
        notes.append(
            f"Shallow lot: depth {lot_depth:g} ft is under {SHALLOW_LOT_DEPTH_FT} ft. A reduced "
            "rear yard may apply if the lot existed in this form on Dec 15, 1961; "
            "not verified."
        )
    return FixedResult(
        value=REAR_YARD_BASELINE_FT,
        notes=tuple(notes),
        requires_manual_review=True,
        **cite("23-342"),
    )


def calculate_yard_requirements(
    district: Optional[NormalizedDistrict],
    building_type: BuildingType,
    lot_frontage: Optional[float],
    lot_depth: Optional[float],
) -> YardRequirements:
    """Front, side and rear yards plus the lot-shape flags they raise."""
    return YardRequirements(
        front=calculate_front_yard(district),
        side=calculate_side_yard(district, building_type),
        rear=calculate_rear_yard(district, lot_frontage, lot_depth),
        shallow_lot_candidate=lot_depth is not None and lot_depth < SHALLOW_LOT_DEPTH_FT,
        lot_frontage_missing=lot_frontage is None,
    )
