"""
NYC Zoning Resolution residential parking requirements.

Updated to reflect City of Yes for Housing Opportunity (adopted Dec 5, 2024).

Three regimes, selected by transit zone:
  - Inner Transit Zone (ZR 25-21): no new residential parking required
  - Outer Transit Zone (ZR 25-22): reduced percentages, generous waivers
  - Beyond the Greater Transit Zone (ZR 25-23): prior percentages, with
    small-lot reductions

Within a regime:
    raw      = units × percent / 100   (percent after small-lot modifiers)
    rounded  = raw rounded half up
    required = 0 if rounded <= waiver max, else rounded

When the transit zone is unknown, or is Manhattan Core / Long Island City,
every regime is returned for manual selection.

Sources:
  - ZR Article II, Chapter 5 as amended
  - City of Yes for Housing Opportunity (ULURP N 240187 ZRY)
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional

from feasibility.models.results import (
    Candidate, ConditionalResult, FixedResult, NotApplicableResult, ParkingComputation, unsupported,
)
from feasibility.models.schemas import BuildingType, NormalizedDistrict, TransitZone
from feasibility.zoning_engine.citations import cite, zr_section, zr_url
from feasibility.zoning_engine.density import density_applies
from feasibility.zoning_engine.districts import base_district, resolve, unresolved
from feasibility.zoning_engine.far_tables import RESIDENTIAL_FAR

PARKING_LABEL = "parking"
NARROW_LOT_FRONTAGE_FT = 25


def _by_district(by_base: dict, overrides: dict | None = None) -> dict:
    """Expand a base-district table to every tabulated residential district."""
    table = dict(by_base)
    for district in RESIDENTIAL_FAR:
        base = base_district(district)
        if base in by_base:
            table[district] = by_base[base]
    table.update(overrides or {})
    return table


# ──────────────────────────────────────────────────────────────────
# REGIME TABLES: district → (percent of dwelling units, waiver max spaces)
# ──────────────────────────────────────────────────────────────────

INNER_TRANSIT_PARKING = _by_district(
    {f"R{n}": (0, 0) for n in range(1, 13)},
)

OUTER_TRANSIT_PARKING = _by_district({
    "R1":  (50, 10),
    "R2":  (50, 10),
    "R3":  (50, 10),
    "R4":  (50, 10),
    "R5":  (50, 10),
    "R6":  (25, 15),
    "R7":  (25, 15),
    "R8":  (20, 15),
    "R9":  (20, 15),
    "R10": (20, 15),
    "R11": (20, 15),
    "R12": (20, 15),
})

BEYOND_GTZ_PARKING = _by_district(
    {
        "R1":  (100, 0),
        "R2":  (100, 0),
        "R3":  (100, 0),
        "R4":  (100, 0),
        "R5":  (85, 0),
        "R6":  (70, 5),
        "R7":  (50, 15),
        "R8":  (40, 15),
        "R9":  (40, 15),
        "R10": (40, 15),
        "R11": (40, 15),
        "R12": (40, 15),
    },
    overrides={
        "R5D":  (50, 5),
        "R6A":  (50, 5),
        "R6B":  (50, 5),
        "R6D":  (50, 5),
        "R7-1": (50, 5),
        "R7D":  (40, 15),
        "R7X":  (40, 15),
    },
)

# ZR 25-23 small-lot modifiers: district → [(max lot area sq ft, percent), ...]
_HIGHER_DENSITY_SMALL_LOTS = [(10000, 0), (15000, 20)]

SMALL_LOT_MODIFIERS = _by_district(
    {f"R{n}": _HIGHER_DENSITY_SMALL_LOTS for n in range(8, 13)},
    overrides={
        "R6":   [(10000, 50)],
        "R6A":  [(10000, 50)],
        "R6B":  [(10000, 50)],
        "R6D":  [(10000, 50)],
        "R6-1": [(10000, 50)],
        "R6-2": [(10000, 50)],
        "R7":   [(10000, 50)],
        "R7-1": [(10000, 50)],
        "R7-2": _HIGHER_DENSITY_SMALL_LOTS,
        "R7A":  _HIGHER_DENSITY_SMALL_LOTS,
        "R7B":  [(10000, 50)],
        "R7D":  _HIGHER_DENSITY_SMALL_LOTS,
        "R7X":  _HIGHER_DENSITY_SMALL_LOTS,
    },
)


@dataclass(frozen=True)
class ParkingRegime:
    key: str
    section: str
    label: str
    table: dict
    applies_small_lot_modifiers: bool = False


REGIMES = {
    "inner": ParkingRegime(
        "existing_inner_transit_25_21", "25-21", "Inner Transit Zone", INNER_TRANSIT_PARKING,
    ),
    "outer": ParkingRegime(
        "outer_transit_25_22", "25-22", "Outer Transit Zone", OUTER_TRANSIT_PARKING,
    ),
    "beyond_gtz": ParkingRegime(
        "beyond_gtz_25_23", "25-23", "Beyond the Greater Transit Zone", BEYOND_GTZ_PARKING,
        applies_small_lot_modifiers=True,
    ),
}

ALL_REGIMES = ("inner", "outer", "beyond_gtz")


# ──────────────────────────────────────────────────────────────────
# ROUNDING AND WAIVERS
# ──────────────────────────────────────────────────────────────────

def round_half_up(value: float) -> int:
    """4.5 -> 5, 4.49 -> 4."""
    return int(math.floor(round(value, 9) + 0.5))


def apply_waiver(rounded_spaces: int, waiver_max_spaces: int) -> int:
    """Requirements at or below the waiver maximum are waived entirely."""
    return 0 if rounded_spaces <= waiver_max_spaces else rounded_spaces


def small_lot_percent(
    district: NormalizedDistrict, lot_area: Optional[float], percent: float,
) -> tuple[float, Optional[str]]:
    """Apply ZR 25-23 small-lot reductions; returns (percent, note)."""
    resolution = resolve(SMALL_LOT_MODIFIERS, district, "small-lot parking")
    if resolution is None:
        return percent, None
    if lot_area is None:
        return percent, "Lot area unavailable; small-lot parking reductions not evaluated."
    for max_area, reduced in resolution.value:
        if lot_area <= max_area and reduced < percent:
            if reduced == 0:
                note = f"Lot area {lot_area:,.0f} sq ft <= {max_area:,} sq ft: parking waived."
            else:
                note = f"Lot area {lot_area:,.0f} sq ft <= {max_area:,} sq ft: reduced to {reduced}%."
            return reduced, note
    return percent, None


def compute_regime(
    regime: ParkingRegime,
    district: NormalizedDistrict,
    units: int,
    lot_area: Optional[float],
) -> tuple[Optional[Candidate], Optional[str]]:
    """Parking under one regime; returns (candidate, base-district assumption).

    The candidate is None when the district is not tabulated for the regime.
    """
    resolution = resolve(regime.table, district, f"{regime.label} parking")
    if resolution is None:
        return None, None
    percent, waiver_max = resolution.value
    notes = []
    if regime.applies_small_lot_modifiers:
        percent, note = small_lot_percent(district, lot_area, percent)
        if note:
            notes.append(note)

    raw = units * percent / 100
    rounded = round_half_up(raw)
    required = apply_waiver(rounded, waiver_max)
    if required == 0 and rounded > 0:
        notes.append(f"{rounded} spaces <= waiver maximum of {waiver_max}; requirement waived.")

    candidate = Candidate(
        value=float(required),
        label=regime.label,
        when=f"Lot in the {regime.label}",
        district=district.normalized,
        source_section=zr_section(regime.section),
        source_url=zr_url(regime.section),
        parking=ParkingComputation(
            scenario_key=regime.key,
            units=units,
            percent_per_dwelling_unit=percent,
            raw_spaces=round(raw, 4),
            rounded_spaces=rounded,
            waiver_max_spaces=waiver_max,
            required_spaces_after_waiver=required,
        ),
        notes=tuple(notes),
    )
    return candidate, resolution.assumption


def is_narrow_lot(lot_frontage: Optional[float]) -> bool:
    return lot_frontage is not None and lot_frontage <= NARROW_LOT_FRONTAGE_FT


# ──────────────────────────────────────────────────────────────────
# CALCULATOR
# ──────────────────────────────────────────────────────────────────

def calculate_parking(
    district: Optional[NormalizedDistrict],
    transit_zone: TransitZone,
    building_type: BuildingType,
    units: Optional[int],
    existing_units: Optional[int] = None,
    lot_area: Optional[float] = None,
    lot_frontage: Optional[float] = None,
):
    """Required residential parking spaces.

    Args:
        district: Primary zoning district
        transit_zone: Transit-zone category of the lot
        building_type: Classified building type
        units: Dwelling units to park (DUF maximum, else existing units)
        existing_units: Existing dwelling units, for applicability
        lot_area: Lot area in SF, for small-lot reductions
        lot_frontage: Lot frontage in ft, for the narrow-lot note
    """
    if district is None or district.base_district is None:
        return unresolved(district, PARKING_LABEL)
    if not density_applies(building_type, existing_units):
        return NotApplicableResult(
            notes=("Residential parking computed for multiple dwellings only.",),
        )
    if units is None:
        return unsupported("Dwelling unit count unavailable; parking not computed.")

    zones = ALL_REGIMES if transit_zone in ("unknown", "manhattan_core_lic") else (transit_zone,)
    candidates = []
    fallback = []
    for zone in zones:
        candidate, assumption = compute_regime(REGIMES[zone], district, units, lot_area)
        if candidate is not None:
            candidates.append(candidate)
        if assumption and assumption not in fallback:
            fallback.append(assumption)
    if not candidates:
        return unresolved(district, PARKING_LABEL)

    notes = []
    review = False
    if is_narrow_lot(lot_frontage):
        notes.append(
            f"Lot frontage {lot_frontage:g} ft is <= {NARROW_LOT_FRONTAGE_FT} ft; parking may be "
            "fully waived for narrow lots (unverified)."
        )
        review = True

    if len(zones) == 1:
        only = candidates[0]
        return FixedResult(
            value=only.value,
            unit="spaces",
            detail=only,
            notes=tuple(notes),
            assumptions=tuple(fallback),
            requires_manual_review=review,
            **cite(REGIMES[zones[0]].section),
        )

    if transit_zone == "manhattan_core_lic":
        assumption = (
            "Lot is in the Manhattan Core / Long Island City area, where separate parking "
            "rules may govern; all parking regimes included pending manual verification."
        )
    else:
        assumption = (
            "Transit zone unknown; all parking regimes (25-21, 25-22, 25-23) included "
            "pending manual verification."
        )
    return ConditionalResult(
        candidates=tuple(candidates),
        unit="spaces",
        notes=tuple(notes),
        assumptions=(assumption, *fallback),
        requires_manual_review=True,
        source_section="ZR §25-21, §25-22, §25-23",
        source_url=zr_url("25-20"),
    )
