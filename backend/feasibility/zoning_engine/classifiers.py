"""
Categorical facts derived from raw parcel attributes.

  - building type from the DOF building class code
  - lot type from the geocoder's corner code
  - transit-zone category from the transit-zone map label
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

from feasibility.models.schemas import BuildingType, LotType, TransitZone

# Building class first letter → building type
BUILDING_CLASS_TYPES: dict[str, BuildingType] = {
    "A": "single_or_two_family",   # one family dwellings
    "B": "single_or_two_family",   # two family dwellings
    "C": "multiple_dwelling",      # walk-up apartments
    "D": "multiple_dwelling",      # elevator apartments
}

# Ordered: first substring match wins
TRANSIT_ZONE_LABELS: list[tuple[str, TransitZone]] = [
    ("inner transit zone", "inner"),
    ("outer transit zone", "outer"),
    ("manhattan core", "manhattan_core_lic"),
    ("long island city", "manhattan_core_lic"),
    ("beyond the greater transit zone", "beyond_gtz"),
]

TRANSIT_ZONE_DESCRIPTIONS: dict[str, str] = {
    "inner": "Inner Transit Zone",
    "outer": "Outer Transit Zone",
    "manhattan_core_lic": "Manhattan Core and Long Island City",
    "beyond_gtz": "Beyond the Greater Transit Zone",
    "unknown": "Unknown",
}


@dataclass(frozen=True)
class BuildingTypeResult:
    building_type: BuildingType
    inferred: bool = False
    assumption: Optional[str] = None


@dataclass(frozen=True)
class LotTypeResult:
    lot_type: LotType
    inferred: bool = False
    assumption: Optional[str] = None


def classify_building_type(building_class: Optional[str]) -> BuildingTypeResult:
    """A*/B* → single_or_two_family, C*/D* → multiple_dwelling.

    Anything else defaults to single_or_two_family, whose lot coverage and
    parking limits are generally the more restrictive ones.
    """
    code = (building_class or "").strip().upper()
    if code and code[0] in BUILDING_CLASS_TYPES:
        return BuildingTypeResult(BUILDING_CLASS_TYPES[code[0]])
    if code:
        reason = f"Building class {code} not recognized"
    else:
        reason = "Building class unavailable"
    return BuildingTypeResult(
        "single_or_two_family",
        inferred=True,
        assumption=f"{reason}; assumed single- or two-family building.",
    )


def classify_lot_type(corner_code: Optional[str], has_geocode_record: bool = True) -> LotTypeResult:
    """Any non-blank corner code → corner; otherwise interior_or_through.

    A missing corner code on a geocoder record is a confident interior
    classification. Only a missing record makes the lot type inferred.
    """
    if corner_code is not None and corner_code.strip():
        return LotTypeResult("corner")
    if not has_geocode_record:
        return LotTypeResult(
            "interior_or_through",
            inferred=True,
            assumption="No geocoder record available; lot assumed interior or through.",
        )
    return LotTypeResult("interior_or_through")


def classify_transit_zone(labels: Optional[Sequence[Optional[str]]]) -> TransitZone:
    """Map transit-zone query output to a canonical category.

    ``labels`` is None when the spatial query failed, an empty sequence when
    it succeeded with no intersecting polygon (beyond_gtz), or the zone
    labels of the intersecting features.
    """
    if labels is None:
        return "unknown"
    if len(labels) == 0:
        return "beyond_gtz"
    for label in labels:
        text = (label or "").lower()
        for needle, category in TRANSIT_ZONE_LABELS:
            if needle in text:
                return category
    return "unknown"
