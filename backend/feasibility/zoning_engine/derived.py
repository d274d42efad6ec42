"""Floor area and footprint values derived from the FAR and lot coverage results."""

from __future__ import annotations

from typing import Optional

from feasibility.models.results import DerivedValues

FAR_LIMIT_REACHED = "FAR limit reached already"


def controlling_value(result) -> Optional[float]:
    """Numeric value of a fixed or candidates result, else None."""
    value = getattr(result, "value", None)
    if result.kind in ("fixed", "candidates") and isinstance(value, (int, float)):
        return float(value)
    return None


def max_buildable_floor_area(far: Optional[float], lot_area: Optional[float]) -> Optional[float]:
    """FAR × lot area; None unless both are known and lot area is positive."""
    if far is None or lot_area is None or lot_area <= 0:
        return None
    return round(far * lot_area, 2)


def calculate_derived_values(
    far_result,
    lot_coverage_result,
    lot_area: Optional[float],
    existing_floor_area: Optional[float],
) -> DerivedValues:
    far = controlling_value(far_result)
    coverage = controlling_value(lot_coverage_result)
    notes = []

    if lot_area is None or lot_area <= 0:
        notes.append("Lot area unavailable; floor area and footprint not computed.")

    buildable = max_buildable_floor_area(far, lot_area)

    remaining = None
    message = None
    if buildable is not None:
        if existing_floor_area is None:
            notes.append("Existing floor area unavailable; remaining floor area not computed.")
        else:
            remaining = round(max(0.0, buildable - existing_floor_area), 2)
            if remaining == 0:
                message = FAR_LIMIT_REACHED

    footprint = None
    if coverage is not None and lot_area is not None and lot_area > 0:
        footprint = round(coverage * lot_area, 2)

    return DerivedValues(
        controlling_far=far,
        max_lot_coverage=coverage,
        max_buildable_floor_area_sqft=buildable,
        remaining_buildable_floor_area_sqft=remaining,
        remaining_floor_area_message=message,
        max_building_footprint_sqft=footprint,
        notes=tuple(notes),
    )
