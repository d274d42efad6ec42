"""
Main zoning calculator: takes ParcelFacts and produces a ZoningResolutionResult.

Integrates all zoning rules:
  - FAR tables, with the multi-district minimum
  - Lot coverage
  - Minimum base height and height envelope
  - Density (dwelling unit factor)
  - Parking (transit-zone regimes)
  - Yards (front, side, rear)

Every calculator runs on the primary (first) district except FAR, which
considers every district on the lot. Calculators are independent of one
another; derived values are computed last from the FAR and lot coverage
results.
"""

from __future__ import annotations

import logging
import re
from typing import Optional

from feasibility.models.results import ResultFlags, ZoningResolutionResult
from feasibility.models.schemas import ParcelFacts
from feasibility.zoning_engine.classifiers import classify_building_type, classify_lot_type
from feasibility.zoning_engine.density import DUF_APPLIES, calculate_density
from feasibility.zoning_engine.derived import (
    calculate_derived_values, controlling_value, max_buildable_floor_area,
)
from feasibility.zoning_engine.districts import district_candidates, is_high_density
from feasibility.zoning_engine.height_setback import (
    calculate_height_envelope, calculate_min_base_height,
)
from feasibility.zoning_engine.lot_coverage import YARD_BASED_DISTRICTS, calculate_lot_coverage
from feasibility.zoning_engine.multi_district import calculate_controlling_far
from feasibility.zoning_engine.parking import calculate_parking, is_narrow_lot
from feasibility.zoning_engine.yards import calculate_yard_requirements

logger = logging.getLogger(__name__)

# FEMA Special Flood Hazard Area zone codes: A, AE, AH, AO, AR, A99, V, VE
SFHA_ZONE_RE = re.compile(r"^[AV][0-9EHOR]*$")


def in_special_flood_hazard_area(flood_zone: Optional[str]) -> bool:
    """True for FEMA A and V zones."""
    if not flood_zone:
        return False
    return SFHA_ZONE_RE.match(flood_zone.strip().upper()) is not None


class ZoningResolutionCalculator:
    """Evaluates every zoning constraint family for one lot."""

    def calculate(self, facts: ParcelFacts) -> ZoningResolutionResult:
        candidates = district_candidates(facts.zoning_districts)
        primary = candidates[0] if candidates else None
        logger.debug(
            "Evaluating %s: districts=%s",
            facts.bbl or facts.address or "lot",
            [d.normalized for d in candidates],
        )

        building = classify_building_type(facts.building_class)
        lot = classify_lot_type(facts.corner_code, facts.has_geocode_record)

        far = calculate_controlling_far(candidates)
        lot_coverage = calculate_lot_coverage(primary, lot.lot_type, building.building_type)
        min_base_height = calculate_min_base_height(primary)
        height_envelope = calculate_height_envelope(primary)

        context_review = bool(facts.overlays or facts.special_districts)
        buildable = max_buildable_floor_area(controlling_value(far), facts.lot_area)
        density = calculate_density(
            primary,
            buildable,
            building.building_type,
            facts.existing_units,
            requires_manual_review=far.requires_manual_review or context_review,
        )

        parking = calculate_parking(
            primary,
            facts.transit_zone,
            building.building_type,
            units=self._parking_units(density, facts.existing_units),
            existing_units=facts.existing_units,
            lot_area=facts.lot_area,
            lot_frontage=facts.lot_frontage,
        )
        yards = calculate_yard_requirements(
            primary, building.building_type, facts.lot_frontage, facts.lot_depth,
        )

        derived = calculate_derived_values(
            far, lot_coverage, facts.lot_area, facts.existing_floor_area,
        )

        results = {
            "far": far,
            "lot_coverage": lot_coverage,
            "min_base_height": min_base_height,
            "height_envelope": height_envelope,
            "density": density,
            "parking": parking,
            "front_yard": yards.front,
            "side_yard": yards.side,
            "rear_yard": yards.rear,
        }

        # ── Assumptions ──
        assumptions = []
        for note in (building.assumption, lot.assumption):
            if note:
                assumptions.append(note)
        if len(candidates) > 1:
            assumptions.append(
                f"Lot spans multiple districts; constraints other than FAR evaluated for "
                f"primary district {primary.normalized} only."
            )
            residential = [d.normalized for d in candidates[1:] if d.base_district]
            if primary.base_district is None and residential and buildable is not None:
                assumptions.append(
                    f"Primary district {primary.normalized} is not residential; the "
                    f"{buildable:,.0f} sq ft buildable area from {', '.join(residential)} was "
                    "not used for the dwelling unit cap or parking."
                )
        for result in results.values():
            assumptions.extend(result.assumptions)
        if height_envelope.kind == "conditional" or min_base_height.kind == "conditional":
            assumptions.append("Multiple height limits possible; manual review required.")
        if facts.overlays:
            assumptions.append(
                f"Commercial overlay(s) {', '.join(facts.overlays)} present; overlay rules "
                "not evaluated."
            )
        if facts.special_districts:
            assumptions.append(
                f"Special district(s) {', '.join(facts.special_districts)} may modify these "
                "rules; not evaluated."
            )
        if in_special_flood_hazard_area(facts.flood_zone):
            assumptions.append(
                f"Lot is in FEMA flood zone {facts.flood_zone.strip().upper()}; flood-resistant "
                "construction rules (ZR Article VI, Chapter 4) not evaluated."
            )
        assumptions.extend(derived.notes)

        flags = ResultFlags(
            has_overlay=bool(facts.overlays),
            has_special_district=bool(facts.special_districts),
            multi_district_lot=len(candidates) > 1,
            building_type_inferred=building.inferred,
            lot_type_inferred=lot.inferred,
            eligible_site_not_evaluated=(
                lot_coverage.kind == "fixed" and is_high_density(primary)
            ),
            special_lot_coverage_rules_not_evaluated=(
                primary is not None and primary.normalized in YARD_BASED_DISTRICTS
            ),
            district_not_found=primary is None or (
                primary.base_district is not None and far.kind == "unsupported"
            ),
            non_residential=primary is not None and primary.base_district is None,
            shallow_lot_candidate=yards.shallow_lot_candidate,
            lot_frontage_missing=yards.lot_frontage_missing,
            narrow_lot_waiver_candidate=(
                parking.kind != "not_applicable" and is_narrow_lot(facts.lot_frontage)
            ),
            transit_zone_unknown=facts.transit_zone == "unknown",
            in_special_flood_hazard_area=in_special_flood_hazard_area(facts.flood_zone),
        )

        return ZoningResolutionResult(
            bbl=facts.bbl,
            address=facts.address,
            districts=candidates,
            primary_district=primary,
            building_type=building.building_type,
            lot_type=lot.lot_type,
            transit_zone=facts.transit_zone,
            derived=derived,
            assumptions=tuple(dict.fromkeys(assumptions)),
            flags=flags,
            **results,
        )

    @staticmethod
    def _parking_units(density, existing_units: Optional[int]) -> Optional[int]:
        """Units to park: the DUF maximum when known, else existing units."""
        if density.kind == "toggle":
            standard = density.scenario(DUF_APPLIES)
            if standard is not None and standard.value is not None:
                return int(standard.value)
        return existing_units
