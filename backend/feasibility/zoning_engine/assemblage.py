"""
NYC Zoning Assemblage Engine.

Aggregates two or more lots that would be developed as one site.

Pipeline:
  1. Per lot: controlling FAR (multi-district minimum) and buildable area
  2. Combined lot area and total buildable floor area
  3. FAR method: "shared_district" when every lot has the same single
     district and no lot needs review, else "per_lot_sum"
  4. Density: DUF on the combined buildable area, or per lot then summed
  5. Zoning consistency across lots, with a confidence rating

Lots with missing area or FAR are excluded from numeric totals; the totals
are then marked partial rather than silently understated.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Optional

from feasibility.models.results import Scenario, ToggleResult
from feasibility.models.schemas import ParcelFacts
from feasibility.zoning_engine.citations import cite
from feasibility.zoning_engine.classifiers import classify_building_type
from feasibility.zoning_engine.density import (
    DUF_APPLIES, DUF_NOT_APPLICABLE, DWELLING_UNIT_FACTOR, ROUNDING_RULE,
    density_applies, round_dwelling_units,
)
from feasibility.zoning_engine.derived import controlling_value, max_buildable_floor_area
from feasibility.zoning_engine.districts import district_candidates
from feasibility.zoning_engine.multi_district import calculate_controlling_far

SHARED_DISTRICT = "shared_district"
PER_LOT_SUM = "per_lot_sum"
COMBINED_AREA_THEN_DUF = "combined_area_then_duf"
PER_LOT_DUF_SUM = "per_lot_duf_sum"


# ──────────────────────────────────────────────────────────────────
# DATA CLASSES
# ──────────────────────────────────────────────────────────────────

@dataclass
class AssemblageLot:
    """One lot's contribution to the assemblage."""
    bbl: Optional[str]
    address: Optional[str]
    lot_area: Optional[float]
    status: str  # "ok" or "missing_lot_area"
    primary_district: Optional[str]
    base_profile: Optional[str]
    far_profile: Optional[str]
    controlling_far: Optional[float]
    buildable_sqft: Optional[float]
    requires_manual_review: bool
    has_overlay: bool = False
    has_special_district: bool = False
    units_raw: Optional[float] = None
    units_rounded: Optional[int] = None
    notes: list[str] = field(default_factory=list)

    @property
    def missing_inputs(self) -> bool:
        return self.buildable_sqft is None


@dataclass
class ZoningConsistency:
    """Whether the lots share a zoning profile."""
    same_primary_district: bool
    same_normalized_profile: bool
    same_block: bool
    has_any_overlay: bool
    has_any_special_district: bool
    multi_district_lots: int
    confidence: str  # "high", "medium", "low"
    requires_manual_review: bool
    notes: list[str] = field(default_factory=list)


@dataclass
class AssemblageAnalysis:
    """Complete assemblage analysis result."""
    lots: list[AssemblageLot]
    combined_lot_area_sqft: float
    total_buildable_sqft: float
    far_method: str
    density_method: str
    density: ToggleResult
    consistency: ZoningConsistency
    requires_manual_review: bool
    missing_lot_area: bool = False
    partial_total: bool = False
    assumptions: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        d = asdict(self)
        d["density"] = self.density.model_dump()
        return d


# ──────────────────────────────────────────────────────────────────
# PER-LOT
# ──────────────────────────────────────────────────────────────────

def _block_from_bbl(bbl: Optional[str]) -> Optional[int]:
    if not bbl or len(bbl) != 10 or not bbl.isdigit():
        return None
    return int(bbl[1:6])


def _analyze_lot(facts: ParcelFacts) -> AssemblageLot:
    candidates = district_candidates(facts.zoning_districts)
    primary = candidates[0] if candidates else None
    far = calculate_controlling_far(candidates)
    far_value = controlling_value(far)
    has_area = facts.lot_area is not None and facts.lot_area > 0
    buildable = max_buildable_floor_area(far_value, facts.lot_area)

    notes = []
    if buildable is None:
        notes.append("Missing lot area or max FAR; excluded from density numeric total.")
    elif far.requires_manual_review:
        notes.append("FAR required manual review (e.g. multiple zoning districts).")

    units_raw = None
    units_rounded = None
    if buildable is not None:
        units_raw = round(buildable / DWELLING_UNIT_FACTOR, 4)
        units_rounded = round_dwelling_units(buildable / DWELLING_UNIT_FACTOR)

    return AssemblageLot(
        bbl=facts.bbl,
        address=facts.address,
        lot_area=facts.lot_area if has_area else None,
        status="ok" if has_area else "missing_lot_area",
        primary_district=primary.normalized if primary else None,
        base_profile=primary.base_district if primary else None,
        far_profile=primary.normalized if len(candidates) == 1 and far.kind == "fixed" else None,
        controlling_far=far_value,
        buildable_sqft=buildable,
        requires_manual_review=far.kind != "fixed" or far.requires_manual_review,
        has_overlay=bool(facts.overlays),
        has_special_district=bool(facts.special_districts),
        units_raw=units_raw,
        units_rounded=units_rounded,
        notes=notes,
    )


# ──────────────────────────────────────────────────────────────────
# ZONING CONSISTENCY
# ──────────────────────────────────────────────────────────────────

def check_zoning_consistency(lots: list[ParcelFacts]) -> ZoningConsistency:
    primaries = []
    profiles = []
    blocks = []
    multi_district = 0
    for facts in lots:
        candidates = district_candidates(facts.zoning_districts)
        primary = candidates[0] if candidates else None
        primaries.append(primary.normalized if primary else None)
        profiles.append(primary.base_district if primary else None)
        blocks.append(_block_from_bbl(facts.bbl))
        if len(candidates) > 1:
            multi_district += 1

    has_overlay = any(f.overlays for f in lots)
    has_special = any(f.special_districts for f in lots)
    same_primary = all(primaries) and len(set(primaries)) == 1
    same_profile = all(profiles) and len(set(profiles)) == 1
    any_block_missing = any(b is None for b in blocks)
    same_block = not any_block_missing and len(lots) > 1 and len(set(blocks)) == 1

    notes = []
    if not same_primary or not same_profile:
        notes.append(
            "If districts differ across lots, assemblage calculations should use per-lot "
            "method and require manual review."
        )
    if has_overlay or has_special:
        notes.append(
            "Overlays or Special Districts can change applicable rules; verify on NYC "
            "Zoning Map / ZR."
        )
    if any_block_missing:
        notes.append("Block is missing for at least one lot; same-block check could not be confirmed.")

    if not all(primaries):
        confidence = "low"
    elif same_primary and not has_overlay and not has_special and multi_district == 0:
        confidence = "high"
    elif same_profile:
        confidence = "medium"
    else:
        confidence = "low"

    return ZoningConsistency(
        same_primary_district=same_primary,
        same_normalized_profile=same_profile,
        same_block=same_block,
        has_any_overlay=has_overlay,
        has_any_special_district=has_special,
        multi_district_lots=multi_district,
        confidence=confidence,
        requires_manual_review=confidence != "high",
        notes=notes,
    )


# ──────────────────────────────────────────────────────────────────
# MAIN ENTRY POINT
# ──────────────────────────────────────────────────────────────────

def analyze_assemblage(lots: list[ParcelFacts]) -> AssemblageAnalysis:
    """Aggregate two or more lots into one development site.

    Raises:
        ValueError: fewer than two lots given.
    """
    if len(lots) < 2:
        raise ValueError("Assemblage requires at least 2 lots")

    analyzed = [_analyze_lot(facts) for facts in lots]

    combined_area = sum(lot.lot_area for lot in analyzed if lot.lot_area is not None)
    total_buildable = round(
        sum(lot.buildable_sqft for lot in analyzed if lot.buildable_sqft is not None), 2
    )
    missing_lot_area = any(lot.status == "missing_lot_area" for lot in analyzed)
    missing_inputs = any(lot.missing_inputs for lot in analyzed)

    profiles = [lot.far_profile for lot in analyzed]
    all_same_profile = all(profiles) and len(set(profiles)) == 1
    none_require_review = not any(lot.requires_manual_review for lot in analyzed)
    far_method = SHARED_DISTRICT if all_same_profile and none_require_review else PER_LOT_SUM

    # ── Density ──
    duf_applicable = any(
        density_applies(classify_building_type(f.building_class).building_type, f.existing_units)
        for f in lots
    )
    any_overlay_or_special = any(lot.has_overlay or lot.has_special_district for lot in analyzed)
    use_combined = far_method == SHARED_DISTRICT and not any_overlay_or_special and not missing_inputs
    density_method = COMBINED_AREA_THEN_DUF if use_combined else PER_LOT_DUF_SUM
    density_review = not use_combined

    if use_combined:
        units = round_dwelling_units(total_buildable / DWELLING_UNIT_FACTOR) if total_buildable > 0 else None
    else:
        units = sum(lot.units_rounded for lot in analyzed if lot.units_rounded is not None) or None

    assumptions = []
    if not use_combined and duf_applicable:
        assumptions.append(
            "DUF computed using per-lot method due to mixed zoning or manual-review flags."
        )
    if missing_inputs:
        assumptions.append(
            "Lots with missing lot area or max FAR excluded from numeric cap; partial total shown."
        )

    standard_notes = [f"Method: {density_method}."]
    if missing_inputs:
        standard_notes.append("Some lots excluded due to missing inputs; see per-lot breakdown.")
    if not duf_applicable:
        standard_notes.append("No lot is a multiple dwelling; DUF cap does not apply.")

    density = ToggleResult(
        scenarios=(
            Scenario(
                id=DUF_APPLIES,
                label="Standard (DUF applies)",
                value=float(units) if duf_applicable and units is not None else None,
                units_raw=round(total_buildable / DWELLING_UNIT_FACTOR, 4) if total_buildable > 0 else None,
                rounding_rule=ROUNDING_RULE,
                notes=tuple(standard_notes),
                requires_manual_review=density_review,
            ),
            Scenario(
                id=DUF_NOT_APPLICABLE,
                label="Affordable/Senior/Conversion (DUF not applicable)",
                notes=("No DUF-based unit cap; unit count governed by other constraints.",),
                requires_manual_review=True,
            ),
        ),
        default_scenario=DUF_APPLIES if duf_applicable else DUF_NOT_APPLICABLE,
        requires_manual_review=density_review,
        **cite("23-52"),
    )

    consistency = check_zoning_consistency(lots)

    return AssemblageAnalysis(
        lots=analyzed,
        combined_lot_area_sqft=combined_area,
        total_buildable_sqft=total_buildable,
        far_method=far_method,
        density_method=density_method,
        density=density,
        consistency=consistency,
        requires_manual_review=far_method == PER_LOT_SUM or consistency.requires_manual_review,
        missing_lot_area=missing_lot_area,
        partial_total=missing_inputs,
        assumptions=assumptions,
    )
