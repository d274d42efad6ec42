"""
NYC Zoning Resolution minimum base height and height envelope tables.

Updated to reflect City of Yes for Housing Opportunity (adopted Dec 5, 2024).

Each table entry is either a single value (fixed) or a list of
(value, condition) alternatives (conditional). Alternatives are never
collapsed to one value: which applies depends on street width, program
election and other site conditions the engine does not evaluate.

Sources:
  - ZR Section 23-421 / 23-422 (R1-R5 height and setback)
  - ZR Section 23-424 (R1-R5 height limits)
  - ZR Section 23-432 (R6-R12 Quality Housing height limits)
"""

from __future__ import annotations

from typing import Optional

from feasibility.models.results import (
    Candidate, ConditionalResult, FixedResult, HeightPair, SeeSectionResult,
)
from feasibility.models.schemas import NormalizedDistrict
from feasibility.zoning_engine.citations import cite, zr_section, zr_url
from feasibility.zoning_engine.districts import is_low_density, resolve, unresolved

MIN_BASE_HEIGHT_LABEL = "minimum base height"
HEIGHT_ENVELOPE_LABEL = "height envelope"

WIDE_STREET = "Wide street (75 ft or more)"
NARROW_STREET = "Narrow street (less than 75 ft)"
SEE_TABLE = "Depends on applicable zoning conditions; see citation."

CONDITIONAL_NOTE = "Multiple values apply; manual review required."

# ──────────────────────────────────────────────────────────────────
# MINIMUM BASE HEIGHT (ZR 23-432), feet
# ──────────────────────────────────────────────────────────────────

MIN_BASE_HEIGHT = {
    "R6":    [(40, WIDE_STREET), (30, NARROW_STREET)],
    "R6A":   40,
    "R6-1":  40,
    "R6B":   30,
    "R6D":   30,
    "R6-2":  30,
    "R7A":   40,
    "R7-1":  40,
    "R7-21": 40,
    "R7-2":  40,
    "R7B":   40,
    "R7D":   60,
    "R7X":   60,
    "R7-3":  60,
    "R8":    60,
    "R8A":   60,
    "R8B":   55,
    "R8X":   60,
    "R9":    60,
    "R9A":   60,
    "R9D":   60,
    "R9-1":  60,
    "R9X":   105,
    "R10":   60,
    "R10X":  60,
    "R10A":  125,
    "R11":   60,
    "R11A":  60,
    "R12":   60,
}

# R1-R5 districts governed by ZR 23-422; the remainder use 23-421
SECTION_23_422_DISTRICTS = {"R3-2", "R4", "R4B", "R5", "R5B", "R5D"}

# ──────────────────────────────────────────────────────────────────
# HEIGHT ENVELOPE: (max base height, max building height), feet
# ──────────────────────────────────────────────────────────────────

_LOW_RISE = (35, 35)

HEIGHT_ENVELOPE = {
    # R1-R3 (ZR 23-424)
    "R1":    _LOW_RISE,
    "R1-1":  _LOW_RISE,
    "R1-2":  _LOW_RISE,
    "R1-2A": _LOW_RISE,
    "R2":    _LOW_RISE,
    "R2A":   _LOW_RISE,
    "R2X":   _LOW_RISE,
    "R3":    _LOW_RISE,
    "R3-1":  _LOW_RISE,
    "R3-2":  _LOW_RISE,
    "R3A":   _LOW_RISE,
    "R3X":   _LOW_RISE,
    # R4-R5 (ZR 23-424)
    "R4":    (35, 45),
    "R4-1":  (35, 45),
    "R4A":   (35, 45),
    "R4B":   (35, 45),
    "R5":    (45, 55),
    "R5A":   (45, 55),
    "R5B":   (45, 55),
    "R5D":   (45, 55),
    # R6-R12 (ZR 23-432)
    "R6":    [((65, 75), WIDE_STREET), ((45, 55), NARROW_STREET)],
    "R6A":   (65, 75),
    "R6-1":  (65, 75),
    "R6B":   (45, 55),
    "R6D":   (45, 65),
    "R6-2":  (45, 65),
    "R7A":   (75, 85),
    "R7-21": (75, 85),
    "R7-1":  [((75, 85), SEE_TABLE), ((65, 75), SEE_TABLE)],
    "R7-2":  (65, 75),
    "R7B":   (65, 75),
    "R7D":   (85, 105),
    "R7X":   (95, 125),
    "R7-3":  (95, 125),
    "R8":    [((85, 115), SEE_TABLE), ((95, 135), SEE_TABLE)],
    "R8A":   (95, 125),
    "R8B":   (65, 75),
    "R8X":   (95, 155),
    "R9":    [((105, 145), SEE_TABLE), ((95, 135), SEE_TABLE)],
    "R9A":   [((105, 145), SEE_TABLE), ((95, 135), SEE_TABLE)],
    "R9D":   (125, 175),
    "R9-1":  (125, 175),
    "R9X":   [((125, 175), SEE_TABLE), ((125, 165), SEE_TABLE)],
    "R10":   [((155, 215), SEE_TABLE), ((125, 185), SEE_TABLE)],
    "R10X":  [((155, 215), SEE_TABLE), ((125, 185), SEE_TABLE)],
    "R10A":  [((155, 215), SEE_TABLE), ((125, 185), SEE_TABLE)],
    "R11":   (155, 255),
    "R11A":  (155, 255),
    "R12":   (155, 325),
}


def _as_value(raw):
    if isinstance(raw, tuple):
        return HeightPair(max_base_height_ft=raw[0], max_building_height_ft=raw[1])
    return float(raw)


def _table_result(table: dict, district: Optional[NormalizedDistrict], label: str, section: str):
    resolution = resolve(table, district, label)
    if resolution is None:
        return unresolved(district, label)

    assumptions = (resolution.assumption,) if resolution.assumption else ()
    if isinstance(resolution.value, list):
        candidates = tuple(
            Candidate(
                value=_as_value(raw),
                when=when,
                district=district.normalized,
                source_section=zr_section(section),
                source_url=zr_url(section),
            )
            for raw, when in resolution.value
        )
        return ConditionalResult(
            candidates=candidates,
            notes=(CONDITIONAL_NOTE,),
            assumptions=assumptions,
            **cite(section),
        )
    return FixedResult(value=_as_value(resolution.value), assumptions=assumptions, **cite(section))


def calculate_min_base_height(district: Optional[NormalizedDistrict]):
    """Minimum base height for the street wall.

    R1-R5 have no single minimum; the result points at the governing section.
    """
    if is_low_density(district):
        section = "23-422" if district.normalized in SECTION_23_422_DISTRICTS else "23-421"
        return SeeSectionResult(
            notes=(f"No single minimum base height applies in {district.normalized}; see citation.",),
            **cite(section),
        )
    return _table_result(MIN_BASE_HEIGHT, district, MIN_BASE_HEIGHT_LABEL, "23-432")


def calculate_height_envelope(district: Optional[NormalizedDistrict]):
    """Max base height and max building height pair."""
    section = "23-424" if is_low_density(district) else "23-432"
    return _table_result(HEIGHT_ENVELOPE, district, HEIGHT_ENVELOPE_LABEL, section)
