"""
NYC Zoning Resolution residential FAR (Floor Area Ratio) tables.

Values follow City of Yes for Housing Opportunity (adopted Dec 5, 2024).
One table, keyed by normalized district; letter-suffix and hyphenated
variants that share their base district's FAR are listed explicitly so
they resolve by exact match.

Sources:
  - ZR Section 23-21 (Floor Area Regulations in R1-R5 Districts)
  - ZR Section 23-22 (Floor Area Regulations in R6-R12 Districts)
"""

from __future__ import annotations

from typing import Optional

from feasibility.models.results import Candidate, FixedResult
from feasibility.models.schemas import NormalizedDistrict
from feasibility.zoning_engine.citations import cite, zr_section, zr_url
from feasibility.zoning_engine.districts import is_low_density, resolve, unresolved

FAR_LABEL = "FAR"

# ──────────────────────────────────────────────────────────────────
# LOW DENSITY (ZR 23-21)
# ──────────────────────────────────────────────────────────────────

LOW_DENSITY_FAR = {
    "R1":    0.75,
    "R1-1":  0.75,
    "R1-2":  0.75,
    "R1-2A": 0.75,
    "R1A":   0.75,
    "R2":    1.0,
    "R2A":   1.0,
    "R2X":   1.0,
    "R3":    1.0,
    "R3-1":  1.0,
    "R3-2":  1.0,
    "R3A":   1.0,
    "R3X":   1.0,
    "R4":    1.5,
    "R4-1":  1.5,
    "R4A":   1.5,
    "R4B":   1.5,
    "R5":    2.0,
    "R5A":   2.0,
    "R5B":   2.0,
    "R5D":   2.0,
}

# ──────────────────────────────────────────────────────────────────
# MEDIUM AND HIGH DENSITY (ZR 23-22)
# ──────────────────────────────────────────────────────────────────

HIGH_DENSITY_FAR = {
    "R6":    2.2,
    "R6-1":  3.0,
    "R6-2":  2.5,
    "R6A":   3.0,
    "R6B":   2.0,
    "R6D":   2.5,
    "R7":    3.44,
    "R7-1":  3.44,
    "R7-2":  3.44,
    "R7A":   4.0,
    "R7B":   3.0,
    "R7D":   4.66,
    "R7X":   5.0,
    "R8":    6.02,
    "R8A":   6.02,
    "R8B":   4.0,
    "R8X":   6.02,
    "R9":    7.52,
    "R9-1":  9.0,
    "R9A":   7.52,
    "R9D":   9.0,
    "R9X":   9.0,
    "R10":   10.0,
    "R10A":  10.0,
    "R10X":  10.0,
    "R11":   12.0,
    "R11A":  12.0,
    "R12":   15.0,
}

RESIDENTIAL_FAR = {**LOW_DENSITY_FAR, **HIGH_DENSITY_FAR}


def far_section(district: NormalizedDistrict) -> str:
    return "23-21" if is_low_density(district) else "23-22"


def lookup_far(district: Optional[NormalizedDistrict]) -> Optional[Candidate]:
    """Resolve one district's FAR as a citation-bearing candidate, or None."""
    resolution = resolve(RESIDENTIAL_FAR, district, FAR_LABEL)
    if resolution is None:
        return None
    section = far_section(district)
    notes = (resolution.assumption,) if resolution.assumption else ()
    return Candidate(
        value=resolution.value,
        district=district.normalized,
        label=f"{district.normalized} residential FAR",
        source_section=zr_section(section),
        source_url=zr_url(section),
        notes=notes,
    )


def calculate_far(district: Optional[NormalizedDistrict]):
    """Single-district FAR result (fixed or unsupported)."""
    candidate = lookup_far(district)
    if candidate is None:
        return unresolved(district, FAR_LABEL)
    section = far_section(district)
    return FixedResult(
        value=candidate.value,
        unit="ratio",
        detail=candidate,
        assumptions=candidate.notes,
        **cite(section),
    )
