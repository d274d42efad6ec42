"""
District normalization and the shared table lookup.

Every regulatory table in the engine is keyed by normalized district code.
``resolve`` is the single lookup path used by all calculators:

  1. exact match on the normalized code
  2. match on the base district (R7-2 -> R7)
  3. no match

A base-district match always carries an assumption string naming the
substitution.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Generic, Iterable, Mapping, Optional, TypeVar

from feasibility.models.results import UnsupportedResult, unsupported
from feasibility.models.schemas import NormalizedDistrict

logger = logging.getLogger(__name__)

T = TypeVar("T")

_BASE_RE = re.compile(r"^(R\d+)")
_DASHES_RE = re.compile(r"[\u2010-\u2015\u2212]")
_MULTI_HYPHEN_RE = re.compile(r"-{2,}")


# ──────────────────────────────────────────────────────────────────
# NORMALIZATION
# ──────────────────────────────────────────────────────────────────

def normalize_district(raw: Optional[str]) -> Optional[NormalizedDistrict]:
    """Canonicalize a raw district string.

    Uppercases, removes all whitespace, folds unicode dashes to "-" and
    collapses repeated hyphens. Returns None for null or blank input.

        " r7 - 2 " -> NormalizedDistrict("R7-2", base_district="R7")
        "C4-4"     -> NormalizedDistrict("C4-4", base_district=None)
    """
    if raw is None:
        return None
    text = "".join(str(raw).split()).upper()
    text = _DASHES_RE.sub("-", text)
    text = _MULTI_HYPHEN_RE.sub("-", text).strip("-")
    if not text:
        return None
    return NormalizedDistrict(normalized=text, base_district=base_district(text))


def base_district(district: str) -> Optional[str]:
    """Extract the residential base district (R6A -> R6, R10X -> R10)."""
    match = _BASE_RE.match(district.strip().upper())
    return match.group(1) if match else None


def district_candidates(raw_districts: Iterable[Optional[str]]) -> tuple[NormalizedDistrict, ...]:
    """Normalize and dedupe a lot's district codes, keeping first-seen order."""
    seen: set[str] = set()
    candidates = []
    for raw in raw_districts:
        nd = normalize_district(raw)
        if nd is None or nd.normalized in seen:
            continue
        seen.add(nd.normalized)
        candidates.append(nd)
    return tuple(candidates)


def district_number(district: Optional[NormalizedDistrict]) -> Optional[int]:
    """Density number of the base district (R7-2 -> 7), None if non-residential."""
    if district is None or district.base_district is None:
        return None
    return int(district.base_district[1:])


def is_low_density(district: Optional[NormalizedDistrict]) -> bool:
    """R1 through R5."""
    n = district_number(district)
    return n is not None and 1 <= n <= 5


def is_high_density(district: Optional[NormalizedDistrict]) -> bool:
    """R6 through R12."""
    n = district_number(district)
    return n is not None and 6 <= n <= 12


# ──────────────────────────────────────────────────────────────────
# TABLE LOOKUP
# ──────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Resolution(Generic[T]):
    value: T
    requested: str
    matched: str
    assumption: Optional[str] = None

    @property
    def used_base(self) -> bool:
        return self.requested != self.matched


def resolve(
    table: Mapping[str, T],
    district: Optional[NormalizedDistrict],
    label: str,
) -> Optional[Resolution[T]]:
    """Look up ``district`` in ``table``: exact code first, then base district."""
    if district is None:
        return None
    if district.normalized in table:
        return Resolution(table[district.normalized], district.normalized, district.normalized)
    base = district.base_district
    if base is not None and base in table:
        logger.debug("%s: %s not tabulated, using base %s", label, district.normalized, base)
        return Resolution(
            table[base],
            district.normalized,
            base,
            assumption=(
                f"District {district.normalized} not in {label} lookup; "
                f"using base district {base} value."
            ),
        )
    return None


def unresolved(district: Optional[NormalizedDistrict], label: str, **kwargs) -> UnsupportedResult:
    """Unsupported result explaining why ``district`` has no ``label`` value."""
    if district is None:
        note = f"No zoning district available; {label} not evaluated."
    elif district.base_district is None:
        note = (
            f"District {district.normalized} is not a residential district; "
            f"{label} is evaluated for residential districts only."
        )
    else:
        note = f"District {district.normalized} not found in {label} lookup."
    return unsupported(note, **kwargs)
