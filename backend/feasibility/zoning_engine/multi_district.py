"""
Controlling FAR for lots that span more than one zoning district.

The conservative rule is used: the lowest FAR among resolvable districts
controls, every candidate is listed, and the result is flagged for manual
review so a human can apportion floor area per ZR §77-02 if appropriate.
"""

from __future__ import annotations

from feasibility.models.results import CandidatesResult, FixedResult, unsupported
from feasibility.models.schemas import NormalizedDistrict
from feasibility.zoning_engine.far_tables import FAR_LABEL, calculate_far, lookup_far


def calculate_controlling_far(candidates: tuple[NormalizedDistrict, ...]):
    """FAR result for an ordered, deduplicated tuple of district candidates."""
    if len(candidates) <= 1:
        return calculate_far(candidates[0] if candidates else None)

    resolved = []
    skipped = []
    for district in candidates:
        candidate = lookup_far(district)
        if candidate is None:
            skipped.append(district.normalized)
        else:
            resolved.append(candidate)

    codes = ", ".join(d.normalized for d in candidates)
    if not resolved:
        return unsupported(f"None of the lot's districts ({codes}) has a residential {FAR_LABEL}.")

    assumptions = tuple(note for c in resolved for note in c.notes)
    notes = [f"Lot spans multiple districts ({codes})."]
    if skipped:
        notes.append(f"No residential FAR for {', '.join(skipped)}; excluded from comparison.")

    if len(resolved) == 1:
        only = resolved[0]
        notes.append(f"{only.district} is the only district with a residential FAR.")
        return FixedResult(
            value=only.value,
            unit="ratio",
            detail=only,
            notes=tuple(notes),
            assumptions=assumptions,
            source_section=only.source_section,
            source_url=only.source_url,
            requires_manual_review=True,
        )

    controlling = min(resolved, key=lambda c: c.value)
    notes.append(
        f"Using minimum FAR {controlling.value} ({controlling.district}) as the "
        "conservative controlling value; floor area may be apportioned by district area."
    )
    return CandidatesResult(
        candidates=tuple(resolved),
        value=controlling.value,
        unit="ratio",
        notes=tuple(notes),
        assumptions=assumptions,
        source_section=controlling.source_section,
        source_url=controlling.source_url,
        requires_manual_review=True,
    )
