#!/usr/bin/env python3
"""
Evaluate one NYC lot against the Zoning Resolution rules.

Either evaluates a ParcelFacts JSON file offline, or runs the live pipeline
(geocode → PLUTO / transit zone / flood zone → zoning engine) for an address.

Usage:
    # Offline, from a facts file:
    python3 scripts/evaluate_lot.py --facts lot.json

    # Live lookup:
    python3 scripts/evaluate_lot.py --address "555 Union St, Brooklyn, NY"

    # Human-readable summary instead of JSON:
    python3 scripts/evaluate_lot.py --facts lot.json --summary
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import os
import sys

# Add backend to path so the script runs from a checkout without installing
SCRIPT_DIR = os.path.dirname(os.path.abspath(__file__))
BACKEND_DIR = os.path.join(os.path.dirname(SCRIPT_DIR), "backend")
sys.path.insert(0, BACKEND_DIR)

from pydantic import ValidationError  # noqa: E402

from feasibility.config import settings  # noqa: E402
from feasibility.models.schemas import ParcelFacts  # noqa: E402
from feasibility.services.pipeline import FeasibilityPipeline, PipelineError  # noqa: E402
from feasibility.zoning_engine import ZoningResolutionCalculator  # noqa: E402
from feasibility.zoning_engine.classifiers import TRANSIT_ZONE_DESCRIPTIONS  # noqa: E402

logger = logging.getLogger("evaluate_lot")


# ──────────────────────────────────────────────────────────────────
# FORMATTING
# ──────────────────────────────────────────────────────────────────

def _describe(result: dict) -> str:
    kind = result.get("kind")
    unit = result.get("unit") or ""
    if kind == "fixed":
        value = result.get("value")
        if isinstance(value, dict):
            return (
                f"base {value.get('max_base_height_ft')} ft / "
                f"building {value.get('max_building_height_ft')} ft"
            )
        return f"{value} {unit}".strip()
    if kind in ("conditional", "candidates"):
        return f"{len(result.get('candidates', []))} candidates (manual review)"
    if kind == "toggle":
        default = next(
            (s for s in result.get("scenarios", []) if s.get("id") == result.get("default_scenario")),
            {},
        )
        return f"{default.get('value')} units ({default.get('label', 'default')})"
    if kind == "see_section":
        return f"see {result.get('source_section')}"
    notes = result.get("notes") or []
    return f"{kind}: {notes[0]}" if notes else str(kind)


def format_result(report: dict) -> str:
    """Render the report as a short text summary."""
    lines = []
    lines.append(f"\n{'='*70}")
    lines.append(f"  {report.get('address') or report.get('bbl') or 'Lot'}")
    lines.append(f"{'='*70}")
    lines.append(f"  BBL:       {report.get('bbl', 'N/A')}")
    districts = [d["normalized"] for d in report.get("districts", [])]
    lines.append(f"  Zoning:    {', '.join(districts) or 'N/A'}")
    lines.append(f"  Building:  {report.get('building_type')}")
    lines.append(f"  Lot type:  {report.get('lot_type')}")
    transit = report.get('transit_zone')
    lines.append(f"  Transit:   {TRANSIT_ZONE_DESCRIPTIONS.get(transit, transit)}")

    lines.append("\n  CONSTRAINTS:")
    for name in (
        "far", "lot_coverage", "min_base_height", "height_envelope", "density",
        "parking", "front_yard", "side_yard", "rear_yard",
    ):
        result = report.get(name) or {}
        review = " *" if result.get("requires_manual_review") else ""
        lines.append(f"    {name:<16} {_describe(result)}{review}")

    derived = report.get("derived") or {}
    lines.append("\n  DERIVED:")
    lines.append(f"    Max ZFA:        {derived.get('max_buildable_floor_area_sqft')}")
    remaining = derived.get("remaining_floor_area_message") or derived.get(
        "remaining_buildable_floor_area_sqft"
    )
    lines.append(f"    Remaining ZFA:  {remaining}")
    lines.append(f"    Max footprint:  {derived.get('max_building_footprint_sqft')}")

    flags = [k for k, v in (report.get("flags") or {}).items() if v]
    if flags:
        lines.append(f"\n  FLAGS: {', '.join(flags)}")
    assumptions = report.get("assumptions") or []
    if assumptions:
        lines.append("\n  ASSUMPTIONS:")
        for a in assumptions:
            lines.append(f"    - {a}")
    lines.append("\n  (* requires manual review)")
    return "\n".join(lines)


# ──────────────────────────────────────────────────────────────────
# MAIN
# ──────────────────────────────────────────────────────────────────

def evaluate_facts_file(path: str) -> dict:
    with open(path) as f:
        facts = ParcelFacts.model_validate(json.load(f))
    result = ZoningResolutionCalculator().calculate(facts)
    return result.model_dump(mode="json")


async def evaluate_address(address: str) -> dict:
    report = await FeasibilityPipeline().run(address)
    for name, step in report.steps.items():
        if not step.succeeded:
            logger.warning("%s lookup failed: %s", name, step.error)
    return report.result.model_dump(mode="json")


async def main() -> int:
    parser = argparse.ArgumentParser(description="Evaluate an NYC lot against zoning rules")
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--facts", metavar="FILE", help="ParcelFacts JSON file")
    source.add_argument("--address", metavar="ADDR", help="NYC street address or BBL")
    parser.add_argument("--summary", action="store_true", help="Print a text summary instead of JSON")
    args = parser.parse_args()

    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        if args.facts:
            report = evaluate_facts_file(args.facts)
        else:
            report = await evaluate_address(args.address)
    except (OSError, ValueError, ValidationError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2
    except PipelineError as e:
        print(f"FAILED: {e}", file=sys.stderr)
        return 1

    if args.summary:
        print(format_result(report))
    else:
        print(json.dumps(report, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
