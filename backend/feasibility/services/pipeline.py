"""
Feasibility report pipeline.

Stages:
  1. Geocode the address (hard dependency; failure aborts the run)
  2. PLUTO, transit zone and flood zone, concurrently
  3. Build ParcelFacts from whatever succeeded
  4. Store each step's result and the facts in the report-facts store
  5. Evaluate the lot with ZoningResolutionCalculator

Each step is wrapped so that an exception becomes a failed StepResult
rather than propagating; only the geocode step is fatal.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from dataclasses import dataclass, field
from typing import Any, Optional, Protocol

from pydantic import BaseModel

from feasibility.models.results import ZoningResolutionResult
from feasibility.models.schemas import GeocodeResult, ParcelFacts, PlutoData
from feasibility.services import cache
from feasibility.services.facts import build_parcel_facts
from feasibility.services.flood_zones import lookup_flood_zone
from feasibility.services.geocoding import geocode_address
from feasibility.services.pluto import fetch_pluto_data
from feasibility.services.transit_zones import lookup_transit_zone
from feasibility.zoning_engine import ZoningResolutionCalculator

logger = logging.getLogger(__name__)

SUCCEEDED = "succeeded"
FAILED = "failed"


class PipelineError(Exception):
    """Raised when a step the report cannot do without has failed."""


# ──────────────────────────────────────────────────────────────────
# STEP CONTRACT
# ──────────────────────────────────────────────────────────────────

@dataclass
class StepResult:
    status: str  # "succeeded" or "failed"
    data: Any = None
    error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.status == SUCCEEDED

    def to_dict(self) -> dict:
        data = self.data
        if isinstance(data, BaseModel):
            data = data.model_dump(mode="json")
        return {"status": self.status, "data": data, "error": self.error}


@dataclass
class PipelineContext:
    address: str
    report_id: str
    geocode: Optional[GeocodeResult] = None


class Step(Protocol):
    name: str

    async def run(self, context: PipelineContext) -> Any: ...


async def execute_step(step: Step, context: PipelineContext) -> StepResult:
    try:
        data = await step.run(context)
    except Exception as e:
        logger.warning("Step %s failed for report %s: %s", step.name, context.report_id, e)
        return StepResult(status=FAILED, error=str(e) or type(e).__name__)
    return StepResult(status=SUCCEEDED, data=data)


# ──────────────────────────────────────────────────────────────────
# STEPS
# ──────────────────────────────────────────────────────────────────

class GeocodeStep:
    name = "geocode"

    async def run(self, context: PipelineContext) -> GeocodeResult:
        cached = await cache.get_cached_geocode(context.address)
        if cached:
            return GeocodeResult.model_validate(cached)
        result = await geocode_address(context.address)
        await cache.set_cached_geocode(context.address, result.model_dump(mode="json"))
        return result


class PlutoStep:
    name = "pluto"

    async def run(self, context: PipelineContext) -> Optional[PlutoData]:
        bbl = context.geocode.bbl
        cached = await cache.get_cached_pluto(bbl)
        if cached:
            return PlutoData.model_validate(cached)
        result = await fetch_pluto_data(bbl)
        if result is not None:
            await cache.set_cached_pluto(bbl, result.model_dump(mode="json"))
        return result


class TransitZoneStep:
    name = "transit_zone"

    async def run(self, context: PipelineContext):
        geo = context.geocode
        return await lookup_transit_zone(geo.latitude, geo.longitude)


class FloodZoneStep:
    name = "flood_zone"

    async def run(self, context: PipelineContext) -> Optional[str]:
        geo = context.geocode
        return await lookup_flood_zone(geo.latitude, geo.longitude)


# ──────────────────────────────────────────────────────────────────
# PIPELINE
# ──────────────────────────────────────────────────────────────────

@dataclass
class PipelineReport:
    report_id: str
    address: str
    facts: ParcelFacts
    result: ZoningResolutionResult
    steps: dict[str, StepResult] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "report_id": self.report_id,
            "address": self.address,
            "steps": {name: {"status": s.status, "error": s.error} for name, s in self.steps.items()},
            "facts": self.facts.model_dump(mode="json"),
            "result": self.result.model_dump(mode="json"),
        }


class FeasibilityPipeline:
    """Runs the lookup steps for an address and evaluates the lot."""

    def __init__(
        self,
        geocode_step: Optional[Step] = None,
        lookup_steps: Optional[list[Step]] = None,
        calculator: Optional[ZoningResolutionCalculator] = None,
        store_facts: bool = True,
    ):
        self.geocode_step = geocode_step or GeocodeStep()
        if lookup_steps is None:
            lookup_steps = [PlutoStep(), TransitZoneStep(), FloodZoneStep()]
        self.lookup_steps = lookup_steps
        self.calculator = calculator or ZoningResolutionCalculator()
        self.store_facts = store_facts

    async def run(self, address: str, report_id: Optional[str] = None) -> PipelineReport:
        """Evaluate the lot at an address.

        Raises:
            PipelineError: the address could not be geocoded.
        """
        context = PipelineContext(address=address, report_id=report_id or uuid.uuid4().hex)
        logger.info("Report %s: evaluating %r", context.report_id, address)

        geocoded = await execute_step(self.geocode_step, context)
        steps = {self.geocode_step.name: geocoded}
        if not geocoded.succeeded:
            await self._store(context.report_id, steps)
            raise PipelineError(f"Could not geocode {address!r}: {geocoded.error}")
        context.geocode = geocoded.data

        lookups = await asyncio.gather(
            *(execute_step(step, context) for step in self.lookup_steps)
        )
        steps.update(zip((step.name for step in self.lookup_steps), lookups))

        facts = build_parcel_facts(
            geocoded.data,
            self._data(steps, PlutoStep.name),
            transit_zone=self._data(steps, TransitZoneStep.name),
            flood_zone=self._data(steps, FloodZoneStep.name),
            address=address,
        )
        await self._store(context.report_id, steps, facts)

        result = self.calculator.calculate(facts)
        failed = [name for name, s in steps.items() if not s.succeeded]
        if failed:
            logger.warning("Report %s completed with failed steps: %s", context.report_id, failed)
        return PipelineReport(
            report_id=context.report_id,
            address=address,
            facts=facts,
            result=result,
            steps=steps,
        )

    @staticmethod
    def _data(steps: dict[str, StepResult], name: str):
        step = steps.get(name)
        return step.data if step is not None and step.succeeded else None

    async def _store(
        self,
        report_id: str,
        steps: dict[str, StepResult],
        facts: Optional[ParcelFacts] = None,
    ) -> None:
        if not self.store_facts:
            return
        for name, step in steps.items():
            await cache.put_facts(report_id, name, step.to_dict())
        if facts is not None:
            await cache.put_facts(report_id, "parcel_facts", facts.model_dump(mode="json"))
