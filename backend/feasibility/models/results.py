"""
Constraint result types.

Every constraint family produces exactly one ``ConstraintResult``, a union
discriminated on ``kind``:

  fixed           one resolved value
  conditional     several legally valid values; caller must disambiguate
  candidates      one value per district candidate; ``value`` is controlling
  see_section     no single numeric answer; read the cited section
  toggle          named alternative scenarios, each with its own value
  not_applicable  the family does not apply to these facts
  unsupported     no rule for this input
"""

from __future__ import annotations

from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, Field

from feasibility.models.schemas import BuildingType, LotType, NormalizedDistrict, TransitZone


class HeightPair(BaseModel):
    model_config = {"frozen": True}

    max_base_height_ft: float
    max_building_height_ft: float


class ParkingComputation(BaseModel):
    model_config = {"frozen": True}

    scenario_key: str
    units: int
    percent_per_dwelling_unit: float
    raw_spaces: float
    rounded_spaces: int
    waiver_max_spaces: int
    required_spaces_after_waiver: int


class Candidate(BaseModel):
    model_config = {"frozen": True}

    value: Union[float, HeightPair, None] = None
    when: Optional[str] = None
    label: Optional[str] = None
    district: Optional[str] = None
    source_section: Optional[str] = None
    source_url: Optional[str] = None
    parking: Optional[ParkingComputation] = None
    notes: tuple[str, ...] = ()


class Scenario(BaseModel):
    model_config = {"frozen": True}

    id: str
    label: str
    value: Optional[float] = None
    units_raw: Optional[float] = None
    rounding_rule: Optional[str] = None
    notes: tuple[str, ...] = ()
    requires_manual_review: bool = False


class _ResultBase(BaseModel):
    model_config = {"frozen": True}

    notes: tuple[str, ...] = ()
    assumptions: tuple[str, ...] = ()
    source_section: Optional[str] = None
    source_url: Optional[str] = None
    requires_manual_review: bool = False


class FixedResult(_ResultBase):
    kind: Literal["fixed"] = "fixed"
    value: Union[float, HeightPair]
    unit: str = "ft"
    detail: Optional[Candidate] = None


class ConditionalResult(_ResultBase):
    kind: Literal["conditional"] = "conditional"
    candidates: tuple[Candidate, ...]
    unit: str = "ft"
    requires_manual_review: bool = True


class CandidatesResult(_ResultBase):
    kind: Literal["candidates"] = "candidates"
    candidates: tuple[Candidate, ...]
    value: Optional[float] = None
    unit: str = "ratio"
    requires_manual_review: bool = True


class SeeSectionResult(_ResultBase):
    kind: Literal["see_section"] = "see_section"
    requires_manual_review: bool = True


class ToggleResult(_ResultBase):
    kind: Literal["toggle"] = "toggle"
    scenarios: tuple[Scenario, ...]
    default_scenario: str
    unit: str = "units"

    def scenario(self, scenario_id: str) -> Optional[Scenario]:
        return next((s for s in self.scenarios if s.id == scenario_id), None)


class NotApplicableResult(_ResultBase):
    kind: Literal["not_applicable"] = "not_applicable"


class UnsupportedResult(_ResultBase):
    kind: Literal["unsupported"] = "unsupported"


ConstraintResult = Annotated[
    Union[
        FixedResult,
        ConditionalResult,
        CandidatesResult,
        SeeSectionResult,
        ToggleResult,
        NotApplicableResult,
        UnsupportedResult,
    ],
    Field(discriminator="kind"),
]


def unsupported(note: str, **kwargs) -> UnsupportedResult:
    notes = (note,) + tuple(kwargs.pop("notes", ()))
    return UnsupportedResult(notes=notes, **kwargs)


class DerivedValues(BaseModel):
    model_config = {"frozen": True}

    controlling_far: Optional[float] = None
    max_lot_coverage: Optional[float] = None
    max_buildable_floor_area_sqft: Optional[float] = None
    remaining_buildable_floor_area_sqft: Optional[float] = None
    remaining_floor_area_message: Optional[str] = None
    max_building_footprint_sqft: Optional[float] = None
    notes: tuple[str, ...] = ()


class ResultFlags(BaseModel):
    model_config = {"frozen": True}

    has_overlay: bool = False
    has_special_district: bool = False
    multi_district_lot: bool = False
    building_type_inferred: bool = False
    lot_type_inferred: bool = False
    eligible_site_not_evaluated: bool = False
    special_lot_coverage_rules_not_evaluated: bool = False
    district_not_found: bool = False
    non_residential: bool = False
    shallow_lot_candidate: bool = False
    lot_frontage_missing: bool = False
    narrow_lot_waiver_candidate: bool = False
    transit_zone_unknown: bool = False
    in_special_flood_hazard_area: bool = False


class ZoningResolutionResult(BaseModel):
    model_config = {"frozen": True}

    bbl: Optional[str] = None
    address: Optional[str] = None
    districts: tuple[NormalizedDistrict, ...] = ()
    primary_district: Optional[NormalizedDistrict] = None
    building_type: BuildingType
    lot_type: LotType
    transit_zone: TransitZone

    far: ConstraintResult
    lot_coverage: ConstraintResult
    min_base_height: ConstraintResult
    height_envelope: ConstraintResult
    density: ConstraintResult
    parking: ConstraintResult
    front_yard: ConstraintResult
    side_yard: ConstraintResult
    rear_yard: ConstraintResult

    derived: DerivedValues
    assumptions: tuple[str, ...] = ()
    flags: ResultFlags = ResultFlags()

    @property
    def constraints(self) -> dict:
        return {
            "far": self.far,
            "lot_coverage": self.lot_coverage,
            "min_base_height": self.min_base_height,
            "height_envelope": self.height_envelope,
            "density": self.density,
            "parking": self.parking,
            "front_yard": self.front_yard,
            "side_yard": self.side_yard,
            "rear_yard": self.rear_yard,
        }
