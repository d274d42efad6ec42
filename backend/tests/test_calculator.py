"""Tests for the full zoning calculator."""

from __future__ import annotations

import pytest

from feasibility.models.schemas import ParcelFacts
from feasibility.zoning_engine import ZoningResolutionCalculator
from feasibility.zoning_engine.calculator import in_special_flood_hazard_area
from feasibility.zoning_engine.density import DUF_APPLIES


@pytest.fixture
def calculator():
    return ZoningResolutionCalculator()


@pytest.fixture
def r6_walkup():
    """R6 interior lot, 50 x 100, six-unit walk-up in the outer transit zone."""
    return ParcelFacts(
        bbl="3012340056",
        address="123 Example St, Brooklyn",
        zoning_districts=("R6",),
        lot_area=5000,
        lot_frontage=50,
        lot_depth=100,
        existing_floor_area=4000,
        building_class="C1",
        existing_units=6,
        transit_zone="outer",
    )


class TestSingleDistrictLot:
    """Typical R6 multiple dwelling."""

    def test_far_and_derived(self, calculator, r6_walkup):
        result = calculator.calculate(r6_walkup)
        assert result.far.kind == "fixed"
        assert result.far.value == pytest.approx(2.2)
        assert result.derived.max_buildable_floor_area_sqft == pytest.approx(11000)
        assert result.derived.remaining_buildable_floor_area_sqft == pytest.approx(7000)
        assert result.derived.max_building_footprint_sqft == pytest.approx(4000)

    def test_classification(self, calculator, r6_walkup):
        result = calculator.calculate(r6_walkup)
        assert result.primary_district.normalized == "R6"
        assert result.building_type == "multiple_dwelling"
        assert result.lot_type == "interior_or_through"
        assert not result.flags.building_type_inferred
        assert not result.flags.lot_type_inferred

    def test_density_and_parking(self, calculator, r6_walkup):
        result = calculator.calculate(r6_walkup)
        # 11,000 / 680 = 16.18 -> 16 units
        assert result.density.scenario(DUF_APPLIES).value == 16
        # 16 units x 25% = 4 spaces, waived (<= 15)
        assert result.parking.kind == "fixed"
        assert result.parking.value == 0
        assert result.parking.detail.parking.units == 16

    def test_heights_and_yards(self, calculator, r6_walkup):
        result = calculator.calculate(r6_walkup)
        assert result.min_base_height.kind == "conditional"
        assert result.height_envelope.kind == "conditional"
        assert "Multiple height limits possible; manual review required." in result.assumptions
        assert result.front_yard.value == 0
        assert result.rear_yard.value == 20

    def test_flags(self, calculator, r6_walkup):
        flags = calculator.calculate(r6_walkup).flags
        assert flags.eligible_site_not_evaluated
        assert not flags.multi_district_lot
        assert not flags.transit_zone_unknown
        assert not flags.district_not_found
        assert not flags.shallow_lot_candidate

    def test_every_constraint_present(self, calculator, r6_walkup):
        result = calculator.calculate(r6_walkup)
        assert set(result.constraints) == {
            "far", "lot_coverage", "min_base_height", "height_envelope", "density",
            "parking", "front_yard", "side_yard", "rear_yard",
        }

    def test_fixed_results_cite_sections(self, calculator, r6_walkup):
        result = calculator.calculate(r6_walkup)
        for name, constraint in result.constraints.items():
            if constraint.kind == "fixed":
                assert constraint.source_section.startswith("ZR §"), name


class TestNoDistrict:
    """A lot without zoning data produces unsupported results, not errors."""

    def test_everything_unsupported(self, calculator):
        result = calculator.calculate(ParcelFacts(lot_area=2500))
        for name, constraint in result.constraints.items():
            assert constraint.kind == "unsupported", name
        assert result.primary_district is None
        assert result.flags.district_not_found
        assert result.derived.controlling_far is None

    def test_building_type_inferred(self, calculator):
        result = calculator.calculate(ParcelFacts(zoning_districts=("R5",)))
        assert result.flags.building_type_inferred
        assert result.building_type == "single_or_two_family"


class TestMultiDistrictLot:
    """Lot split between R6 and R8 with an unknown transit zone."""

    @pytest.fixture
    def facts(self):
        return ParcelFacts(
            zoning_districts=("R6", "R8"),
            lot_area=10000,
            lot_frontage=100,
            lot_depth=100,
            building_class="D4",
            transit_zone="unknown",
        )

    def test_minimum_far(self, calculator, facts):
        result = calculator.calculate(facts)
        assert result.far.kind == "candidates"
        assert result.far.value == pytest.approx(2.2)
        assert result.far.requires_manual_review
        assert result.derived.max_buildable_floor_area_sqft == pytest.approx(22000)

    def test_primary_district_note(self, calculator, facts):
        result = calculator.calculate(facts)
        assert result.flags.multi_district_lot
        assert (
            "Lot spans multiple districts; constraints other than FAR evaluated for primary "
            "district R6 only."
        ) in result.assumptions

    def test_parking_all_regimes(self, calculator, facts):
        result = calculator.calculate(facts)
        assert result.flags.transit_zone_unknown
        assert result.parking.kind == "conditional"
        assert len(result.parking.candidates) == 3

    def test_density_review(self, calculator, facts):
        result = calculator.calculate(facts)
        # 22,000 / 680 = 32.35 -> 32
        assert result.density.scenario(DUF_APPLIES).value == 32
        assert result.density.requires_manual_review

    def test_commercial_primary_notes_unused_residential_area(self, calculator):
        result = calculator.calculate(ParcelFacts(
            zoning_districts=("C4-4", "R7A"),
            lot_area=5000,
            building_class="D1",
            transit_zone="outer",
        ))
        assert result.far.value == pytest.approx(4.0)
        assert result.derived.max_buildable_floor_area_sqft == pytest.approx(20000)
        assert result.density.kind == "unsupported"
        assert result.parking.kind == "unsupported"
        assert (
            "Primary district C4-4 is not residential; the 20,000 sq ft buildable area from "
            "R7A was not used for the dwelling unit cap or parking."
        ) in result.assumptions


class TestReportScenarios:
    """Whole-report walkthroughs for common lots."""

    def test_r6_two_family_lot(self, calculator):
        result = calculator.calculate(ParcelFacts(
            zoning_districts=("R6",),
            lot_area=4000,
            building_class="A1",
        ))
        assert result.building_type == "single_or_two_family"
        assert not result.flags.building_type_inferred
        assert result.far.kind == "fixed"
        assert result.far.value == pytest.approx(2.2)
        assert result.lot_coverage.kind == "fixed"
        assert result.derived.max_buildable_floor_area_sqft == pytest.approx(8800)
        assert result.density.kind == "not_applicable"

    def test_r7_2_lot_without_corner_code(self, calculator):
        result = calculator.calculate(ParcelFacts(
            zoning_districts=("R7-2",),
            lot_area=5000,
            building_class="C4",
        ))
        assert result.lot_type == "interior_or_through"
        assert not result.flags.lot_type_inferred
        assert result.front_yard.kind == "fixed"
        assert result.front_yard.value == 0
        assert result.front_yard.source_section == "ZR §23-322"


class TestContextFlags:
    """Overlays, special districts, flood zones and lot shape."""

    def test_commercial_district(self, calculator):
        result = calculator.calculate(ParcelFacts(zoning_districts=("C4-4",), lot_area=5000))
        assert result.flags.non_residential
        assert not result.flags.district_not_found
        assert result.far.kind == "unsupported"

    def test_overlay_and_special_district(self, calculator):
        result = calculator.calculate(ParcelFacts(
            zoning_districts=("R7A",),
            overlays=("C2-4",),
            special_districts=("EC-5",),
            building_class="D1",
            lot_area=5000,
        ))
        assert result.flags.has_overlay
        assert result.flags.has_special_district
        assert result.density.requires_manual_review
        assert any("C2-4" in a for a in result.assumptions)
        assert any("EC-5" in a for a in result.assumptions)

    def test_flood_zone(self, calculator):
        result = calculator.calculate(ParcelFacts(zoning_districts=("R5",), flood_zone="AE"))
        assert result.flags.in_special_flood_hazard_area
        assert any("flood zone AE" in a for a in result.assumptions)

    def test_no_geocode_record_infers_lot_type(self, calculator):
        result = calculator.calculate(ParcelFacts(zoning_districts=("R5",), has_geocode_record=False))
        assert result.flags.lot_type_inferred

    def test_yard_based_coverage_flag(self, calculator):
        result = calculator.calculate(ParcelFacts(zoning_districts=("R3X",), building_class="A1"))
        assert result.flags.special_lot_coverage_rules_not_evaluated
        assert result.lot_coverage.kind == "unsupported"

    def test_narrow_shallow_lot(self, calculator):
        result = calculator.calculate(ParcelFacts(
            zoning_districts=("R6",),
            building_class="C0",
            lot_area=1800,
            lot_frontage=20,
            lot_depth=90,
            transit_zone="beyond_gtz",
        ))
        assert result.flags.narrow_lot_waiver_candidate
        assert result.flags.shallow_lot_candidate
        assert not result.flags.lot_frontage_missing

    def test_assumptions_are_unique(self, calculator):
        result = calculator.calculate(ParcelFacts(zoning_districts=("R7-3", "R7-3"), lot_area=5000))
        assert len(result.assumptions) == len(set(result.assumptions))


class TestFloodZoneCodes:
    """FEMA Special Flood Hazard Area codes."""

    @pytest.mark.parametrize("zone", ["A", "AE", "AH", "AO", "A99", "V", "VE", " ae "])
    def test_sfha(self, zone):
        assert in_special_flood_hazard_area(zone)

    @pytest.mark.parametrize("zone", [None, "", "X", "D", "0.2 PCT ANNUAL CHANCE FLOOD HAZARD"])
    def test_not_sfha(self, zone):
        assert not in_special_flood_hazard_area(zone)
