"""Tests for yard requirements calculator."""

from __future__ import annotations

from feasibility.zoning_engine.districts import normalize_district
from feasibility.zoning_engine.yards import (
    calculate_front_yard, calculate_rear_yard, calculate_side_yard, calculate_yard_requirements,
)


class TestFrontYard:
    """Front yard depth."""

    def test_r1_20ft(self):
        result = calculate_front_yard(normalize_district("R1-2"))
        assert result.value == 20
        assert result.requires_manual_review
        assert result.source_section == "ZR §23-321"

    def test_r3a_10ft(self):
        assert calculate_front_yard(normalize_district("R3A")).value == 10

    def test_r4b_line_up_note(self):
        result = calculate_front_yard(normalize_district("R4B"))
        assert result.value == 5
        assert any("line-up" in n for n in result.notes)

    def test_high_density_none_required(self):
        result = calculate_front_yard(normalize_district("R7A"))
        assert result.value == 0
        assert not result.requires_manual_review
        assert result.source_section == "ZR §23-322"

    def test_commercial_unsupported(self):
        result = calculate_front_yard(normalize_district("C4-4"))
        assert result.kind == "unsupported"
        assert "residential districts only" in result.notes[0]

    def test_no_district_unsupported(self):
        assert calculate_front_yard(None).kind == "unsupported"


class TestSideYard:
    """Side yard width."""

    def test_r1_detached(self):
        result = calculate_side_yard(normalize_district("R1"), "single_or_two_family")
        assert result.value == 8
        assert any("detached" in n for n in result.notes)

    def test_multiple_dwelling_low_density(self):
        result = calculate_side_yard(normalize_district("R3-2"), "multiple_dwelling")
        assert result.value == 8

    def test_high_density(self):
        result = calculate_side_yard(normalize_district("R6"), "multiple_dwelling")
        assert result.value == 0
        assert result.requires_manual_review
        assert any("at least 8 ft" in n for n in result.notes)


class TestRearYard:
    """20 ft baseline with caveats."""

    def test_baseline(self):
        result = calculate_rear_yard(normalize_district("R5"), 50, 100)
        assert result.value == 20
        assert result.requires_manual_review
        assert result.source_section == "ZR §23-342"

    def test_narrow_lot_note(self):
        result = calculate_rear_yard(normalize_district("R5"), 35, 100)
        assert result.value == 20
        assert "Lot frontage 35 ft is < 40 ft; a 30 ft rear yard may be required." in result.notes

    def test_shallow_lot_note(self):
        result = calculate_rear_yard(normalize_district("R6"), 50, 80)
        assert any("Shallow lot" in n and "Dec 15, 1961" in n for n in result.notes)

    def test_missing_frontage_note(self):
        result = calculate_rear_yard(normalize_district("R6"), None, 100)
        assert any("frontage unavailable" in n for n in result.notes)

    def test_non_residential(self):
        assert calculate_rear_yard(normalize_district("M1-1"), 50, 100).kind == "unsupported"


class TestYardFlags:
    """Lot-shape flags raised by yard rules."""

    def test_shallow_and_missing_frontage(self):
        yards = calculate_yard_requirements(normalize_district("R5"), "single_or_two_family", None, 80)
        assert yards.shallow_lot_candidate
        assert yards.lot_frontage_missing

    def test_regular_lot(self):
        yards = calculate_yard_requirements(normalize_district("R5"), "single_or_two_family", 50, 100)
        assert not yards.shallow_lot_candidate
        assert not yards.lot_frontage_missing
