"""Tests for residential FAR tables and multi-district FAR."""

from __future__ import annotations

import pytest

from feasibility.zoning_engine.districts import district_candidates, normalize_district
from feasibility.zoning_engine.far_tables import RESIDENTIAL_FAR, calculate_far
from feasibility.zoning_engine.multi_district import calculate_controlling_far


class TestResidentialFAR:
    """FAR lookup per district."""

    @pytest.mark.parametrize("district,far", [
        ("R1-2", 0.75),
        ("R2", 1.0),
        ("R3X", 1.0),
        ("R4", 1.5),
        ("R5D", 2.0),
        ("R6", 2.2),
        ("R6A", 3.0),
        ("R6B", 2.0),
        ("R7-2", 3.44),
        ("R7A", 4.0),
        ("R7X", 5.0),
        ("R8", 6.02),
        ("R8B", 4.0),
        ("R9D", 9.0),
        ("R10", 10.0),
        ("R11", 12.0),
        ("R12", 15.0),
    ])
    def test_tabulated(self, district, far):
        result = calculate_far(normalize_district(district))
        assert result.kind == "fixed"
        assert result.value == pytest.approx(far)
        assert result.unit == "ratio"
        assert result.assumptions == ()

    def test_low_density_cites_23_21(self):
        result = calculate_far(normalize_district("R5"))
        assert result.source_section == "ZR §23-21"
        assert result.source_url == "https://zr.planning.nyc.gov/article-ii/chapter-3/23-21"

    def test_high_density_cites_23_22(self):
        result = calculate_far(normalize_district("R7A"))
        assert result.source_section == "ZR §23-22"

    def test_untabulated_variant_uses_base(self):
        result = calculate_far(normalize_district("R7-3"))
        assert result.kind == "fixed"
        assert result.value == pytest.approx(3.44)
        assert result.assumptions == (
            "District R7-3 not in FAR lookup; using base district R7 value.",
        )

    def test_commercial_unsupported(self):
        result = calculate_far(normalize_district("C4-4"))
        assert result.kind == "unsupported"
        assert "residential districts only" in result.notes[0]

    def test_no_district_unsupported(self):
        assert calculate_far(None).kind == "unsupported"

    def test_every_value_positive(self):
        assert all(v > 0 for v in RESIDENTIAL_FAR.values())


class TestControllingFAR:
    """Lots spanning more than one district."""

    def test_single_district_passthrough(self):
        result = calculate_controlling_far(district_candidates(["R6"]))
        assert result.kind == "fixed"
        assert not result.requires_manual_review

    def test_minimum_controls(self):
        result = calculate_controlling_far(district_candidates(["R8", "R6"]))
        assert result.kind == "candidates"
        assert result.value == pytest.approx(2.2)
        assert result.requires_manual_review
        assert {c.district for c in result.candidates} == {"R8", "R6"}
        assert any("minimum FAR 2.2" in n for n in result.notes)

    def test_one_resolvable_district(self):
        result = calculate_controlling_far(district_candidates(["C4-4", "R7A"]))
        assert result.kind == "fixed"
        assert result.value == pytest.approx(4.0)
        assert result.requires_manual_review
        assert any("C4-4" in n for n in result.notes)

    def test_none_resolvable(self):
        result = calculate_controlling_far(district_candidates(["C4-4", "M1-1"]))
        assert result.kind == "unsupported"
        assert "C4-4, M1-1" in result.notes[0]

    def test_empty(self):
        assert calculate_controlling_far(()).kind == "unsupported"
