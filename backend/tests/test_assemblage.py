"""Tests for assemblage analysis."""

from __future__ import annotations

import pytest

from feasibility.models.schemas import ParcelFacts
from feasibility.zoning_engine.assemblage import (
    COMBINED_AREA_THEN_DUF, PER_LOT_DUF_SUM, PER_LOT_SUM, SHARED_DISTRICT,
    analyze_assemblage, check_zoning_consistency,
)
from feasibility.zoning_engine.density import DUF_APPLIES, DUF_NOT_APPLICABLE


def _lot(bbl, district, lot_area=2500, building_class="C1", **kwargs):
    return ParcelFacts(
        bbl=bbl,
        zoning_districts=(district,) if isinstance(district, str) else district,
        lot_area=lot_area,
        building_class=building_class,
        **kwargs,
    )


class TestSharedDistrict:
    """Adjacent R6 lots on one block."""

    @pytest.fixture
    def analysis(self):
        return analyze_assemblage([
            _lot("3012340056", "R6"),
            _lot("3012340057", "R6"),
        ])

    def test_totals(self, analysis):
        assert analysis.combined_lot_area_sqft == pytest.approx(5000)
        assert analysis.total_buildable_sqft == pytest.approx(11000)
        assert not analysis.partial_total
        assert not analysis.missing_lot_area

    def test_methods(self, analysis):
        assert analysis.far_method == SHARED_DISTRICT
        assert analysis.density_method == COMBINED_AREA_THEN_DUF

    def test_combined_density(self, analysis):
        # 11,000 / 680 = 16.18 -> 16
        assert analysis.density.default_scenario == DUF_APPLIES
        assert analysis.density.scenario(DUF_APPLIES).value == 16

    def test_high_confidence(self, analysis):
        assert analysis.consistency.same_primary_district
        assert analysis.consistency.same_block
        assert analysis.consistency.confidence == "high"
        assert not analysis.requires_manual_review

    def test_to_dict(self, analysis):
        d = analysis.to_dict()
        assert d["far_method"] == SHARED_DISTRICT
        assert d["density"]["kind"] == "toggle"
        assert len(d["lots"]) == 2


class TestMixedDistricts:
    """Lots in different districts are summed per lot."""

    @pytest.fixture
    def analysis(self):
        return analyze_assemblage([
            _lot("3012340056", "R6"),
            _lot("3012340057", "R7A"),
        ])

    def test_per_lot_sum(self, analysis):
        assert analysis.far_method == PER_LOT_SUM
        assert analysis.density_method == PER_LOT_DUF_SUM
        # 2,500 x 2.2 + 2,500 x 4.0
        assert analysis.total_buildable_sqft == pytest.approx(15500)

    def test_per_lot_units(self, analysis):
        # 5,500 / 680 = 8.09 -> 8; 10,000 / 680 = 14.71 -> 14
        assert [lot.units_rounded for lot in analysis.lots] == [8, 14]
        assert analysis.density.scenario(DUF_APPLIES).value == 22
        assert analysis.density.requires_manual_review

    def test_low_confidence(self, analysis):
        assert analysis.consistency.confidence == "low"
        assert analysis.requires_manual_review
        assert any("per-lot method" in n for n in analysis.consistency.notes)


class TestConsistency:
    """Zoning consistency confidence."""

    def test_same_base_profile_is_medium(self):
        result = check_zoning_consistency([
            _lot("3012340056", "R7A"),
            _lot("3012340057", "R7B"),
        ])
        assert not result.same_primary_district
        assert result.same_normalized_profile
        assert result.confidence == "medium"
        assert result.requires_manual_review

    def test_overlay_lowers_confidence(self):
        result = check_zoning_consistency([
            _lot("3012340056", "R6", overlays=("C2-4",)),
            _lot("3012340057", "R6"),
        ])
        assert result.has_any_overlay
        assert result.confidence == "medium"

    def test_different_blocks_do_not_change_confidence(self):
        result = check_zoning_consistency([
            _lot("3012340056", "R6"),
            _lot("3099990001", "R6"),
        ])
        assert not result.same_block
        assert result.confidence == "high"

    def test_missing_bbl(self):
        result = check_zoning_consistency([_lot(None, "R6"), _lot("3012340057", "R6")])
        assert not result.same_block
        assert any("Block is missing" in n for n in result.notes)

    def test_missing_district_is_low(self):
        result = check_zoning_consistency([_lot("3012340056", ()), _lot("3012340057", "R6")])
        assert result.confidence == "low"


class TestPartialInputs:
    """Lots with missing inputs are excluded and flagged."""

    def test_missing_lot_area(self):
        analysis = analyze_assemblage([
            _lot("3012340056", "R6"),
            _lot("3012340057", "R6", lot_area=None),
        ])
        assert analysis.missing_lot_area
        assert analysis.partial_total
        assert analysis.total_buildable_sqft == pytest.approx(5500)
        assert analysis.density_method == PER_LOT_DUF_SUM
        assert analysis.lots[1].status == "missing_lot_area"

    def test_no_multiple_dwellings(self):
        analysis = analyze_assemblage([
            _lot("3012340056", "R5", building_class="A1"),
            _lot("3012340057", "R5", building_class="B2"),
        ])
        assert analysis.density.default_scenario == DUF_NOT_APPLICABLE
        assert analysis.density.scenario(DUF_APPLIES).value is None

    def test_requires_two_lots(self):
        with pytest.raises(ValueError):
            analyze_assemblage([_lot("3012340056", "R6")])
