"""Tests for building ParcelFacts from upstream records."""

from __future__ import annotations

import pytest

from feasibility.models.schemas import GeocodeResult, PlutoData, TransitZoneLookup
from feasibility.services.facts import build_parcel_facts


@pytest.fixture
def geocode():
    return GeocodeResult(
        bbl="3002380001", borough=3, block=238, lot=1,
        latitude=40.6937, longitude=-73.9903,
        building_class="D4", corner_code="NE", community_district=302,
        source="geoservice",
    )


@pytest.fixture
def pluto():
    return PlutoData(
        bbl="3002380001",
        address="100 MONTAGUE STREET",
        zonedist1="R7-1",
        overlay1="C1-3",
        bldgclass="C4",
        lotarea=5000,
        lotfront=50,
        lotdepth=100,
        bldgarea=18500,
        unitsres=24,
        cd=302,
    )


class TestBuildParcelFacts:
    """Merging geocoder, PLUTO and map lookups."""

    def test_merged_fields(self, geocode, pluto):
        facts = build_parcel_facts(
            geocode, pluto, TransitZoneLookup(category="inner", query_succeeded=True), "X",
        )
        assert facts.bbl == "3002380001"
        assert facts.zoning_districts == ("R7-1",)
        assert facts.lot_area == pytest.approx(5000)
        assert facts.existing_units == 24
        assert facts.building_class == "D4"  # geoservice wins over PLUTO
        assert facts.corner_code == "NE"
        assert facts.transit_zone == "inner"
        assert facts.overlays == ("C1-3",)
        assert facts.flood_zone == "X"
        assert facts.has_geocode_record

    def test_pluto_backs_up_building_class(self, geocode, pluto):
        geo = geocode.model_copy(update={"building_class": None})
        assert build_parcel_facts(geo, pluto).building_class == "C4"

    def test_missing_transit_lookup_is_unknown(self, geocode, pluto):
        assert build_parcel_facts(geocode, pluto).transit_zone == "unknown"

    def test_no_pluto(self, geocode):
        facts = build_parcel_facts(geocode, None)
        assert facts.zoning_districts == ()
        assert facts.lot_area is None
        assert facts.overlays == ()

    def test_geosearch_only_has_no_geocode_record(self, pluto):
        geo = GeocodeResult(bbl="3002380001", borough=3, block=238, lot=1, source="geosearch")
        facts = build_parcel_facts(geo, pluto)
        assert not facts.has_geocode_record

    def test_bad_values_are_dropped(self, geocode):
        pluto = PlutoData(bbl="3002380001", zonedist1="R6", lotarea=-100, lotfront=0, unitsres=-2)
        facts = build_parcel_facts(geocode, pluto)
        assert facts.lot_area is None
        assert facts.lot_frontage is None
        assert facts.existing_units is None

    def test_too_many_districts_truncated(self, geocode):
        geo = geocode.model_copy(update={"zoning_districts": ["R6", "R7A", "R8", "C4-4", "R9"]})
        facts = build_parcel_facts(geo, None)
        assert facts.zoning_districts == ("R6", "R7A", "R8", "C4-4")
