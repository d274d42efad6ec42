"""
Builds ParcelFacts from upstream records.

Registry data is messy: PLUTO reports zero or negative frontage for some
lots, and Geoservice occasionally omits fields. Builders here are lenient;
a malformed value becomes None (with a warning) instead of aborting the
report. ParcelFacts itself stays strict.
"""

from __future__ import annotations

import logging
import math
from typing import Optional

from feasibility.models.schemas import (
    MAX_DISTRICTS_PER_LOT, GeocodeResult, ParcelFacts, PlutoData, TransitZoneLookup,
)

logger = logging.getLogger(__name__)


def _measure(name: str, value, bbl: Optional[str], allow_zero: bool = True) -> Optional[float]:
    """Coerce an upstream measurement to a finite non-negative float or None."""
    if value is None:
        return None
    try:
        num = float(value)
    except (TypeError, ValueError):
        logger.warning("Discarding non-numeric %s=%r for %s", name, value, bbl)
        return None
    if math.isnan(num) or math.isinf(num):
        return None
    if num < 0 or (num == 0 and not allow_zero):
        logger.warning("Discarding invalid %s=%r for %s", name, value, bbl)
        return None
    return num


def _count(name: str, value, bbl: Optional[str]) -> Optional[int]:
    num = _measure(name, value, bbl)
    return int(num) if num is not None else None


def build_parcel_facts(
    geocode: Optional[GeocodeResult],
    pluto: Optional[PlutoData],
    transit_zone: Optional[TransitZoneLookup] = None,
    flood_zone: Optional[str] = None,
    address: Optional[str] = None,
) -> ParcelFacts:
    """Merge geocoder, PLUTO and map lookups into one ParcelFacts.

    Geoservice supplies building class, corner code and community district;
    without a Geoservice record the lot type is treated as inferred.
    PLUTO supplies zoning and lot dimensions and backs up the building class.
    PLUTO reports zero frontage/depth for unknown dimensions, so zeros there
    are treated as missing.
    """
    bbl = (geocode.bbl if geocode else None) or (pluto.bbl if pluto else None) or None

    districts: list[str] = []
    if pluto is not None:
        districts = pluto.zoning_districts
    if not districts and geocode is not None:
        districts = list(geocode.zoning_districts)
    if len(districts) > MAX_DISTRICTS_PER_LOT:
        logger.warning(
            "Lot %s lists %d zoning districts; keeping the first %d",
            bbl, len(districts), MAX_DISTRICTS_PER_LOT,
        )
        districts = districts[:MAX_DISTRICTS_PER_LOT]

    building_class = None
    if geocode is not None and geocode.building_class:
        building_class = geocode.building_class
    elif pluto is not None:
        building_class = pluto.bldgclass

    community_district = geocode.community_district if geocode else None
    if community_district is None and pluto is not None:
        community_district = pluto.cd

    borough = geocode.borough if geocode else (pluto.borocode if pluto else None)

    return ParcelFacts(
        bbl=bbl,
        address=address or (pluto.address if pluto else None),
        zoning_districts=tuple(districts),
        lot_area=_measure("lotarea", pluto.lotarea, bbl) if pluto else None,
        lot_frontage=_measure("lotfront", pluto.lotfront, bbl, allow_zero=False) if pluto else None,
        lot_depth=_measure("lotdepth", pluto.lotdepth, bbl, allow_zero=False) if pluto else None,
        existing_floor_area=_measure("bldgarea", pluto.bldgarea, bbl) if pluto else None,
        building_class=building_class,
        existing_units=_count("unitsres", pluto.unitsres, bbl) if pluto else None,
        borough=borough,
        community_district=community_district,
        corner_code=geocode.corner_code if geocode else None,
        transit_zone=transit_zone.category if transit_zone else "unknown",
        overlays=tuple(pluto.overlays) if pluto else (),
        special_districts=tuple(pluto.special_districts) if pluto else (),
        flood_zone=flood_zone,
        # Only a Geoservice record carries a corner code
        has_geocode_record=geocode is not None and geocode.source == "geoservice",
    )
