"""FEMA flood hazard zone lookup (National Flood Hazard Layer)."""

from __future__ import annotations

import logging
from typing import Optional

import httpx

from feasibility.config import settings
from feasibility.services.arcgis import query_point

logger = logging.getLogger(__name__)

FLOOD_ZONE_FIELD = "FLD_ZONE"


async def lookup_flood_zone(lat: Optional[float], lng: Optional[float]) -> Optional[str]:
    """FEMA flood zone code at a point (e.g. "AE", "X"), or None.

    Failures are logged and return None.
    """
    if lat is None or lng is None:
        return None

    try:
        features = await query_point(settings.flood_zones_url, lat, lng, FLOOD_ZONE_FIELD)
    except (httpx.HTTPError, ValueError) as e:
        logger.warning("Flood zone lookup failed at (%s, %s): %s", lat, lng, e)
        return None

    for attrs in features:
        zone = attrs.get(FLOOD_ZONE_FIELD)
        if zone and str(zone).strip():
            return str(zone).strip().upper()
    return None
