"""Transit-zone lookup from the NYC DCP Transit Zones layer."""

from __future__ import annotations

import logging
from typing import Optional

import httpx

from feasibility.config import settings
from feasibility.models.schemas import TransitZoneLookup
from feasibility.services.arcgis import query_point
from feasibility.zoning_engine.classifiers import classify_transit_zone

logger = logging.getLogger(__name__)

TRANSIT_ZONE_FIELD = "TranstZone"


async def lookup_transit_zone(lat: Optional[float], lng: Optional[float]) -> TransitZoneLookup:
    """Classify the transit zone at a point.

    Never raises: a missing point or failed query yields category "unknown"
    with query_succeeded False. A successful query with no intersecting
    feature classifies as beyond the Greater Transit Zone.
    """
    if lat is None or lng is None:
        return TransitZoneLookup(category="unknown", query_succeeded=False)

    try:
        features = await query_point(settings.transit_zones_url, lat, lng, TRANSIT_ZONE_FIELD)
    except (httpx.HTTPError, ValueError) as e:
        logger.warning("Transit zone lookup failed at (%s, %s): %s", lat, lng, e)
        return TransitZoneLookup(category="unknown", query_succeeded=False)

    # One label per feature; a blank attribute stays None and classifies
    # as unknown rather than beyond_gtz.
    labels = [str(attrs.get(TRANSIT_ZONE_FIELD) or "").strip() or None for attrs in features]
    category = classify_transit_zone(labels)
    if category == "unknown":
        logger.warning("Transit zone feature at (%s, %s) has no usable label: %r", lat, lng, labels)
    return TransitZoneLookup(
        category=category,
        label=next((label for label in labels if label), None),
        query_succeeded=True,
    )
