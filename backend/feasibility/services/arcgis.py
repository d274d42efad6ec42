"""
Point-in-polygon queries against ArcGIS FeatureServer layers.

Used for the NYC transit-zone layer and the FEMA flood hazard layer. Both
take a WGS84 point and return the attributes of intersecting features.
"""

from __future__ import annotations

import json

import httpx

from feasibility.config import settings


def point_query_params(lat: float, lng: float, out_fields: str = "*") -> dict:
    """Query parameters for an intersects query at one point."""
    return {
        "f": "json",
        "where": "1=1",
        "geometryType": "esriGeometryPoint",
        "geometry": json.dumps({"x": lng, "y": lat, "spatialReference": {"wkid": 4326}}),
        "inSR": "4326",
        "spatialRel": "esriSpatialRelIntersects",
        "outFields": out_fields,
        "returnGeometry": "false",
    }


async def query_point(url: str, lat: float, lng: float, out_fields: str = "*") -> list[dict]:
    """Return the attribute dicts of every feature containing the point.

    Raises httpx errors on transport/HTTP failure, and ValueError when the
    service answers 200 with an ArcGIS error payload.
    """
    async with httpx.AsyncClient(timeout=settings.http_timeout) as client:
        resp = await client.get(url, params=point_query_params(lat, lng, out_fields))
        resp.raise_for_status()
        data = resp.json()

    if "error" in data:
        err = data["error"] or {}
        raise ValueError(f"ArcGIS error {err.get('code')}: {err.get('message')}")

    return [f.get("attributes") or {} for f in data.get("features", [])]
