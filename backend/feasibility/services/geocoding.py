"""
NYC address geocoding and BBL resolution.

Sources (in order of priority):
  1. NYC Planning Labs Geosearch API (free, no auth)
  2. NYC Geoservice Function 1B (building class, corner code, community district)

Handles:
  - Full addresses: "123 Main St, Brooklyn, NY 11201"
  - Abbreviated boroughs: "123 Main St, BK"
  - No borough: "123 Main St" (tries Geosearch which doesn't need borough)
  - BBL input: "3046220022", "3-04622-0022", "3/04622/0022"
"""

from __future__ import annotations

import logging
import re

import httpx

from feasibility.config import settings
from feasibility.models.schemas import GeocodeResult

logger = logging.getLogger(__name__)

# Borough name/abbreviation → code mapping
BOROUGH_MAP = {
    "manhattan": 1, "mn": 1, "mh": 1, "new york": 1, "ny": 1,
    "bronx": 2, "bx": 2, "the bronx": 2,
    "brooklyn": 3, "bk": 3, "bklyn": 3, "kings": 3,
    "queens": 4, "qn": 4, "qns": 4,
    "staten island": 5, "si": 5, "richmond": 5,
}

BOROUGH_CODE_TO_NAME = {
    1: "MANHATTAN", 2: "BRONX", 3: "BROOKLYN", 4: "QUEENS", 5: "STATEN ISLAND",
}

BOROUGH_NAME_TO_CODE = {
    "manhattan": 1, "bronx": 2, "brooklyn": 3, "queens": 4, "staten island": 5,
}


# ──────────────────────────────────────────────────────────────────
# BBL PARSING
# ──────────────────────────────────────────────────────────────────

def parse_bbl(raw: str) -> str | None:
    """Parse a BBL from various formats.

    Accepts:
      - "3046220022" (10-digit)
      - "3-04622-0022" (dash-separated)
      - "3/04622/0022" (slash-separated)

    Returns 10-digit BBL string or None if invalid.
    """
    cleaned = raw.strip().replace("-", "").replace("/", "").replace(" ", "")
    if re.match(r"^[1-5]\d{9}$", cleaned):
        return cleaned
    return None


def bbl_to_result(bbl: str, **kwargs) -> GeocodeResult:
    """Split a 10-digit BBL into borough, block and lot."""
    return GeocodeResult(
        bbl=bbl,
        borough=int(bbl[0]),
        block=int(bbl[1:6]),
        lot=int(bbl[6:10]),
        **kwargs,
    )


# ──────────────────────────────────────────────────────────────────
# ADDRESS PARSING
# ──────────────────────────────────────────────────────────────────

# Trailing "NY" / "NYC" with an optional zipcode. "New York" alone is a
# borough name, handled by the borough suffixes below.
_STATE_SUFFIX_RE = re.compile(r",?\s*(?:ny|nyc)\s*(?:,?\s*ny)?\s*(\d{5})?\s*$", re.IGNORECASE)
# "..., New York 11201": state name followed by a zipcode
_STATE_NAME_ZIP_RE = re.compile(r",?\s*new\s+york\s*,?\s*(\d{5})\s*$", re.IGNORECASE)
# Longest names first so "staten island" wins over "si"
_BOROUGH_SUFFIXES = [
    (re.compile(r",?\s*\b" + re.escape(name) + r"\s*$", re.IGNORECASE), code)
    for name, code in sorted(BOROUGH_MAP.items(), key=lambda item: -len(item[0]))
]
_HOUSE_NUMBER_RE = re.compile(r"^\d[\d\-]*$")

# Inclusive zipcode ranges → borough code
ZIP_RANGES = [
    (10001, 10282, 1),
    (10451, 10475, 2),
    (11201, 11256, 3),
    (11001, 11109, 4),
    (11351, 11697, 4),
    (10301, 10314, 5),
]


def parse_address(address: str) -> tuple[str, str, int | None]:
    """Split a NYC address into house number, street name and borough code.

    The borough comes from a trailing zipcode or borough name; it is None
    when neither is present ("123 Main St").

        "123 Main Street, Brooklyn, NY 11201" -> ("123", "Main Street", 3)
        "37-28 Junction Blvd, QN"             -> ("37-28", "Junction Blvd", 4)
    """
    text = address.strip()
    borough_code = None

    for pattern in (_STATE_SUFFIX_RE, _STATE_NAME_ZIP_RE):
        match = pattern.search(text)
        if match:
            text = text[:match.start()]
            if match.group(1):
                borough_code = zip_to_borough(match.group(1))
            if borough_code:
                break

    if not borough_code:
        for pattern, code in _BOROUGH_SUFFIXES:
            match = pattern.search(text)
            if match:
                borough_code = code
                text = text[:match.start()]
                break

    text = text.strip().strip(",").strip()
    number, _, street = text.partition(" ")
    if street and _HOUSE_NUMBER_RE.match(number):
        return number, street.strip(), borough_code
    return "", text, borough_code


def zip_to_borough(zipcode: str) -> int | None:
    """Borough code for a NYC zipcode, None outside the city."""
    if not zipcode.isdigit():
        return None
    z = int(zipcode)
    for low, high, code in ZIP_RANGES:
        if low <= z <= high:
            return code
    return None


# ──────────────────────────────────────────────────────────────────
# GEOCODING
# ──────────────────────────────────────────────────────────────────

async def geocode_address(address: str) -> GeocodeResult:
    """Geocode a NYC address to a BBL.

    Uses NYC Planning Geosearch as primary, then Geoservice 1B, which also
    supplies building class, corner code and community district.

    Raises ValueError with a clear message if geocoding fails.
    """
    errors = []

    bbl = parse_bbl(address)
    if bbl:
        return bbl_to_result(bbl)

    house_number, street_name, borough_code = parse_address(address)

    try:
        result = await _geocode_geosearch(address)
        if result:
            # Geosearch has no building attributes; enrich from 1B when possible
            if borough_code:
                try:
                    detail = await _geocode_geoservice(
                        house_number, street_name, BOROUGH_CODE_TO_NAME[borough_code],
                    )
                    if detail and detail.bbl == result.bbl:
                        return detail.model_copy(update={
                            "latitude": detail.latitude or result.latitude,
                            "longitude": detail.longitude or result.longitude,
                        })
                except httpx.HTTPError as e:
                    logger.warning("Geoservice 1B enrichment failed for %r: %s", address, e)
            return result
    except httpx.TimeoutException:
        errors.append(f"Geosearch API timeout (>{settings.http_timeout:g}s)")
    except httpx.ConnectError:
        errors.append("Geosearch API connection failed. Check internet connectivity")
    except httpx.HTTPError as e:
        errors.append(f"Geosearch API error: {type(e).__name__}: {e}")

    if not borough_code:
        detail = (
            f"Could not geocode '{address}'. "
            "The NYC Geosearch API did not find a match, and no borough could "
            "be determined for fallback. Please include the borough "
            "(e.g., 'Brooklyn', 'Manhattan') or a NYC zipcode."
        )
        if errors:
            detail += f" Errors: {'; '.join(errors)}"
        raise ValueError(detail)

    borough_name = BOROUGH_CODE_TO_NAME[borough_code]

    try:
        result = await _geocode_geoservice(house_number, street_name, borough_name)
        if result:
            return result
    except httpx.TimeoutException:
        errors.append("Geoservice 1B timeout")
    except httpx.HTTPError as e:
        errors.append(f"Geoservice 1B: {type(e).__name__}")

    detail = (
        f"Could not geocode address: '{address}'. "
        f"Parsed as: {house_number} {street_name}, {borough_name}. "
        "The address may not exist in NYC's database, or it may be a new/unmapped lot."
    )
    if errors:
        detail += f" Service errors: {'; '.join(errors)}"
    raise ValueError(detail)


async def _geocode_geosearch(address: str) -> GeocodeResult | None:
    """Geocode using NYC Planning Labs Geosearch API (Pelias).

    Returns BBL, coordinates, and borough.
    """
    async with httpx.AsyncClient(timeout=settings.http_timeout) as client:
        resp = await client.get(settings.geosearch_url, params={"text": address})
        if resp.status_code != 200:
            return None
        data = resp.json()

    features = data.get("features", [])
    if not features:
        return None

    feat = features[0]
    props = feat.get("properties", {})
    coords = feat.get("geometry", {}).get("coordinates", [None, None])

    borough = props.get("borough")
    if borough and borough.lower() not in BOROUGH_NAME_TO_CODE:
        return None  # Not in NYC

    pad = props.get("addendum", {}).get("pad", {})
    bbl = pad.get("bbl", "")
    if not bbl or len(bbl) < 10:
        return None

    lat = coords[1] if len(coords) >= 2 and coords[1] else None
    lng = coords[0] if len(coords) >= 2 and coords[0] else None

    return bbl_to_result(bbl, latitude=lat, longitude=lng, source="geosearch")


async def _geocode_geoservice(
    house_number: str, street_name: str, borough: str
) -> GeocodeResult | None:
    """Geocode using NYC Geoservice (Function 1B)."""
    params = {
        "Borough": borough,
        "AddressNo": house_number,
        "StreetName": street_name,
        "Key": settings.geoservice_api_key,
    }

    async with httpx.AsyncClient(timeout=settings.http_timeout) as client:
        resp = await client.get(settings.geoservice_url, params=params)
        resp.raise_for_status()
        data = resp.json()

    return parse_geoservice_response(data)


def parse_geoservice_response(data: dict) -> GeocodeResult | None:
    """Extract BBL and lot attributes from a Function 1B response.

    Reads the structured ``root.wa2F1b`` layout, falling back to the flat
    ``display`` layout.
    """
    root = data.get("root") or {}
    wa2f1ax = (root.get("wa2F1b") or {}).get("wa2f1ax") or {}
    wa2f1ex = wa2f1ax.get("wa2f1ex") or {}
    display = data.get("display") or {}

    bbl = str(root.get("bbl_toString") or "").strip()
    if not bbl and isinstance(wa2f1ax.get("bbl"), dict):
        parts = wa2f1ax["bbl"]
        boro = str(parts.get("boro") or "").strip()
        block = str(parts.get("block") or "").strip()
        lot = str(parts.get("lot") or "").strip()
        if boro and block and lot:
            bbl = f"{boro}{block.zfill(5)}{lot.zfill(4)}"
    if not bbl:
        bbl = str(display.get("out_bbl") or "").strip()
    if not bbl or len(bbl) < 10:
        return None

    building_class = _clean(wa2f1ax.get("rpad_bldg_class") or display.get("out_rpad_bldg_class"))
    corner_code = _clean(wa2f1ex.get("corner_code") or display.get("out_corner_code"))
    cd = _clean(wa2f1ex.get("cd") or display.get("out_cd"))

    return bbl_to_result(
        bbl,
        latitude=_coordinate(wa2f1ex.get("latitude") or display.get("out_latitude")),
        longitude=_coordinate(wa2f1ex.get("longitude") or display.get("out_longitude")),
        building_class=building_class,
        corner_code=corner_code,
        community_district=int(cd) if cd and cd.isdigit() else None,
        source="geoservice",
    )


def _clean(val) -> str | None:
    if val is None:
        return None
    text = str(val).strip()
    return text or None


def _coordinate(val) -> float | None:
    text = _clean(val)
    if text is None:
        return None
    try:
        return float(text)
    except ValueError:
        return None
