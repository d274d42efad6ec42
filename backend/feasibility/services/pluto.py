from __future__ import annotations

import logging

import httpx

from feasibility.config import settings
from feasibility.models.schemas import PlutoData

logger = logging.getLogger(__name__)

PLUTO_FIELDS = [
    "bbl", "address", "borocode", "block", "lot",
    "zonedist1", "zonedist2", "zonedist3", "zonedist4",
    "overlay1", "overlay2", "spdist1", "spdist2", "spdist3",
    "splitzone", "bldgclass", "landuse", "lotarea", "lotfront", "lotdepth",
    "bldgarea", "unitsres", "unitstotal", "numfloors", "yearbuilt", "cd", "zipcode",
]


async def fetch_pluto_data(bbl: str, app_token: str | None = None) -> PlutoData | None:
    """Fetch PLUTO data for a given BBL from NYC Open Data Socrata API.

    Returns None when the dataset has no record for the BBL. HTTP failures
    propagate as httpx errors.
    """
    params = {"bbl": bbl, "$select": ",".join(PLUTO_FIELDS)}
    headers = {}
    token = settings.socrata_app_token if app_token is None else app_token
    if token:
        headers["X-App-Token"] = token

    async with httpx.AsyncClient(timeout=settings.pluto_timeout) as client:
        resp = await client.get(settings.pluto_url, params=params, headers=headers)
        resp.raise_for_status()
        data = resp.json()

    if not data:
        logger.info("No PLUTO record for BBL %s", bbl)
        return None

    record = data[0]
    return _parse_pluto_record(record)


def _parse_pluto_record(record: dict) -> PlutoData:
    """Parse a raw PLUTO Socrata record into our schema."""
    def _float(val):
        if val is None:
            return None
        try:
            return float(val)
        except (ValueError, TypeError):
            return None

    def _int(val):
        if val is None:
            return None
        try:
            return int(float(val))
        except (ValueError, TypeError):
            return None

    def _str(val):
        if val is None:
            return None
        text = str(val).strip()
        return text or None

    # Socrata returns BBL as a decimal string ("3046220022.00000000")
    raw_bbl = str(record.get("bbl", "")).strip()
    bbl = raw_bbl.split(".")[0] if raw_bbl else ""

    return PlutoData(
        bbl=bbl,
        address=_str(record.get("address")),
        borocode=_int(record.get("borocode")),
        block=_int(record.get("block")),
        lot=_int(record.get("lot")),
        zonedist1=_str(record.get("zonedist1")),
        zonedist2=_str(record.get("zonedist2")),
        zonedist3=_str(record.get("zonedist3")),
        zonedist4=_str(record.get("zonedist4")),
        overlay1=_str(record.get("overlay1")),
        overlay2=_str(record.get("overlay2")),
        spdist1=_str(record.get("spdist1")),
        spdist2=_str(record.get("spdist2")),
        spdist3=_str(record.get("spdist3")),
        splitzone=_str(record.get("splitzone")),
        bldgclass=_str(record.get("bldgclass")),
        landuse=_str(record.get("landuse")),
        lotarea=_float(record.get("lotarea")),
        lotfront=_float(record.get("lotfront")),
        lotdepth=_float(record.get("lotdepth")),
        bldgarea=_float(record.get("bldgarea")),
        unitsres=_int(record.get("unitsres")),
        unitstotal=_int(record.get("unitstotal")),
        numfloors=_float(record.get("numfloors")),
        yearbuilt=_int(record.get("yearbuilt")),
        cd=_int(record.get("cd")),
        zipcode=_str(record.get("zipcode")),
    )
