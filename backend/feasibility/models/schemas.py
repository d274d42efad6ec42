from __future__ import annotations

import math
from typing import Literal, Optional

from pydantic import BaseModel, field_validator

TransitZone = Literal["inner", "outer", "manhattan_core_lic", "beyond_gtz", "unknown"]
BuildingType = Literal["single_or_two_family", "multiple_dwelling"]
LotType = Literal["corner", "interior_or_through"]

MAX_DISTRICTS_PER_LOT = 4


class GeocodeResult(BaseModel):
    bbl: str
    borough: int
    block: int
    lot: int
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    building_class: Optional[str] = None
    community_district: Optional[int] = None
    corner_code: Optional[str] = None
    zoning_districts: list[str] = []
    source: str = "bbl"  # bbl, geosearch, geoservice


class PlutoData(BaseModel):
    bbl: str
    address: Optional[str] = None
    borocode: Optional[int] = None
    block: Optional[int] = None
    lot: Optional[int] = None
    zonedist1: Optional[str] = None
    zonedist2: Optional[str] = None
    zonedist3: Optional[str] = None
    zonedist4: Optional[str] = None
    overlay1: Optional[str] = None
    overlay2: Optional[str] = None
    spdist1: Optional[str] = None
    spdist2: Optional[str] = None
    spdist3: Optional[str] = None
    splitzone: Optional[str] = None
    bldgclass: Optional[str] = None
    landuse: Optional[str] = None
    lotarea: Optional[float] = None
    lotfront: Optional[float] = None
    lotdepth: Optional[float] = None
    bldgarea: Optional[float] = None
    unitsres: Optional[int] = None
    unitstotal: Optional[int] = None
    numfloors: Optional[float] = None
    yearbuilt: Optional[int] = None
    cd: Optional[int] = None
    zipcode: Optional[str] = None

    @property
    def zoning_districts(self) -> list[str]:
        return [d for d in (self.zonedist1, self.zonedist2, self.zonedist3, self.zonedist4) if d]

    @property
    def overlays(self) -> list[str]:
        return [o for o in (self.overlay1, self.overlay2) if o]

    @property
    def special_districts(self) -> list[str]:
        return [s for s in (self.spdist1, self.spdist2, self.spdist3) if s]


class TransitZoneLookup(BaseModel):
    category: TransitZone = "unknown"
    label: Optional[str] = None
    query_succeeded: bool = False


class NormalizedDistrict(BaseModel):
    """Canonical district string plus its base (e.g. R7-2 -> R7)."""

    model_config = {"frozen": True}

    normalized: str
    base_district: Optional[str] = None


class ParcelFacts(BaseModel):
    """Facts about one tax lot, as consumed by the zoning engine.

    Numeric fields are either non-negative or None. NaN and infinite values
    collapse to None; negative values are rejected.
    """

    model_config = {"frozen": True}

    bbl: Optional[str] = None
    address: Optional[str] = None
    zoning_districts: tuple[Optional[str], ...] = ()
    lot_area: Optional[float] = None
    lot_frontage: Optional[float] = None
    lot_depth: Optional[float] = None
    existing_floor_area: Optional[float] = None
    building_class: Optional[str] = None
    existing_units: Optional[int] = None
    borough: Optional[int] = None
    community_district: Optional[int] = None
    corner_code: Optional[str] = None
    transit_zone: TransitZone = "unknown"
    overlays: tuple[str, ...] = ()
    special_districts: tuple[str, ...] = ()
    flood_zone: Optional[str] = None
    has_geocode_record: bool = True

    @field_validator("zoning_districts")
    @classmethod
    def _at_most_four_districts(cls, v: tuple) -> tuple:
        if len(v) > MAX_DISTRICTS_PER_LOT:
            raise ValueError(
                f"a lot carries at most {MAX_DISTRICTS_PER_LOT} zoning districts, got {len(v)}"
            )
        return v

    @field_validator("lot_area", "lot_frontage", "lot_depth", "existing_floor_area")
    @classmethod
    def _finite_non_negative(cls, v: Optional[float]) -> Optional[float]:
        if v is None or math.isnan(v) or math.isinf(v):
            return None
        if v < 0:
            raise ValueError(f"must be non-negative, got {v}")
        return v

    @field_validator("existing_units", mode="before")
    @classmethod
    def _finite_units(cls, v):
        if isinstance(v, float) and (math.isnan(v) or math.isinf(v)):
            return None
        return v

    @field_validator("existing_units")
    @classmethod
    def _non_negative_units(cls, v: Optional[int]) -> Optional[int]:
        if v is not None and v < 0:
            raise ValueError(f"must be non-negative, got {v}")
        return v
