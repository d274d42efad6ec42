from __future__ import annotations

from feasibility.zoning_engine.calculator import ZoningResolutionCalculator

__all__ = ["ZoningResolutionCalculator"]
