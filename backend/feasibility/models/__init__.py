from __future__ import annotations

from feasibility.models.schemas import ParcelFacts, NormalizedDistrict
from feasibility.models.results import ZoningResolutionResult, ConstraintResult

__all__ = ["ParcelFacts", "NormalizedDistrict", "ZoningResolutionResult", "ConstraintResult"]
