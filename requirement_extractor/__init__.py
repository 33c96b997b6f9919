"""requirement_extractor package"""
from .models import CONFIDENCE_KEYS, CargoRequirement, VesselListing
from .extractor import (
    RequirementExtractor,
    extract_requirement,
    extract_with_patterns,
    month_index,
)

__all__ = [
    "CONFIDENCE_KEYS", "CargoRequirement", "VesselListing",
    "RequirementExtractor", "extract_requirement", "extract_with_patterns",
    "month_index",
]
