"""
requirement_extractor/models.py
Shared VesselListing and CargoRequirement dataclasses used by the extractor,
matching engine, guardrails and API.  Kept in a separate module to avoid
circular imports.
"""
import uuid
from dataclasses import dataclass, field, fields
from datetime import datetime
from typing import Optional


@dataclass
class VesselListing:
    """
    A chartering opportunity as supplied by upstream sources.
    Read-only to the matching engine: scores are returned alongside it,
    never written onto it.
    """
    id: str = ""

    # Vessel identity
    vessel_name: str = ""
    imo: str = ""
    flag: str = ""
    build_year: Optional[int] = None
    age: Optional[int] = None

    # Capacity
    vessel_type: str = ""
    dwt: Optional[float] = None

    # Position & availability
    open_port: str = ""
    load_port: str = ""
    discharge_port: str = ""
    laycan_start: Optional[datetime] = None
    laycan_end: Optional[datetime] = None

    # Commercial terms
    freight_rate: Optional[float] = None     # thousands USD/day
    rate_unit: str = "k/day"

    # Cargo affinity
    cargo_type: str = ""
    cargo_quantity: Optional[float] = None   # metric tonnes

    # Operational attributes
    gear: str = ""                           # "geared" | "gearless"
    ice_class: str = ""
    special_clauses: str = ""
    charterer: str = ""

    status: str = "available"

    def vessel_age(self, current_year: int) -> Optional[int]:
        if self.build_year:
            return current_year - self.build_year
        return self.age

    @property
    def position_port(self) -> str:
        """Where the vessel opens; falls back to its load port."""
        return self.open_port or self.load_port


# Requirement field → key in confidence_scores
CONFIDENCE_KEYS: dict[str, str] = {
    "vessel_type":           "vessel_type",
    "vessel_size":           "vessel_size",
    "load_port":             "load_port",
    "discharge_port":        "discharge_port",
    "laycan_start":          "laycan",
    "laycan_end":            "laycan",
    "target_rate":           "target_rate",
    "max_age":               "max_age",
    "build_year":            "max_age",
    "gear_requirement":      "gear_requirement",
    "ice_class_requirement": "ice_class_requirement",
    "flag_preference":       "flag_preference",
    "special_clauses":       "special_clauses",
    "charterer_preference":  "charterer_preference",
    "cargo_quantity":        "cargo_quantity",
    "cargo_type":            "cargo_type",
}


@dataclass
class CargoRequirement:
    """
    A charter need, either authored directly or extracted from message text.
    Every matchable field is optional; None means "no requirement".
    """
    id: str = field(default_factory=lambda: uuid.uuid4().hex[:8])

    # Vessel
    vessel_type: Optional[str] = None
    vessel_size: Optional[float] = None      # absolute DWT

    # Route & window
    load_port: Optional[str] = None
    discharge_port: Optional[str] = None
    laycan_start: Optional[datetime] = None
    laycan_end: Optional[datetime] = None

    # Commercial
    target_rate: Optional[float] = None      # thousands USD/day

    # Vessel restrictions
    max_age: Optional[int] = None
    build_year: Optional[int] = None
    gear_requirement: Optional[str] = None
    ice_class_requirement: Optional[str] = None
    flag_preference: Optional[str] = None
    special_clauses: Optional[str] = None
    charterer_preference: Optional[str] = None

    # Cargo
    cargo_quantity: Optional[float] = None
    cargo_type: Optional[str] = None

    # Set only when the record comes from extraction
    confidence_scores: Optional[dict[str, float]] = None
    raw_text: str = ""

    def populated_fields(self) -> list[str]:
        return [
            f.name for f in fields(self)
            if f.name in CONFIDENCE_KEYS and getattr(self, f.name) is not None
        ]

    def is_empty(self) -> bool:
        return not self.populated_fields()
