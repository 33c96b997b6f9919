"""
api/models.py
Pydantic request/response models.

Two modes for the match endpoint:
  1. Structured:  provide a requirement object
  2. Free text:   provide the charter message text; the extractor builds the requirement
"""
from dataclasses import asdict
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from matching_engine.engine import MatchResult
from matching_engine.ranking import RankingPreferences, RankingWeights
from requirement_extractor.models import CargoRequirement, VesselListing


class ListingIn(BaseModel):
    id:              str
    vessel_name:     str             = ""
    imo:             str             = ""
    flag:            str             = ""
    build_year:      Optional[int]   = None
    age:             Optional[int]   = Field(default=None, ge=0)
    vessel_type:     str             = ""
    dwt:             Optional[float] = Field(default=None, description="Deadweight tonnage", ge=0)
    open_port:       str             = ""
    load_port:       str             = ""
    discharge_port:  str             = ""
    laycan_start:    Optional[datetime] = None
    laycan_end:      Optional[datetime] = None
    freight_rate:    Optional[float] = Field(default=None, description="Thousands USD/day")
    rate_unit:       str             = "k/day"
    cargo_type:      str             = ""
    cargo_quantity:  Optional[float] = None
    gear:            str             = ""
    ice_class:       str             = ""
    special_clauses: str             = ""
    charterer:       str             = ""
    status:          str             = "available"

    def to_listing(self) -> VesselListing:
        return VesselListing(**self.model_dump())


class RequirementIn(BaseModel):
    id:                    Optional[str]      = None
    vessel_type:           Optional[str]      = None
    vessel_size:           Optional[float]    = Field(default=None, description="Target DWT")
    load_port:             Optional[str]      = None
    discharge_port:        Optional[str]      = None
    laycan_start:          Optional[datetime] = None
    laycan_end:            Optional[datetime] = None
    target_rate:           Optional[float]    = Field(default=None, description="Thousands USD/day")
    max_age:               Optional[int]      = None
    build_year:            Optional[int]      = None
    gear_requirement:      Optional[str]      = None
    ice_class_requirement: Optional[str]      = None
    flag_preference:       Optional[str]      = None
    special_clauses:       Optional[str]      = None
    charterer_preference:  Optional[str]      = None
    cargo_quantity:        Optional[float]    = None
    cargo_type:            Optional[str]      = None

    @field_validator(
        "vessel_type", "load_port", "discharge_port", "gear_requirement",
        "ice_class_requirement", "flag_preference", "special_clauses",
        "charterer_preference", "cargo_type",
    )
    @classmethod
    def blank_is_unset(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not value.strip():
            return None
        return value

    def to_requirement(self) -> CargoRequirement:
        data = self.model_dump(exclude={"id"})
        if self.id:
            return CargoRequirement(id=self.id, **data)
        return CargoRequirement(**data)


class RequirementOut(RequirementIn):
    id:                str
    confidence_scores: Optional[dict[str, float]] = None
    raw_text:          str = ""

    @classmethod
    def from_requirement(cls, req: CargoRequirement) -> "RequirementOut":
        return cls(**asdict(req))


class WeightsIn(BaseModel):
    vessel_size:            float = 0.30
    laycan:                 float = 0.25
    freight_rate:           float = 0.35
    region:                 float = 0.10
    vessel_age:             float = 0.0
    cargo_type:             float = 0.0
    charterer_reputation:   float = 0.0
    port_efficiency:        float = 0.0
    historical_performance: float = 0.0
    market_trend:           float = 0.0
    geographic_proximity:   float = 0.0

    def to_weights(self) -> RankingWeights:
        # RankingWeights raises ValueError on negatives; routes map it to 422
        return RankingWeights(**self.model_dump())


class PreferencesIn(BaseModel):
    preferred_ports:      Optional[list[str]] = None
    max_vessel_age:       Optional[int]       = None
    min_vessel_size:      Optional[float]     = None
    max_vessel_size:      Optional[float]     = None
    preferred_charterers: Optional[list[str]] = None
    target_laycan:        Optional[datetime]  = None
    budget_max:           Optional[float]     = None

    def to_preferences(self) -> RankingPreferences:
        return RankingPreferences(**self.model_dump())


class ExtractRequest(BaseModel):
    text: str = Field(..., description="Free-text charter requirement, e.g. an email body")


class MatchRequest(BaseModel):
    requirement: Optional[RequirementIn] = Field(
        default=None,
        description="Structured requirement. Required when text is not provided.",
    )
    text: Optional[str] = Field(
        default=None,
        description="Charter message text. When provided without a requirement, it is extracted first.",
    )
    listings:  list[ListingIn] = Field(default_factory=list)
    radius_nm: Optional[float] = Field(
        default=None,
        gt=0,
        description="Only consider listings open within this distance of the load port",
    )

    @model_validator(mode="after")
    def require_requirement_or_text(self):
        if self.requirement is None and not (self.text and self.text.strip()):
            raise ValueError("Either 'requirement' (structured) or 'text' (free text) must be provided.")
        return self


class RankRequest(BaseModel):
    listings:    list[ListingIn] = Field(default_factory=list)
    weights:     WeightsIn       = Field(default_factory=WeightsIn)
    preferences: PreferencesIn   = Field(default_factory=PreferencesIn)


class MatchResultOut(BaseModel):
    listing:   ListingIn
    score:     float
    breakdown: dict[str, float] = {}

    @classmethod
    def from_result(cls, result: MatchResult) -> "MatchResultOut":
        return cls(
            listing=ListingIn(**asdict(result.listing)),
            score=result.score,
            breakdown=result.breakdown,
        )


class GuardrailReport(BaseModel):
    passed:           bool
    confidence_score: float
    issues:           list[str] = []
    warnings:         list[str] = []


class ExtractResponse(BaseModel):
    success:     bool
    requirement: RequirementOut
    warnings:    list[str] = []


class MatchResponse(BaseModel):
    success:          bool
    request_id:       str
    timestamp:        str = Field(default_factory=lambda: datetime.utcnow().isoformat())
    requirement:      RequirementOut
    results:          list[MatchResultOut]
    guardrail_report: GuardrailReport


class RankResponse(BaseModel):
    success:          bool
    results:          list[MatchResultOut]
    guardrail_report: GuardrailReport


class PortOut(BaseModel):
    name:      str
    latitude:  float
    longitude: float


class ProximityResponse(BaseModel):
    port_a:      str
    port_b:      str
    resolved_a:  Optional[str]   = None
    resolved_b:  Optional[str]   = None
    distance_nm: Optional[float] = None
    score:       int
    max_nm:      float
