"""
matching_engine/ranking.py
Preference-based weighted ranking of a listing pool.

Every dimension yields a 0–100 sub-score.  An unset preference always scores
a neutral 50 so that it cannot move the ranking.  The composite is the
weight-normalised percentage  Σ(sub × w) / Σ(100 × w) × 100.

Cargo type, port efficiency, historical performance, market trend and
geographic proximity carry weights but have no scoring model yet; they
contribute the neutral 50.
"""
from dataclasses import asdict, dataclass, fields
from datetime import datetime
from typing import Optional, Sequence

from matching_engine.engine import MatchResult
from monitoring import MATCH_REQUESTS, get_logger, timed
from requirement_extractor.models import VesselListing

log = get_logger(__name__)

NEUTRAL = 50.0

# Upper size bound when only a minimum is given (DWT)
DEFAULT_MAX_VESSEL_SIZE = 400_000
SIZE_POINTS_PER_KT = 2.0          # per 1,000 DWT outside the range
LAYCAN_POINTS_PER_DAY = 2.0
AGE_POINTS_PER_YEAR = 10.0
NON_PREFERRED_PORT_SCORE = 20.0


@dataclass(frozen=True)
class RankingWeights:
    vessel_size: float = 0.30
    laycan: float = 0.25
    freight_rate: float = 0.35
    region: float = 0.10
    vessel_age: float = 0.0
    cargo_type: float = 0.0
    charterer_reputation: float = 0.0
    port_efficiency: float = 0.0
    historical_performance: float = 0.0
    market_trend: float = 0.0
    geographic_proximity: float = 0.0

    def __post_init__(self) -> None:
        negative = [f.name for f in fields(self) if getattr(self, f.name) < 0]
        if negative:
            raise ValueError(f"Ranking weights must be non-negative: {', '.join(negative)}")

    def total(self) -> float:
        return sum(asdict(self).values())

    def normalized(self) -> "RankingWeights":
        """Rescale to sum to 1; an all-zero vector falls back to the defaults."""
        total = self.total()
        if total == 0:
            return RankingWeights()
        return RankingWeights(**{k: v / total for k, v in asdict(self).items()})


@dataclass
class RankingPreferences:
    """Client preferences; every field is optional."""
    preferred_ports: Optional[list[str]] = None
    max_vessel_age: Optional[int] = None
    min_vessel_size: Optional[float] = None      # DWT
    max_vessel_size: Optional[float] = None      # DWT
    preferred_charterers: Optional[list[str]] = None
    target_laycan: Optional[datetime] = None
    budget_max: Optional[float] = None           # thousands USD/day


# ── Sub-scores ────────────────────────────────────────────────────────────────

def size_score(listing: VesselListing, prefs: RankingPreferences) -> float:
    if prefs.min_vessel_size is None and prefs.max_vessel_size is None:
        return NEUTRAL
    if listing.dwt is None:
        return NEUTRAL
    low = prefs.min_vessel_size or 0
    high = prefs.max_vessel_size if prefs.max_vessel_size is not None else DEFAULT_MAX_VESSEL_SIZE
    if low <= listing.dwt <= high:
        return 100.0
    gap = min(abs(listing.dwt - low), abs(listing.dwt - high))
    return max(0.0, 100 - (gap / 1000) * SIZE_POINTS_PER_KT)


def laycan_score(listing: VesselListing, prefs: RankingPreferences) -> float:
    if prefs.target_laycan is None or listing.laycan_start is None:
        return NEUTRAL
    days = abs((prefs.target_laycan - listing.laycan_start).total_seconds()) / 86400
    return max(0.0, 100 - days * LAYCAN_POINTS_PER_DAY)


def rate_score(listing: VesselListing, prefs: RankingPreferences) -> float:
    """At or below budget scores full; above it decays by the percentage excess."""
    if prefs.budget_max is None or listing.freight_rate is None:
        return NEUTRAL
    if listing.freight_rate <= prefs.budget_max:
        return 100.0
    if prefs.budget_max <= 0:
        return 0.0
    excess_pct = (listing.freight_rate - prefs.budget_max) / prefs.budget_max * 100
    return max(0.0, 100 - excess_pct)


def port_score(listing: VesselListing, prefs: RankingPreferences) -> float:
    if not prefs.preferred_ports or not listing.load_port:
        return NEUTRAL
    load = listing.load_port.lower()
    preferred = any(p.lower() in load or load in p.lower() for p in prefs.preferred_ports if p)
    return 100.0 if preferred else NON_PREFERRED_PORT_SCORE


def age_score(listing: VesselListing, prefs: RankingPreferences, current_year: int) -> float:
    age = listing.vessel_age(current_year)
    if prefs.max_vessel_age is None or age is None:
        return NEUTRAL
    if age <= prefs.max_vessel_age:
        return 100.0
    return max(0.0, 100 - (age - prefs.max_vessel_age) * AGE_POINTS_PER_YEAR)


def charterer_score(listing: VesselListing, prefs: RankingPreferences) -> float:
    if not prefs.preferred_charterers or not listing.charterer:
        return NEUTRAL
    return 100.0 if listing.charterer in prefs.preferred_charterers else NEUTRAL


def sub_scores(
    listing: VesselListing,
    prefs: RankingPreferences,
    current_year: int,
) -> dict[str, float]:
    return {
        "vessel_size":            size_score(listing, prefs),
        "laycan":                 laycan_score(listing, prefs),
        "freight_rate":           rate_score(listing, prefs),
        "region":                 port_score(listing, prefs),
        "vessel_age":             age_score(listing, prefs, current_year),
        "charterer_reputation":   charterer_score(listing, prefs),
        "cargo_type":             NEUTRAL,
        "port_efficiency":        NEUTRAL,
        "historical_performance": NEUTRAL,
        "market_trend":           NEUTRAL,
        "geographic_proximity":   NEUTRAL,
    }


def composite_score(scores: dict[str, float], weights: RankingWeights) -> float:
    w = asdict(weights)
    max_score = sum(100 * w[k] for k in scores)
    if max_score == 0:
        return NEUTRAL
    return sum(scores[k] * w[k] for k in scores) / max_score * 100


@timed("ranking")
def rank_listings(
    pool: Sequence[VesselListing],
    weights: Optional[RankingWeights] = None,
    preferences: Optional[RankingPreferences] = None,
    current_year: Optional[int] = None,
) -> list[MatchResult]:
    """Score every listing and return the whole pool, best first."""
    weights = weights or RankingWeights()
    prefs = preferences or RankingPreferences()
    year = current_year or datetime.now().year

    ranked: list[MatchResult] = []
    for listing in pool:
        scores = sub_scores(listing, prefs, year)
        total = composite_score(scores, weights)
        ranked.append(MatchResult(
            listing=listing,
            score=round(min(100.0, max(0.0, total)), 2),
            breakdown={k: round(v, 2) for k, v in scores.items()},
        ))

    ranked.sort(key=lambda r: r.score, reverse=True)
    MATCH_REQUESTS.labels(mode="ranking", status="ok").inc()
    log.info("Ranking complete", pool=len(pool),
             top=ranked[0].score if ranked else None)
    return ranked
