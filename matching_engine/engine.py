"""
matching_engine/engine.py
Compatibility retrieval: requirement → best matching vessel listings.

For each candidate the applicable dimension scorers are run in turn; any hard
reject drops the candidate.  The remaining ones are scored as
earned / available points, kept when at or above the acceptance threshold,
ordered, and truncated to the best few.
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, Optional, Sequence

from config.settings import settings
from matching_engine.cache import MatchCache
from matching_engine.scorers import (
    AgeScorer,
    CargoQuantityScorer,
    CargoTypeScorer,
    ChartererScorer,
    DischargePortScorer,
    FlagScorer,
    GearScorer,
    IceClassScorer,
    LaycanScorer,
    LoadPortScorer,
    RateScorer,
    SpecialClausesScorer,
    VesselSizeScorer,
    VesselTypeScorer,
)
from monitoring import LAST_MATCH_SCORE, MATCH_REQUESTS, get_logger, timed
from port_resolver.proximity import in_proximity, proximity_score
from requirement_extractor.models import CargoRequirement, VesselListing

log = get_logger(__name__)


@dataclass(frozen=True)
class MatchResult:
    """A listing paired with its score (0–100) and per-dimension breakdown."""
    listing: VesselListing
    score: float
    breakdown: dict[str, float] = field(default_factory=dict)


class MatchingEngine:
    """
    Orchestrates the dimension scorers and the result cache.
    Each scorer is independent, stateless, and directly testable.
    """

    _SCORER_CLASSES: tuple[type, ...] = (
        VesselTypeScorer,
        VesselSizeScorer,
        LoadPortScorer,
        DischargePortScorer,
        LaycanScorer,
        RateScorer,
        AgeScorer,
        GearScorer,
        IceClassScorer,
        FlagScorer,
        SpecialClausesScorer,
        ChartererScorer,
        CargoQuantityScorer,
        CargoTypeScorer,
    )

    def __init__(
        self,
        cache: Optional[MatchCache] = None,
        threshold_pct: Optional[float] = None,
        result_limit: Optional[int] = None,
    ) -> None:
        self.cache = cache if cache is not None else MatchCache(settings.match_cache_size)
        self.threshold_pct = settings.match_threshold_pct if threshold_pct is None else threshold_pct
        self.result_limit = settings.match_result_limit if result_limit is None else result_limit
        self._scorers = [cls() for cls in self._SCORER_CLASSES]

    def score_listing(
        self,
        requirement: CargoRequirement,
        listing: VesselListing,
        current_year: Optional[int] = None,
    ) -> Optional[MatchResult]:
        """
        Score one listing without applying the threshold.
        Returns None when any dimension hard-rejects it.
        """
        year = current_year or datetime.now().year
        earned = 0.0
        available = 0.0
        breakdown: dict[str, float] = {}

        for scorer in self._scorers:
            if not scorer.applies(requirement):
                continue
            ds = scorer.score(requirement, listing, year)
            if ds.rejected:
                log.debug("Listing rejected", listing=listing.id, dimension=ds.dimension)
                return None
            earned += ds.points
            available += ds.max_points
            breakdown[ds.dimension] = ds.points

        pct = (earned / available) * 100 if available > 0 else 0.0
        return MatchResult(listing=listing, score=round(pct, 2), breakdown=breakdown)

    @timed("compatibility")
    def find_matching_listings(
        self,
        requirement: CargoRequirement,
        pool: Sequence[VesselListing],
        radius_nm: Optional[float] = None,
    ) -> list[MatchResult]:
        """
        Return at most ``result_limit`` listings scoring at or above the
        threshold.  Ordered by score, or by closeness to the target rate when
        the requirement has one.
        """
        key = (requirement.id, len(pool), radius_nm)
        cached = self.cache.get(key)
        if cached is not None:
            MATCH_REQUESTS.labels(mode="compatibility", status="cached").inc()
            return cached

        candidates = [lst for lst in pool if lst.status in settings.matchable_statuses]
        if radius_nm is not None:
            candidates = self._within_radius(requirement, candidates, radius_nm)

        year = datetime.now().year
        accepted: list[MatchResult] = []
        rejected = 0
        for listing in candidates:
            result = self.score_listing(requirement, listing, year)
            if result is None:
                rejected += 1
                continue
            if result.score >= self.threshold_pct:
                accepted.append(result)

        accepted.sort(key=lambda r: r.score, reverse=True)
        if requirement.target_rate is not None:
            target = requirement.target_rate
            accepted.sort(key=lambda r: _rate_gap(r.listing, target))

        results = accepted[: self.result_limit]
        self.cache.put(key, results)

        MATCH_REQUESTS.labels(mode="compatibility", status="ok").inc()
        if results:
            LAST_MATCH_SCORE.set(results[0].score)
        log.info(
            "Matching complete",
            request_id=requirement.id,
            pool=len(pool),
            candidates=len(candidates),
            rejected=rejected,
            accepted=len(accepted),
            returned=len(results),
        )
        if not results:
            log.info("No listings cleared the threshold", request_id=requirement.id,
                     threshold=self.threshold_pct)
        return list(results)

    def find_all_matching(
        self,
        requirements: Iterable[CargoRequirement],
        pool: Sequence[VesselListing],
        radius_nm: Optional[float] = None,
    ) -> dict[str, list[MatchResult]]:
        return {
            req.id: self.find_matching_listings(req, pool, radius_nm=radius_nm)
            for req in requirements
        }

    @staticmethod
    def _within_radius(
        requirement: CargoRequirement,
        candidates: list[VesselListing],
        radius_nm: float,
    ) -> list[VesselListing]:
        if not requirement.load_port:
            log.warning("Proximity radius ignored: requirement has no load port",
                        request_id=requirement.id, radius_nm=radius_nm)
            return candidates
        return [
            lst for lst in candidates
            if in_proximity(lst.position_port, requirement.load_port, radius_nm)
        ]


def _rate_gap(listing: VesselListing, target: float) -> float:
    if listing.freight_rate is None:
        return float("inf")
    return abs(listing.freight_rate - target)


def listing_proximity(
    listing: VesselListing,
    requirement: CargoRequirement,
    max_distance_nm: Optional[float] = None,
) -> int:
    """Proximity score of the listing's position to the requested load port."""
    if not listing.position_port or not requirement.load_port:
        return 50
    return proximity_score(listing.position_port, requirement.load_port, max_distance_nm)


_default_engine = MatchingEngine()


def find_matching_listings(
    requirement: CargoRequirement,
    pool: Sequence[VesselListing],
    radius_nm: Optional[float] = None,
) -> list[MatchResult]:
    return _default_engine.find_matching_listings(requirement, pool, radius_nm=radius_nm)


def find_all_matching(
    requirements: Iterable[CargoRequirement],
    pool: Sequence[VesselListing],
    radius_nm: Optional[float] = None,
) -> dict[str, list[MatchResult]]:
    return _default_engine.find_all_matching(requirements, pool, radius_nm=radius_nm)
