"""matching_engine package"""
from .cache import MatchCache
from .engine import (
    MatchingEngine,
    MatchResult,
    find_all_matching,
    find_matching_listings,
    listing_proximity,
)
from .ranking import RankingPreferences, RankingWeights, rank_listings

__all__ = [
    "MatchCache", "MatchingEngine", "MatchResult", "find_all_matching",
    "find_matching_listings", "listing_proximity", "RankingPreferences",
    "RankingWeights", "rank_listings",
]
