"""
tests/test_matching.py
Unit tests for compatibility retrieval: dimension scorers, threshold,
ordering, truncation, status gate, proximity radius and the result cache.
Run with: pytest tests/ -v
"""
import sys
from datetime import datetime
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from matching_engine.cache import MatchCache
from matching_engine.engine import MatchingEngine, MatchResult, listing_proximity
from matching_engine.scorers import (
    AgeScorer,
    CargoQuantityScorer,
    CargoTypeScorer,
    ChartererScorer,
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
from requirement_extractor.models import CargoRequirement, VesselListing

YEAR = 2026


def make_listing(id: str, **kw) -> VesselListing:
    return VesselListing(id=id, vessel_name=f"MV {id}", **kw)


#Fixtures

@pytest.fixture
def engine() -> MatchingEngine:
    return MatchingEngine(cache=MatchCache(capacity=50), threshold_pct=60, result_limit=3)


@pytest.fixture
def window_req() -> CargoRequirement:
    return CargoRequirement(laycan_start=datetime(2026, 3, 10), laycan_end=datetime(2026, 3, 20))


# Reference scenario

class TestReferenceScenario:

    def test_only_size_compatible_listing_returned(self, engine):
        req = CargoRequirement(vessel_size=76_000, target_rate=20)
        pool = [
            make_listing("A", dwt=75_500, freight_rate=19.8),
            make_listing("B", dwt=50_000, freight_rate=20.0),
        ]
        results = engine.find_matching_listings(req, pool)
        assert [r.listing.id for r in results] == ["A"]
        assert results[0].score == 100.0

    def test_size_outside_twenty_percent_always_rejected(self, engine):
        req = CargoRequirement(vessel_type="Supramax", vessel_size=58_000, target_rate=14,
                               gear_requirement="geared")
        listing = make_listing("X", vessel_type="Supramax", dwt=70_000, freight_rate=14.0,
                               gear="geared")
        assert engine.find_matching_listings(req, [listing]) == []
        assert engine.score_listing(req, listing, YEAR) is None


# Dimension scorers

class TestScorers:

    @pytest.mark.parametrize("dwt,points", [
        (76_000, 15), (79_000, 15), (80_000, 12), (88_000, 8), (61_000, 8),
    ])
    def test_size_bands(self, dwt, points):
        req = CargoRequirement(vessel_size=76_000)
        ds = VesselSizeScorer().score(req, make_listing("S", dwt=dwt), YEAR)
        assert not ds.rejected
        assert ds.points == points

    def test_size_missing_on_listing_rejects(self):
        req = CargoRequirement(vessel_size=76_000)
        assert VesselSizeScorer().score(req, make_listing("S"), YEAR).rejected

    @pytest.mark.parametrize("offered,points", [
        ("Supramax", 10), ("supramax", 10), ("Supramax Eco", 7), ("Handymax", 5), ("Capesize", 0),
    ])
    def test_vessel_type_grades(self, offered, points):
        req = CargoRequirement(vessel_type="Supramax")
        ds = VesselTypeScorer().score(req, make_listing("T", vessel_type=offered), YEAR)
        assert ds.points == points
        assert not ds.rejected

    def test_port_mismatch_never_rejects(self):
        req = CargoRequirement(load_port="Santos")
        ds = LoadPortScorer().score(req, make_listing("P", load_port="Qingdao"), YEAR)
        assert ds.points == 0
        assert not ds.rejected

    def test_port_substring(self):
        req = CargoRequirement(load_port="Santos")
        ds = LoadPortScorer().score(req, make_listing("P", load_port="Santos Outer Anchorage"), YEAR)
        assert ds.points == 7

    @pytest.mark.parametrize("start,end,points", [
        (datetime(2026, 3, 12), datetime(2026, 3, 18), 15),
        (datetime(2026, 3, 18), datetime(2026, 3, 24), 12),
        (datetime(2026, 3, 22), datetime(2026, 3, 26), 8),
    ])
    def test_laycan_tiers(self, window_req, start, end, points):
        listing = make_listing("L", laycan_start=start, laycan_end=end)
        ds = LaycanScorer(buffer_days=5).score(window_req, listing, YEAR)
        assert ds.points == points

    def test_laycan_outside_buffer_rejects(self, window_req):
        listing = make_listing("L", laycan_start=datetime(2026, 4, 1), laycan_end=datetime(2026, 4, 5))
        assert LaycanScorer(buffer_days=5).score(window_req, listing, YEAR).rejected

    def test_laycan_missing_on_listing_rejects(self, window_req):
        assert LaycanScorer(buffer_days=5).score(window_req, make_listing("L"), YEAR).rejected

    def test_laycan_needs_both_requirement_dates(self):
        req = CargoRequirement(laycan_start=datetime(2026, 3, 10))
        assert not LaycanScorer().applies(req)

    @pytest.mark.parametrize("age,points", [(10, 10), (15, 10), (17, 7), (20, 5)])
    def test_age_allowance(self, age, points):
        req = CargoRequirement(max_age=15)
        assert AgeScorer().score(req, make_listing("A", age=age), YEAR).points == points

    def test_age_beyond_allowance_rejects(self):
        req = CargoRequirement(max_age=15)
        assert AgeScorer().score(req, make_listing("A", age=21), YEAR).rejected

    def test_age_from_build_year(self):
        req = CargoRequirement(max_age=10)
        ds = AgeScorer().score(req, make_listing("A", build_year=2018), YEAR)
        assert ds.points == 10

    def test_exact_match_case_insensitive(self):
        req = CargoRequirement(gear_requirement="Geared")
        assert GearScorer().score(req, make_listing("G", gear="geared"), YEAR).points == 10

    def test_exact_mismatch_rejects(self):
        req = CargoRequirement(gear_requirement="geared")
        assert GearScorer().score(req, make_listing("G", gear="gearless"), YEAR).rejected
        assert GearScorer().score(req, make_listing("G"), YEAR).rejected

    @pytest.mark.parametrize("scorer,req_field,listing_field,wanted,other", [
        (IceClassScorer, "ice_class_requirement", "ice_class", "1A", "1C"),
        (FlagScorer, "flag_preference", "flag", "Panama", "Liberia"),
        (SpecialClausesScorer, "special_clauses", "special_clauses", "no Iran", "no Cuba"),
        (ChartererScorer, "charterer_preference", "charterer", "Cargill", "Bunge"),
    ])
    def test_exact_or_reject(self, scorer, req_field, listing_field, wanted, other):
        req = CargoRequirement(**{req_field: wanted})
        same = scorer().score(req, make_listing("E", **{listing_field: wanted.upper()}), YEAR)
        assert same.points == 10
        assert not same.rejected
        assert scorer().score(req, make_listing("E", **{listing_field: other}), YEAR).rejected
        assert scorer().score(req, make_listing("E"), YEAR).rejected

    @pytest.mark.parametrize("rate,points", [
        (20.0, 15), (20.9, 15), (21.5, 12), (18.1, 12), (22.9, 8), (17.2, 8),
    ])
    def test_rate_bands(self, rate, points):
        req = CargoRequirement(target_rate=20)
        ds = RateScorer().score(req, make_listing("R", freight_rate=rate), YEAR)
        assert not ds.rejected
        assert ds.points == points

    @pytest.mark.parametrize("rate", [23.5, 16.5, None])
    def test_rate_outside_fifteen_percent_rejects(self, rate):
        req = CargoRequirement(target_rate=20)
        assert RateScorer().score(req, make_listing("R", freight_rate=rate), YEAR).rejected

    @pytest.mark.parametrize("qty,points", [
        (50_000, 15), (51_000, 15), (54_000, 12), (46_000, 12), (57_000, 8), (43_000, 8),
    ])
    def test_cargo_quantity_bands(self, qty, points):
        req = CargoRequirement(cargo_quantity=50_000)
        ds = CargoQuantityScorer().score(req, make_listing("Q", cargo_quantity=qty), YEAR)
        assert not ds.rejected
        assert ds.points == points

    @pytest.mark.parametrize("qty", [60_000, 40_000, None])
    def test_cargo_quantity_outside_band_rejects(self, qty):
        req = CargoRequirement(cargo_quantity=50_000)
        assert CargoQuantityScorer().score(req, make_listing("Q", cargo_quantity=qty), YEAR).rejected

    @pytest.mark.parametrize("offered,points", [
        ("soybeans", 10), ("Soybeans", 10), ("soybean", 7), ("coal", 0), ("", 0),
    ])
    def test_cargo_type_never_rejects(self, offered, points):
        req = CargoRequirement(cargo_type="soybeans")
        ds = CargoTypeScorer().score(req, make_listing("C", cargo_type=offered), YEAR)
        assert not ds.rejected
        assert ds.points == points

    @pytest.mark.parametrize("scorer,field", [
        (FlagScorer, "flag_preference"),
        (VesselTypeScorer, "vessel_type"),
        (ChartererScorer, "charterer_preference"),
        (LoadPortScorer, "load_port"),
    ])
    def test_blank_requirement_text_does_not_apply(self, scorer, field):
        assert not scorer().applies(CargoRequirement(**{field: ""}))
        assert not scorer().applies(CargoRequirement(**{field: "  "}))


# Threshold, ordering, truncation

class TestRetrieval:

    def test_threshold_boundary(self, engine):
        req = CargoRequirement(vessel_type="Capesize", vessel_size=180_000)
        pool = [
            make_listing("AT", vessel_type="Panamax", dwt=180_000),   # 15/25 = 60%
            make_listing("BELOW", vessel_type="Panamax", dwt=190_000),  # 12/25 = 48%
        ]
        results = engine.find_matching_listings(req, pool)
        assert [r.listing.id for r in results] == ["AT"]
        assert results[0].score == 60.0

    def test_at_most_three_results(self, engine):
        req = CargoRequirement(vessel_size=58_000)
        pool = [make_listing(str(i), dwt=58_000) for i in range(6)]
        assert len(engine.find_matching_listings(req, pool)) == 3

    def test_sorted_by_score_without_target_rate(self, engine):
        req = CargoRequirement(vessel_size=58_000)
        pool = [
            make_listing("FAR", dwt=66_000),      # 8/15, below threshold
            make_listing("NEAR", dwt=62_000),
            make_listing("EXACT", dwt=58_000),
        ]
        results = engine.find_matching_listings(req, pool)
        assert [r.listing.id for r in results] == ["EXACT", "NEAR"]

    def test_target_rate_overrides_score_order(self, engine):
        req = CargoRequirement(vessel_size=58_000, target_rate=14)
        pool = [
            make_listing("BEST_SCORE", dwt=58_000, freight_rate=14.6),
            make_listing("CLOSEST_RATE", dwt=61_000, freight_rate=14.0),
        ]
        results = engine.find_matching_listings(req, pool)
        assert [r.listing.id for r in results] == ["CLOSEST_RATE", "BEST_SCORE"]
        assert results[0].score < results[1].score

    def test_results_never_below_threshold(self, engine):
        req = CargoRequirement(vessel_type="Supramax", vessel_size=58_000, load_port="Santos")
        pool = [
            make_listing("1", vessel_type="Supramax", dwt=58_000, load_port="Santos"),
            make_listing("2", vessel_type="Ultramax", dwt=68_000, load_port="Qingdao"),
            make_listing("3", vessel_type="Handysize", dwt=50_000, load_port="Santos"),
        ]
        for r in engine.find_matching_listings(req, pool):
            assert r.score >= 60

    def test_empty_requirement_matches_nothing(self, engine):
        pool = [make_listing("A", dwt=58_000)]
        assert engine.find_matching_listings(CargoRequirement(), pool) == []

    def test_empty_requirement_scores_zero(self, engine):
        result = engine.score_listing(CargoRequirement(), make_listing("A"), YEAR)
        assert result.score == 0

    def test_empty_pool(self, engine):
        assert engine.find_matching_listings(CargoRequirement(vessel_size=58_000), []) == []

    def test_blank_text_fields_are_neutral(self, engine):
        req = CargoRequirement(vessel_size=58_000, flag_preference="", vessel_type="")
        pool = [make_listing("A", dwt=58_000, flag="Panama", vessel_type="Supramax")]
        results = engine.find_matching_listings(req, pool)
        assert [r.listing.id for r in results] == ["A"]
        assert results[0].breakdown == {"vessel_size": 15}

    def test_inverted_requirement_laycan_is_no_overlap(self, engine):
        req = CargoRequirement(vessel_size=58_000,
                               laycan_start=datetime(2026, 3, 20), laycan_end=datetime(2026, 3, 10))
        pool = [
            make_listing("INSIDE", dwt=58_000,
                         laycan_start=datetime(2026, 3, 12), laycan_end=datetime(2026, 3, 18)),
            make_listing("SPANNING", dwt=58_000,
                         laycan_start=datetime(2026, 3, 5), laycan_end=datetime(2026, 3, 25)),
        ]
        assert engine.find_matching_listings(req, pool) == []

    def test_inverted_listing_laycan_rejected(self, window_req):
        listing = make_listing("L", laycan_start=datetime(2026, 3, 18), laycan_end=datetime(2026, 3, 12))
        assert LaycanScorer(buffer_days=5).score(window_req, listing, YEAR).rejected

    def test_breakdown_lists_scored_dimensions(self, engine):
        req = CargoRequirement(vessel_size=76_000, target_rate=20)
        result = engine.score_listing(req, make_listing("A", dwt=80_000, freight_rate=20), YEAR)
        assert result.breakdown == {"vessel_size": 12, "target_rate": 15}

    def test_listing_not_mutated(self, engine):
        listing = make_listing("A", dwt=58_000)
        results = engine.find_matching_listings(CargoRequirement(vessel_size=58_000), [listing])
        assert isinstance(results[0], MatchResult)
        assert results[0].listing is listing
        assert not hasattr(listing, "score")


# Supplementary filters

class TestFilters:

    def test_status_gate(self, engine):
        req = CargoRequirement(vessel_size=58_000)
        pool = [
            make_listing("AVAILABLE", dwt=58_000),
            make_listing("PENDING", dwt=58_000, status="pending"),
            make_listing("FIXED", dwt=58_000, status="fixed"),
            make_listing("SUBS", dwt=58_000, status="on_subs"),
        ]
        ids = {r.listing.id for r in engine.find_matching_listings(req, pool)}
        assert ids == {"AVAILABLE", "PENDING"}

    def test_radius_filter(self, engine):
        req = CargoRequirement(vessel_size=58_000, load_port="Rotterdam")
        pool = [
            make_listing("NEAR", dwt=58_000, open_port="Antwerp", load_port="Rotterdam"),
            make_listing("FAR", dwt=58_000, open_port="Santos", load_port="Rotterdam"),
            make_listing("UNKNOWN", dwt=58_000, open_port="Atlantis", load_port="Rotterdam"),
        ]
        results = engine.find_matching_listings(req, pool, radius_nm=100)
        assert [r.listing.id for r in results] == ["NEAR"]

    def test_radius_falls_back_to_listing_load_port(self, engine):
        req = CargoRequirement(vessel_size=58_000, load_port="Rotterdam")
        pool = [make_listing("A", dwt=58_000, load_port="Antwerp")]
        assert len(engine.find_matching_listings(req, pool, radius_nm=100)) == 1

    def test_radius_ignored_without_load_port(self, engine):
        req = CargoRequirement(vessel_size=58_000)
        pool = [make_listing("A", dwt=58_000, open_port="Santos")]
        assert len(engine.find_matching_listings(req, pool, radius_nm=10)) == 1

    def test_listing_proximity(self):
        req = CargoRequirement(load_port="Rotterdam")
        assert listing_proximity(make_listing("A", open_port="Rotterdam"), req) == 100
        assert listing_proximity(make_listing("B"), req) == 50
        assert listing_proximity(make_listing("C", open_port="Santos"), req) == 0

    def test_find_all_matching(self, engine):
        first = CargoRequirement(id="r1", vessel_size=58_000)
        second = CargoRequirement(id="r2", vessel_size=180_000)
        pool = [make_listing("S", dwt=58_000), make_listing("C", dwt=180_000)]
        out = engine.find_all_matching([first, second], pool)
        assert [r.listing.id for r in out["r1"]] == ["S"]
        assert [r.listing.id for r in out["r2"]] == ["C"]


# Cache

class TestCache:

    def test_repeat_call_returns_equal_results(self, engine):
        req = CargoRequirement(vessel_size=58_000)
        pool = [make_listing("A", dwt=58_000), make_listing("B", dwt=60_000)]
        first = engine.find_matching_listings(req, pool)
        second = engine.find_matching_listings(req, pool)
        assert first == second
        assert first is not second

    def test_mutating_result_does_not_reach_cache(self, engine):
        req = CargoRequirement(vessel_size=58_000)
        pool = [make_listing("A", dwt=58_000)]
        first = engine.find_matching_listings(req, pool)
        first.clear()
        assert len(engine.find_matching_listings(req, pool)) == 1

    def test_key_is_requirement_id_and_pool_size(self, engine):
        req = CargoRequirement(vessel_size=58_000)
        engine.find_matching_listings(req, [make_listing("A", dwt=58_000)])
        cached = engine.find_matching_listings(req, [make_listing("Z", dwt=10_000)])
        assert [r.listing.id for r in cached] == ["A"]

    def test_radius_is_part_of_key(self, engine):
        req = CargoRequirement(vessel_size=58_000, load_port="Rotterdam")
        pool = [make_listing("FAR", dwt=58_000, open_port="Santos", load_port="Rotterdam")]
        assert len(engine.find_matching_listings(req, pool)) == 1
        assert engine.find_matching_listings(req, pool, radius_nm=100) == []

    def test_truncated_results_cached(self, engine):
        req = CargoRequirement(vessel_size=58_000)
        pool = [make_listing(str(i), dwt=58_000) for i in range(5)]
        engine.find_matching_listings(req, pool)
        assert len(engine.find_matching_listings(req, pool)) == 3

    def test_insertion_order_eviction(self):
        cache = MatchCache(capacity=2)
        cache.put("a", [1])
        cache.put("b", [2])
        cache.put("c", [3])
        assert cache.get("a") is None
        assert cache.get("b") == [2]
        assert len(cache) == 2

    def test_reads_do_not_refresh_entries(self):
        cache = MatchCache(capacity=2)
        cache.put("a", [1])
        cache.put("b", [2])
        cache.get("a")
        cache.put("c", [3])
        assert "a" not in cache
        assert "b" in cache

    def test_clear(self):
        cache = MatchCache(capacity=2)
        cache.put("a", [1])
        cache.clear()
        assert len(cache) == 0
