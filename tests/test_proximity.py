"""
tests/test_proximity.py
Unit tests for port resolution, great-circle distance and proximity scoring.
Run with: pytest tests/ -v
"""
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from port_resolver.proximity import (
    EARTH_RADIUS_NM,
    distance,
    in_proximity,
    proximity_between,
    proximity_score,
    resolve_port,
)
from port_resolver.registry import PORT_REGISTRY, PortLocation, list_ports


#Fixtures

@pytest.fixture
def rotterdam() -> PortLocation:
    return PORT_REGISTRY["Rotterdam"]


@pytest.fixture
def antwerp() -> PortLocation:
    return PORT_REGISTRY["Antwerp"]


# Registry

class TestRegistry:

    def test_list_ports_sorted_by_name(self):
        names = [p.name for p in list_ports()]
        assert names == sorted(names)
        assert len(names) == len(PORT_REGISTRY)

    def test_registry_is_read_only(self):
        with pytest.raises(TypeError):
            PORT_REGISTRY["Atlantis"] = PortLocation("Atlantis", 0.0, 0.0)

    def test_port_location_is_frozen(self, rotterdam):
        with pytest.raises(Exception):
            rotterdam.latitude = 0.0

    def test_coordinates_in_range(self):
        for port in list_ports():
            assert -90 <= port.latitude <= 90
            assert -180 <= port.longitude <= 180


# Resolution

class TestResolvePort:

    def test_exact_key(self):
        assert resolve_port("Santos").name == "Santos"

    def test_case_insensitive(self):
        assert resolve_port("qingdao").name == "Qingdao"

    def test_query_contains_port_name(self):
        assert resolve_port("Port of Santos").name == "Santos"

    def test_partial_name(self):
        assert resolve_port("Hedland").name == "Port Hedland"

    def test_unknown_port(self):
        assert resolve_port("Atlantis") is None

    @pytest.mark.parametrize("value", ["", "   ", None, 42])
    def test_empty_or_invalid_input(self, value):
        assert resolve_port(value) is None


# Distance

class TestDistance:

    def test_identity(self, rotterdam):
        assert distance(rotterdam, rotterdam) == 0

    def test_symmetry(self, rotterdam, antwerp):
        assert distance(rotterdam, antwerp) == pytest.approx(distance(antwerp, rotterdam))

    def test_rotterdam_antwerp(self, rotterdam, antwerp):
        assert 35 < distance(rotterdam, antwerp) < 50

    def test_antipodal_points_half_circumference(self):
        a = PortLocation("A", 0.0, 0.0)
        b = PortLocation("B", 0.0, 180.0)
        assert distance(a, b) == pytest.approx(EARTH_RADIUS_NM * 3.141592653589793, rel=1e-6)

    def test_symmetry_over_registry(self):
        ports = list_ports()[:10]
        for a in ports:
            for b in ports:
                assert distance(a, b) == pytest.approx(distance(b, a))

    def test_proximity_between_unknown(self):
        assert proximity_between("Atlantis", "Qingdao") is None
        assert proximity_between("", "Qingdao") is None

    def test_proximity_between_free_text(self):
        assert proximity_between("port of rotterdam", "Antwerp") == pytest.approx(
            distance(PORT_REGISTRY["Rotterdam"], PORT_REGISTRY["Antwerp"])
        )


# Proximity score

class TestProximityScore:

    def test_same_port(self):
        assert proximity_score("Qingdao", "Qingdao") == 100

    def test_same_text_ignores_case_and_whitespace(self):
        assert proximity_score("Atlantis", " atlantis ") == 100

    def test_unresolved_is_neutral(self):
        assert proximity_score("Atlantis", "Qingdao") == 50
        assert proximity_score("Qingdao", "Atlantis") == 50

    def test_close_ports_score_high(self):
        score = proximity_score("Rotterdam", "Antwerp")
        assert 90 <= score <= 93

    def test_beyond_max_distance(self):
        assert proximity_score("Santos", "Qingdao") == 0

    def test_custom_max_distance(self):
        assert proximity_score("Rotterdam", "Antwerp", 40) == 0
        assert proximity_score("Rotterdam", "Antwerp", 5000) == 99

    def test_zero_max_distance(self):
        assert proximity_score("Rotterdam", "Antwerp", 0) == 0

    def test_score_is_symmetric(self):
        assert proximity_score("Santos", "Paranagua") == proximity_score("Paranagua", "Santos")

    def test_bounded(self):
        names = [p.name for p in list_ports()]
        for other in names:
            score = proximity_score("Durban", other)
            assert isinstance(score, int)
            assert 0 <= score <= 100


class TestInProximity:

    def test_within_radius(self):
        assert in_proximity("Rotterdam", "Antwerp", 100) is True

    def test_outside_radius(self):
        assert in_proximity("Rotterdam", "Antwerp", 10) is False

    def test_unknown_port_never_in_proximity(self):
        assert in_proximity("Atlantis", "Antwerp", 100_000) is False
