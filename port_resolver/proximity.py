"""
port_resolver/proximity.py
Free-text port resolution and nautical-mile proximity.

Resolution order (first hit wins):
  1. Exact, case-sensitive registry key
  2. Case-insensitive substring, either direction
  3. Word-level substring between query words and registry words
  4. None — callers treat this as "unknown", never as zero distance
"""
import math
from typing import Optional

from config.settings import settings
from port_resolver.registry import PORT_REGISTRY, PortLocation

EARTH_RADIUS_NM = 3440.065


def resolve_port(name: Optional[str]) -> Optional[PortLocation]:
    if not name or not isinstance(name, str):
        return None

    if name in PORT_REGISTRY:
        return PORT_REGISTRY[name]

    query = name.lower().strip()
    if not query:
        return None

    for key, location in PORT_REGISTRY.items():
        key_lower = key.lower()
        if query in key_lower or key_lower in query:
            return location

    query_words = query.split()
    for key, location in PORT_REGISTRY.items():
        key_words = key.lower().split()
        if any(qw in kw or kw in qw for qw in query_words for kw in key_words):
            return location

    return None


def distance(a: PortLocation, b: PortLocation) -> float:
    """Great-circle distance between two locations in nautical miles (haversine)."""
    lat1, lat2 = math.radians(a.latitude), math.radians(b.latitude)
    d_lat = lat2 - lat1
    d_lon = math.radians(b.longitude - a.longitude)
    h = (
        math.sin(d_lat / 2) ** 2
        + math.cos(lat1) * math.cos(lat2) * math.sin(d_lon / 2) ** 2
    )
    h = min(1.0, h)
    c = 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))
    return EARTH_RADIUS_NM * c


def proximity_between(name_a: Optional[str], name_b: Optional[str]) -> Optional[float]:
    """Distance in NM between two free-text port names, or None if either is unknown."""
    if not name_a or not name_b:
        return None
    loc_a = resolve_port(name_a)
    loc_b = resolve_port(name_b)
    if loc_a is None or loc_b is None:
        return None
    return distance(loc_a, loc_b)


def proximity_score(name_a: str, name_b: str, max_distance_nm: Optional[float] = None) -> int:
    """
    0–100 closeness score between two ports.

    Identical names short-circuit to 100. Unknown distance scores a neutral 50
    so that missing coordinates never count as confirmed-far.
    """
    max_nm = settings.proximity_max_nm if max_distance_nm is None else max_distance_nm

    if (name_a or "").lower().strip() == (name_b or "").lower().strip():
        return 100

    dist = proximity_between(name_a, name_b)
    if dist is None:
        return 50
    if dist == 0:
        return 100
    if max_nm <= 0 or dist > max_nm:
        return 0
    # half-up rounding
    return max(0, min(100, math.floor(100 - (dist / max_nm) * 100 + 0.5)))


def in_proximity(name_a: Optional[str], name_b: Optional[str], radius_nm: float) -> bool:
    dist = proximity_between(name_a, name_b)
    return dist is not None and dist <= radius_nm
