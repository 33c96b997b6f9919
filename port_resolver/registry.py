"""
port_resolver/registry.py
Static coordinate registry for the major dry-bulk load and discharge ports.

The table is built once at import and exposed read-only; nothing in the
system writes to it at runtime.
"""
from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping


@dataclass(frozen=True)
class PortLocation:
    """Canonical port name with decimal-degree coordinates."""
    name: str
    latitude: float
    longitude: float


_COORDINATES: dict[str, tuple[float, float]] = {
    # China
    "Qingdao":          (36.0986, 120.3719),
    "Rizhao":           (35.4164, 119.4611),
    "Dalian":           (38.9140, 121.6147),
    "Tianjin":          (39.1422, 117.1767),
    "Shanghai":         (31.2304, 121.4737),
    "Ningbo":           (29.8683, 121.5440),
    "Zhoushan":         (30.0164, 122.2072),
    "Guangzhou":        (23.1291, 113.2644),

    # Japan
    "Kashima":          (35.9667, 140.6500),
    "Chiba":            (35.6074, 140.1065),
    "Tokyo":            (35.6762, 139.6503),
    "Nagoya":           (35.1815, 136.9066),
    "Osaka":            (34.6937, 135.5023),
    "Kobe":             (34.6901, 135.1956),

    # Korea
    "Pohang":           (36.0190, 129.3435),
    "Gwangyang":        (34.9406, 127.7011),
    "Busan":            (35.1796, 129.0756),
    "Incheon":          (37.4563, 126.7052),

    # Australia
    "Port Hedland":     (-20.3100, 118.5717),
    "Dampier":          (-20.6617, 116.7106),
    "Newcastle":        (-32.9283, 151.7817),
    "Port Kembla":      (-34.4775, 150.9025),
    "Brisbane":         (-27.4698, 153.0251),
    "Gladstone":        (-23.8393, 151.2578),
    "Hay Point":        (-21.2833, 149.3000),

    # Brazil
    "Tubarao":          (-20.2976, -40.2958),
    "Ponta da Madeira": (-2.5297, -44.3028),
    "Itaqui":           (-2.5833, -44.3667),
    "Santos":           (-23.9608, -46.3331),
    "Paranagua":        (-25.5163, -48.5081),
    "Rio Grande":       (-32.0350, -52.0986),

    # US Gulf
    "New Orleans":      (29.9511, -90.0715),
    "Houston":          (29.7604, -95.3698),
    "Galveston":        (29.3013, -94.7977),
    "Mobile":           (30.6954, -88.0399),

    # US East Coast
    "Norfolk":          (36.8468, -76.2852),
    "Baltimore":        (39.2904, -76.6122),
    "Philadelphia":     (39.9526, -75.1652),
    "New York":         (40.7128, -74.0060),

    # Europe
    "Rotterdam":        (51.9244, 4.4777),
    "Amsterdam":        (52.3676, 4.9041),
    "Antwerp":          (51.2194, 4.4025),
    "Hamburg":          (53.5511, 9.9937),
    "Bremen":           (53.0793, 8.8017),

    # Southeast Asia
    "Singapore":        (1.3521, 103.8198),
    "Port Klang":       (3.0044, 101.3997),
    "Jakarta":          (-6.2088, 106.8456),
    "Surabaya":         (-7.2575, 112.7521),

    # India
    "Paradip":          (20.2648, 86.6947),
    "Visakhapatnam":    (17.6868, 83.2185),
    "Chennai":          (13.0827, 80.2707),
    "Mumbai":           (19.0760, 72.8777),
    "Kandla":           (23.0333, 70.2167),

    # Black Sea
    "Constanta":        (44.1598, 28.6348),
    "Odessa":           (46.4825, 30.7233),
    "Novorossiysk":     (44.7230, 37.7686),

    # South Africa
    "Durban":           (-29.8587, 31.0218),
    "Richards Bay":     (-28.7831, 32.0378),
    "Cape Town":        (-33.9249, 18.4241),
    "Saldanha":         (-33.0117, 17.9442),
}

PORT_REGISTRY: Mapping[str, PortLocation] = MappingProxyType({
    name: PortLocation(name=name, latitude=lat, longitude=lon)
    for name, (lat, lon) in _COORDINATES.items()
})


def list_ports() -> list[PortLocation]:
    """All registry entries, sorted by canonical name."""
    return sorted(PORT_REGISTRY.values(), key=lambda p: p.name)
