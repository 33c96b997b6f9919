"""port_resolver package"""
from .registry import PORT_REGISTRY, PortLocation, list_ports
from .proximity import (
    EARTH_RADIUS_NM,
    distance,
    in_proximity,
    proximity_between,
    proximity_score,
    resolve_port,
)

__all__ = [
    "PORT_REGISTRY", "PortLocation", "list_ports", "EARTH_RADIUS_NM",
    "distance", "in_proximity", "proximity_between", "proximity_score",
    "resolve_port",
]
