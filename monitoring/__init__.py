"""monitoring package"""
from .logger import (
    CACHE_EVENTS,
    EXTRACTIONS,
    GUARDRAIL_FAILURES,
    LAST_MATCH_SCORE,
    MATCH_LATENCY,
    MATCH_REQUESTS,
    configure_logging,
    get_logger,
    start_metrics_server,
    timed,
)

__all__ = [
    "timed", "start_metrics_server", "get_logger",
    "configure_logging", "MATCH_REQUESTS", "MATCH_LATENCY", "EXTRACTIONS",
    "CACHE_EVENTS", "LAST_MATCH_SCORE", "GUARDRAIL_FAILURES",
]
