"""
monitoring/logger.py
Structured logging for the matching engine, Prometheus counters for
matching/ranking/extraction, and a latency decorator.
"""
import functools
import logging
import time
from typing import Any, Callable, Optional, Sequence


def get_logger(name: str):
    """structlog logger bound to ``name``."""
    import structlog
    return structlog.get_logger(name)


def configure_logging(level: str = "INFO", json_logs: bool = False) -> None:
    """Set up structlog over stdlib logging. Later calls are no-ops."""
    import structlog
    if structlog.is_configured():
        return
    renderer = (
        structlog.processors.JSONRenderer() if json_logs
        else structlog.dev.ConsoleRenderer()
    )
    structlog.configure(
        processors=[
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    logging.basicConfig(level=level.upper(), format="%(message)s")


def _configure_from_settings() -> None:
    from config.settings import settings
    configure_logging(settings.log_level, settings.log_json)


_configure_from_settings()


# ── Prometheus Metrics (registered on first use) ──────────────────────────────

class _LazyMetric:
    """Defers registering a Prometheus metric until something records to it."""

    def __init__(self, kind: str, name: str, desc: str,
                 labels: Sequence[str] = (), **kwargs: Any) -> None:
        self._spec = (kind, name, desc, tuple(labels), kwargs)
        self._metric = None

    def _get(self):
        if self._metric is None:
            import prometheus_client
            kind, name, desc, labels, kwargs = self._spec
            factory = getattr(prometheus_client, kind)
            self._metric = factory(name, desc, list(labels), **kwargs)
        return self._metric

    def __getattr__(self, attr: str):
        # labels / inc / observe / set all go to the real metric
        return getattr(self._get(), attr)


MATCH_REQUESTS = _LazyMetric(
    "Counter", "bulk_matching_requests_total",
    "Matching and ranking calls", ["mode", "status"],
)
MATCH_LATENCY = _LazyMetric(
    "Histogram", "bulk_matching_duration_seconds",
    "Matching and ranking latency", ["mode"],
    buckets=[0.001, 0.005, 0.01, 0.05, 0.1, 0.5],
)
EXTRACTIONS = _LazyMetric(
    "Counter", "bulk_matching_extractions_total",
    "Requirement extractions", ["outcome"],
)
CACHE_EVENTS = _LazyMetric(
    "Counter", "bulk_matching_cache_events_total",
    "Match cache hits, misses and evictions", ["event"],
)
LAST_MATCH_SCORE = _LazyMetric(
    "Gauge", "bulk_matching_last_top_score",
    "Score of the best listing in the last match",
)
GUARDRAIL_FAILURES = _LazyMetric(
    "Counter", "bulk_matching_guardrail_failures_total",
    "Guardrail failures", ["check_type"],
)


def start_metrics_server(port: Optional[int] = None) -> None:
    from config.settings import settings
    port = settings.metrics_port if port is None else port
    log = get_logger("monitoring")
    try:
        from prometheus_client import start_http_server
        start_http_server(port)
        log.info("Prometheus metrics server started", port=port)
    except OSError as exc:
        log.warning("Could not start metrics server", port=port, error=str(exc))


def timed(mode: str) -> Callable:
    """Record the wrapped call's latency under ``MATCH_LATENCY{mode=...}``."""
    def decorator(fn: Callable) -> Callable:
        @functools.wraps(fn)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            t0 = time.perf_counter()
            try:
                return fn(*args, **kwargs)
            finally:
                MATCH_LATENCY.labels(mode=mode).observe(time.perf_counter() - t0)
        return wrapper
    return decorator
