"""Prometheus metrics for RecipeBox.

Series exposed on ``/metrics``:

- ``recipebox_http_requests_total`` / ``recipebox_http_request_duration_seconds``
- ``recipebox_cache_hits_total`` / ``recipebox_cache_misses_total`` for the listing
- ``recipebox_cache_invalidations_total`` and
  ``recipebox_cache_invalidation_failures_total`` (stale snapshot possible)
- ``recipebox_cache_errors_total`` / ``recipebox_cache_operation_duration_seconds``
- ``recipebox_store_decode_errors_total`` for malformed stored documents

Each ``MetricsRegistry`` owns its ``CollectorRegistry``, so several registries
(as in tests) never collide on metric names. The ``record_*`` helpers write to
the process-wide registry and do nothing when metrics are disabled.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field

from prometheus_client import CollectorRegistry, Counter, Histogram, generate_latest
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from recipebox.config import settings

logger = logging.getLogger(__name__)

HTTP_BUCKETS = (0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5)
CACHE_BUCKETS = (0.0001, 0.0005, 0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 1.0)


@dataclass
class MetricsRegistry:
    """Prometheus collectors for one application instance.

    Collectors stay ``None`` until ``initialize`` runs with metrics enabled.
    """

    http_requests_total: Counter | None = None
    http_request_duration_seconds: Histogram | None = None
    cache_hits_total: Counter | None = None
    cache_misses_total: Counter | None = None
    cache_invalidations_total: Counter | None = None
    cache_invalidation_failures_total: Counter | None = None
    cache_errors_total: Counter | None = None
    cache_operation_duration_seconds: Histogram | None = None
    store_decode_errors_total: Counter | None = None

    _initialized: bool = field(default=False, repr=False)
    _registry: CollectorRegistry | None = field(default=None, repr=False)

    @property
    def enabled(self) -> bool:
        return self._registry is not None

    def initialize(self, enabled: bool | None = None) -> None:
        """Create the collectors; repeated calls are no-ops."""
        if self._initialized:
            return
        self._initialized = True

        if not (settings.enable_metrics if enabled is None else enabled):
            logger.info("Metrics are disabled")
            return

        registry = self._registry = CollectorRegistry()

        def counter(name: str, doc: str, *labels: str) -> Counter:
            return Counter(f"recipebox_{name}", doc, list(labels), registry=registry)

        def histogram(name: str, doc: str, buckets: tuple[float, ...], *labels: str) -> Histogram:
            return Histogram(
                f"recipebox_{name}", doc, list(labels), buckets=buckets, registry=registry
            )

        self.http_requests_total = counter(
            "http_requests_total", "HTTP requests", "method", "path", "status"
        )
        self.http_request_duration_seconds = histogram(
            "http_request_duration_seconds",
            "HTTP request latency in seconds",
            HTTP_BUCKETS,
            "method",
            "path",
        )
        self.cache_hits_total = counter(
            "cache_hits_total", "Listing served from cache", "cache_type"
        )
        self.cache_misses_total = counter(
            "cache_misses_total", "Listing read from the store", "cache_type"
        )
        self.cache_invalidations_total = counter(
            "cache_invalidations_total", "Snapshot deletions after a store write", "operation"
        )
        self.cache_invalidation_failures_total = counter(
            "cache_invalidation_failures_total",
            "Store writes whose snapshot deletion failed",
            "operation",
        )
        self.cache_errors_total = counter(
            "cache_errors_total", "Cache transport errors and timeouts", "operation"
        )
        self.cache_operation_duration_seconds = histogram(
            "cache_operation_duration_seconds",
            "Cache call latency in seconds",
            CACHE_BUCKETS,
            "operation",
            "cache_type",
        )
        self.store_decode_errors_total = counter(
            "store_decode_errors_total", "Stored documents that failed to decode"
        )
        logger.info("Prometheus metrics initialized")

    def generate_latest(self) -> bytes:
        """Exposition-format snapshot of every collector."""
        if self._registry is None:
            return b"# Metrics disabled\n"
        return generate_latest(self._registry)

    def sample(self, name: str, labels: dict[str, str] | None = None) -> float:
        """Current value of one sample; 0.0 if it was never recorded."""
        if self._registry is None:
            return 0.0
        return self._registry.get_sample_value(name, labels or {}) or 0.0


metrics_registry = MetricsRegistry()


def get_metrics() -> MetricsRegistry:
    """The process-wide registry, initialized on first use."""
    metrics_registry.initialize()
    return metrics_registry


def normalize_path(path: str) -> str:
    """Collapse recipe ids so the ``path`` label stays low-cardinality.

    ``/recipes/3f2a...`` becomes ``/recipes/{id}``; ``/recipes/search`` is kept.
    """
    head, _, tail = path.strip("/").partition("/")
    if head == "recipes" and tail and "/" not in tail and tail != "search":
        return "/recipes/{id}"
    return path


class MetricsMiddleware(BaseHTTPMiddleware):
    """Count and time every request except health probes and scrapes."""

    SKIP_PREFIXES = ("/health", "/metrics")

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        path = request.url.path
        metrics = get_metrics()
        if not metrics.enabled or path.startswith(self.SKIP_PREFIXES):
            return await call_next(request)

        label = normalize_path(path)
        status = 500
        start = time.perf_counter()
        try:
            response = await call_next(request)
            status = response.status_code
            return response
        finally:
            elapsed = time.perf_counter() - start
            _inc(metrics.http_requests_total, request.method, label, str(status))
            if metrics.http_request_duration_seconds is not None:
                metrics.http_request_duration_seconds.labels(request.method, label).observe(elapsed)


def _inc(collector: Counter | None, *labels: str) -> None:
    if collector is None:
        return
    (collector.labels(*labels) if labels else collector).inc()


def record_cache_hit(cache_type: str = "redis") -> None:
    _inc(get_metrics().cache_hits_total, cache_type)


def record_cache_miss(cache_type: str = "redis") -> None:
    _inc(get_metrics().cache_misses_total, cache_type)


def record_cache_invalidation(operation: str, succeeded: bool = True) -> None:
    """Count a post-write snapshot deletion, or its failure."""
    metrics = get_metrics()
    if succeeded:
        _inc(metrics.cache_invalidations_total, operation)
    else:
        _inc(metrics.cache_invalidation_failures_total, operation)


def record_cache_error(operation: str) -> None:
    _inc(get_metrics().cache_errors_total, operation)


def record_cache_operation(operation: str, duration: float, cache_type: str = "redis") -> None:
    histogram = get_metrics().cache_operation_duration_seconds
    if histogram is not None:
        histogram.labels(operation, cache_type).observe(duration)


def record_decode_error() -> None:
    _inc(get_metrics().store_decode_errors_total)
