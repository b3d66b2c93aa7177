"""Prometheus metric inventory.

Everything the service measures is declared here; the owning modules
import a metric and increment or observe it where the action happens.
"""

from __future__ import annotations

from prometheus_client import Counter, Gauge, Histogram

# ---------------------------------------------------------------------------
# HTTP metrics (populated by MetricsMiddleware)
# ---------------------------------------------------------------------------

REQUEST_COUNT = Counter(
    "http_requests_total",
    "Total HTTP requests by method, endpoint, and status code",
    ["method", "endpoint", "status_code"],
)

REQUEST_DURATION = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    # 5ms covers a cache hit; anything past 1s means the store is struggling
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0],
)

ACTIVE_REQUESTS = Gauge(
    "http_active_requests",
    "Number of HTTP requests currently being processed",
)

# ---------------------------------------------------------------------------
# Cache metrics
# ---------------------------------------------------------------------------

CACHE_OPERATIONS = Counter(
    "cache_operations_total",
    "Cache operations by operation and result",
    # operation: read|write|delete
    # result: hit|miss (read), ok (write/delete), lost (write), error, invalid
    ["operation", "result"],
)

CACHE_STORE_EVENTS = Counter(
    "cache_store_events_total",
    "Store handle lifecycle events",
    ["event"],  # connect|disconnect|error
)
