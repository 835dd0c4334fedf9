# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Prometheus metrics — single source of truth for all metric objects.
Imported by services and middleware. Never instantiated in controllers.
"""

from prometheus_client import Counter, Gauge, Histogram

# ── HTTP Metrics (used by middleware) ──
REQUEST_COUNT = Counter(
    "workforce_requests_total",
    "Total HTTP requests to the workforce service",
    ["method", "endpoint", "status"],
)
REQUEST_LATENCY = Histogram(
    "workforce_request_duration_seconds",
    "Request latency in seconds",
    ["method", "endpoint"],
)
HTTP_ERRORS = Counter(
    "workforce_http_errors_total",
    "Total HTTP error responses",
    ["method", "endpoint", "status"],
)

# ── Upstream Metrics (used by service clients) ──
UPSTREAM_REQUESTS = Counter(
    "workforce_upstream_requests_total",
    "Calls issued to upstream services",
    ["service", "operation", "status"],
)
UPSTREAM_LATENCY = Histogram(
    "workforce_upstream_duration_seconds",
    "Latency of upstream calls",
    ["service"],
)
UPSTREAM_RETRIES = Counter(
    "workforce_upstream_retries_total",
    "Retry attempts to upstream services",
    ["service", "attempt"],
)

# ── Business Metrics (updated by service layer only) ──
MUTATIONS_TOTAL = Counter(
    "workforce_mutations_total",
    "Single-member mutations by outcome",
    ["operation", "outcome"],
)
BATCHES_TOTAL = Counter(
    "workforce_batches_total",
    "Bulk batches by action and outcome",
    ["action", "outcome"],
)
BATCH_OPERATIONS = Counter(
    "workforce_batch_operations_total",
    "Individual operations issued inside bulk batches",
    ["operation", "outcome"],
)
REFRESH_DURATION = Histogram(
    "workforce_refresh_duration_seconds",
    "Duration of a full membership refresh",
)
ENRICHMENT_FAILURES = Counter(
    "workforce_enrichment_failures_total",
    "Per-member enrichment lookups that failed",
    ["lookup"],
)
MEMBERS_IN_VIEW = Gauge(
    "workforce_members_in_view",
    "Members in the most recent refreshed view",
)
PENDING_INVITATIONS = Gauge(
    "workforce_pending_invitations",
    "Pending invitations in the most recent refreshed view",
)
NOTIFICATIONS_SENT = Counter(
    "workforce_notifications_sent_total",
    "User-facing notifications emitted",
    ["level"],
)
