"""
Operational Metrics for IdleWatch

Prometheus metrics for scan runs, classification volume, pricing gaps
and notification delivery. Exposed at /metrics.
"""

from prometheus_client import Counter, Histogram

# --- Scan Metrics ---
SCAN_DURATION = Histogram(
    "idlewatch_scan_duration_seconds",
    "Duration of full-account resource scans",
    ["trigger"],
    buckets=(5, 10, 30, 60, 120, 300, 600, 1200, 1800),
)

SCAN_RUNS_TOTAL = Counter(
    "idlewatch_scan_runs_total",
    "Total number of full-account scans",
    ["trigger", "status"],
)

RESOURCES_CLASSIFIED_TOTAL = Counter(
    "idlewatch_resources_classified_total",
    "Resources classified, by service and usage status",
    ["service", "usage_status"],
)

# --- External Dependency Metrics ---
PRICE_LOOKUP_FAILURES_TOTAL = Counter(
    "idlewatch_price_lookup_failures_total",
    "Price List API lookups that fell back to a zero price",
    ["service_code"],
)

NOTIFICATIONS_SENT_TOTAL = Counter(
    "idlewatch_notifications_sent_total",
    "Report emails attempted, by trigger and outcome",
    ["kind", "status"],
)
