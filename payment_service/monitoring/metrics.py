"""
Prometheus Metrics

Metrics collection for monitoring the payment service.
"""

from prometheus_client import Counter, Histogram, Info

# Application info
app_info = Info("payment_service_app", "Payment service application information")

# Charge metrics
charge_requests_counter = Counter(
    "charge_requests_total",
    "Total charge requests by outcome",
    ["outcome"],  # created, replayed, rejected, failed
)

payment_decisions_counter = Counter(
    "payment_decisions_total",
    "Charge decisions made by the decision engine",
    ["status"],  # SUCCESS, FAILED
)

# Idempotency metrics
idempotency_replays_counter = Counter(
    "idempotency_replays_total",
    "Stored responses replayed instead of recomputed",
    ["source"],  # ledger, race
)

idempotency_conflicts_counter = Counter(
    "idempotency_conflicts_total",
    "Ledger reservations lost to a concurrent writer",
)

idempotency_malformed_snapshots_counter = Counter(
    "idempotency_snapshots_malformed_total",
    "Stored snapshots that failed to parse and were replayed raw",
)

payment_persistence_failures_counter = Counter(
    "payment_persistence_failures_total",
    "Charges that could not be durably recorded",
)

# API metrics
api_requests_total = Counter(
    "api_requests_total",
    "Total API requests",
    ["method", "endpoint", "status_code"],
)

api_request_duration = Histogram(
    "api_request_duration_seconds",
    "API request duration in seconds",
    ["method", "endpoint"],
    buckets=[0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)


def initialize_metrics(app_name: str, version: str) -> None:
    """Initialize application metrics."""
    app_info.info({
        "app_name": app_name,
        "version": version,
    })
