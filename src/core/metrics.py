"""Prometheus metrics for the Comex Credit service.

Metrics are organized into two categories:

Business Metrics (for Credit Operations/Finance):
- comex_status_transition_total: Applied transitions by axis and target
- comex_credit_reservation_total: Reservation attempts by outcome
- comex_credit_reserved_cents_total: Credit reserved by imports
- comex_credit_released_cents_total: Credit released back to applications
- comex_import_total: Imports by lifecycle event
- comex_payment_recorded_total: Payments marked paid, by type

Technical Metrics (for Engineering/SRE):
- comex_operation_latency_seconds: Service operation latency
- comex_event_webhook_latency_seconds: Event webhook delivery latency
- comex_event_webhook_retry_total: Event webhook retries
- comex_http_requests_total: HTTP requests by endpoint/status
"""

import time
from contextlib import contextmanager
from typing import Generator

from prometheus_client import Counter, Histogram, REGISTRY, generate_latest
from prometheus_client.exposition import CONTENT_TYPE_LATEST


# =============================================================================
# Business Metrics (Credit Operations/Finance dashboards)
# =============================================================================

status_transition_total = Counter(
    "comex_status_transition_total",
    "Total number of applied status transitions",
    ["axis", "to_status"],
)

credit_reservation_total = Counter(
    "comex_credit_reservation_total",
    "Credit reservation attempts by outcome",
    ["outcome"],  # reserved, insufficient_credit, no_approved_credit, conflict
)

credit_reserved_cents = Counter(
    "comex_credit_reserved_cents_total",
    "Total credit reserved by imports, in cents",
)

credit_released_cents = Counter(
    "comex_credit_released_cents_total",
    "Total credit released back to applications, in cents",
)

import_total = Counter(
    "comex_import_total",
    "Import lifecycle events",
    ["event"],  # created, cancelled, completed, value_updated
)

payment_recorded_total = Counter(
    "comex_payment_recorded_total",
    "Payments marked as paid",
    ["payment_type"],
)


# =============================================================================
# Technical Metrics (Engineering/SRE dashboards)
# =============================================================================

operation_latency = Histogram(
    "comex_operation_latency_seconds",
    "Service operation latency in seconds",
    ["operation"],
    buckets=[0.005, 0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5],
)

webhook_latency = Histogram(
    "comex_event_webhook_latency_seconds",
    "Event webhook delivery latency in seconds",
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0],
)

webhook_retries = Counter(
    "comex_event_webhook_retry_total",
    "Total number of event webhook retries",
)

webhook_failures = Counter(
    "comex_event_webhook_failures_total",
    "Total number of event webhook delivery failures (after all retries)",
)

webhook_success = Counter(
    "comex_event_webhook_success_total",
    "Total number of successful event webhook deliveries",
)

http_requests_total = Counter(
    "comex_http_requests_total",
    "Total HTTP requests by endpoint and status",
    ["method", "endpoint", "status"],
)

http_request_latency = Histogram(
    "comex_http_request_latency_seconds",
    "HTTP request latency by endpoint",
    ["method", "endpoint"],
    buckets=[0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0],
)


# =============================================================================
# Helper Functions
# =============================================================================

def record_status_transition(axis: str, to_status: str) -> None:
    """Record an applied status transition."""
    status_transition_total.labels(axis=axis, to_status=to_status).inc()


def record_reservation(outcome: str, amount_cents: int = 0) -> None:
    """Record a reservation attempt and, on success, the amount reserved."""
    credit_reservation_total.labels(outcome=outcome).inc()
    if outcome == "reserved":
        credit_reserved_cents.inc(amount_cents)


def record_release(amount_cents: int) -> None:
    """Record credit returned to an application."""
    credit_released_cents.inc(amount_cents)


def record_import_event(event: str) -> None:
    """Record an import lifecycle event."""
    import_total.labels(event=event).inc()


def record_payment(payment_type: str) -> None:
    """Record a payment marked as paid."""
    payment_recorded_total.labels(payment_type=payment_type).inc()


@contextmanager
def track_operation_latency(operation: str) -> Generator[None, None, None]:
    """Context manager to track service operation latency."""
    start = time.perf_counter()
    try:
        yield
    finally:
        duration = time.perf_counter() - start
        operation_latency.labels(operation=operation).observe(duration)


@contextmanager
def track_webhook_latency() -> Generator[None, None, None]:
    """Context manager to track webhook latency."""
    start = time.perf_counter()
    try:
        yield
    finally:
        duration = time.perf_counter() - start
        webhook_latency.observe(duration)


def record_webhook_retry() -> None:
    """Record a webhook retry attempt."""
    webhook_retries.inc()


def record_webhook_success() -> None:
    """Record a successful webhook delivery."""
    webhook_success.inc()


def record_webhook_failure() -> None:
    """Record a failed webhook delivery (after all retries)."""
    webhook_failures.inc()


def record_http_request(method: str, endpoint: str, status: int, duration: float) -> None:
    """Record an HTTP request."""
    http_requests_total.labels(method=method, endpoint=endpoint, status=str(status)).inc()
    http_request_latency.labels(method=method, endpoint=endpoint).observe(duration)


def get_metrics() -> bytes:
    """Get current metrics in Prometheus format."""
    return generate_latest(REGISTRY)


def get_metrics_content_type() -> str:
    """Get the content type for metrics response."""
    return CONTENT_TYPE_LATEST
