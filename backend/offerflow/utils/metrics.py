"""
Prometheus metrics for observability
"""

import re
from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from prometheus_client.core import CollectorRegistry

# Create a custom registry to avoid conflicts
metrics_registry = CollectorRegistry()

# HTTP request metrics
http_requests_total = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["path", "method", "status"],
    registry=metrics_registry,
)

http_request_duration_seconds = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["path", "method"],
    registry=metrics_registry,
    buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
)

# Lifecycle metrics
lifecycle_submissions_total = Counter(
    "lifecycle_submissions_total",
    "Total lifecycle item submissions",
    ["item_kind", "outcome"],  # created, conflict
    registry=metrics_registry,
)

lifecycle_gate_decisions_total = Counter(
    "lifecycle_gate_decisions_total",
    "Total gate decisions",
    ["item_kind", "gate", "decision", "outcome"],  # applied, noop, conflict, forbidden
    registry=metrics_registry,
)

lifecycle_visibility_fail_closed_total = Counter(
    "lifecycle_visibility_fail_closed_total",
    "Items hidden because a not_required gate belongs to a party with an advisor",
    ["item_kind"],
    registry=metrics_registry,
)


def record_http_request(
    path: str,
    method: str,
    status_code: int,
    duration_seconds: float,
) -> None:
    """
    Record HTTP request metrics.

    Args:
        path: Request path (normalized)
        method: HTTP method
        status_code: Response status code
        duration_seconds: Request duration in seconds
    """
    normalized_path = _normalize_path(path)

    http_requests_total.labels(
        path=normalized_path,
        method=method.upper(),
        status=str(status_code),
    ).inc()

    http_request_duration_seconds.labels(
        path=normalized_path,
        method=method.upper(),
    ).observe(duration_seconds)


def record_submission(item_kind: str, outcome: str) -> None:
    lifecycle_submissions_total.labels(item_kind=item_kind, outcome=outcome).inc()


def record_gate_decision(item_kind: str, gate: str, decision: str, outcome: str) -> None:
    """
    Record a gate decision.

    Args:
        outcome: applied, noop, conflict, forbidden
    """
    lifecycle_gate_decisions_total.labels(
        item_kind=item_kind,
        gate=gate,
        decision=decision,
        outcome=outcome,
    ).inc()


def record_visibility_fail_closed(item_kind: str) -> None:
    lifecycle_visibility_fail_closed_total.labels(item_kind=item_kind).inc()


def _normalize_path(path: str) -> str:
    """
    Normalize path for metrics (replace UUIDs and IDs with placeholders).

    Examples:
        /api/v1/offers -> /api/v1/offers
        /api/v1/offers/123e4567-... -> /api/v1/offers/{id}
    """
    path = re.sub(
        r'[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}',
        '{id}',
        path,
        flags=re.IGNORECASE,
    )

    # Replace numeric IDs (if any remain)
    path = re.sub(r'/\d+', '/{id}', path)

    return path


def get_metrics_output() -> bytes:
    """Get Prometheus metrics output"""
    return generate_latest(metrics_registry)


METRICS_CONTENT_TYPE = CONTENT_TYPE_LATEST
