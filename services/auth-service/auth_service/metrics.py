"""Prometheus instruments for credential lifecycle outcomes."""

from __future__ import annotations

from prometheus_client import Counter

AUTH_REQUESTS = Counter(
    "auth_requests_total",
    "Credential lifecycle requests by operation and outcome.",
    ["operation", "outcome"],
)


def record_outcome(operation: str, outcome: str) -> None:
    AUTH_REQUESTS.labels(operation=operation, outcome=outcome).inc()
