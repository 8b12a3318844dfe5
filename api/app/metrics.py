"""Prometheus metrics exported on /metrics."""

from prometheus_client import Counter

STORAGE_OPERATIONS = Counter(
    "storage_operations_total",
    "Media storage operations by backend, operation and outcome",
    ["backend", "operation", "outcome"],
)
