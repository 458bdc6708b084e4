"""Monitoring and metrics instrumentation for the retry engine.

Exports Prometheus metrics for operational monitoring and alerting.
"""

from retryable.monitoring.metrics import (
    attempts_total,
    backoff_seconds,
    runs_total,
)

__all__ = [
    "attempts_total",
    "runs_total",
    "backoff_seconds",
]
