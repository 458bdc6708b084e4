"""Custom Prometheus metrics for the retry engine.

These metrics live in the default prometheus_client registry; exposing
them (an HTTP endpoint, a push gateway) is up to the host application.
Useful alert signals:
- retryable_attempts_total{outcome="retry"} (high retry rate indicates a flaky dependency)
- retryable_runs_total{outcome="exhausted"} (work that never succeeded)
- retryable_runs_total{outcome="refused"} (reentrant retry loops)
"""

from prometheus_client import Counter, Histogram

# === Attempt Metrics ===

attempts_total = Counter(
    "retryable_attempts_total",
    "Total work-function attempts by outcome",
    ["outcome"],
)
"""
Attempts counter by outcome.

Labels:
- outcome: success (work returned), retry (eligible failure, another attempt
  follows), exhausted (eligible failure on the last allowed attempt),
  ineligible (failure outside the policy, propagated immediately)
"""

# === Run Metrics ===

runs_total = Counter(
    "retryable_runs_total",
    "Total retry loops by terminal state",
    ["outcome"],
)
"""
Retry loop counter by terminal state.

Labels:
- outcome: succeeded, exhausted, propagated, skipped (tries < 1),
  refused (reentrant loop refused), aborted (a hook or the sleep primitive raised)
"""

# === Backoff Metrics ===

backoff_seconds = Histogram(
    "retryable_backoff_seconds",
    "Backoff delays actually slept between attempts",
    buckets=[0.01, 0.1, 0.5, 1.0, 2.0, 5.0, 10.0, 30.0, 60.0],
)
