"""
Backoff strategies for the retry loop.

This module implements the Strategy Pattern for the wait inserted
between a failed attempt and the next one. The configured ``sleep``
option selects the strategy:

    1. NoBackoff: ``sleep=None``, the next attempt starts immediately
    2. FixedBackoff: a number, the same delay after every failure
    3. ComputedBackoff: a callable, ``delay = fn(failed_attempt_index)``

Values are passed through verbatim: no capping, no jitter.
"""

from collections.abc import Callable
from typing import Protocol


class BackoffStrategy(Protocol):
    """
    Protocol for backoff strategies.

    Each strategy implements a single ``delay`` method returning the wait
    before the next attempt, or None when no wait should happen.
    """

    def delay(self, attempt: int) -> float | None:
        """
        Compute the wait after a failed attempt.

        Args:
            attempt: Zero-based index of the attempt that just failed

        Returns:
            Delay in seconds, or None for no wait
        """
        ...


class NoBackoff:
    """Retry immediately."""

    name = "none"

    def delay(self, attempt: int) -> float | None:
        return None


class FixedBackoff:
    """Same delay after every failed attempt."""

    name = "fixed"

    def __init__(self, duration: float):
        self.duration = duration

    def delay(self, attempt: int) -> float | None:
        return self.duration


class ComputedBackoff:
    """
    Delay computed from the failed attempt index.

    The first failure passes index 0, so ``lambda n: 4 ** n`` waits
    1, 4, 16, 64... between consecutive attempts.
    """

    name = "computed"

    def __init__(self, fn: Callable[[int], float]):
        self.fn = fn

    def delay(self, attempt: int) -> float | None:
        return self.fn(attempt)


def backoff_for(sleep_spec: float | Callable[[int], float] | None) -> BackoffStrategy:
    """Select the strategy for a ``sleep`` option value."""
    if sleep_spec is None:
        return NoBackoff()
    if callable(sleep_spec):
        return ComputedBackoff(sleep_spec)
    return FixedBackoff(sleep_spec)


def delay(sleep_spec: float | Callable[[int], float] | None, attempt: int) -> float | None:
    """Wait to insert after ``attempt`` failed, per the ``sleep`` option."""
    return backoff_for(sleep_spec).delay(attempt)
