"""
Retry engine.

Runs a callable until it succeeds, exhausts its attempt budget, or
raises a failure outside the retry policy:

1. **Options**: per-context defaults merged with per-call overrides
2. **Matching**: exception class (subclasses included) and message pattern
3. **Backoff**: fixed delay, computed delay, or none
4. **Nesting**: optional refusal of reentrant loops

Main Components:
    - RetryEngine: Main orchestrator for the retry loop
    - RetryOptions: Immutable loop configuration
    - BackoffStrategy: Protocol for backoff strategies
    - InvalidOptions / NestingError: Engine control-flow errors

Usage:
    >>> from retryable.retry import RetryEngine
    >>> engine = RetryEngine()
    >>> engine.run(lambda: "ok", tries=3)
    'ok'
"""

from retryable.retry.engine import RESET, RetryEngine, default_logger
from retryable.retry.exceptions import InvalidOptions, NestingError, RetryableError
from retryable.retry.matcher import FailureMatcher
from retryable.retry.metadata import AttemptOutcome, Failure, RunMetadata, Success
from retryable.retry.nesting import NestingGuard, NestingMarker
from retryable.retry.options import OptionsResolver, RetryOptions, builtin_defaults
from retryable.retry.strategies import (
    BackoffStrategy,
    ComputedBackoff,
    FixedBackoff,
    NoBackoff,
    backoff_for,
)

__all__ = [
    "RESET",
    "RetryEngine",
    "default_logger",
    "RetryableError",
    "InvalidOptions",
    "NestingError",
    "FailureMatcher",
    "AttemptOutcome",
    "Success",
    "Failure",
    "RunMetadata",
    "NestingGuard",
    "NestingMarker",
    "OptionsResolver",
    "RetryOptions",
    "builtin_defaults",
    "BackoffStrategy",
    "NoBackoff",
    "FixedBackoff",
    "ComputedBackoff",
    "backoff_for",
]
