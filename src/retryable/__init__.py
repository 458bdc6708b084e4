"""
Retryable: a reusable retry-execution engine.

Wraps any fallible operation (network call, flaky I/O, transient
dependency) in a retry loop driven by a policy:
- Which exceptions are retryable (classes and a message pattern)
- How many attempts to allow
- How long to wait between attempts

Entry points: the Retryable mixin (per-object defaults) and the
module-level run / configure_defaults / retrying helpers.
"""

__version__ = "0.1.0"

from retryable.api import configure_defaults, reset_defaults, retrying, run
from retryable.logging_config import configure_logging
from retryable.mixin import Retryable
from retryable.retry import (
    RESET,
    InvalidOptions,
    NestingError,
    RetryEngine,
    RetryOptions,
    default_logger,
)

__all__ = [
    "RESET",
    "Retryable",
    "RetryEngine",
    "RetryOptions",
    "InvalidOptions",
    "NestingError",
    "default_logger",
    "configure_defaults",
    "configure_logging",
    "reset_defaults",
    "retrying",
    "run",
]
