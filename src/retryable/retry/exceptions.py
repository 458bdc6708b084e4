"""
Retry engine exceptions.

This module defines the errors raised by the retry engine itself, as
opposed to failures raised by the work function it orchestrates:

- InvalidOptions: an options value contains an unrecognized key or an
  unusable value. Raised before any attempt or state change.
- NestingError: a retry loop was started inside another active loop on
  the same owning context while nesting detection is enabled.

Both derive from RetryableError so the engine can recognize its own
control-flow errors and never subject them to a retry policy.
"""

from typing import Any


class RetryableError(Exception):
    """
    Base exception for all retry engine errors.

    Work-function failures are never wrapped in this type; only errors
    produced by the engine's own checks inherit from it.
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        """
        Initialize retry engine error.

        Args:
            message: Human-readable error description
            details: Structured error data for logging
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class InvalidOptions(RetryableError):
    """
    Raised when retry options cannot be merged.

    Covers unrecognized option keys and values of the wrong shape
    (e.g. a non-exception class in ``on``). Always fatal to the call that
    triggered it; the stored defaults are left untouched.
    """

    def __init__(
        self,
        message: str,
        unknown_keys: list[str] | None = None,
        errors: list[dict[str, Any]] | None = None,
    ):
        """
        Initialize invalid options error.

        Args:
            message: Error description
            unknown_keys: Option keys that are not recognized
            errors: Field-level validation errors (pydantic error dicts)
        """
        details: dict[str, Any] = {}
        if unknown_keys:
            details["unknown_keys"] = unknown_keys
        if errors:
            details["errors"] = errors

        super().__init__(message, details)
        self.unknown_keys = unknown_keys or []


class NestingError(RetryableError):
    """
    Raised when a retry loop is started inside an active detecting loop.

    Attributes:
        call_site: Description of the call site that opened the outer loop
    """

    def __init__(self, call_site: str):
        self.call_site = call_site
        super().__init__(f"Nested retryable: {call_site}", {"call_site": call_site})
