"""
Module-level retry API.

A single process-default engine backs these helpers, for code that has
no natural object to mix Retryable into:

    from retryable import retrying

    @retrying(tries=5, on=ConnectionError, sleep=lambda n: 2 ** n)
    def fetch(url):
        ...
"""

import functools
from collections.abc import Callable, Mapping
from typing import Any, TypeVar

from retryable.retry.engine import RESET, RetryEngine
from retryable.retry.nesting import describe_call_site
from retryable.retry.options import RetryOptions, combine_overrides

F = TypeVar("F", bound=Callable[..., Any])

default_engine = RetryEngine()


def configure_defaults(
    options: "Mapping[str, Any] | RetryOptions | None" = None, /, **overrides: Any
) -> RetryOptions:
    """Update the process-default retry options."""
    return default_engine.configure_defaults(options, **overrides)


def reset_defaults() -> RetryOptions:
    """Restore the built-in process-default retry options."""
    return default_engine.configure_defaults(RESET)


def run(
    work: Callable[..., Any],
    options: "Mapping[str, Any] | RetryOptions | None" = None,
    /,
    **overrides: Any,
) -> Any:
    """Run work under the process-default retry policy."""
    return default_engine.run(work, options, **overrides)


def retrying(
    options: "Mapping[str, Any] | RetryOptions | None" = None, /, **overrides: Any
) -> Callable[[F], F]:
    """
    Decorate a function so every call runs under the retry policy.

    Options are validated when the decorator is applied. The wrapped
    function is called with its own arguments, not the attempt index.
    Defaults are read from the process-default engine at call time.

    Raises:
        InvalidOptions: On an unrecognized option key
    """
    combined = combine_overrides(options, overrides)
    default_engine.resolver.resolve(combined)

    def decorator(fn: F) -> F:
        call_site = describe_call_site(fn)

        @functools.wraps(fn)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            return default_engine.execute(
                lambda: fn(*args, **kwargs), combined, call_site=call_site
            )

        return wrapper  # type: ignore[return-value]

    return decorator
