"""
Retryable mixin.

Mix into any class to give each instance its own retry defaults and
nesting marker slot:

    class Uploader(Retryable):
        def push(self, blob):
            return self.retryable(lambda: self.client.put(blob), on=ConnectionError)

The engine is created lazily on first use. Waiting goes through
``retry_sleep`` so subclasses (and tests) can replace it.
"""

import time
from collections.abc import Callable, Mapping
from typing import Any

from retryable.retry.engine import RetryEngine
from retryable.retry.options import RetryOptions


class Retryable:
    """Per-instance retry context."""

    @property
    def retry_engine(self) -> RetryEngine:
        engine = getattr(self, "_retry_engine", None)
        if engine is None:
            engine = RetryEngine(sleep=lambda duration: self.retry_sleep(duration))
            self._retry_engine = engine
        return engine

    def retry_sleep(self, duration: float) -> None:
        time.sleep(duration)

    def retryable_options(
        self, options: "Mapping[str, Any] | RetryOptions | None" = None, /, **overrides: Any
    ) -> RetryOptions:
        """
        Read or update this instance's retry defaults.

        Called without arguments it returns the current defaults;
        ``retryable_options(RESET)`` restores the built-in ones.
        """
        return self.retry_engine.configure_defaults(options, **overrides)

    def retryable(
        self,
        work: Callable[..., Any],
        options: "Mapping[str, Any] | RetryOptions | None" = None,
        /,
        **overrides: Any,
    ) -> Any:
        """Run work under this instance's retry policy. See RetryEngine.run."""
        return self.retry_engine.run(work, options, **overrides)
