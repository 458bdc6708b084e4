"""Shared test fixtures and configuration for all tests.

This conftest.py provides common fixtures used across unit and integration tests.
"""

from collections.abc import Callable
from typing import Any
from unittest.mock import Mock

import pytest

from retryable.config import Settings
from retryable.retry.engine import RetryEngine


class CountingWork:
    """Work function wrapper that counts attempts.

    The wrapped body receives ``(attempt, previous_failure)`` like any
    two-argument work function; every invocation is recorded in ``seen``.
    """

    def __init__(self, body: Callable[[int, BaseException | None], Any]):
        self.body = body
        self.calls = 0
        self.seen: list[tuple[int, BaseException | None]] = []

    def __call__(self, attempt: int, previous: BaseException | None) -> Any:
        self.calls += 1
        self.seen.append((attempt, previous))
        return self.body(attempt, previous)


@pytest.fixture
def test_settings() -> Settings:
    """Settings with the documented defaults and metrics disabled.

    Override specific settings in individual tests as needed:
        def test_something(test_settings):
            engine = RetryEngine(settings=test_settings.model_copy(update={"DEFAULT_TRIES": 4}))
    """
    return Settings(
        DEFAULT_TRIES=2,
        DEFAULT_SLEEP=1.0,
        DEFAULT_MATCHING=".*",
        LOG_LEVEL="DEBUG",
        ENVIRONMENT="development",
        PROMETHEUS_ENABLED=False,  # Disable metrics unless a test needs them
    )


@pytest.fixture
def mock_sleep() -> Mock:
    """Injected sleep primitive; assert on its calls instead of waiting."""
    return Mock(name="sleep")


@pytest.fixture
def engine(mock_sleep: Mock, test_settings: Settings) -> RetryEngine:
    """Fresh engine (own defaults, own nesting slot) with mocked sleep."""
    return RetryEngine(sleep=mock_sleep, settings=test_settings)


@pytest.fixture
def counting() -> Callable[[Callable[..., Any]], CountingWork]:
    """Factory wrapping a body in CountingWork."""
    return CountingWork
