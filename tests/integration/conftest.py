"""Integration test fixtures.

Provides a host object mixing in Retryable whose sleeps are recorded
instead of performed, plus a flaky dependency to retry against.
"""

import pytest

from retryable import Retryable


class FlakyService:
    """Dependency failing a fixed number of times before answering."""

    def __init__(self, failures: int, message: str = "my IO timeout", error=RuntimeError):
        self.failures = failures
        self.message = message
        self.error = error
        self.calls = 0

    def fetch(self) -> str:
        self.calls += 1
        if self.calls <= self.failures:
            raise self.error(self.message)
        return "foo"


class RecordingClient(Retryable):
    """Host object whose retry waits are recorded, not slept."""

    def __init__(self) -> None:
        self.slept: list[float] = []

    def retry_sleep(self, duration: float) -> None:
        self.slept.append(duration)


@pytest.fixture
def client() -> RecordingClient:
    return RecordingClient()


@pytest.fixture
def flaky() -> type[FlakyService]:
    """Factory for flaky dependencies."""
    return FlakyService
