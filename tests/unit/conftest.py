"""Unit test fixtures (mocks and stubs).

Provides mock collaborators for testing the engine without waiting.
"""

from unittest.mock import Mock

import pytest

from retryable import api


@pytest.fixture
def default_engine_sleep(monkeypatch: pytest.MonkeyPatch) -> Mock:
    """Mock the process-default engine's sleep and reset its defaults."""
    mock = Mock(name="default_engine.sleep")
    monkeypatch.setattr(api.default_engine, "sleep", mock)
    api.reset_defaults()
    yield mock
    api.reset_defaults()
