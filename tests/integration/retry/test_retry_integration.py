"""
Integration tests for the retry engine.

End-to-end scenarios through the Retryable mixin: a host object retries
a flaky dependency with recorded (not performed) waits.
"""

import json
import logging

import pytest
import structlog

from retryable import NestingError, RESET
from retryable.logging_config import add_library_context, configure_logging

pytestmark = pytest.mark.integration


class TransientIOError(OSError):
    """Failure of a flaky dependency that clears up on its own."""


def test_default_policy_recovers_from_one_failure(client, flaky):
    service = flaky(failures=1, message="boom", error=Exception)

    result = client.retryable(service.fetch)

    assert result == "foo"
    assert service.calls == 2
    assert client.slept == [1]


def test_full_policy_recovers_from_io_timeouts(client, flaky):
    service = flaky(failures=3, message="my IO timeout", error=RuntimeError)

    result = client.retryable(
        service.fetch, tries=4, on=RuntimeError, sleep=0.3, matching="IO timeout"
    )

    assert result == "foo"
    assert service.calls == 4
    assert client.slept == [0.3, 0.3, 0.3]
    assert client.retry_engine.last_run.outcome == "succeeded"


def test_exhaustion_propagates_last_failure(client, flaky):
    service = flaky(failures=10, message="still down", error=TransientIOError)
    client.retryable_options(tries=4, on=OSError, sleep=lambda n: 4**n)

    with pytest.raises(TransientIOError, match="still down"):
        client.retryable(service.fetch)

    assert service.calls == 4
    assert client.slept == [1, 4, 16]
    assert client.retry_engine.last_run.outcome == "exhausted"


def test_non_matching_message_fails_fast(client, flaky):
    service = flaky(failures=1, message="permission denied", error=RuntimeError)

    with pytest.raises(RuntimeError, match="permission denied"):
        client.retryable(service.fetch, tries=5, matching="timeout")

    assert service.calls == 1
    assert client.slept == []


def test_temporary_options_do_not_persist(client, flaky):
    client.retryable(flaky(failures=0).fetch, task="X", tries=9)

    assert client.retryable_options().task is None
    assert client.retryable_options().tries == 2


def test_nesting_refused_then_recovers(client, flaky):
    service = flaky(failures=0)
    client.retryable_options(detect_nesting=True)

    with pytest.raises(NestingError):
        client.retryable(lambda: client.retryable(service.fetch))

    assert service.calls == 0
    assert client.retryable(service.fetch) == "foo"

    client.retryable_options(RESET)
    assert client.retryable(lambda: client.retryable(service.fetch)) == "foo"


def test_task_logging_to_stderr(client, flaky, capsys):
    service = flaky(failures=2, message="IO timeout", error=TimeoutError)

    client.retryable(service.fetch, task="syncing mailbox", tries=3, sleep=None)

    assert capsys.readouterr().err.splitlines() == [
        "syncing mailbox",
        "syncing mailbox RETRY 1 because TimeoutError",
        "syncing mailbox RETRY 2 because TimeoutError",
    ]


@pytest.fixture
def restore_logging():
    yield
    library_logger = logging.getLogger("retryable")
    library_logger.handlers.clear()
    library_logger.setLevel(logging.NOTSET)
    structlog.reset_defaults()


@pytest.mark.parametrize("environment", ["development", "production"])
def test_configure_logging(restore_logging, test_settings, environment):
    settings = test_settings.model_copy(update={"ENVIRONMENT": environment})

    library_logger = configure_logging(settings)

    assert library_logger is logging.getLogger("retryable")
    assert library_logger.level == logging.DEBUG
    assert len(library_logger.handlers) == 1
    assert isinstance(library_logger.handlers[0].formatter, structlog.stdlib.ProcessorFormatter)


def test_reconfiguring_replaces_handler(restore_logging, test_settings):
    configure_logging(test_settings)
    library_logger = configure_logging(test_settings)

    assert len(library_logger.handlers) == 1


def test_production_events_rendered_as_json(restore_logging, test_settings, capsys):
    settings = test_settings.model_copy(update={"ENVIRONMENT": "production"})
    configure_logging(settings)

    structlog.get_logger("retryable.retry.engine").warning("Retry attempts exhausted")

    event = json.loads(capsys.readouterr().err.splitlines()[-1])
    assert event["event"] == "Retry attempts exhausted"
    assert event["level"] == "warning"
    assert event["library"] == "retryable"


def test_library_context_processor():
    event = add_library_context(None, "info", {"event": "retrying"})

    assert event == {"event": "retrying", "library": "retryable"}
