"""
Retry engine.

This module implements the RetryEngine that runs a unit of work until it
succeeds, exhausts its attempt budget, or fails in a way the policy does
not cover. One engine is one owning context: it holds the mutable
default options and the nesting marker slot.

Loop (per run):
    1. Resolve options (defaults + per-call overrides); tries < 1 skips
    2. Open the nesting scope (NestingError if a detecting loop is active)
    3. Log the attempt, invoke the work with (attempt, previous_failure)
    4. Success: return the value
    5. Failure: propagate if ineligible or out of attempts, otherwise
       wait per the backoff strategy and go to 3

Usage:
    engine = RetryEngine()
    engine.configure_defaults(tries=4, on=TimeoutError, sleep=0.3)
    body = engine.run(fetch_page, matching="timed out")
"""

import inspect
import sys
import time
from collections.abc import Callable, Mapping
from contextlib import ExitStack
from typing import Any

import structlog

from retryable.config import Settings, settings as default_settings
from retryable.monitoring.metrics import attempts_total, backoff_seconds, runs_total
from retryable.retry.exceptions import NestingError
from retryable.retry.matcher import FailureMatcher
from retryable.retry.metadata import (
    AttemptOutcome,
    Failure,
    RunMetadata,
    RunOutcome,
    Success,
)
from retryable.retry.nesting import NestingGuard, describe_call_site
from retryable.retry.options import (
    OptionsResolver,
    RetryOptions,
    builtin_defaults,
    combine_overrides,
)
from retryable.retry.strategies import delay

logger = structlog.get_logger(__name__)


class _Reset:
    def __repr__(self) -> str:
        return "RESET"


RESET = _Reset()
"""Pass to ``configure_defaults`` to restore the built-in defaults."""


def default_logger(task: Any, attempt: int, previous: BaseException | None) -> None:
    """
    Textual attempt logger writing to stderr.

    Emits ``"<task>"`` before the first attempt and
    ``"<task> RETRY <attempt> because <ExceptionClass>"`` before each retry.
    """
    label = "" if task is None else str(task)
    if previous is None:
        print(label, file=sys.stderr)
    else:
        print(f"{label} RETRY {attempt} because {type(previous).__name__}", file=sys.stderr)


def _positional_capacity(work: Callable[..., Any]) -> int:
    """
    How many of (attempt, previous_failure) the work callable asks for.

    Only positional parameters without a default count; optional ones keep
    their own defaults.
    """
    try:
        signature = inspect.signature(work)
    except (TypeError, ValueError):
        return 0

    count = 0
    for param in signature.parameters.values():
        if param.kind is param.VAR_POSITIONAL:
            return 2
        if (
            param.kind in (param.POSITIONAL_ONLY, param.POSITIONAL_OR_KEYWORD)
            and param.default is param.empty
        ):
            count += 1
    return min(count, 2)


def _bind_work(work: Callable[..., Any]) -> Callable[[int, BaseException | None], Any]:
    capacity = _positional_capacity(work)
    if capacity == 2:
        return work
    if capacity == 1:
        return lambda attempt, previous: work(attempt)
    return lambda attempt, previous: work()


class RetryEngine:
    """
    Synchronous retry loop with per-context defaults.

    Attempts run strictly one after another on the calling thread; the
    engine blocks in ``sleep`` for the whole backoff between attempts.
    Instances are not thread-safe: share one per owning context only.

    Attributes:
        sleep: Wait primitive, called with the delay in seconds
        settings: Engine settings (defaults, metrics switch)
        resolver: Default options and per-call merging
        guard: Nesting marker slot
        last_run: Metadata of the most recently finished run
    """

    def __init__(
        self,
        sleep: Callable[[float], Any] = time.sleep,
        settings: Settings | None = None,
    ):
        """
        Initialize retry engine.

        Args:
            sleep: Wait primitive (time.sleep unless injected)
            settings: Engine settings (module settings unless injected)
        """
        self.sleep = sleep
        self.settings = settings or default_settings
        self.resolver = OptionsResolver(builtin_defaults(self.settings))
        self.guard = NestingGuard()
        self.matcher = FailureMatcher()
        self.last_run: RunMetadata | None = None

    @property
    def options(self) -> RetryOptions:
        """Current default options."""
        return self.resolver.current

    def configure_defaults(
        self,
        options: "Mapping[str, Any] | RetryOptions | _Reset | None" = None,
        /,
        **overrides: Any,
    ) -> RetryOptions:
        """
        Merge options into the stored defaults.

        Args:
            options: Mapping of option values, or RESET to restore the
                built-in defaults first
            **overrides: Option values as keywords

        Returns:
            The stored defaults after the update

        Raises:
            InvalidOptions: On an unrecognized key (defaults unchanged)
        """
        if options is RESET:
            return self.resolver.reset(combine_overrides(None, overrides))

        combined = combine_overrides(options, overrides)
        if combined:
            return self.resolver.configure(combined)
        return self.resolver.current

    def run(
        self,
        work: Callable[..., Any],
        options: "Mapping[str, Any] | RetryOptions | None" = None,
        /,
        **overrides: Any,
    ) -> Any:
        """
        Run work under the retry policy.

        Per-call options are merged into a temporary copy of the defaults
        and never stored.

        Args:
            work: Callable invoked once per attempt; it receives
                ``(attempt, previous_failure)`` if it accepts them
            options: Mapping of per-call option values
            **overrides: Per-call option values as keywords

        Returns:
            The work's return value, or None if ``tries`` < 1

        Raises:
            InvalidOptions: On an unrecognized option key
            NestingError: If started inside an active detecting loop
            BaseException: The work's last failure, unchanged
        """
        return self.execute(work, combine_overrides(options, overrides))

    def execute(
        self,
        work: Callable[..., Any],
        overrides: "Mapping[str, Any] | None" = None,
        *,
        call_site: str | None = None,
    ) -> Any:
        """Run work with an already-combined overrides mapping."""
        opts = self.resolver.resolve(overrides)

        if opts.tries < 1:
            self._finish(RunMetadata(attempts=0, outcome="skipped", task=opts.task))
            return None

        call_site = call_site or describe_call_site(work)

        with ExitStack() as stack:
            try:
                stack.enter_context(self.guard.enter(opts.detect_nesting, call_site))
            except NestingError as e:
                logger.warning(
                    "Nested retry loop refused",
                    extra={"call_site": call_site, "active_call_site": e.call_site},
                )
                self._finish(RunMetadata(attempts=0, outcome="refused", task=opts.task))
                raise

            return self._loop(_bind_work(work), opts)

    def _loop(
        self, call: Callable[[int, BaseException | None], Any], opts: RetryOptions
    ) -> Any:
        previous: BaseException | None = None
        sleeps: list[float] = []
        attempt = 0

        while True:
            try:
                self._log_attempt(opts, attempt, previous)
            except BaseException:
                self._abort(attempt, sleeps, opts, "logger")
                raise

            outcome = self._attempt(call, attempt, previous)

            if isinstance(outcome, Success):
                self._record_attempt("success")
                self._finish(
                    RunMetadata(attempt + 1, "succeeded", tuple(sleeps), opts.task)
                )
                return outcome.value

            error = outcome.error

            if not self.matcher.eligible(error, opts.on, opts.matching):
                logger.debug(
                    "Failure not covered by retry policy",
                    extra={
                        "task": opts.task,
                        "attempt": attempt,
                        "error_type": type(error).__name__,
                    },
                )
                self._record_attempt("ineligible")
                self._finish(
                    RunMetadata(attempt + 1, "propagated", tuple(sleeps), opts.task)
                )
                raise error

            if attempt + 1 >= opts.tries:
                logger.warning(
                    f"Retry attempts exhausted (after {attempt + 1} attempts)",
                    extra={
                        "task": opts.task,
                        "tries": opts.tries,
                        "error_type": type(error).__name__,
                    },
                )
                self._record_attempt("exhausted")
                self._finish(
                    RunMetadata(attempt + 1, "exhausted", tuple(sleeps), opts.task)
                )
                raise error

            previous = error
            try:
                wait = delay(opts.sleep, attempt)
            except BaseException:
                self._abort(attempt + 1, sleeps, opts, "backoff")
                raise
            self._record_attempt("retry")

            logger.info(
                f"Retrying after failure (attempt {attempt + 2}/{opts.tries})",
                extra={
                    "task": opts.task,
                    "attempt": attempt,
                    "delay": wait,
                    "error_type": type(error).__name__,
                },
            )

            if wait is not None:
                try:
                    self.sleep(wait)
                except BaseException:
                    self._abort(attempt + 1, sleeps, opts, "sleep")
                    raise
                sleeps.append(wait)
                if self.settings.PROMETHEUS_ENABLED:
                    backoff_seconds.observe(wait)

            attempt += 1

    @staticmethod
    def _attempt(
        call: Callable[[int, BaseException | None], Any],
        attempt: int,
        previous: BaseException | None,
    ) -> AttemptOutcome:
        try:
            return Success(attempt, call(attempt, previous))
        except BaseException as e:  # classified by the loop, re-raised unchanged
            return Failure(attempt, e)

    def _log_attempt(
        self, opts: RetryOptions, attempt: int, previous: BaseException | None
    ) -> None:
        hook = opts.logger
        if hook is None and opts.task is not None:
            hook = default_logger

        logger.debug(
            f"Starting attempt {attempt + 1}/{opts.tries}",
            extra={
                "task": opts.task,
                "attempt": attempt,
                "previous_error": type(previous).__name__ if previous else None,
            },
        )

        if hook is not None:
            hook(opts.task, attempt, previous)

    def _record_attempt(self, outcome: str) -> None:
        if self.settings.PROMETHEUS_ENABLED:
            attempts_total.labels(outcome=outcome).inc()

    def _record_run(self, outcome: RunOutcome) -> None:
        if self.settings.PROMETHEUS_ENABLED:
            runs_total.labels(outcome=outcome).inc()

    def _abort(
        self, attempts: int, sleeps: list[float], opts: RetryOptions, stage: str
    ) -> None:
        logger.warning(
            f"Retry loop aborted by failing {stage}",
            extra={"task": opts.task, "attempts": attempts},
        )
        self._finish(RunMetadata(attempts, "aborted", tuple(sleeps), opts.task))

    def _finish(self, metadata: RunMetadata) -> None:
        self.last_run = metadata
        self._record_run(metadata.outcome)
