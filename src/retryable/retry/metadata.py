"""
Attempt outcomes and run metadata.

Each attempt of the work function produces an AttemptOutcome (Success or
Failure) that the engine branches on. RunMetadata summarizes a finished
run for diagnostics and tests.
"""

from dataclasses import dataclass, field
from typing import Any, Literal


@dataclass(frozen=True)
class Success:
    """Work function returned normally."""

    attempt: int
    value: Any


@dataclass(frozen=True)
class Failure:
    """Work function raised."""

    attempt: int
    error: BaseException


AttemptOutcome = Success | Failure

RunOutcome = Literal[
    "succeeded", "exhausted", "propagated", "skipped", "refused", "aborted"
]


@dataclass(frozen=True)
class RunMetadata:
    """
    Summary of one ``run()`` call.

    ``refused`` (nesting detected) and ``aborted`` (a hook or the sleep
    primitive raised) end a run without a verdict on the work itself.

    Attributes:
        attempts: Number of times the work function was invoked
        outcome: Terminal state of the loop
        sleeps: Delays actually waited, in order
        task: Task label the run was configured with
    """

    attempts: int
    outcome: RunOutcome
    sleeps: tuple[float, ...] = field(default_factory=tuple)
    task: Any = None

    def __post_init__(self) -> None:
        """Validate metadata invariants."""
        if self.attempts < 0:
            raise ValueError("attempts must be >= 0")

        if self.outcome in ("skipped", "refused") and self.attempts:
            raise ValueError(f"a {self.outcome} run makes no attempts")

        # An aborted run may stop after a wait, before the next attempt
        max_sleeps = self.attempts if self.outcome == "aborted" else self.attempts - 1
        if len(self.sleeps) > max(max_sleeps, 0):
            raise ValueError("a run waits at most once between consecutive attempts")
