"""
Reentrancy detection for retry loops.

Each owning context (an object mixing in Retryable, or the module-level
default engine) has one marker slot. A loop started with
``detect_nesting=True`` records a marker for its whole dynamic extent;
any loop started while a marker is active is refused with NestingError,
whether or not that inner loop asked for detection itself.
"""

from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any

from retryable.retry.exceptions import NestingError


@dataclass(frozen=True)
class NestingMarker:
    """Token recorded by the loop that opened a detecting scope."""

    call_site: str


def describe_call_site(work: Callable[..., Any]) -> str:
    """
    Identify a retry loop by its work callable.

    Uses the qualified name plus the source location of the callable's
    code object, so no stack inspection is needed.
    """
    name = getattr(work, "__qualname__", None) or repr(work)
    code = getattr(work, "__code__", None)
    if code is None:
        return name
    return f"{name} ({code.co_filename}:{code.co_firstlineno})"


class NestingGuard:
    """Marker slot for one owning context. Not thread-safe."""

    def __init__(self) -> None:
        self._marker: NestingMarker | None = None

    @property
    def active(self) -> NestingMarker | None:
        return self._marker

    @contextmanager
    def enter(self, detect: bool, call_site: str) -> Iterator[NestingMarker | None]:
        """
        Open a retry scope.

        Args:
            detect: Record a marker so loops started inside are refused
            call_site: Description of the loop being opened

        Yields:
            The recorded marker, or None when ``detect`` is False

        Raises:
            NestingError: If a detecting loop is already active
        """
        if self._marker is not None:
            raise NestingError(self._marker.call_site)

        if not detect:
            yield None
            return

        marker = NestingMarker(call_site)
        self._marker = marker
        try:
            yield marker
        finally:
            if self._marker is marker:
                self._marker = None
