"""
Failure classification for the retry loop.

Decides whether a failure raised by the work function may be retried:
its class must be covered by the configured exception classes
(subclasses included) and its message must match the configured pattern.
"""

import re

from retryable.retry.exceptions import RetryableError


class FailureMatcher:
    """Eligibility check for work-function failures."""

    @staticmethod
    def eligible(
        failure: BaseException,
        on: tuple[type[BaseException], ...],
        pattern: re.Pattern[str],
    ) -> bool:
        """
        Check whether a failure is covered by the retry policy.

        Args:
            failure: Exception raised by the work function
            on: Exception classes eligible for retry (empty: nothing is)
            pattern: Pattern searched in ``str(failure)``

        Returns:
            True if the failure should be retried
        """
        # Engine control-flow errors (e.g. from a nested loop) always escape
        if isinstance(failure, RetryableError):
            return False

        if not on or not isinstance(failure, on):
            return False

        return pattern.search(str(failure)) is not None
