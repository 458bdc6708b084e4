"""
Retry options and their resolution.

RetryOptions is the immutable configuration of one retry loop. The
OptionsResolver owns the mutable per-context defaults (GlobalOptions)
and merges per-call overrides on top of them.

Merging is strict: only the keys declared on RetryOptions are accepted,
and any other key raises InvalidOptions before anything is stored.
"""

import re
from collections.abc import Callable, Mapping
from typing import Any

import structlog
from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from retryable.config import Settings, settings as default_settings
from retryable.retry.exceptions import InvalidOptions

logger = structlog.get_logger(__name__)

MATCH_EVERYTHING = re.compile(".*")


class RetryOptions(BaseModel):
    """
    Configuration of a single retry loop.

    Attributes:
        tries: Maximum number of attempts (< 1 means the work never runs)
        on: Exception classes eligible for retry (subclasses included)
        sleep: Fixed delay in seconds, a function of the failed attempt
            index returning the delay, or None for no wait
        matching: Pattern searched in ``str(exception)``; non-matching
            failures are propagated immediately
        detect_nesting: Refuse to start inside another active loop
        task: Opaque label handed to the logger
        logger: Called as ``logger(task, attempt, previous_failure)``
            before every attempt
    """

    model_config = ConfigDict(frozen=True, extra="forbid", arbitrary_types_allowed=True)

    tries: int = 1
    on: tuple[type[BaseException], ...] = (Exception,)
    sleep: float | Callable[[int], float] | None = 1.0
    matching: re.Pattern[str] = MATCH_EVERYTHING
    detect_nesting: bool = False
    task: Any = None
    logger: Callable[[Any, int, BaseException | None], None] | None = None

    @field_validator("on", mode="before")
    @classmethod
    def _normalize_on(cls, value: Any) -> Any:
        """Accept a single exception class or any collection of them."""
        if value is None:
            return ()
        if isinstance(value, type):
            return (value,)
        if isinstance(value, (list, tuple, set, frozenset)):
            return tuple(value)
        return value


RECOGNIZED_KEYS = frozenset(RetryOptions.model_fields)


def builtin_defaults(settings: Settings | None = None) -> RetryOptions:
    """Build the user-facing default options from settings."""
    settings = settings or default_settings
    return RetryOptions(
        tries=settings.DEFAULT_TRIES,
        on=(Exception,),
        sleep=settings.DEFAULT_SLEEP,
        matching=settings.DEFAULT_MATCHING,
    )


def _as_mapping(overrides: "Mapping[str, Any] | RetryOptions") -> Mapping[str, Any]:
    if isinstance(overrides, RetryOptions):
        # Only fields set explicitly override the defaults
        return {name: getattr(overrides, name) for name in overrides.model_fields_set}
    return overrides


def combine_overrides(
    options: "Mapping[str, Any] | RetryOptions | None", keywords: Mapping[str, Any]
) -> dict[str, Any] | None:
    """Fold a positional options value and keyword options into one mapping."""
    if options is None and not keywords:
        return None
    combined = dict(_as_mapping(options)) if options is not None else {}
    combined.update(keywords)
    return combined


def merge_options(
    base: RetryOptions, overrides: "Mapping[str, Any] | RetryOptions"
) -> RetryOptions:
    """
    Apply overrides key-by-key on top of base.

    Args:
        base: Options to start from (left untouched)
        overrides: Option values to apply

    Returns:
        A new, validated RetryOptions

    Raises:
        InvalidOptions: If a key is unrecognized or a value is unusable
    """
    overrides = _as_mapping(overrides)

    unknown = sorted(str(key) for key in overrides if key not in RECOGNIZED_KEYS)
    if unknown:
        raise InvalidOptions(
            f"Unrecognized retry option(s): {', '.join(unknown)}",
            unknown_keys=unknown,
        )

    values = {name: getattr(base, name) for name in RECOGNIZED_KEYS}
    values.update(overrides)

    try:
        return RetryOptions.model_validate(values)
    except ValidationError as e:
        raise InvalidOptions(
            "Invalid retry option value(s)",
            errors=e.errors(include_url=False),
        ) from e


class OptionsResolver:
    """
    Holds the per-context default options and resolves per-call overrides.

    The stored defaults are only replaced by ``configure`` and ``reset``;
    ``resolve`` always works on a temporary merge.
    """

    def __init__(self, defaults: RetryOptions):
        self._builtin = defaults
        self._global = defaults

    @property
    def current(self) -> RetryOptions:
        """Stored defaults (immutable, safe to hand out)."""
        return self._global

    def resolve(
        self, overrides: "Mapping[str, Any] | RetryOptions | None" = None
    ) -> RetryOptions:
        """Return the options for one run without touching the defaults."""
        if not overrides:
            return self._global.model_copy()
        return merge_options(self._global, overrides)

    def configure(self, overrides: "Mapping[str, Any] | RetryOptions") -> RetryOptions:
        """Merge overrides into the stored defaults and return them."""
        merged = merge_options(self._global, overrides)
        self._global = merged
        logger.debug(
            "Retry defaults updated",
            extra={"keys": sorted(_as_mapping(overrides))},
        )
        return merged

    def reset(
        self, overrides: "Mapping[str, Any] | RetryOptions | None" = None
    ) -> RetryOptions:
        """
        Restore the built-in defaults, then apply overrides.

        The merged value is validated before anything is stored, so an
        invalid override leaves the current defaults in place.
        """
        merged = merge_options(self._builtin, overrides) if overrides else self._builtin
        self._global = merged
        return merged
