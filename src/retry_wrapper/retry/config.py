"""
Retry configuration and presets.
"""

import math
from dataclasses import dataclass, field, fields
from typing import Any, FrozenSet, Iterable, Mapping

from ..exceptions import InvalidConfigError
from .classify import should_retry_error

# Option names accepted by RetryConfig.from_options besides the field names.
OPTION_ALIASES = {
    "errors": "retryable_error_kinds",
    "intervals": "base_interval_ms",
    "backoff": "backoff_factor",
    "maxAttempts": "max_attempts",
    "maxInterval": "max_interval_ms",
    "retryableErrorKinds": "retryable_error_kinds",
    "baseIntervalMs": "base_interval_ms",
    "backoffFactor": "backoff_factor",
    "maxIntervalMs": "max_interval_ms",
    "jitterEnabled": "jitter",
    "jitter_enabled": "jitter",
}


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


@dataclass(frozen=True)
class RetryConfig:
    """
    Configuration for retry behavior.

    Attributes:
        retryable_error_kinds: Error kinds that trigger a retry (empty: all kinds)
        base_interval_ms: Delay before the first retry in milliseconds (default: 1000)
        backoff_factor: Multiplier applied per attempt (default: 2)
        max_attempts: Total invocations including the first one (default: 3)
        max_interval_ms: Upper bound on any single delay (default: no cap)
        jitter: Randomize each delay by ±20% (default: False)
    """

    retryable_error_kinds: FrozenSet[str] = field(default_factory=frozenset)
    base_interval_ms: float = 1000
    backoff_factor: float = 2
    max_attempts: int = 3
    max_interval_ms: float | None = None
    jitter: bool = False

    def __post_init__(self) -> None:
        kinds = self.retryable_error_kinds
        if kinds is None:
            kinds = frozenset()
        elif isinstance(kinds, str):
            kinds = frozenset([kinds])
        elif not isinstance(kinds, frozenset):
            kinds = frozenset(kinds)
        if not all(isinstance(kind, str) for kind in kinds):
            raise InvalidConfigError(
                "error kinds must be strings", field="retryable_error_kinds"
            )
        object.__setattr__(self, "retryable_error_kinds", kinds)

        if not _is_number(self.base_interval_ms) or not self.base_interval_ms >= 0:
            raise InvalidConfigError(
                f"must be a non-negative number, got {self.base_interval_ms!r}",
                field="base_interval_ms",
            )
        if not _is_number(self.backoff_factor) or not self.backoff_factor >= 1:
            raise InvalidConfigError(
                f"must be a number >= 1, got {self.backoff_factor!r}",
                field="backoff_factor",
            )
        if (
            not isinstance(self.max_attempts, int)
            or isinstance(self.max_attempts, bool)
            or self.max_attempts < 1
        ):
            raise InvalidConfigError(
                f"must be an integer >= 1, got {self.max_attempts!r}",
                field="max_attempts",
            )
        if self.max_interval_ms is not None and (
            not _is_number(self.max_interval_ms)
            or math.isnan(self.max_interval_ms)
            or self.max_interval_ms < 0
        ):
            raise InvalidConfigError(
                f"must be a non-negative number, got {self.max_interval_ms!r}",
                field="max_interval_ms",
            )
        if not isinstance(self.jitter, bool):
            raise InvalidConfigError(
                f"must be a boolean, got {self.jitter!r}", field="jitter"
            )

    @property
    def max_retries(self) -> int:
        """Number of retries after the initial attempt."""
        return self.max_attempts - 1

    def should_retry(self, error: BaseException) -> bool:
        """Check if the given error should trigger a retry."""
        return should_retry_error(error, self.retryable_error_kinds)

    @classmethod
    def no_retry(cls) -> "RetryConfig":
        """Preset for no retry (single attempt only)."""
        return cls(max_attempts=1)

    @classmethod
    def immediate(
        cls, max_attempts: int = 3, errors: Iterable[str] = ()
    ) -> "RetryConfig":
        """Preset for retrying without waiting between attempts."""
        return cls(
            retryable_error_kinds=frozenset(errors),
            base_interval_ms=0,
            max_attempts=max_attempts,
        )

    @classmethod
    def from_options(cls, options: Mapping[str, Any]) -> "RetryConfig":
        """
        Build a config from a mapping of options.

        Keys may be field names, their camelCase forms (``baseIntervalMs``,
        ``jitterEnabled``, ...) or the short option names ``errors``,
        ``intervals``, ``backoff``, ``maxAttempts`` and ``maxInterval``.
        Options set to None fall back to their defaults.

        Raises:
            InvalidConfigError: On unknown or duplicated options
        """
        field_names = {f.name for f in fields(cls)}
        kwargs: dict[str, Any] = {}
        seen: set[str] = set()
        for key, value in options.items():
            name = OPTION_ALIASES.get(key, key)
            if name not in field_names:
                raise InvalidConfigError(f"unknown retry option {key!r}")
            if name in seen:
                raise InvalidConfigError(f"option given twice as {key!r}", field=name)
            seen.add(name)
            if value is not None:
                kwargs[name] = value
        return cls(**kwargs)
