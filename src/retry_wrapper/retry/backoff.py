"""
Backoff delay calculation.
"""

import math
import random
from typing import Protocol

from .config import RetryConfig

# Jitter scales a delay by a factor drawn from [JITTER_LOW, JITTER_LOW + JITTER_SPAN).
JITTER_LOW = 0.8
JITTER_SPAN = 0.4


class RandomSource(Protocol):
    def random(self) -> float: ...


def calculate_delay(
    base_interval_ms: float,
    backoff_factor: float,
    attempt: int,
    max_interval_ms: float | None = None,
    jitter: bool = False,
    *,
    rng: RandomSource | None = None,
) -> float:
    """
    Calculate the delay before the retry that follows a failed attempt.

    Args:
        base_interval_ms: Delay after the first failed attempt
        backoff_factor: Growth multiplier per attempt
        attempt: Zero-based index of the attempt that failed
        max_interval_ms: Optional cap, applied after jitter
        jitter: Scale the delay by a random factor in [0.8, 1.2)
        rng: Source of randomness for jitter (default: the random module)

    Returns:
        Delay in milliseconds
    """
    if not base_interval_ms:
        return 0

    # Past the float range the delay is unbounded and only the cap applies
    try:
        delay = base_interval_ms * backoff_factor**attempt
    except OverflowError:
        delay = math.inf

    # Spread out concurrent retriers (±20%)
    if jitter:
        source = rng if rng is not None else random
        try:
            delay = delay * (JITTER_LOW + source.random() * JITTER_SPAN)
        except OverflowError:
            delay = math.inf

    if max_interval_ms is not None:
        delay = min(delay, max_interval_ms)

    return delay


def calculate_backoff(
    attempt: int, config: RetryConfig, *, rng: RandomSource | None = None
) -> float:
    """Calculate the delay in milliseconds for an attempt under a config."""
    return calculate_delay(
        config.base_interval_ms,
        config.backoff_factor,
        attempt,
        config.max_interval_ms,
        config.jitter,
        rng=rng,
    )
