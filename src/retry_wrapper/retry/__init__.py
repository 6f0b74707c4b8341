"""
Retry Wrapper - Retry Logic.

Error classification, exponential backoff with jitter, and the attempt loop.
"""

from .config import RetryConfig
from .classify import error_kind, normalize_error, should_retry_error
from .backoff import calculate_delay, calculate_backoff
from .wrapper import AttemptState, wrap, wrap_async, with_retry, async_with_retry

__all__ = [
    "RetryConfig",
    "error_kind",
    "normalize_error",
    "should_retry_error",
    "calculate_delay",
    "calculate_backoff",
    "AttemptState",
    "wrap",
    "wrap_async",
    "with_retry",
    "async_with_retry",
]
