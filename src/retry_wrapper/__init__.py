"""
Retry Wrapper - retry a fallible callable with exponential backoff.

Wraps plain functions and coroutine functions alike, with an optional
interval cap, ±20% jitter and filtering by error kind.
"""

from .exceptions import RetryWrapperError, InvalidConfigError, OperationError
from .retry import (
    RetryConfig,
    AttemptState,
    error_kind,
    normalize_error,
    should_retry_error,
    calculate_delay,
    calculate_backoff,
    wrap,
    wrap_async,
    with_retry,
    async_with_retry,
)

__version__ = "0.1.0"

__all__ = [
    # Version
    "__version__",
    # Wrappers
    "wrap",
    "wrap_async",
    "with_retry",
    "async_with_retry",
    "AttemptState",
    # Configuration
    "RetryConfig",
    # Classification
    "error_kind",
    "normalize_error",
    "should_retry_error",
    # Backoff
    "calculate_delay",
    "calculate_backoff",
    # Exceptions
    "RetryWrapperError",
    "InvalidConfigError",
    "OperationError",
]
