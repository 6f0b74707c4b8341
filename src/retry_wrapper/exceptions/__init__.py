"""
Retry Wrapper - Exception Hierarchy.

Structured operation errors and configuration errors.
"""

from .base import (
    RetryWrapperError,
    InvalidConfigError,
    OperationError,
)

__all__ = [
    "RetryWrapperError",
    "InvalidConfigError",
    "OperationError",
]
