"""
Error normalization and retry classification.
"""

from typing import AbstractSet

from ..exceptions import OperationError


def error_kind(error: BaseException) -> str:
    """Return the kind used to match an error against retryable kinds."""
    if isinstance(error, OperationError):
        return error.kind
    return type(error).__name__


def normalize_error(error: BaseException) -> OperationError:
    """
    Coerce a raised value into an OperationError.

    OperationErrors are returned unchanged. Anything else becomes an
    OperationError carrying the original's class name as its kind, its text
    as the message and the original itself as the cause.
    """
    if isinstance(error, OperationError):
        return error
    return OperationError(str(error), kind=error_kind(error), cause=error)


def should_retry_error(
    error: BaseException, retryable_kinds: AbstractSet[str] | None = None
) -> bool:
    """
    Check if an error should trigger a retry.

    Args:
        error: The failure raised by the operation
        retryable_kinds: Kinds eligible for retry; None or empty means all

    Returns:
        True when the kinds are unrestricted or contain the error's kind
    """
    if not retryable_kinds:
        return True
    return error_kind(error) in retryable_kinds
