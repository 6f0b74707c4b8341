"""
Base exception classes for the retry wrapper.

`OperationError` is the structured form every failure of a wrapped
operation is normalized into. Its `kind` is what retry filtering matches on.
"""


class RetryWrapperError(Exception):
    """Base exception for errors raised by the retry wrapper itself."""


class InvalidConfigError(RetryWrapperError, ValueError):
    """Raised when a retry configuration value is out of range."""

    def __init__(self, message: str, *, field: str | None = None):
        super().__init__(message)
        self.message = message
        self.field = field

    def __str__(self) -> str:
        if self.field:
            return f"{self.field}: {self.message}"
        return self.message


class OperationError(Exception):
    """
    Structured failure of a wrapped operation.

    The kind defaults to the class name, so a subclass such as
    ``class NetworkError(OperationError)`` is classified as "NetworkError".
    """

    def __init__(
        self,
        message: str = "",
        *,
        kind: str | None = None,
        cause: BaseException | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.kind = kind or type(self).__name__
        self.cause = cause

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r}, kind={self.kind!r})"
