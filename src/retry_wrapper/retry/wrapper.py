"""
Attempt loop and retry wrappers.

`wrap` turns a callable into one with the same signature that re-invokes it
on failure. Plain functions get a blocking wrapper, coroutine functions an
async one; both drive the same AttemptState so the retry decision lives in
one place, and any awaitable result is finished by the same async loop.
"""

import asyncio
import functools
import inspect
import logging
import time
from typing import Any, Awaitable, Callable, Mapping, NoReturn, ParamSpec, TypeVar

from ..exceptions import InvalidConfigError, OperationError
from .backoff import RandomSource, calculate_backoff
from .classify import normalize_error
from .config import RetryConfig

logger = logging.getLogger(__name__)

P = ParamSpec("P")
T = TypeVar("T")

OnRetry = Callable[[int, OperationError, float], None]
ConfigLike = RetryConfig | Mapping[str, Any] | None


class AttemptState:
    """
    Progress of a single call through the attempt loop.

    A fresh state is created for every call of a wrapped operation, so
    concurrent calls never share anything but the read-only config.
    """

    def __init__(
        self,
        config: RetryConfig,
        *,
        on_retry: OnRetry | None = None,
        rng: RandomSource | None = None,
    ):
        self.config = config
        self.on_retry = on_retry
        self.rng = rng
        self.attempt_index = 0
        self.last_failure: OperationError | None = None

    @property
    def is_last_attempt(self) -> bool:
        return self.attempt_index >= self.config.max_attempts - 1

    def record_failure(self, error: Exception) -> float:
        """
        Record a failed attempt and decide what happens next.

        Must be called from the ``except`` block that caught ``error``.

        Returns:
            Delay in milliseconds to wait before the next attempt

        Raises:
            OperationError: The normalized failure, when it is not retryable
                or no attempts remain
        """
        failure = normalize_error(error)
        self.last_failure = failure

        if not self.config.should_retry(failure):
            logger.debug(f"Not retrying {failure.kind}: {failure}")
            self._surface(failure, error)
        if self.is_last_attempt:
            logger.debug(
                f"Giving up after {self.attempt_index + 1} attempt(s): "
                f"{failure.kind}: {failure}"
            )
            self._surface(failure, error)

        delay = calculate_backoff(self.attempt_index, self.config, rng=self.rng)
        self.attempt_index += 1

        if self.on_retry:
            self.on_retry(self.attempt_index, failure, delay)
        else:
            logger.warning(
                f"Retry {self.attempt_index}/{self.config.max_retries}: "
                f"{failure.kind}: {failure}, waiting {delay:.0f}ms"
            )
        return delay

    @staticmethod
    def _surface(failure: OperationError, error: Exception) -> NoReturn:
        if failure is error:
            raise failure
        raise failure from error


def _resolve_config(config: ConfigLike) -> RetryConfig:
    if config is None:
        return RetryConfig()
    if isinstance(config, RetryConfig):
        return config
    if isinstance(config, Mapping):
        return RetryConfig.from_options(config)
    raise InvalidConfigError(
        f"expected RetryConfig or mapping, got {type(config).__name__}"
    )


def _is_async_callable(operation: Callable[..., Any]) -> bool:
    if inspect.iscoroutinefunction(operation):
        return True
    if inspect.iscoroutinefunction(getattr(type(operation), "__call__", None)):
        return True
    # Async functions behind a functools.wraps decorator
    return inspect.iscoroutinefunction(inspect.unwrap(operation))


async def _pause(sleep: Callable[[float], Any] | None, seconds: float) -> None:
    if sleep is None:
        await asyncio.sleep(seconds)
        return
    paused = sleep(seconds)
    if inspect.isawaitable(paused):
        await paused


async def _run_async(
    operation: Callable[..., Any],
    args: tuple,
    kwargs: dict,
    state: AttemptState,
    sleep: Callable[[float], Any] | None,
    pending: Any = None,
) -> Any:
    """
    Drive the attempt loop, awaiting every awaitable result.

    ``pending`` is an awaitable already produced by the current attempt.
    """
    while True:
        try:
            if pending is None:
                pending = operation(*args, **kwargs)
            result = pending
            pending = None
            if inspect.isawaitable(result):
                result = await result
            return result
        except Exception as e:
            delay = state.record_failure(e)
        if delay > 0:
            await _pause(sleep, delay / 1000)


def _sync_wrapper(
    operation: Callable[P, T],
    config: RetryConfig,
    on_retry: OnRetry | None,
    sleep: Callable[[float], Any] | None,
    rng: RandomSource | None,
) -> Callable[P, T]:
    @functools.wraps(operation)
    def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
        pause = sleep if sleep is not None else time.sleep
        state = AttemptState(config, on_retry=on_retry, rng=rng)
        while True:
            try:
                result = operation(*args, **kwargs)
            except Exception as e:
                delay = state.record_failure(e)
            else:
                # The operation turned out to be async; finish the call as a coroutine
                if inspect.isawaitable(result):
                    return _run_async(operation, args, kwargs, state, sleep, result)
                return result
            if delay > 0:
                pause(delay / 1000)

    return wrapper


def _async_wrapper(
    operation: Callable[P, Any],
    config: RetryConfig,
    on_retry: OnRetry | None,
    sleep: Callable[[float], Any] | None,
    rng: RandomSource | None,
) -> Callable[P, Awaitable[Any]]:
    @functools.wraps(operation)
    async def wrapper(*args: P.args, **kwargs: P.kwargs) -> Any:
        state = AttemptState(config, on_retry=on_retry, rng=rng)
        return await _run_async(operation, args, kwargs, state, sleep)

    return wrapper


def wrap(
    operation: Callable[P, T],
    config: ConfigLike = None,
    *,
    on_retry: OnRetry | None = None,
    sleep: Callable[[float], Any] | None = None,
    rng: RandomSource | None = None,
) -> Callable[P, T]:
    """
    Wrap a callable with retry logic.

    Coroutine functions, and objects whose ``__call__`` is one, produce an
    async wrapper that waits with ``asyncio.sleep``. Other callables produce a
    blocking wrapper that waits with ``time.sleep``; if such a callable returns
    an awaitable, the call continues as a coroutine that awaits it and keeps
    retrying asynchronously.

    Args:
        operation: The callable to retry
        config: RetryConfig, mapping of options, or None for defaults
        on_retry: Optional callback(attempt, error, delay_ms) called before each wait
        sleep: Optional replacement for the wait, taking seconds
        rng: Optional random source for jitter

    Returns:
        Callable with the same parameters that raises the last normalized
        OperationError when it gives up
    """
    if not callable(operation):
        raise TypeError(f"operation must be callable, got {type(operation).__name__}")
    resolved = _resolve_config(config)
    if _is_async_callable(operation):
        return _async_wrapper(operation, resolved, on_retry, sleep, rng)
    return _sync_wrapper(operation, resolved, on_retry, sleep, rng)


def wrap_async(
    operation: Callable[P, Any],
    config: ConfigLike = None,
    *,
    on_retry: OnRetry | None = None,
    sleep: Callable[[float], Awaitable[Any]] | None = None,
    rng: RandomSource | None = None,
) -> Callable[P, Awaitable[Any]]:
    """
    Wrap any callable in an async retry wrapper.

    Results that are awaitable are awaited, so plain functions, coroutine
    functions and callables returning awaitables are all accepted.
    """
    if not callable(operation):
        raise TypeError(f"operation must be callable, got {type(operation).__name__}")
    return _async_wrapper(operation, _resolve_config(config), on_retry, sleep, rng)


def with_retry(
    config: ConfigLike = None,
    *,
    on_retry: OnRetry | None = None,
    sleep: Callable[[float], Any] | None = None,
    rng: RandomSource | None = None,
) -> Callable[[Callable[P, T]], Callable[P, T]]:
    """
    Decorator form of `wrap`.

    Args:
        config: Retry configuration (default: RetryConfig())
        on_retry: Optional callback(attempt, error, delay_ms) called before each retry

    Returns:
        Decorator applying retry behavior
    """
    resolved = _resolve_config(config)

    def decorator(func: Callable[P, T]) -> Callable[P, T]:
        return wrap(func, resolved, on_retry=on_retry, sleep=sleep, rng=rng)

    return decorator


def async_with_retry(
    config: ConfigLike = None,
    *,
    on_retry: OnRetry | None = None,
    sleep: Callable[[float], Awaitable[Any]] | None = None,
    rng: RandomSource | None = None,
) -> Callable[[Callable[P, Any]], Callable[P, Awaitable[Any]]]:
    """Decorator form of `wrap_async`."""
    resolved = _resolve_config(config)

    def decorator(func: Callable[P, Any]) -> Callable[P, Awaitable[Any]]:
        return wrap_async(func, resolved, on_retry=on_retry, sleep=sleep, rng=rng)

    return decorator
