"""
Retry strategies with bounded exponential backoff.

A RetryPolicy keeps re-invoking an operation while it fails with an error
the caller explicitly listed as retryable, sleeping a little longer after
every failure, until the operation succeeds or the overall deadline passes.
Errors that are not listed propagate on first occurrence.
"""

import functools
import logging
import time
from concurrent.futures import ThreadPoolExecutor, wait
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Optional, Tuple, Type, TypeVar, Union

from .exceptions import ErrorKind, ExecTimeoutError, error_kind_of

logger = logging.getLogger(__name__)

T = TypeVar('T')

# An ErrorKind member, an exception class, or the name of either.
RetrySelector = Union[ErrorKind, Type[BaseException], str]

BACKOFF_UNIT_SECONDS = 0.1


@dataclass
class RetryState:
    """Bookkeeping for a single RetryPolicy invocation."""

    failures: int = 0
    sleep_time: float = 0.0

    def record_failure(self, max_sleep: Optional[float] = None) -> float:
        """Count one more failure and return how long to sleep before retrying."""
        self.failures += 1
        self.sleep_time = backoff_delay(self.failures, max_sleep)
        return self.sleep_time


def backoff_delay(failures: int, max_sleep: Optional[float] = None) -> float:
    """
    Compute the backoff delay after a given number of failures.

    The delay is (2**failures - 1) * 0.1 seconds, so 0.1, 0.3, 0.7, 1.5, ...
    for the first, second, third and fourth failure, clamped to max_sleep.
    """
    delay = ((2 ** failures) - 1) * BACKOFF_UNIT_SECONDS
    if max_sleep is not None and delay > max_sleep:
        delay = max_sleep
    return delay


def normalize_selectors(retry_on: Any) -> Tuple[RetrySelector, ...]:
    """Turn a single selector, an iterable of selectors or None into a tuple."""
    if retry_on is None:
        return ()
    if isinstance(retry_on, (str, ErrorKind, type)):
        return (retry_on,)
    return tuple(retry_on)


def matches_selector(error: BaseException, selectors: Iterable[RetrySelector]) -> bool:
    """
    Check whether an error is selected by any of the given selectors.

    A selector matches when it is:
    - the error's ErrorKind,
    - the error's exact class (subclasses do not match),
    - the error's class name, or
    - the symbolic name or value of the error's ErrorKind.
    """
    kind = error_kind_of(error)
    class_name = type(error).__name__

    for selector in selectors:
        if isinstance(selector, ErrorKind):
            if kind is selector:
                return True
        elif isinstance(selector, type):
            if type(error) is selector:
                return True
        elif isinstance(selector, str):
            if selector == class_name:
                return True
            if kind is not None and selector in (kind.name, kind.value):
                return True
    return False


class RetryPolicy:
    """
    Retry an operation with exponential backoff until an overall deadline.

    The number of retries is unbounded; only the timeout limits how long the
    policy keeps trying. Each attempt runs on a worker thread and the caller
    waits for it no longer than the time left, so an attempt that hangs past
    the deadline cannot hold the caller. A worker cannot be killed: an
    overrunning attempt is abandoned and finishes in the background, and its
    result is discarded.
    """

    def __init__(
        self,
        timeout: float,
        retry_on: Any = (),
        max_sleep: Optional[float] = None,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize the retry policy.

        Args:
            timeout: Overall wall-clock budget in seconds
            retry_on: Selector or iterable of selectors naming retryable errors
            max_sleep: Upper bound for a single backoff sleep in seconds
            logger: Logger used to report caught errors (defaults to module logger)
        """
        self.timeout = timeout
        self.retry_on = normalize_selectors(retry_on)
        self.max_sleep = max_sleep
        self.logger = logger or logging.getLogger(__name__)

    def execute(self, operation: Callable[..., T], *args, **kwargs) -> T:
        """
        Run the operation, retrying on selected errors.

        Returns:
            The operation's result

        Raises:
            ExecTimeoutError: If the deadline passes while an attempt is
                running, or a retryable failure happens after the deadline
            Exception: Any error not selected by retry_on, immediately
        """
        state = RetryState()
        deadline = time.monotonic() + self.timeout
        name = getattr(operation, "__name__", repr(operation))
        last_error: Optional[Exception] = None
        budget = self.timeout

        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix=f"retry-{name}")
        try:
            while True:
                if budget <= 0:
                    raise self._timeout_error(name, state, last_error) from last_error

                future = executor.submit(operation, *args, **kwargs)
                done, _ = wait([future], timeout=budget)
                if not done:
                    self.logger.warning(f"{name} still running after the {self.timeout}s deadline, abandoning it")
                    raise self._timeout_error(name, state, last_error) from last_error

                try:
                    return future.result()
                except Exception as e:
                    if not self.retry_on or not matches_selector(e, self.retry_on):
                        raise
                    last_error = e

                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    state.failures += 1
                    raise self._timeout_error(name, state, last_error) from last_error

                self.logger.info(f"Caught exception {type(last_error).__name__}: {last_error}")
                sleep_time = min(state.record_failure(self.max_sleep), remaining)
                time.sleep(sleep_time)
                budget = remaining - sleep_time
        finally:
            executor.shutdown(wait=False, cancel_futures=True)

    def _timeout_error(self, name: str, state: RetryState, last_error: Optional[Exception]) -> ExecTimeoutError:
        message = f"Timed out after {self.timeout}s waiting for {name} ({state.failures} failures)"
        if last_error is not None:
            message += f"; last error: {type(last_error).__name__}: {last_error}"
        return ExecTimeoutError(message)


def block_and_retry_until_ready(
    timeout: float,
    operation: Callable[[], T],
    retry_on: Any = (),
    max_sleep: Optional[float] = None,
    logger: Optional[logging.Logger] = None
) -> T:
    """
    Functional form of RetryPolicy.execute.

    Example:
        >>> block_and_retry_until_ready(60, lambda: resolver.resolve("esx01"),
        ...                             retry_on=[ErrorKind.ROUTE_NOT_FOUND], max_sleep=5)
    """
    return RetryPolicy(timeout, retry_on, max_sleep, logger).execute(operation)


def with_retry(
    timeout: float,
    retry_on: Any = (),
    max_sleep: Optional[float] = None
):
    """
    Decorator retrying the wrapped function with a RetryPolicy.

    Args:
        timeout: Overall wall-clock budget in seconds
        retry_on: Selector or iterable of selectors naming retryable errors
        max_sleep: Upper bound for a single backoff sleep in seconds

    Returns:
        Decorated function
    """
    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @functools.wraps(func)
        def wrapper(*args, **kwargs) -> T:
            return RetryPolicy(timeout, retry_on, max_sleep).execute(func, *args, **kwargs)
        return wrapper
    return decorator
