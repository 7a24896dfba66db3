"""
Backoff for engine operations that can fail transiently.

The usual culprit is a DuckDB database file held by another process: the
lock is released within moments, so the open is tried again before giving
up. Works on both plain functions and coroutine functions.
"""
import asyncio
import inspect
import logging
from functools import wraps
from typing import Callable, Optional, Tuple, Type, Union

from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from parquetstudio.messages import get_logger

from .exceptions import EngineConnectionError

ExceptionTypes = Union[Type[Exception], Tuple[Type[Exception], ...]]


def with_retry(
    timeout: float = 60,
    retries: int = 3,
    delay: float = 0.5,
    exceptions: ExceptionTypes = (EngineConnectionError,),
    logger_name: str = "parquetstudio.retry",
    retry_if_func: Optional[Callable[[BaseException], bool]] = None,
    reraise: bool = False,
):
    """
    Retry a function with exponential backoff.

    Args:
        timeout: Seconds allowed per attempt of a coroutine function; plain
            functions cannot be interrupted and run unbounded
        retries: Total number of attempts
        delay: First wait between attempts, doubled up to 8x
        exceptions: Exception types that trigger another attempt
        logger_name: Logger that reports each retry as a warning
        retry_if_func: Predicate on the raised exception; replaces
            `exceptions` when given
        reraise: After the last attempt, raise the original exception
            instead of tenacity.RetryError

    Example:
        @with_retry(retries=5, delay=0.2, reraise=True)
        def connect(self):
            return duckdb.connect(self.database)

    Raises:
        TimeoutError: If a coroutine attempt exceeds the timeout
        tenacity.RetryError: If every attempt fails and reraise is off
    """
    # tenacity logs through a standard library logger
    retry_logger = get_logger(logger_name).logger

    if retry_if_func is not None:
        should_retry = retry_if_exception(retry_if_func)
    else:
        should_retry = retry_if_exception_type(exceptions)

    backoff = retry(
        stop=stop_after_attempt(retries),
        wait=wait_exponential(multiplier=delay, min=delay, max=delay * 8),
        retry=should_retry,
        before_sleep=before_sleep_log(retry_logger, logging.WARNING),
        reraise=reraise,
    )

    def decorator(func):
        if not inspect.iscoroutinefunction(func):
            return backoff(func)

        @wraps(func)
        async def bounded(*args, **kwargs):
            try:
                async with asyncio.timeout(timeout):
                    return await func(*args, **kwargs)
            except TimeoutError as e:
                raise TimeoutError(
                    f"{func.__name__} timed out after {timeout} seconds"
                ) from e

        return backoff(bounded)

    return decorator
