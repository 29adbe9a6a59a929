"""Retry support shared by the FogBugz API client.

The retry policy is deliberately simple: a bounded number of sequential
attempts separated by a fixed delay. The last failure is re-raised as-is so
callers see the real error, not a generic "retries exhausted" one.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from typing import Any, TypeVar

from ..errors import TransportError
from ..fogbugz_logging import get_logger

logger = get_logger()

T = TypeVar("T")


def with_retry(
    operation: Callable[[], T],
    max_attempts: int = 3,
    delay: float = 1.0,
    sleep: Callable[[float], Any] = time.sleep,
    retry_on: tuple[type[BaseException], ...] = (Exception,),
) -> T:
    """Run an operation, retrying on failure with a fixed delay.

    Args:
        operation: Zero-argument callable to execute
        max_attempts: Total number of attempts (not additional retries)
        delay: Seconds to wait between a failed attempt and the next one
        sleep: Sleep function, injectable for tests
        retry_on: Exception types that trigger a retry; anything else
            propagates immediately

    Returns:
        Result of the first successful attempt

    Raises:
        ValueError: If max_attempts is less than 1
        Exception: The exception raised by the final attempt, unchanged
    """
    if max_attempts < 1:
        raise ValueError(f"max_attempts must be at least 1, got {max_attempts}")

    for attempt in range(1, max_attempts + 1):
        try:
            return operation()
        except retry_on as e:
            if attempt >= max_attempts:
                raise
            logger.warning(
                f"Retrying request (attempt {attempt} of {max_attempts}) "
                f"after error: {e}"
            )
            sleep(delay)

    # Unreachable: the loop either returns or raises.
    raise AssertionError("with_retry exited without a result")


class IntegrationClient:
    """Base class for clients that talk to the FogBugz API.

    Holds the retry budget and exposes :meth:`_execute_with_retry`, which
    only retries transport failures; programming errors surface at once.
    """

    def __init__(self, max_retries: int = 3, retry_delay: float = 1.0):
        """Initialize the integration client.

        Args:
            max_retries: Maximum number of attempts per request
            retry_delay: Fixed delay between attempts (seconds)
        """
        self.max_retries = max_retries
        self.retry_delay = retry_delay

    def _sleep(self, seconds: float) -> None:
        time.sleep(seconds)

    def _execute_with_retry(self, operation: Callable[..., T], *args, **kwargs) -> T:
        """Execute an operation with retry logic.

        Args:
            operation: The function to execute
            *args: Positional arguments for the operation
            **kwargs: Keyword arguments for the operation

        Returns:
            Result of the operation

        Raises:
            TransportError: If every attempt fails
        """
        return with_retry(
            lambda: operation(*args, **kwargs),
            max_attempts=self.max_retries,
            delay=self.retry_delay,
            sleep=self._sleep,
            retry_on=(TransportError,),
        )
