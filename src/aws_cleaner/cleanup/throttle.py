"""Throttling-aware execution of AWS API calls.

Wraps a zero-argument AWS call and retries it with linear backoff while AWS
keeps rejecting it as rate limited. Any other error propagates untouched.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional, TypeVar

from .errors import RetryExhaustedError, is_throttle

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_BACKOFF_SECONDS = 2
DEFAULT_MAX_ATTEMPTS = 7


@dataclass(frozen=True)
class RetryPolicy:
    """Linear backoff policy for throttled calls.

    Attempt 1 waits ``backoff_seconds``, attempt 2 waits ``2 * backoff_seconds``
    and so on until ``max_attempts`` calls have been made.

    Attributes:
        max_attempts: Maximum number of times the call is invoked
        backoff_seconds: Base wait between attempts
    """

    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    backoff_seconds: float = DEFAULT_BACKOFF_SECONDS

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {self.max_attempts}")
        if self.backoff_seconds < 0:
            raise ValueError(f"backoff_seconds must not be negative, got {self.backoff_seconds}")

    def should_retry(self, error: BaseException, attempt: int) -> Optional[float]:
        """Decide whether a failed attempt is retried.

        Args:
            error: Error raised by the attempt
            attempt: 1-based number of the attempt that failed

        Returns:
            Seconds to wait before the next attempt, or None to stop retrying
        """
        if not is_throttle(error):
            return None
        if attempt >= self.max_attempts:
            return None
        return attempt * self.backoff_seconds


class ThrottledExecutor:
    """Runs AWS calls, backing off and retrying while they are throttled.

    Attributes:
        policy: Retry policy deciding the backoff for each throttled attempt
    """

    def __init__(
        self,
        policy: Optional[RetryPolicy] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """Initialize executor.

        Args:
            policy: Retry policy (default: 7 attempts, 2 second linear backoff)
            sleep: Function used to wait between attempts
        """
        self.policy = policy or RetryPolicy()
        self._sleep = sleep

    def run_with_throttle(self, action: Callable[[], object]) -> None:
        """Run a side-effecting AWS call with throttle protection.

        Args:
            action: Zero-argument callable performing the call

        Raises:
            RetryExhaustedError: If every attempt was throttled
        """
        self.run_request_with_throttle(action)

    def run_request_with_throttle(self, request: Callable[[], T]) -> T:
        """Run a value-returning AWS call with throttle protection.

        Args:
            request: Zero-argument callable performing the call

        Returns:
            Result of the first attempt that was not throttled

        Raises:
            RetryExhaustedError: If every attempt was throttled
        """
        attempt = 1
        while True:
            try:
                return request()
            except Exception as e:
                if not is_throttle(e):
                    raise

                delay = self.policy.should_retry(e, attempt)
                if delay is None:
                    logger.error(f"Still throttled after {attempt} attempts, giving up")
                    raise RetryExhaustedError(attempt) from e

                logger.warning(f"Throttled API calls detected, backoff {delay} seconds")
                self._sleep(delay)
                attempt += 1
