"""Polling until an asynchronous AWS operation completes."""

from __future__ import annotations

import logging
import time
from typing import Callable

logger = logging.getLogger(__name__)

DEFAULT_POLLING_DELAY_MS = 5000


class CompletionPoller:
    """Repeatedly evaluates a condition until it holds or time runs out.

    The clock and sleep functions are injectable so tests can run without
    real waiting.
    """

    def __init__(
        self,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._clock = clock
        self._sleep = sleep

    def wait_for(
        self,
        max_wait_seconds: float,
        condition: Callable[[], bool],
        polling_delay_ms: int = DEFAULT_POLLING_DELAY_MS,
    ) -> bool:
        """Wait for a condition to become true.

        The condition is checked immediately, then again after every polling
        delay until it is true or ``max_wait_seconds`` have elapsed. An
        exception raised by the condition counts as "not yet true".

        Args:
            max_wait_seconds: Upper bound on the time spent waiting
            condition: Zero-argument callable returning a boolean
            polling_delay_ms: Delay between checks in milliseconds

        Returns:
            The last value observed for the condition
        """
        end_time = self._clock() + max_wait_seconds
        situation = self._check(condition)
        while not situation and self._clock() < end_time:
            self._sleep(polling_delay_ms / 1000.0)
            situation = self._check(condition)

        if not situation:
            logger.warning(f"Situation did not occur in {max_wait_seconds} seconds")
        return situation

    def _check(self, condition: Callable[[], bool]) -> bool:
        try:
            return bool(condition())
        except Exception as e:
            logger.debug(f"Situation threw an exception: {type(e).__name__}: {e}")
            return False


_default_poller = CompletionPoller()


def wait_for(
    max_wait_seconds: float,
    condition: Callable[[], bool],
    polling_delay_ms: int = DEFAULT_POLLING_DELAY_MS,
) -> bool:
    """Wait for a condition using the real clock. See CompletionPoller.wait_for."""
    return _default_poller.wait_for(max_wait_seconds, condition, polling_delay_ms)
