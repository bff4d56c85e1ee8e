"""Tests for CompletionPoller."""

from __future__ import annotations

from unittest.mock import Mock

import pytest

from aws_cleaner.cleanup.waiter import CompletionPoller
from tests.fixtures.stacks import FakeClock


class TestCompletionPoller:
    """Test suite for CompletionPoller."""

    @pytest.fixture
    def clock(self) -> FakeClock:
        return FakeClock()

    @pytest.fixture
    def poller(self, clock: FakeClock) -> CompletionPoller:
        return CompletionPoller(clock=clock.time, sleep=clock.sleep)

    def test_true_immediately_does_not_sleep(self, poller: CompletionPoller, clock: FakeClock) -> None:
        """Test the condition is checked before any wait."""
        condition = Mock(return_value=True)

        assert poller.wait_for(10, condition, 1000) is True
        condition.assert_called_once_with()
        assert clock.sleeps == []

    def test_true_on_third_check(self, poller: CompletionPoller, clock: FakeClock) -> None:
        """Test a condition true on the third check waits two polling delays."""
        condition = Mock(side_effect=[False, False, True])

        assert poller.wait_for(10, condition, 1000) is True
        assert condition.call_count == 3
        assert clock.sleeps == [1.0, 1.0]
        assert clock.now == pytest.approx(2.0)

    def test_times_out(self, poller: CompletionPoller, clock: FakeClock) -> None:
        """Test a condition that never holds returns False once the limit passes."""
        condition = Mock(return_value=False)

        assert poller.wait_for(3, condition, 1000) is False
        assert condition.call_count == 4
        assert clock.now == pytest.approx(3.0)

    def test_exception_counts_as_false(self, poller: CompletionPoller) -> None:
        """Test errors raised by the condition do not abort the wait."""
        condition = Mock(side_effect=[RuntimeError("not yet"), True])

        assert poller.wait_for(10, condition, 500) is True
        assert condition.call_count == 2

    def test_zero_wait_checks_once(self, poller: CompletionPoller, clock: FakeClock) -> None:
        """Test a zero limit still evaluates the condition once."""
        condition = Mock(return_value=False)

        assert poller.wait_for(0, condition, 1000) is False
        condition.assert_called_once_with()
        assert clock.sleeps == []
