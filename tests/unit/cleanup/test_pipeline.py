"""Tests for ResourceCleanupPipeline."""

from __future__ import annotations

from typing import List
from unittest.mock import Mock

import pytest
from botocore.exceptions import ClientError

from aws_cleaner.cleanup.errors import ResourceCleanupError, RetryExhaustedError
from aws_cleaner.cleanup.filters import NameExclusionFilter
from aws_cleaner.cleanup.pipeline import ResourceCleanupPipeline
from aws_cleaner.cleanup.throttle import ThrottledExecutor
from aws_cleaner.models.deletion_record import DeletionStatus
from aws_cleaner.models.run_context import RunContext
from aws_cleaner.providers.base import ResourceProvider
from tests.fixtures.stacks import FakeClock, client_error, throttling_error


class FakeQueueProvider(ResourceProvider):
    """Provider over an in-memory list of ids."""

    kind = "test:queue"
    service_name = "sqs"

    def __init__(self, ids: List[str]) -> None:
        super().__init__(client=Mock())
        self.ids = list(ids)
        self.deleted: List[str] = []
        self.delete_errors: dict = {}

    def enumerate(self) -> List[str]:
        return list(self.ids)

    def delete(self, physical_id: str) -> None:
        if physical_id in self.delete_errors:
            raise self.delete_errors[physical_id]
        self.deleted.append(physical_id)


class TestResourceCleanupPipeline:
    """Test suite for ResourceCleanupPipeline."""

    @pytest.fixture
    def clock(self) -> FakeClock:
        return FakeClock()

    @pytest.fixture
    def executor(self, clock: FakeClock) -> ThrottledExecutor:
        return ThrottledExecutor(sleep=clock.sleep)

    def test_name(self) -> None:
        assert ResourceCleanupPipeline(FakeQueueProvider([])).name == "test:queue cleaner"

    def test_commit_deletes_in_enumeration_order(self, executor: ThrottledExecutor) -> None:
        """Test every accepted id is deleted in order."""
        provider = FakeQueueProvider(["q1", "q2", "q3"])
        pipeline = ResourceCleanupPipeline(provider, executor=executor)

        records = pipeline.clean(RunContext(commit=True))

        assert provider.deleted == ["q1", "q2", "q3"]
        assert [r.physical_id for r in records] == ["q1", "q2", "q3"]
        assert all(r.status == DeletionStatus.DELETED for r in records)
        assert all(r.resource_kind == "test:queue" for r in records)

    def test_dry_run_deletes_nothing(self, executor: ThrottledExecutor) -> None:
        """Test a dry run issues zero delete calls."""
        provider = FakeQueueProvider(["q1", "q2"])
        pipeline = ResourceCleanupPipeline(provider, executor=executor)

        records = pipeline.clean(RunContext(commit=False))

        assert provider.deleted == []
        assert [r.status for r in records] == [DeletionStatus.WOULD_DELETE, DeletionStatus.WOULD_DELETE]

    def test_filtered_ids_are_skipped(self, executor: ThrottledExecutor) -> None:
        """Test ids rejected by the filter are recorded as skipped with the reason."""
        provider = FakeQueueProvider(["scratch", "keep-me"])
        pipeline = ResourceCleanupPipeline(provider, NameExclusionFilter(["keep"]), executor)

        records = pipeline.clean(RunContext(commit=True))

        assert provider.deleted == ["scratch"]
        skipped = records[1]
        assert skipped.status == DeletionStatus.SKIPPED
        assert skipped.reason == "Name contains skip name 'keep'"
        assert skipped.validate() is True

    def test_empty_enumeration(self, executor: ThrottledExecutor) -> None:
        assert ResourceCleanupPipeline(FakeQueueProvider([]), executor=executor).clean(RunContext(commit=True)) == []

    def test_throttled_delete_is_retried(self, executor: ThrottledExecutor, clock: FakeClock) -> None:
        """Test a throttled delete succeeds after backing off."""
        provider = FakeQueueProvider(["q1"])
        provider.delete = Mock(side_effect=[throttling_error(), None])
        pipeline = ResourceCleanupPipeline(provider, executor=executor)

        records = pipeline.clean(RunContext(commit=True))

        assert provider.delete.call_count == 2
        assert clock.sleeps == [2]
        assert records[0].status == DeletionStatus.DELETED

    def test_terminal_error_aborts_remaining_ids(self, executor: ThrottledExecutor) -> None:
        """Test a non-throttle delete error propagates and later ids are not touched."""
        provider = FakeQueueProvider(["q1", "q2", "q3"])
        provider.delete_errors["q2"] = client_error("AccessDenied", "denied")
        pipeline = ResourceCleanupPipeline(provider, executor=executor)

        with pytest.raises(ResourceCleanupError) as exc_info:
            pipeline.clean(RunContext(commit=True))

        assert provider.deleted == ["q1"]
        assert isinstance(exc_info.value.__cause__, ClientError)
        assert exc_info.value.physical_id == "q2"

    def test_failed_delete_is_recorded(self, executor: ThrottledExecutor) -> None:
        """Test the error carries the records so far plus a FAILED record for the id."""
        provider = FakeQueueProvider(["q1", "q2", "q3"])
        provider.delete_errors["q2"] = client_error("AccessDenied", "denied")
        pipeline = ResourceCleanupPipeline(provider, executor=executor)

        with pytest.raises(ResourceCleanupError) as exc_info:
            pipeline.clean(RunContext(commit=True))

        records = exc_info.value.records
        assert [(r.physical_id, r.status) for r in records] == [
            ("q1", DeletionStatus.DELETED),
            ("q2", DeletionStatus.FAILED),
        ]
        assert records[1].error_code == "AccessDenied"
        assert records[1].error_message == "denied"
        assert records[1].validate() is True

    def test_exhausted_enumeration_propagates(self, executor: ThrottledExecutor) -> None:
        """Test an always-throttled enumeration raises RetryExhaustedError."""
        provider = FakeQueueProvider([])
        provider.enumerate = Mock(side_effect=throttling_error())
        pipeline = ResourceCleanupPipeline(provider, executor=executor)

        with pytest.raises(RetryExhaustedError):
            pipeline.clean(RunContext(commit=True))

        assert provider.enumerate.call_count == 7
