"""Tests for DeletionRecord model.

Test coverage for individual deletion record entity with status-specific validation.
"""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from aws_cleaner.models.deletion_record import DeletionCandidate, DeletionRecord, DeletionStatus


class TestDeletionRecord:
    """Test suite for DeletionRecord model."""

    def test_create_deleted_record(self) -> None:
        """Test creating a record for a deleted resource."""
        record = DeletionRecord(
            resource_kind="sqs:queue",
            physical_id="https://sqs.us-east-1.amazonaws.com/123456789012/scratch",
            status=DeletionStatus.DELETED,
            timestamp=datetime(2026, 10, 17, 15, 31, 0, tzinfo=timezone.utc),
        )

        assert record.resource_kind == "sqs:queue"
        assert record.status == DeletionStatus.DELETED
        assert record.reason is None
        assert record.error_message is None
        assert record.validate() is True

    def test_default_timestamp_is_utc(self) -> None:
        record = DeletionRecord(resource_kind="s3:bucket", physical_id="b", status=DeletionStatus.WOULD_DELETE)

        assert record.timestamp.tzinfo is not None

    def test_for_candidate(self) -> None:
        """Test building a record from a candidate."""
        candidate = DeletionCandidate(resource_kind="s3:bucket", physical_id="keep-bucket")

        record = DeletionRecord.for_candidate(candidate, DeletionStatus.SKIPPED, reason="Name contains skip name")

        assert record.resource_kind == "s3:bucket"
        assert record.physical_id == "keep-bucket"
        assert record.reason == "Name contains skip name"
        assert str(candidate) == "s3:bucket keep-bucket"

    def test_failed_requires_error_message(self) -> None:
        record = DeletionRecord(resource_kind="s3:bucket", physical_id="b", status=DeletionStatus.FAILED)

        with pytest.raises(ValueError, match="error_message"):
            record.validate()

    def test_failed_with_error_is_valid(self) -> None:
        record = DeletionRecord(
            resource_kind="s3:bucket",
            physical_id="b",
            status=DeletionStatus.FAILED,
            error_code="AccessDenied",
            error_message="Access Denied",
        )

        assert record.validate() is True

    def test_skipped_requires_reason(self) -> None:
        record = DeletionRecord(resource_kind="s3:bucket", physical_id="b", status=DeletionStatus.SKIPPED)

        with pytest.raises(ValueError, match="reason"):
            record.validate()

    def test_deleted_cannot_have_error(self) -> None:
        record = DeletionRecord(
            resource_kind="s3:bucket",
            physical_id="b",
            status=DeletionStatus.DELETED,
            error_message="boom",
        )

        with pytest.raises(ValueError):
            record.validate()

    def test_physical_id_required(self) -> None:
        with pytest.raises(ValueError, match="physical_id"):
            DeletionRecord(resource_kind="s3:bucket", physical_id="", status=DeletionStatus.DELETED).validate()

    def test_to_dict(self) -> None:
        """Test serialization uses plain values."""
        record = DeletionRecord(
            resource_kind="sns:topic",
            physical_id="arn:aws:sns:us-east-1:123456789012:alerts",
            status=DeletionStatus.WOULD_DELETE,
            timestamp=datetime(2026, 10, 17, 12, 0, 0, tzinfo=timezone.utc),
        )

        data = record.to_dict()

        assert data["status"] == "would-delete"
        assert data["timestamp"] == "2026-10-17T12:00:00+00:00"
        assert data["physical_id"] == "arn:aws:sns:us-east-1:123456789012:alerts"
