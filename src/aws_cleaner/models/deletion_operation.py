"""Deletion operation model.

Represents a complete cleanup run with mode, status and every deletion record.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional

from .deletion_record import DeletionRecord, DeletionStatus


class OperationMode(Enum):
    """Operation execution mode."""

    DRY_RUN = "dry-run"
    EXECUTE = "execute"

    @classmethod
    def from_commit(cls, commit: bool) -> "OperationMode":
        return cls.EXECUTE if commit else cls.DRY_RUN


class OperationStatus(Enum):
    """Operation execution status with state transitions."""

    EXECUTING = "executing"
    COMPLETED = "completed"
    PARTIAL = "partial"
    FAILED = "failed"


@dataclass
class DeletionOperation:
    """Deletion operation entity.

    Represents one orchestrator run across every cleaner.

    State transitions:
        executing -> completed (every cleaner finished)
        executing -> partial (some cleaners failed, others finished)
        executing -> failed (a cleaner failed and the run stopped)

    Attributes:
        operation_id: Unique identifier for the operation
        timestamp: When the operation was initiated (UTC)
        account_id: AWS account ID (12-digit number)
        mode: dry-run or execute
        status: Current execution status
        records: Deletion records produced by all cleaners
        failed_cleaners: Cleaner name -> error message for cleaners that failed
        aws_profile: AWS profile used for credentials (optional)
        started_at: When execution started (optional)
        completed_at: When execution completed (optional)
    """

    operation_id: str
    timestamp: datetime
    account_id: str
    mode: OperationMode
    status: OperationStatus
    records: list[DeletionRecord] = field(default_factory=list)
    failed_cleaners: dict[str, str] = field(default_factory=dict)
    aws_profile: Optional[str] = None
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    def _count(self, status: DeletionStatus) -> int:
        return sum(1 for record in self.records if record.status == status)

    @property
    def total_resources(self) -> int:
        return len(self.records)

    @property
    def deleted_count(self) -> int:
        return self._count(DeletionStatus.DELETED)

    @property
    def would_delete_count(self) -> int:
        return self._count(DeletionStatus.WOULD_DELETE)

    @property
    def skipped_count(self) -> int:
        return self._count(DeletionStatus.SKIPPED)

    @property
    def failed_count(self) -> int:
        return self._count(DeletionStatus.FAILED)

    @property
    def duration_seconds(self) -> Optional[float]:
        if self.started_at and self.completed_at:
            return (self.completed_at - self.started_at).total_seconds()
        return None

    def validate(self) -> bool:
        """Validate operation invariants.

        Validation rules:
            - completed_at must be after started_at
            - dry-run mode never produces deleted records
            - execute mode never produces would-delete records

        Returns:
            True if validation passes

        Raises:
            ValueError: If any validation rule fails
        """
        # Timing validation
        if self.completed_at and self.started_at:
            if self.completed_at < self.started_at:
                raise ValueError("Completion time before start time")

        # Mode/record consistency
        if self.mode == OperationMode.DRY_RUN and self.deleted_count:
            raise ValueError("Dry-run mode cannot delete resources")
        if self.mode == OperationMode.EXECUTE and self.would_delete_count:
            raise ValueError("Execute mode cannot produce would-delete records")

        return True
