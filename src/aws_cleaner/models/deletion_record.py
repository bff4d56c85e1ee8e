"""Deletion record model.

Individual resource deletion decision with result and metadata.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional


class DeletionStatus(Enum):
    """Outcome of one deletion candidate."""

    DELETED = "deleted"
    WOULD_DELETE = "would-delete"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class DeletionCandidate:
    """A physical resource id together with the resource kind that produced it.

    Attributes:
        resource_kind: Provider kind (e.g., "s3:bucket", "cloudformation:stack")
        physical_id: Provider-specific identifier (bucket name, queue URL, topic ARN)
    """

    resource_kind: str
    physical_id: str

    def __str__(self) -> str:
        return f"{self.resource_kind} {self.physical_id}"


@dataclass
class DeletionRecord:
    """Deletion record entity.

    Represents the decision taken for a single candidate during a run.

    Validation rules:
        - status=failed: requires error_message
        - status=skipped: requires reason
        - status=deleted or would-delete: no error_message

    Attributes:
        resource_kind: Provider kind that enumerated the resource
        physical_id: Physical resource identifier
        status: Deletion outcome
        timestamp: When the decision was taken (UTC)
        reason: Why the resource was skipped (optional)
        error_code: AWS error code if failed (optional)
        error_message: Human-readable error if failed (optional)
    """

    resource_kind: str
    physical_id: str
    status: DeletionStatus
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    reason: Optional[str] = None
    error_code: Optional[str] = None
    error_message: Optional[str] = None

    @classmethod
    def for_candidate(cls, candidate: DeletionCandidate, status: DeletionStatus, **kwargs: Any) -> "DeletionRecord":
        """Create a record for a deletion candidate."""
        return cls(
            resource_kind=candidate.resource_kind,
            physical_id=candidate.physical_id,
            status=status,
            **kwargs,
        )

    def validate(self) -> bool:
        """Validate record invariants.

        Returns:
            True if validation passes

        Raises:
            ValueError: If any validation rule fails
        """
        if not self.physical_id:
            raise ValueError("Record requires a physical_id")

        if self.status == DeletionStatus.FAILED:
            if not self.error_message:
                raise ValueError("Failed status requires error_message")
        elif self.status == DeletionStatus.SKIPPED:
            if not self.reason:
                raise ValueError("Skipped status requires reason")
        elif self.error_message:
            raise ValueError(f"{self.status.value} status cannot have an error message")

        return True

    def to_dict(self) -> dict[str, Any]:
        """Convert record to dictionary for serialization."""
        return {
            "resource_kind": self.resource_kind,
            "physical_id": self.physical_id,
            "status": self.status.value,
            "timestamp": self.timestamp.isoformat(),
            "reason": self.reason,
            "error_code": self.error_code,
            "error_message": self.error_message,
        }
