"""CloudFormation stack model and lifecycle status classification."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable

from ..cleanup.errors import StackClassificationError

DELETE_COMPLETE = "DELETE_COMPLETE"
DELETE_IN_PROGRESS = "DELETE_IN_PROGRESS"
DELETE_FAILED = "DELETE_FAILED"

# Statuses of stacks that exist and are not being deleted. DELETE_FAILED is
# included so that failed deletions are retried.
REMOVABLE_STATUSES = frozenset(
    {
        "CREATE_IN_PROGRESS",
        "CREATE_FAILED",
        "CREATE_COMPLETE",
        "ROLLBACK_IN_PROGRESS",
        "ROLLBACK_FAILED",
        "ROLLBACK_COMPLETE",
        "REVIEW_IN_PROGRESS",
        "UPDATE_IN_PROGRESS",
        "UPDATE_COMPLETE_CLEANUP_IN_PROGRESS",
        "UPDATE_COMPLETE",
        "UPDATE_FAILED",
        "UPDATE_ROLLBACK_IN_PROGRESS",
        "UPDATE_ROLLBACK_FAILED",
        "UPDATE_ROLLBACK_COMPLETE_CLEANUP_IN_PROGRESS",
        "UPDATE_ROLLBACK_COMPLETE",
        "IMPORT_IN_PROGRESS",
        "IMPORT_COMPLETE",
        "IMPORT_ROLLBACK_IN_PROGRESS",
        "IMPORT_ROLLBACK_FAILED",
        "IMPORT_ROLLBACK_COMPLETE",
        DELETE_FAILED,
    }
)


class StackState(Enum):
    """Lifecycle class of a stack status."""

    REMOVABLE = "removable"
    DELETING = "deleting"
    DELETED = "deleted"


def classify_stack_status(stack_name: str, status: str) -> StackState:
    """Classify a CloudFormation stack status.

    Args:
        stack_name: Stack name (used in the error message)
        status: CloudFormation status string, case-insensitive

    Returns:
        StackState for the status

    Raises:
        StackClassificationError: If the status is not a known CloudFormation status
    """
    normalized = status.upper()
    if normalized == DELETE_COMPLETE:
        return StackState.DELETED
    if normalized == DELETE_IN_PROGRESS:
        return StackState.DELETING
    if normalized in REMOVABLE_STATUSES:
        return StackState.REMOVABLE
    raise StackClassificationError(stack_name, status)


@dataclass(frozen=True)
class StackDescriptor:
    """A CloudFormation stack as seen at the start of a resolver run.

    Attributes:
        stack_id: Stack ARN
        name: Stack name
        status: CloudFormation status string
        exports: Names of the exports the stack publishes
    """

    stack_id: str
    name: str
    status: str
    exports: tuple[str, ...] = field(default_factory=tuple)

    @property
    def state(self) -> StackState:
        return classify_stack_status(self.name, self.status)

    @property
    def has_exports(self) -> bool:
        return bool(self.exports)

    def matches_prefix(self, prefixes: Iterable[str]) -> bool:
        """Return True if the stack name starts with any of the prefixes."""
        return any(prefix and self.name.startswith(prefix) for prefix in prefixes)

    def __str__(self) -> str:
        return f"{self.name} ({self.status})"
