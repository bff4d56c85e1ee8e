"""Error classification and cleanup exceptions.

AWS reports every failure as a ``ClientError``; the cleanup engine only cares
about a handful of kinds (throttling and the various "already gone" answers).
``classify_client_error`` maps a ``ClientError`` onto those kinds so the rest of
the package never inspects error codes or messages directly.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Any, Optional

from botocore.exceptions import ClientError

if TYPE_CHECKING:
    from ..models.deletion_operation import DeletionOperation
    from ..models.deletion_record import DeletionRecord


class ErrorKind(Enum):
    """Classification of an AWS client error."""

    THROTTLE = "throttle"
    STACK_NOT_FOUND = "stack-not-found"
    NOT_IMPORTED = "not-imported"
    NOT_FOUND = "not-found"
    OTHER = "other"


THROTTLE_CODES = frozenset(
    {
        "Throttling",
        "ThrottlingException",
        "ThrottledException",
        "RequestThrottled",
        "RequestThrottledException",
        "RequestLimitExceeded",
        "TooManyRequestsException",
        "SlowDown",
    }
)

NOT_FOUND_CODES = frozenset(
    {
        "NoSuchBucket",
        "NoSuchEntity",
        "NotFound",
        "NotFoundException",
        "ResourceNotFoundException",
        "CacheClusterNotFound",
        "AWS.SimpleQueueService.NonExistentQueue",
        "QueueDoesNotExist",
    }
)

# CloudFormation answers missing stacks and unused exports with a generic
# ValidationError; the message is the only discriminator it offers.
CFN_VALIDATION_CODE = "ValidationError"
CFN_STACK_MISSING_TEXT = "does not exist"
CFN_NOT_IMPORTED_TEXT = "is not imported"


def error_code(error: ClientError) -> str:
    """Extract the AWS error code from a ClientError."""
    return error.response.get("Error", {}).get("Code", "Unknown")


def error_message(error: ClientError) -> str:
    """Extract the AWS error message from a ClientError."""
    return error.response.get("Error", {}).get("Message", str(error))


def classify_client_error(error: ClientError) -> ErrorKind:
    """Classify an AWS client error.

    Args:
        error: Error raised by a boto3 client call

    Returns:
        ErrorKind describing how the cleanup engine should treat the error
    """
    code = error_code(error)
    message = error_message(error)

    if code in THROTTLE_CODES:
        return ErrorKind.THROTTLE

    if code == CFN_VALIDATION_CODE:
        if CFN_NOT_IMPORTED_TEXT in message:
            return ErrorKind.NOT_IMPORTED
        if CFN_STACK_MISSING_TEXT in message:
            return ErrorKind.STACK_NOT_FOUND
        return ErrorKind.OTHER

    if code == "StackNotFoundException":
        return ErrorKind.STACK_NOT_FOUND

    if code in NOT_FOUND_CODES or code.endswith(".NotFound"):
        return ErrorKind.NOT_FOUND

    return ErrorKind.OTHER


def is_throttle(error: BaseException) -> bool:
    """Return True if the error is an AWS throttling rejection."""
    return isinstance(error, ClientError) and classify_client_error(error) == ErrorKind.THROTTLE


def is_gone(error: BaseException) -> bool:
    """Return True if the error says the target no longer exists."""
    return isinstance(error, ClientError) and classify_client_error(error) in (
        ErrorKind.NOT_FOUND,
        ErrorKind.STACK_NOT_FOUND,
    )


class CleanerError(Exception):
    """Base class for cleanup engine errors.

    Attributes:
        records: Deletion records a cleaner produced before it failed
    """

    def __init__(self, *args: Any, records: Optional[list[DeletionRecord]] = None) -> None:
        super().__init__(*args)
        self.records: list[DeletionRecord] = list(records or [])


class RetryExhaustedError(CleanerError):
    """Raised when a throttled call is still throttled after the last attempt."""

    def __init__(self, attempts: int) -> None:
        super().__init__(f"Timeout AWS operation after {attempts} attempts")
        self.attempts = attempts


class StackClassificationError(CleanerError):
    """Raised when a stack reports a status the cleaner does not understand."""

    def __init__(self, stack_name: str, status: str) -> None:
        super().__init__(f"Stack {stack_name} has unclassified status {status}")
        self.stack_name = stack_name
        self.status = status


class CyclicDependencyError(CleanerError):
    """Raised when a full resolver pass removes no stacks."""

    def __init__(self, remaining: list[str], records: Optional[list[DeletionRecord]] = None) -> None:
        super().__init__(
            f"No stack could be deleted in a full pass; exports still imported for: {', '.join(remaining)}",
            records=records,
        )
        self.remaining = remaining


class StackDeletionError(CleanerError):
    """Raised when stacks keep failing to delete and no progress is possible."""

    def __init__(
        self, remaining: list[str], failures: dict[str, str], records: Optional[list[DeletionRecord]] = None
    ) -> None:
        details = "; ".join(f"{name}: {reason}" for name, reason in failures.items())
        super().__init__(f"Could not delete stacks {', '.join(remaining)}. {details}", records=records)
        self.remaining = remaining
        self.failures = failures


class ResourceCleanupError(CleanerError):
    """Raised when a resource pipeline stops on an error for one resource.

    The underlying error is chained as ``__cause__``.
    """

    def __init__(self, physical_id: str, error: BaseException, records: Optional[list[DeletionRecord]] = None) -> None:
        super().__init__(f"Could not clean {physical_id}: {error}", records=records)
        self.physical_id = physical_id
        self.error = error


class CleanupFailedError(CleanerError):
    """Raised at the end of a run in which one or more cleaners failed."""

    def __init__(self, operation: Optional[DeletionOperation], failures: dict[str, Any]) -> None:
        names = ", ".join(failures)
        super().__init__(f"{len(failures)} cleaner(s) failed: {names}")
        self.operation = operation
        self.failures = failures
