"""Environment cleaner.

Main orchestrator running every cleaner, in order, for one cleanup run.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional, Sequence

from ..models.deletion_operation import DeletionOperation, OperationStatus
from ..models.run_context import RunContext
from .audit import AuditStorage
from .errors import CleanerError, CleanupFailedError
from .pipeline import Cleaner

logger = logging.getLogger(__name__)


class EnvironmentCleaner:
    """Environment cleaner orchestrator.

    Holds an ordered list of cleaners (the stack resolver first, since deleting
    stacks removes resources other cleaners would otherwise try to delete) and
    runs each one with the same immutable run context.

    By default the first failing cleaner aborts the run. With
    ``continue_on_error`` every cleaner runs and failures are reported together
    at the end.

    Attributes:
        cleaners: Cleaners in execution order
        audit_storage: Audit storage for run logs (optional)
        continue_on_error: Isolate cleaner failures instead of aborting
    """

    def __init__(
        self,
        cleaners: Sequence[Cleaner],
        audit_storage: Optional[AuditStorage] = None,
        continue_on_error: bool = False,
    ) -> None:
        """Initialize environment cleaner.

        Args:
            cleaners: Cleaners in execution order
            audit_storage: Audit storage for logging (optional)
            continue_on_error: Keep running remaining cleaners after a failure
        """
        self.cleaners = list(cleaners)
        self.audit_storage = audit_storage
        self.continue_on_error = continue_on_error

    def run(self, context: RunContext, account_id: str, aws_profile: Optional[str] = None) -> DeletionOperation:
        """Run every cleaner once.

        Args:
            context: Run context shared by every cleaner
            account_id: AWS account ID being cleaned
            aws_profile: AWS profile name (optional, recorded in the audit log)

        Returns:
            DeletionOperation with every deletion record

        Raises:
            Exception: The first cleaner error, when continue_on_error is False
            CleanupFailedError: If any cleaner failed and continue_on_error is True
        """
        operation = DeletionOperation(
            operation_id=context.run_id,
            timestamp=context.started_at,
            account_id=account_id,
            mode=context.mode,
            status=OperationStatus.EXECUTING,
            aws_profile=aws_profile,
            started_at=datetime.now(timezone.utc),
        )
        failures: dict[str, Exception] = {}

        logger.info(f"Cleaning AWS resources ({context.mode.value})")
        for cleaner in self.cleaners:
            logger.info(f"Processing {cleaner.name}")
            try:
                operation.records.extend(cleaner.clean(context))
            except Exception as e:
                logger.error(f"{cleaner.name} failed: {e}")
                if isinstance(e, CleanerError):
                    operation.records.extend(e.records)
                failures[cleaner.name] = e
                operation.failed_cleaners[cleaner.name] = str(e)
                if not self.continue_on_error:
                    self._finish(operation, OperationStatus.FAILED)
                    raise

        if failures:
            self._finish(operation, OperationStatus.PARTIAL)
            raise CleanupFailedError(operation, failures)

        self._finish(operation, OperationStatus.COMPLETED)
        logger.debug("Resource cleaning completed")
        return operation

    def _finish(self, operation: DeletionOperation, status: OperationStatus) -> None:
        operation.status = status
        operation.completed_at = datetime.now(timezone.utc)
        if self.audit_storage is not None:
            self.audit_storage.log_operation(operation)
