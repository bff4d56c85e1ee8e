"""Generic cleanup pipeline shared by every simple resource kind.

Enumerate candidate ids, apply the deletion filter chain, honour the run's
commit flag and delete accepted ids one at a time through the throttled
executor.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Optional

from botocore.exceptions import ClientError

from ..models.deletion_record import DeletionCandidate, DeletionRecord, DeletionStatus
from ..models.run_context import RunContext
from ..providers.base import ResourceProvider
from .errors import ResourceCleanupError, error_code, error_message
from .filters import AllowAllFilter, DeletionFilter
from .throttle import ThrottledExecutor

logger = logging.getLogger(__name__)


class Cleaner(ABC):
    """Contract shared by the stack resolver and every resource pipeline."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Display name of the cleaner."""

    @abstractmethod
    def clean(self, context: RunContext) -> list[DeletionRecord]:
        """Run the cleaner once.

        Args:
            context: Immutable run context (commit flag, deny-lists)

        Returns:
            One deletion record per candidate considered
        """


class ResourceCleanupPipeline(Cleaner):
    """Enumerate, filter, commit-gate and delete for one resource kind.

    Processing is strictly sequential. A terminal error for one id is recorded
    as FAILED and aborts the remaining ids of this pipeline.

    Attributes:
        provider: Resource-kind provider supplying enumerate/delete
        deletion_filter: Filter chain deciding which ids may be deleted
        executor: Throttled executor wrapping every AWS call
    """

    def __init__(
        self,
        provider: ResourceProvider,
        deletion_filter: Optional[DeletionFilter] = None,
        executor: Optional[ThrottledExecutor] = None,
    ) -> None:
        self.provider = provider
        self.deletion_filter = deletion_filter or AllowAllFilter()
        self.executor = executor or ThrottledExecutor()

    @property
    def name(self) -> str:
        return f"{self.provider.kind} cleaner"

    def clean(self, context: RunContext) -> list[DeletionRecord]:
        """Clean every resource of the provider's kind.

        Args:
            context: Run context; ``context.commit`` gates the delete calls

        Returns:
            Deletion records in enumeration order

        Raises:
            ResourceCleanupError: If processing one id fails; carries the records
                produced so far, ending with a FAILED record for that id
        """
        physical_ids = self.executor.run_request_with_throttle(self.provider.enumerate)
        if not physical_ids:
            logger.debug(f"No {self.provider.kind} resources found")
            return []

        logger.debug(f"Processing {len(physical_ids)} {self.provider.kind} resources")
        records: list[DeletionRecord] = []

        for physical_id in physical_ids:
            candidate = DeletionCandidate(resource_kind=self.provider.kind, physical_id=physical_id)
            try:
                records.append(self._process(candidate, context))
            except Exception as e:
                logger.error(f"Failed to clean {candidate}: {e}")
                records.append(self._failed_record(candidate, e))
                raise ResourceCleanupError(physical_id, e, records=records) from e

        return records

    def _process(self, candidate: DeletionCandidate, context: RunContext) -> DeletionRecord:
        physical_id = candidate.physical_id

        if not self.deletion_filter.should_delete(physical_id):
            reason = self.deletion_filter.rejection_reason(physical_id)
            logger.debug(f"Skipping {candidate}: {reason}")
            return DeletionRecord.for_candidate(candidate, DeletionStatus.SKIPPED, reason=reason)

        if not context.commit:
            logger.info(f"Would delete {physical_id}")
            return DeletionRecord.for_candidate(candidate, DeletionStatus.WOULD_DELETE)

        logger.info(f"Deleting {candidate}")
        self.executor.run_with_throttle(lambda: self.provider.delete(physical_id))
        return DeletionRecord.for_candidate(candidate, DeletionStatus.DELETED)

    @staticmethod
    def _failed_record(candidate: DeletionCandidate, error: Exception) -> DeletionRecord:
        if isinstance(error, ClientError):
            return DeletionRecord.for_candidate(
                candidate,
                DeletionStatus.FAILED,
                error_code=error_code(error),
                error_message=error_message(error),
            )
        return DeletionRecord.for_candidate(candidate, DeletionStatus.FAILED, error_message=str(error) or repr(error))
