"""CloudFormation stack deletion in export/import dependency order.

A stack that publishes exports cannot be deleted while another stack imports
one of them. The resolver deletes stacks without exports first, then makes
repeated passes over the exporting stacks, deleting each one as soon as none of
its exports has a live importer.
"""

from __future__ import annotations

import logging
from typing import Iterable, Iterator, Optional

from botocore.exceptions import ClientError

from ..aws.stacks import StackClient
from ..models.deletion_record import DeletionRecord, DeletionStatus
from ..models.run_context import RunContext
from ..models.stack import DELETE_COMPLETE, DELETE_FAILED, StackDescriptor, StackState
from .errors import CleanerError, CyclicDependencyError, StackDeletionError, error_message, is_gone
from .pipeline import Cleaner
from .throttle import ThrottledExecutor
from .waiter import DEFAULT_POLLING_DELAY_MS, CompletionPoller

logger = logging.getLogger(__name__)

STACK_KIND = "cloudformation:stack"
EXPORTS_IMPORTED_REASON = "Exports still imported"
DEFAULT_MAX_WAIT_SECONDS = 1200


class ExportUsageIndex:
    """Answers "is this export imported right now?" with a live query per check.

    Attributes:
        stacks: CloudFormation stack client
        executor: Executor applying throttle protection to each query
    """

    def __init__(self, stacks: StackClient, executor: ThrottledExecutor) -> None:
        self.stacks = stacks
        self.executor = executor

    def is_imported(self, export_name: str) -> bool:
        importers = self.executor.run_request_with_throttle(lambda: self.stacks.list_imports(export_name))
        if importers:
            logger.debug(f"Export {export_name} is imported by {importers}")
        return bool(importers)

    def all_unused(self, export_names: Iterable[str]) -> bool:
        """Return True if none of the exports has an outstanding import."""
        return not any(self.is_imported(name) for name in export_names)


class KillList:
    """Ordered set of stacks still pending deletion in one resolver run.

    Only removable stacks are accepted and no stack appears twice.
    """

    def __init__(self, stacks: Iterable[StackDescriptor] = ()) -> None:
        self._stacks: list[StackDescriptor] = []
        for stack in stacks:
            self.add(stack)

    def add(self, stack: StackDescriptor) -> None:
        if stack.state != StackState.REMOVABLE:
            raise ValueError(f"Stack {stack} is not removable")
        if any(existing.stack_id == stack.stack_id for existing in self._stacks):
            raise ValueError(f"Stack {stack.name} is already in the kill list")
        self._stacks.append(stack)

    def remove(self, stack: StackDescriptor) -> None:
        self._stacks.remove(stack)

    def names(self) -> list[str]:
        return [stack.name for stack in self._stacks]

    def __iter__(self) -> Iterator[StackDescriptor]:
        # Iterate over a copy so stacks can be removed during a pass
        return iter(list(self._stacks))

    def __len__(self) -> int:
        return len(self._stacks)

    def __contains__(self, stack: object) -> bool:
        return stack in self._stacks


class StackDependencyResolver(Cleaner):
    """Deletes CloudFormation stacks in export/import dependency order.

    Error discipline is lenient: a failed delete or a deletion that does not
    complete within ``max_wait_seconds`` is logged and the stack stays in the
    kill list for the next pass. A pass that removes nothing ends the run with
    StackDeletionError (when failures were seen) or CyclicDependencyError.

    Attributes:
        stacks: CloudFormation stack client
        permanent_prefixes: Stack name prefixes that are never deleted
        max_wait_seconds: Upper bound on waiting for one stack deletion
        polling_delay_ms: Delay between deletion status checks
        executor: Throttled executor wrapping every CloudFormation call
        poller: Completion poller used to wait for deletions
    """

    def __init__(
        self,
        stacks: StackClient,
        permanent_prefixes: Iterable[str] = (),
        max_wait_seconds: float = DEFAULT_MAX_WAIT_SECONDS,
        polling_delay_ms: int = DEFAULT_POLLING_DELAY_MS,
        executor: Optional[ThrottledExecutor] = None,
        poller: Optional[CompletionPoller] = None,
    ) -> None:
        self.stacks = stacks
        self.permanent_prefixes = tuple(prefix for prefix in permanent_prefixes if prefix)
        self.max_wait_seconds = max_wait_seconds
        self.polling_delay_ms = polling_delay_ms
        self.executor = executor or ThrottledExecutor()
        self.poller = poller or CompletionPoller()
        self._failures: dict[str, str] = {}
        logger.info(f"Ignoring stacks prefixed {list(self.permanent_prefixes)}")

    @property
    def name(self) -> str:
        return "CloudFormation stack cleaner"

    def clean(self, context: RunContext) -> list[DeletionRecord]:
        """Delete every removable, non-permanent stack.

        Args:
            context: Run context; permanent prefixes from the context are honoured
                in addition to the resolver's own

        Returns:
            One record per preserved or deleted stack

        Raises:
            CyclicDependencyError: If the remaining stacks still have imported exports
            StackDeletionError: If remaining stacks keep failing to delete
            CleanerError: If a CloudFormation call fails outright

        Errors raised once deletion has started carry the records produced so
        far, including a FAILED record for every stack left undeleted.
        """
        prefixes = self.permanent_prefixes + tuple(
            prefix for prefix in context.permanent_stack_prefixes if prefix not in self.permanent_prefixes
        )

        logger.debug("Requesting exports")
        export_map = self.executor.run_request_with_throttle(self.stacks.exports_by_stack)

        logger.debug("Requesting stacks")
        summaries = self.executor.run_request_with_throttle(self.stacks.list_stacks)

        records: list[DeletionRecord] = []
        kill_list = KillList()
        for stack in self._describe(summaries, export_map):
            if stack.state == StackState.DELETED:
                continue
            if stack.state == StackState.DELETING:
                logger.info(f"Stack {stack.name} is already being deleted")
                continue
            if stack.matches_prefix(prefixes):
                logger.info(f"Preserving stack named {stack.name}")
                records.append(self._record(stack, DeletionStatus.SKIPPED, reason="Permanent stack prefix"))
                continue
            kill_list.add(stack)

        if not len(kill_list):
            logger.debug("No stacks to delete")
            return records

        if not context.commit:
            for stack in self._deletion_preview(kill_list):
                logger.info(f"Would delete stack {stack} exporting {list(stack.exports)}")
                records.append(self._record(stack, DeletionStatus.WOULD_DELETE))
            return records

        try:
            self._delete_in_dependency_order(kill_list, records)
        except CleanerError as e:
            e.records = records
            raise
        except ClientError as e:
            raise CleanerError(f"Stack cleanup stopped: {error_message(e)}", records=records) from e
        return records

    def _describe(self, summaries: list[dict], export_map: dict[str, list[str]]) -> Iterator[StackDescriptor]:
        for summary in summaries:
            stack_id = summary["StackId"]
            yield StackDescriptor(
                stack_id=stack_id,
                name=summary["StackName"],
                status=summary["StackStatus"],
                exports=tuple(export_map.get(stack_id, [])),
            )

    def _deletion_preview(self, kill_list: KillList) -> list[StackDescriptor]:
        """No-export stacks first, then exporting stacks, in enumeration order."""
        stacks = list(kill_list)
        return [stack for stack in stacks if not stack.has_exports] + [stack for stack in stacks if stack.has_exports]

    def _delete_in_dependency_order(self, kill_list: KillList, records: list[DeletionRecord]) -> None:
        self._failures = {}
        usage = ExportUsageIndex(self.stacks, self.executor)

        no_export_stacks = [stack for stack in kill_list if not stack.has_exports]
        logger.info(f"Deleting {len(no_export_stacks)} stacks without exports")
        for stack in no_export_stacks:
            if self._delete_and_wait(stack):
                kill_list.remove(stack)
                records.append(self._record(stack, DeletionStatus.DELETED))

        pass_number = 0
        while len(kill_list):
            pass_number += 1
            logger.info(f"Dependency pass {pass_number} over {len(kill_list)} stacks")
            removed = 0
            self._failures = {}

            for stack in kill_list:
                if not usage.all_unused(stack.exports):
                    logger.debug(f"Stack {stack.name} still has imported exports")
                    continue
                if self._delete_and_wait(stack):
                    kill_list.remove(stack)
                    records.append(self._record(stack, DeletionStatus.DELETED))
                    removed += 1

            if removed == 0:
                for stack in kill_list:
                    reason = self._failures.get(stack.name, EXPORTS_IMPORTED_REASON)
                    records.append(self._record(stack, DeletionStatus.FAILED, error_message=reason))
                remaining = kill_list.names()
                if self._failures:
                    raise StackDeletionError(remaining, dict(self._failures))
                raise CyclicDependencyError(remaining)

    def _delete_and_wait(self, stack: StackDescriptor) -> bool:
        """Delete a stack and wait for the deletion to complete.

        Returns:
            True if the stack is gone, False if it should be retried in a later pass
        """
        logger.info(f"Deleting stack {stack.name} with current status {stack.status}")
        try:
            self.executor.run_with_throttle(lambda: self.stacks.delete_stack(stack.name))
        except ClientError as e:
            if is_gone(e):
                logger.debug(f"Stack {stack.name} already deleted")
                return True
            logger.warning(f"Could not delete stack {stack.name}. {error_message(e)}")
            self._failures[stack.name] = error_message(e)
            return False

        retried = False

        def deletion_complete() -> bool:
            nonlocal retried
            status = self.executor.run_request_with_throttle(lambda: self.stacks.describe_stack_status(stack.stack_id))
            if status is None or status == DELETE_COMPLETE:
                return True
            if status == DELETE_FAILED and not retried:
                retried = True
                logger.info(f"Stack {stack.name} failed to delete, retrying")
                self.executor.run_with_throttle(lambda: self.stacks.delete_stack(stack.name))
            return False

        if not self.poller.wait_for(self.max_wait_seconds, deletion_complete, self.polling_delay_ms):
            reason = f"Deletion did not complete within {self.max_wait_seconds} seconds"
            logger.warning(f"Stack {stack.name}: {reason}")
            self._failures[stack.name] = reason
            return False

        logger.debug(f"Deleted stack {stack.name}")
        return True

    @staticmethod
    def _record(
        stack: StackDescriptor,
        status: DeletionStatus,
        reason: Optional[str] = None,
        error_message: Optional[str] = None,
    ) -> DeletionRecord:
        return DeletionRecord(
            resource_kind=STACK_KIND,
            physical_id=stack.name,
            status=status,
            reason=reason,
            error_message=error_message,
        )
