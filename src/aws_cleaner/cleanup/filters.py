"""Deletion filters.

Decide whether a physical resource id may be deleted. The default chain
protects resources owned by a CloudFormation stack (the stack resolver deletes
those) and ids containing a configured deny-list substring.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Iterable, Optional

from ..aws.stacks import StackClient
from .throttle import ThrottledExecutor

logger = logging.getLogger(__name__)


class DeletionFilter(ABC):
    """Predicate deciding whether a physical resource may be deleted."""

    @abstractmethod
    def should_delete(self, physical_id: str) -> bool:
        """Return True if the resource with this physical id may be deleted."""

    def rejection_reason(self, physical_id: str) -> str:
        """Human-readable reason used when should_delete returned False."""
        return f"Protected by {type(self).__name__}"


class AllowAllFilter(DeletionFilter):
    """Filter that allows every id."""

    def should_delete(self, physical_id: str) -> bool:
        return True


class InStackFilter(DeletionFilter):
    """Protects resources that belong to an existing CloudFormation stack.

    Attributes:
        stacks: CloudFormation stack client
        executor: Executor applying throttle protection to the lookup
    """

    def __init__(self, stacks: StackClient, executor: Optional[ThrottledExecutor] = None) -> None:
        self.stacks = stacks
        self.executor = executor or ThrottledExecutor()

    def should_delete(self, physical_id: str) -> bool:
        """Allow deletion only when no stack references the physical id.

        Raises:
            ClientError: For lookup errors other than "stack does not exist"
        """
        resources = self.executor.run_request_with_throttle(lambda: self.stacks.describe_stack_resources(physical_id))
        in_stack = bool(resources)
        if in_stack:
            owners = sorted({resource.get("StackName", "") for resource in resources})
            logger.debug(f"{physical_id} is in stack(s) {owners}")
        else:
            logger.debug(f"{physical_id} is not in any stack")
        return not in_stack

    def rejection_reason(self, physical_id: str) -> str:
        return "Managed by a CloudFormation stack"


class NameExclusionFilter(DeletionFilter):
    """Protects ids containing any configured substring.

    Attributes:
        skip_names: Deny-list substrings
    """

    def __init__(self, skip_names: Iterable[str]) -> None:
        self.skip_names = [name for name in skip_names if name]

    def matching_name(self, physical_id: str) -> Optional[str]:
        for name in self.skip_names:
            if name in physical_id:
                return name
        return None

    def should_delete(self, physical_id: str) -> bool:
        match = self.matching_name(physical_id)
        if match is not None:
            logger.info(f"{physical_id} is in skip names {self.skip_names}")
            return False
        return True

    def rejection_reason(self, physical_id: str) -> str:
        return f"Name contains skip name '{self.matching_name(physical_id)}'"


class PhysicalDeletionFilter(DeletionFilter):
    """Stack-membership and name-exclusion filters combined with logical AND.

    The stack lookup runs first; the name check is only consulted for ids no
    stack owns.
    """

    def __init__(self, in_stack: DeletionFilter, name_exclusion: DeletionFilter) -> None:
        self.in_stack = in_stack
        self.name_exclusion = name_exclusion
        self._last_rejected_by: Optional[DeletionFilter] = None

    def should_delete(self, physical_id: str) -> bool:
        for deletion_filter in (self.in_stack, self.name_exclusion):
            if not deletion_filter.should_delete(physical_id):
                self._last_rejected_by = deletion_filter
                return False
        self._last_rejected_by = None
        return True

    def rejection_reason(self, physical_id: str) -> str:
        if self._last_rejected_by is None:
            return super().rejection_reason(physical_id)
        return self._last_rejected_by.rejection_reason(physical_id)
