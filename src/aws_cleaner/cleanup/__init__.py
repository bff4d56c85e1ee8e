"""Resource cleanup engine.

This module provides the throttled execution core, the deletion filter chain,
the generic cleanup pipeline and the CloudFormation dependency resolver.

Classes:
    ThrottledExecutor: Runs AWS calls with bounded linear backoff on throttling
    CompletionPoller: Waits for a condition to become true within a time limit
    PhysicalDeletionFilter: Decides whether a physical resource id may be deleted
    ResourceCleanupPipeline: Enumerate, filter, commit-gate and delete one resource kind
    StackDependencyResolver: Deletes CloudFormation stacks in dependency order
    EnvironmentCleaner: Runs every cleaner in order for one run
    AuditStorage: Audit log storage and retrieval
"""

from __future__ import annotations

__all__ = [
    "ThrottledExecutor",
    "CompletionPoller",
    "PhysicalDeletionFilter",
    "ResourceCleanupPipeline",
    "StackDependencyResolver",
    "EnvironmentCleaner",
    "AuditStorage",
]
