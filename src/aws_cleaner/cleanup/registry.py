"""Explicit registry of cleaners.

Builds the ordered cleaner list for a run: the CloudFormation stack resolver
first, then one cleanup pipeline per registered resource-kind provider.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterable, Optional, Type

from ..aws.stacks import StackClient
from ..models.run_context import RunContext
from ..providers.acm import CertificateProvider
from ..providers.base import ResourceProvider
from ..providers.dynamodb import DynamoTableProvider
from ..providers.elasticache import ElastiCacheClusterProvider
from ..providers.elasticbeanstalk import BeanstalkEnvironmentProvider
from ..providers.logs import LogGroupProvider
from ..providers.s3 import S3BucketProvider
from ..providers.sns import SNSTopicProvider
from ..providers.sqs import SQSQueueProvider
from .dependency import DEFAULT_MAX_WAIT_SECONDS, STACK_KIND, StackDependencyResolver
from .filters import InStackFilter, NameExclusionFilter, PhysicalDeletionFilter
from .pipeline import Cleaner, ResourceCleanupPipeline
from .throttle import ThrottledExecutor
from .waiter import DEFAULT_POLLING_DELAY_MS, CompletionPoller

logger = logging.getLogger(__name__)

# Execution order of the simple resource kinds
PROVIDERS: list[Type[ResourceProvider]] = [
    BeanstalkEnvironmentProvider,
    ElastiCacheClusterProvider,
    DynamoTableProvider,
    SNSTopicProvider,
    SQSQueueProvider,
    S3BucketProvider,
    LogGroupProvider,
    CertificateProvider,
]

ClientFactory = Callable[[str], Any]


def provider_kinds() -> list[str]:
    """Return every kind that can be selected, stacks first."""
    return [STACK_KIND] + [provider_class.kind for provider_class in PROVIDERS]


def build_cleaners(
    client_factory: ClientFactory,
    context: RunContext,
    executor: Optional[ThrottledExecutor] = None,
    max_stack_wait_seconds: float = DEFAULT_MAX_WAIT_SECONDS,
    stack_polling_delay_ms: int = DEFAULT_POLLING_DELAY_MS,
    resource_kinds: Optional[Iterable[str]] = None,
    poller: Optional[CompletionPoller] = None,
) -> list[Cleaner]:
    """Build the ordered cleaner list for a run.

    Args:
        client_factory: Callable returning a boto3 client for a service name
        context: Run context providing the deny-list and permanent stack prefixes
        executor: Shared throttled executor (default: 7 attempts, 2 second backoff)
        max_stack_wait_seconds: Upper bound on waiting for one stack deletion
        stack_polling_delay_ms: Delay between stack deletion status checks
        resource_kinds: Restrict to these kinds ("cloudformation:stack" included), None for all
        poller: Completion poller for stack deletions (optional)

    Returns:
        Cleaners in execution order, stack resolver first
    """
    executor = executor or ThrottledExecutor()
    selected = set(resource_kinds) if resource_kinds else None

    stack_client = StackClient(client_factory("cloudformation"))
    cleaners: list[Cleaner] = []

    if selected is None or STACK_KIND in selected:
        cleaners.append(
            StackDependencyResolver(
                stack_client,
                permanent_prefixes=context.permanent_stack_prefixes,
                max_wait_seconds=max_stack_wait_seconds,
                polling_delay_ms=stack_polling_delay_ms,
                executor=executor,
                poller=poller,
            )
        )

    deletion_filter = PhysicalDeletionFilter(
        in_stack=InStackFilter(stack_client, executor),
        name_exclusion=NameExclusionFilter(context.skip_names),
    )

    for provider_class in PROVIDERS:
        if selected is not None and provider_class.kind not in selected:
            continue
        provider = provider_class(client_factory(provider_class.service_name))
        cleaners.append(ResourceCleanupPipeline(provider, deletion_filter, executor))

    logger.debug(f"Built cleaners: {[cleaner.name for cleaner in cleaners]}")
    return cleaners
