"""Base class for resource-kind providers."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, ClassVar, List


class ResourceProvider(ABC):
    """Abstract base class for all resource-kind providers.

    Each provider should:
    1. Have a unique kind (e.g., "sqs:queue")
    2. Enumerate the physical ids of every resource of that kind
    3. Delete a single resource by physical id

    Providers never decide what is safe to delete; filtering, dry-run and
    throttle handling belong to the cleanup pipeline.
    """

    #: Resource kind identifier (e.g., "s3:bucket")
    kind: ClassVar[str]
    #: boto3 service name used to build the provider's client
    service_name: ClassVar[str]

    def __init__(self, client: Any) -> None:
        """Initialize provider.

        Args:
            client: boto3 client for the provider's service
        """
        self.client = client
        self.logger = logging.getLogger(f"{__name__}.{type(self).__name__}")

    @abstractmethod
    def enumerate(self) -> List[str]:
        """List the physical ids of every resource of this kind.

        Returns:
            List of physical ids (empty list if none exist)
        """

    @abstractmethod
    def delete(self, physical_id: str) -> None:
        """Delete one resource.

        Args:
            physical_id: Physical id returned by enumerate
        """
