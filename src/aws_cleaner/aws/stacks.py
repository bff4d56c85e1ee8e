"""CloudFormation calls used by the stack dependency resolver."""

from __future__ import annotations

import logging
from typing import Any, Optional

from botocore.exceptions import ClientError

from ..cleanup.errors import ErrorKind, classify_client_error

logger = logging.getLogger(__name__)


class StackClient:
    """Thin wrapper over a boto3 CloudFormation client.

    Handles pagination and turns CloudFormation's "does not exist" and
    "is not imported" answers into ordinary return values.

    Attributes:
        client: boto3 CloudFormation client
    """

    def __init__(self, client: Any) -> None:
        self.client = client

    def list_stacks(self) -> list[dict[str, Any]]:
        """List every stack summary, including recently deleted stacks.

        Returns:
            Stack summaries with StackId, StackName and StackStatus
        """
        summaries: list[dict[str, Any]] = []
        paginator = self.client.get_paginator("list_stacks")
        for page in paginator.paginate():
            summaries.extend(page.get("StackSummaries", []))
        logger.debug(f"{len(summaries)} stacks found")
        return summaries

    def list_exports(self) -> list[dict[str, Any]]:
        """List every export in the region.

        Returns:
            Exports with ExportingStackId, Name and Value
        """
        exports: list[dict[str, Any]] = []
        paginator = self.client.get_paginator("list_exports")
        for page in paginator.paginate():
            exports.extend(page.get("Exports", []))
        logger.debug(f"{len(exports)} exports found")
        return exports

    def exports_by_stack(self) -> dict[str, list[str]]:
        """Group export names by the id of the stack publishing them.

        Returns:
            Mapping of stack id to the export names it publishes
        """
        export_map: dict[str, list[str]] = {}
        for export in self.list_exports():
            export_map.setdefault(export["ExportingStackId"], []).append(export["Name"])
        return export_map

    def list_imports(self, export_name: str) -> list[str]:
        """List the stacks importing an export.

        Args:
            export_name: Export name

        Returns:
            Names of importing stacks, empty if the export is not imported
        """
        imports: list[str] = []
        try:
            paginator = self.client.get_paginator("list_imports")
            for page in paginator.paginate(ExportName=export_name):
                imports.extend(page.get("Imports", []))
        except ClientError as e:
            if classify_client_error(e) == ErrorKind.NOT_IMPORTED:
                return []
            raise
        return imports

    def delete_stack(self, stack_name: str) -> None:
        """Request deletion of a stack. Deletion completes asynchronously."""
        self.client.delete_stack(StackName=stack_name)

    def describe_stack_status(self, stack_name: str) -> Optional[str]:
        """Fetch the current status of a stack.

        Args:
            stack_name: Stack name or id

        Returns:
            Stack status, or None if the stack no longer exists
        """
        try:
            response = self.client.describe_stacks(StackName=stack_name)
        except ClientError as e:
            if classify_client_error(e) == ErrorKind.STACK_NOT_FOUND:
                return None
            raise

        stacks = response.get("Stacks", [])
        if not stacks:
            return None
        return stacks[0]["StackStatus"]

    def describe_stack_resources(self, physical_id: str) -> list[dict[str, Any]]:
        """List the stack resources owning a physical resource id.

        Args:
            physical_id: Physical resource id

        Returns:
            Stack resources referencing the id, empty if no stack owns it
        """
        try:
            response = self.client.describe_stack_resources(PhysicalResourceId=physical_id)
        except ClientError as e:
            if classify_client_error(e) == ErrorKind.STACK_NOT_FOUND:
                return []
            raise
        return response.get("StackResources", [])
