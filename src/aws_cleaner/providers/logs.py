"""CloudWatch Logs log group provider."""

from __future__ import annotations

from typing import List

from .base import ResourceProvider


class LogGroupProvider(ResourceProvider):
    """Provider for CloudWatch log groups.

    Only empty log groups (zero stored bytes) are candidates; groups holding
    data are never enumerated.
    """

    kind = "logs:log-group"
    service_name = "logs"

    def enumerate(self) -> List[str]:
        group_names: List[str] = []
        paginator = self.client.get_paginator("describe_log_groups")
        for page in paginator.paginate():
            for group in page.get("logGroups", []):
                if group.get("storedBytes", 0) != 0:
                    self.logger.debug(f"Keeping group {group['logGroupName']} with {group['storedBytes']} stored bytes")
                    continue
                group_names.append(group["logGroupName"])
        return group_names

    def delete(self, physical_id: str) -> None:
        self.logger.info(f"Removing group {physical_id}")
        self.client.delete_log_group(logGroupName=physical_id)
