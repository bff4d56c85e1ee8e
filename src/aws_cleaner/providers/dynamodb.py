"""DynamoDB table provider."""

from __future__ import annotations

from typing import List

from .base import ResourceProvider


class DynamoTableProvider(ResourceProvider):
    """Provider for DynamoDB tables."""

    kind = "dynamodb:table"
    service_name = "dynamodb"

    def enumerate(self) -> List[str]:
        table_names: List[str] = []
        paginator = self.client.get_paginator("list_tables")
        for page in paginator.paginate():
            table_names.extend(page.get("TableNames", []))
        return table_names

    def delete(self, physical_id: str) -> None:
        self.logger.debug(f"Deleting table {physical_id}")
        self.client.delete_table(TableName=physical_id)
