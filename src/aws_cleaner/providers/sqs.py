"""SQS queue provider."""

from __future__ import annotations

from typing import List

from .base import ResourceProvider


class SQSQueueProvider(ResourceProvider):
    """Provider for SQS queues, identified by queue URL."""

    kind = "sqs:queue"
    service_name = "sqs"

    def enumerate(self) -> List[str]:
        queue_urls: List[str] = []
        paginator = self.client.get_paginator("list_queues")
        for page in paginator.paginate():
            queue_urls.extend(page.get("QueueUrls", []))
        return queue_urls

    def delete(self, physical_id: str) -> None:
        self.logger.info(f"Deleting Queue {physical_id}")
        self.client.delete_queue(QueueUrl=physical_id)
