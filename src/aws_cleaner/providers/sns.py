"""SNS topic provider."""

from __future__ import annotations

from typing import List

from .base import ResourceProvider


class SNSTopicProvider(ResourceProvider):
    """Provider for SNS topics. Deleting a topic also removes its subscriptions."""

    kind = "sns:topic"
    service_name = "sns"

    def enumerate(self) -> List[str]:
        self.logger.debug("Listing topics")
        topic_arns: List[str] = []
        paginator = self.client.get_paginator("list_topics")
        for page in paginator.paginate():
            topic_arns.extend(topic["TopicArn"] for topic in page.get("Topics", []))
        return topic_arns

    def delete(self, physical_id: str) -> None:
        self.logger.info(f"Deleting topic {physical_id}")
        self.client.delete_topic(TopicArn=physical_id)
